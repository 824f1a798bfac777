from datetime import timedelta
from decimal import Decimal

import pytest

from payroll_api.common.errors import NotFoundError, ValidationError
from payroll_api.services.attendance_aggregator import AttendanceRecord, month_range
from payroll_api.services.payroll_policy import PayrollPolicy
from payroll_api.services.payslip_generator import generate_payslip
from payroll_api.services.salary_resolver import AssignedComponent

MONTH, YEAR = 6, 2026  # June: 30 days


def _profile():
    return [
        AssignedComponent(1, "Fixed", Decimal("20000")),
        AssignedComponent(2, "Percentage", Decimal("40")),
        AssignedComponent(3, "Fixed", Decimal("1600")),
        AssignedComponent(4, "Percentage", Decimal("12")),
    ]


def _present(n):
    start, _ = month_range(YEAR, MONTH)
    return [AttendanceRecord(day=start + timedelta(days=i), status="Present") for i in range(n)]


def _line(slip, name):
    return next(c for c in slip.components if c.name == name)


def test_full_month_pays_everything(library):
    slip = generate_payslip(7, MONTH, YEAR, _profile(), library, _present(30))
    assert slip.gross_earnings == Decimal("29600.00")
    assert slip.total_deductions == Decimal("2400.00")
    assert slip.net_salary == Decimal("27200.00")
    assert slip.breakdown.worked_fraction == Decimal("1")
    assert slip.breakdown.absent_days == 0
    assert not slip.needs_review


def test_net_is_gross_minus_deductions(library):
    slip = generate_payslip(7, MONTH, YEAR, _profile(), library, _present(17))
    assert slip.net_salary == slip.gross_earnings - slip.total_deductions


def test_half_month_prorates_only_pro_rata_components(library):
    slip = generate_payslip(7, MONTH, YEAR, _profile(), library, _present(15))
    assert _line(slip, "Basic Salary").amount == Decimal("10000.00")
    assert _line(slip, "House Rent Allowance").amount == Decimal("4000.00")
    assert _line(slip, "Conveyance Allowance").amount == Decimal("1600.00")
    assert _line(slip, "Provident Fund").amount == Decimal("2400.00")
    assert _line(slip, "Basic Salary").full_amount == Decimal("20000.00")
    assert slip.breakdown.absent_days == 15
    assert slip.net_salary == Decimal("13200.00")


def test_deduct_mode_gives_same_net_with_loss_of_pay_line(library):
    prorate = generate_payslip(7, MONTH, YEAR, _profile(), library, _present(15))
    deduct = generate_payslip(7, MONTH, YEAR, _profile(), library, _present(15),
                              policy=PayrollPolicy(loss_of_pay_mode="deduct"))
    assert deduct.gross_earnings == Decimal("29600.00")
    lop = _line(deduct, "Loss of Pay")
    assert lop.category == "Deduction"
    assert lop.amount == Decimal("14000.00")
    assert _line(deduct, "Basic Salary").amount == Decimal("20000.00")
    assert deduct.net_salary == prorate.net_salary
    assert deduct.loss_of_pay_mode == "deduct"


def test_deduct_mode_full_month_has_no_loss(library):
    slip = generate_payslip(7, MONTH, YEAR, _profile(), library, _present(30),
                            policy=PayrollPolicy(loss_of_pay_mode="deduct"))
    assert _line(slip, "Loss of Pay").amount == Decimal("0.00")
    assert slip.net_salary == Decimal("27200.00")


def test_no_attendance_makes_pro_rata_earnings_zero_and_flags_negative_net(library):
    slip = generate_payslip(7, MONTH, YEAR, _profile(), library, [])
    assert _line(slip, "Basic Salary").amount == Decimal("0.00")
    assert _line(slip, "House Rent Allowance").amount == Decimal("0.00")
    assert slip.gross_earnings == Decimal("1600.00")
    assert slip.net_salary == Decimal("-800.00")
    assert slip.needs_review
    assert slip.breakdown.absent_days == 30


def test_missing_profile_is_not_found(library):
    with pytest.raises(NotFoundError):
        generate_payslip(7, MONTH, YEAR, None, library, [])


def test_invalid_month_rejected(library):
    with pytest.raises(ValidationError):
        generate_payslip(7, 0, YEAR, _profile(), library, [])


def test_to_dict_is_json_ready(library):
    data = generate_payslip(7, MONTH, YEAR, _profile(), library, _present(30)).to_dict()
    assert data["net_salary"] == 27200.0
    assert data["breakdown"]["worked_fraction"] == 1.0
    assert [c["name"] for c in data["components"]][0] == "Basic Salary"
