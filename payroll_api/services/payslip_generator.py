# payroll_api/services/payslip_generator.py
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from payroll_api.common.errors import NotFoundError
from payroll_api.services.attendance_aggregator import (
    AttendanceAggregate,
    AttendanceRecord,
    aggregate_attendance,
    month_range,
)
from payroll_api.services.component_library import DEDUCTION, EARNING, ComponentLibrary
from payroll_api.services.money import ZERO, q2
from payroll_api.services.payroll_policy import LOP_DEDUCT, LOSS_OF_PAY_LINE, PayrollPolicy
from payroll_api.services.salary_resolver import AssignedComponent, resolve_profile

log = logging.getLogger(__name__)


@dataclass
class PayslipComponent:
    name: str
    category: str
    amount: Decimal
    full_amount: Decimal
    pro_rated: bool
    component_id: Optional[int] = None


@dataclass
class PayslipBreakdown:
    absent_days: int
    half_days: int
    unpaid_leave_days: int
    present_days: Decimal
    working_days: int
    holiday_days: int
    paid_leave_days: int
    worked_fraction: Decimal


@dataclass
class Payslip:
    employee_id: int
    month: int
    year: int
    components: List[PayslipComponent]
    gross_earnings: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    breakdown: PayslipBreakdown
    loss_of_pay_mode: str
    needs_review: bool = False

    @property
    def key(self):
        return (self.employee_id, self.month, self.year)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation (Decimals as floats)."""
        return _jsonable(asdict(self))


def _jsonable(v):
    if isinstance(v, Decimal):
        return float(v)
    if isinstance(v, dict):
        return {k: _jsonable(x) for k, x in v.items()}
    if isinstance(v, list):
        return [_jsonable(x) for x in v]
    return v


def build_payslip(
    employee_id: int,
    month: int,
    year: int,
    resolved_components,
    aggregate: AttendanceAggregate,
    policy: PayrollPolicy,
) -> Payslip:
    """
    Combine resolved full-month amounts with an attendance aggregate.

    prorate mode: pro-rated components are scaled by the worked fraction.
    deduct mode:  pro-rated Earnings are paid in full and the shortfall is
                  one "Loss of Pay" Deduction line; pro-rated Deductions are
                  still scaled. The modes never both reduce the same pay.
    """
    fraction = aggregate.worked_fraction
    deduct_mode = policy.loss_of_pay_mode == LOP_DEDUCT

    lines: List[PayslipComponent] = []
    lop_base = ZERO
    for rc in resolved_components:
        amount = rc.amount
        if rc.pro_rated:
            if deduct_mode and rc.category == EARNING:
                lop_base += rc.amount
            else:
                amount = q2(rc.amount * fraction)
        lines.append(PayslipComponent(
            name=rc.name,
            category=rc.category,
            amount=amount,
            full_amount=rc.amount,
            pro_rated=rc.pro_rated,
            component_id=rc.component_id,
        ))

    if deduct_mode and lop_base > 0:
        lop = q2(lop_base * (Decimal("1") - fraction))
        lines.append(PayslipComponent(
            name=LOSS_OF_PAY_LINE,
            category=DEDUCTION,
            amount=lop,
            full_amount=lop,
            pro_rated=False,
        ))

    gross = q2(sum((c.amount for c in lines if c.category == EARNING), ZERO))
    deductions = q2(sum((c.amount for c in lines if c.category == DEDUCTION), ZERO))
    net = q2(gross - deductions)

    breakdown = PayslipBreakdown(
        absent_days=aggregate.absent,
        half_days=aggregate.half_day,
        unpaid_leave_days=aggregate.unpaid_leave_days,
        present_days=aggregate.present_days,
        working_days=aggregate.working_days,
        holiday_days=aggregate.holiday,
        paid_leave_days=aggregate.on_leave_paid,
        worked_fraction=fraction,
    )

    slip = Payslip(
        employee_id=employee_id,
        month=int(month),
        year=int(year),
        components=lines,
        gross_earnings=gross,
        total_deductions=deductions,
        net_salary=net,
        breakdown=breakdown,
        loss_of_pay_mode=policy.loss_of_pay_mode,
        needs_review=net < 0,
    )
    if slip.needs_review:
        log.warning("[payslip] employee %s %02d/%s has negative net salary %s; flagged for review",
                    employee_id, slip.month, slip.year, net)
    return slip


def generate_payslip(
    employee_id: int,
    month: int,
    year: int,
    assigned: Optional[Sequence[AssignedComponent]],
    library: ComponentLibrary,
    attendance: Iterable[AttendanceRecord] = (),
    leave_categories: Optional[Mapping[str, str]] = None,
    policy: Optional[PayrollPolicy] = None,
) -> Payslip:
    """
    Compute one employee's payslip for a calendar month.

    ``assigned`` is the employee's salary profile; None means the employee
    has no profile (NotFoundError). Empty attendance is not an error: every
    working day counts as Absent.
    """
    policy = policy or PayrollPolicy()
    start, end = month_range(year, month)
    if assigned is None:
        raise NotFoundError(f"No salary profile for employee {employee_id}",
                            payload={"employee_id": employee_id})

    resolved = resolve_profile(assigned, library)
    aggregate = aggregate_attendance(employee_id, start, end, attendance, leave_categories)
    return build_payslip(employee_id, month, year, resolved.components, aggregate, policy)
