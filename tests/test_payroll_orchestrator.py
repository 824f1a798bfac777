import threading
from datetime import timedelta
from decimal import Decimal

import pytest

from payroll_api.common.errors import PartialBatchError
from payroll_api.services.attendance_aggregator import AttendanceRecord, month_range
from payroll_api.services.payroll_orchestrator import PayslipJob, generate_bulk
from payroll_api.services.payroll_policy import PayrollPolicy
from payroll_api.services.salary_resolver import AssignedComponent

MONTH, YEAR = 6, 2026


def _job(eid, basic="20000", assigned="default"):
    if assigned == "default":
        assigned = [
            AssignedComponent(1, "Fixed", Decimal(basic)),
            AssignedComponent(2, "Percentage", Decimal("10")),
        ]
    start, _ = month_range(YEAR, MONTH)
    att = tuple(AttendanceRecord(day=start + timedelta(days=i), status="Present") for i in range(30))
    return PayslipJob(employee_id=eid, assigned=assigned, attendance=att)


def test_one_bad_employee_does_not_stop_the_batch(library):
    jobs = [_job(1), _job(2), _job(3, basic="0"), _job(4)]
    result = generate_bulk(jobs, MONTH, YEAR, library, PayrollPolicy(bulk_max_workers=3))
    assert sorted(s.employee_id for s in result.payslips) == [1, 2, 4]
    assert len(result.errors) == 1
    err = result.errors[0]
    assert err.employee_id == 3
    assert err.code == "VALIDATION_ERROR"
    assert result.summary() == {"ok": 3, "failed": 1, "skipped": 0}
    assert not result.ok


def test_missing_profile_reported_as_not_found(library):
    result = generate_bulk([_job(1), _job(2, assigned=None)], MONTH, YEAR, library)
    assert [e.code for e in result.errors] == ["NOT_FOUND"]
    assert [s.employee_id for s in result.payslips] == [1]


def test_results_keep_submission_order(library):
    jobs = [_job(eid) for eid in range(1, 9)]
    result = generate_bulk(jobs, MONTH, YEAR, library, max_workers=4)
    assert [s.employee_id for s in result.payslips] == list(range(1, 9))
    assert all(s.net_salary == Decimal("22000.00") for s in result.payslips)


def test_raise_for_errors_carries_partial_results(library):
    result = generate_bulk([_job(1), _job(2, basic="-5")], MONTH, YEAR, library)
    with pytest.raises(PartialBatchError) as ei:
        result.raise_for_errors()
    assert ei.value.status_code == 207
    assert len(ei.value.payslips) == 1
    assert ei.value.payload["errors"][0]["employee_id"] == 2


def test_cancelled_batch_skips_unstarted_jobs(library):
    cancel = threading.Event()
    cancel.set()
    result = generate_bulk([_job(1), _job(2)], MONTH, YEAR, library, cancel_event=cancel)
    assert result.payslips == []
    assert sorted(result.skipped) == [1, 2]


def test_empty_batch(library):
    result = generate_bulk([], MONTH, YEAR, library)
    assert result.ok
    assert result.summary() == {"ok": 0, "failed": 0, "skipped": 0}
