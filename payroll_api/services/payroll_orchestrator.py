# payroll_api/services/payroll_orchestrator.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from payroll_api.common.errors import APIError, PartialBatchError
from payroll_api.services.attendance_aggregator import AttendanceRecord
from payroll_api.services.component_library import ComponentLibrary
from payroll_api.services.payroll_policy import PayrollPolicy
from payroll_api.services.payslip_generator import Payslip, generate_payslip
from payroll_api.services.salary_resolver import AssignedComponent

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayslipJob:
    """Everything one employee's payslip needs, fetched before the fan-out."""
    employee_id: int
    assigned: Optional[Sequence[AssignedComponent]]
    attendance: Sequence[AttendanceRecord] = ()
    leave_categories: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EmployeeFailure:
    employee_id: int
    code: str
    message: str

    def to_dict(self) -> dict:
        return {"employee_id": self.employee_id, "code": self.code, "message": self.message}


@dataclass
class BulkPayrollResult:
    month: int
    year: int
    payslips: List[Payslip] = field(default_factory=list)
    errors: List[EmployeeFailure] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise PartialBatchError(self.payslips, self.errors)

    def summary(self) -> Dict[str, int]:
        return {"ok": len(self.payslips), "failed": len(self.errors), "skipped": len(self.skipped)}


def _run_one(job: PayslipJob, month: int, year: int, library: ComponentLibrary,
             policy: PayrollPolicy, cancel_event: Optional[threading.Event]):
    if cancel_event is not None and cancel_event.is_set():
        return ("skipped", job.employee_id)
    try:
        slip = generate_payslip(
            job.employee_id, month, year, job.assigned, library,
            job.attendance, job.leave_categories, policy,
        )
        return ("ok", slip)
    except APIError as e:
        log.warning("[payroll.bulk] employee %s failed: %s", job.employee_id, e.message)
        return ("error", EmployeeFailure(job.employee_id, e.code, e.message))
    except Exception as e:
        log.exception("[payroll.bulk] employee %s failed unexpectedly", job.employee_id)
        return ("error", EmployeeFailure(job.employee_id, "INTERNAL_ERROR", str(e)))


def generate_bulk(
    jobs: Iterable[PayslipJob],
    month: int,
    year: int,
    library: ComponentLibrary,
    policy: Optional[PayrollPolicy] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BulkPayrollResult:
    """
    Generate payslips for every job, one worker per employee.

    A failing employee is recorded in ``errors`` and never stops the batch.
    Setting ``cancel_event`` makes jobs that have not started yet come back
    in ``skipped``; finished payslips are kept as they are.
    """
    policy = policy or PayrollPolicy()
    workers = max_workers or policy.bulk_max_workers
    jobs = list(jobs)
    result = BulkPayrollResult(month=int(month), year=int(year))
    if not jobs:
        return result

    with ThreadPoolExecutor(max_workers=min(workers, len(jobs))) as executor:
        futures = [
            executor.submit(_run_one, job, month, year, library, policy, cancel_event)
            for job in jobs
        ]
        # results are merged here, in the submitting thread
        for fut in futures:
            kind, value = fut.result()
            if kind == "ok":
                result.payslips.append(value)
            elif kind == "error":
                result.errors.append(value)
            else:
                result.skipped.append(value)

    log.info("[payroll.bulk] %02d/%s done: %s", int(month), year, result.summary())
    return result
