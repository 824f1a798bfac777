# payroll_api/services/payroll_store.py
"""
Database side of payroll: loads engine inputs from the SQLAlchemy models and
writes payslips back. The engine modules never touch the session; everything
here runs in the request / CLI thread inside an app context.
"""
from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from payroll_api.common.errors import APIError, NotFoundError, ValidationError
from payroll_api.extensions import db
from payroll_api.models.attendance import AttendanceRecord as AttendanceRow
from payroll_api.models.employee import Employee
from payroll_api.models.leave import LeaveBalance
from payroll_api.models.payroll.components import SalaryComponent
from payroll_api.models.payroll.payslip import Payslip as PayslipRow
from payroll_api.models.payroll.salary_profile import EmployeeSalaryComponent, EmployeeSalaryProfile
from payroll_api.models.task import EmployeeTask
from payroll_api.services.attendance_aggregator import (
    AttendanceRecord,
    month_range,
    normalize_leave_category,
    normalize_status,
)
from payroll_api.services.component_library import ComponentDefinition, ComponentLibrary
from payroll_api.services.increment_evaluator import (
    EmployeeRecord,
    IncrementSheet,
    TaskRating,
    evaluate_increments,
    task_rating_increments,
)
from payroll_api.services.payroll_orchestrator import (
    BulkPayrollResult,
    EmployeeFailure,
    PayslipJob,
    generate_bulk,
)
from payroll_api.services.payroll_policy import PayrollPolicy
from payroll_api.services.payslip_generator import Payslip, generate_payslip
from payroll_api.services.salary_resolver import AssignedComponent, ResolvedProfile, resolve_profile

log = logging.getLogger(__name__)


# ---------- component library ----------

def to_definition(c: SalaryComponent) -> ComponentDefinition:
    return ComponentDefinition(
        id=c.id,
        name=c.name,
        category=c.category,
        is_pro_rata=bool(c.is_pro_rata),
        is_basic_salary=c.is_basic_salary,
        calculation_type=c.calculation_type,
        default_value=Decimal(str(c.default_value)) if c.default_value is not None else None,
    )


def load_library() -> ComponentLibrary:
    rows = SalaryComponent.query.order_by(SalaryComponent.id.asc()).all()
    return ComponentLibrary(to_definition(c) for c in rows)


def referenced_component_ids() -> set:
    rows = db.session.query(EmployeeSalaryComponent.component_id).distinct().all()
    return {r[0] for r in rows}


# ---------- salary profiles ----------

def get_employee(employee_id: int) -> Employee:
    emp = db.session.get(Employee, employee_id)
    if not emp:
        raise NotFoundError(f"Employee {employee_id} not found", payload={"employee_id": employee_id})
    return emp


def get_profile_row(employee_id: int) -> Optional[EmployeeSalaryProfile]:
    return EmployeeSalaryProfile.query.filter_by(employee_id=employee_id).first()


def to_assigned(rows: Iterable[EmployeeSalaryComponent]) -> List[AssignedComponent]:
    return [
        AssignedComponent(
            component_id=r.component_id,
            calculation_type=r.calculation_type,
            value=Decimal(str(r.value or 0)),
            pro_rated=r.pro_rated,
        )
        for r in rows
    ]


def load_profile(employee_id: int) -> Optional[List[AssignedComponent]]:
    prof = get_profile_row(employee_id)
    if prof is None:
        return None
    return to_assigned(prof.components)


def replace_profile(employee_id: int, items: List[dict],
                    library: Optional[ComponentLibrary] = None) -> Tuple[EmployeeSalaryProfile, ResolvedProfile]:
    """
    Full replace-and-save of an employee's salary profile. The new component
    list is resolved first, so an invalid profile is never committed.
    """
    get_employee(employee_id)
    if not isinstance(items, list):
        raise ValidationError("components must be a list")
    library = library or load_library()
    assigned = [AssignedComponent.from_dict(x or {}) for x in items]
    resolved = resolve_profile(assigned, library)

    prof = get_profile_row(employee_id)
    if prof is None:
        prof = EmployeeSalaryProfile(employee_id=employee_id)
        db.session.add(prof)
    else:
        prof.components.clear()
        # unique (profile_id, component_id): old rows must be gone before re-insert
        db.session.flush()

    for pos, a in enumerate(assigned):
        prof.components.append(EmployeeSalaryComponent(
            component_id=a.component_id,
            position=pos,
            calculation_type=a.calculation_type,
            value=a.value,
            pro_rated=a.pro_rated,
        ))
    prof.updated_at = datetime.utcnow()
    db.session.commit()
    log.info("[profiles] employee %s profile saved with %s component(s)", employee_id, len(assigned))
    return prof, resolved


# ---------- attendance / leave ----------

def to_attendance(r: AttendanceRow) -> AttendanceRecord:
    return AttendanceRecord(
        day=r.work_date,
        status=normalize_status(r.status),
        check_in=r.check_in,
        check_out=r.check_out,
        leave_type=r.leave_type,
        leave_category=normalize_leave_category(r.leave_category),
    )


def load_attendance(employee_id: int, start: date, end: date) -> List[AttendanceRecord]:
    rows = (AttendanceRow.query
            .filter(AttendanceRow.employee_id == employee_id)
            .filter(AttendanceRow.work_date >= start)
            .filter(AttendanceRow.work_date <= end)
            .order_by(AttendanceRow.work_date.asc())
            .all())
    return [to_attendance(r) for r in rows]


def load_leave_categories(employee_id: int, year: int) -> Dict[str, str]:
    rows = LeaveBalance.query.filter_by(employee_id=employee_id, year=year).all()
    return {r.leave_type: r.category for r in rows}


# ---------- payslips ----------

def active_employee_ids() -> List[int]:
    rows = (db.session.query(Employee.id)
            .filter(Employee.status == "active")
            .order_by(Employee.id.asc())
            .all())
    return [r[0] for r in rows]


def build_job(employee_id: int, month: int, year: int) -> PayslipJob:
    start, end = month_range(year, month)
    return PayslipJob(
        employee_id=employee_id,
        assigned=load_profile(employee_id),
        attendance=tuple(load_attendance(employee_id, start, end)),
        leave_categories=load_leave_categories(employee_id, year),
    )


def save_payslip(slip: Payslip, commit: bool = True) -> PayslipRow:
    """Upsert keyed by (employee, month, year): regeneration overwrites, never adds."""
    data = slip.to_dict()
    row = PayslipRow.query.filter_by(employee_id=slip.employee_id, month=slip.month, year=slip.year).first()
    if row is None:
        row = PayslipRow(employee_id=slip.employee_id, month=slip.month, year=slip.year)
        db.session.add(row)
    row.components = data["components"]
    row.breakdown = data["breakdown"]
    row.gross_earnings = slip.gross_earnings
    row.total_deductions = slip.total_deductions
    row.net_salary = slip.net_salary
    row.loss_of_pay_mode = slip.loss_of_pay_mode
    row.needs_review = slip.needs_review
    row.generated_at = datetime.utcnow()
    if commit:
        db.session.commit()
    return row


def generate_and_save(employee_id: int, month: int, year: int,
                      policy: Optional[PayrollPolicy] = None) -> Payslip:
    get_employee(employee_id)
    job = build_job(employee_id, month, year)
    slip = generate_payslip(employee_id, month, year, job.assigned, load_library(),
                            job.attendance, job.leave_categories, policy)
    save_payslip(slip)
    return slip


def generate_bulk_and_save(month: int, year: int, policy: Optional[PayrollPolicy] = None,
                           cancel_event: Optional[threading.Event] = None) -> BulkPayrollResult:
    """
    Fetch inputs for every active employee, compute in parallel, then persist
    the successes. Bad stored data for one employee (an unknown attendance
    status, say) is reported for that employee only. Each payslip is committed
    on its own so a failed write can not undo another employee's payslip.
    """
    month_range(year, month)
    library = load_library()

    jobs: List[PayslipJob] = []
    prefetch_errors: List[EmployeeFailure] = []
    for eid in active_employee_ids():
        try:
            jobs.append(build_job(eid, month, year))
        except APIError as e:
            log.warning("[payroll.bulk] employee %s inputs rejected: %s", eid, e.message)
            prefetch_errors.append(EmployeeFailure(eid, e.code, e.message))

    result = generate_bulk(jobs, month, year, library, policy, cancel_event=cancel_event)
    result.errors[:0] = prefetch_errors

    saved: List[Payslip] = []
    for slip in result.payslips:
        try:
            save_payslip(slip)
        except SQLAlchemyError as e:
            db.session.rollback()
            log.exception("[payroll.bulk] employee %s payslip not saved", slip.employee_id)
            result.errors.append(EmployeeFailure(slip.employee_id, "PERSIST_ERROR", str(e)))
            continue
        saved.append(slip)
    result.payslips = saved
    return result


def payslip_row_dict(row: PayslipRow) -> dict:
    emp = row.employee
    return {
        "id": row.id,
        "employee_id": row.employee_id,
        "employee_code": emp.code if emp else None,
        "employee_name": emp.name if emp else None,
        "month": row.month,
        "year": row.year,
        "components": row.components,
        "gross_earnings": float(row.gross_earnings or 0),
        "total_deductions": float(row.total_deductions or 0),
        "net_salary": float(row.net_salary or 0),
        "breakdown": row.breakdown,
        "loss_of_pay_mode": row.loss_of_pay_mode,
        "needs_review": bool(row.needs_review),
        "generated_at": row.generated_at.isoformat() if row.generated_at else None,
    }


# ---------- increments ----------

def load_employee_records() -> List[EmployeeRecord]:
    return [
        EmployeeRecord(
            employee_id=e.id,
            name=e.name,
            date_of_joining=e.doj,
            experience=e.experience,
            salary=Decimal(str(e.salary or 0)),
            status=e.status,
        )
        for e in Employee.query.order_by(Employee.id.asc()).all()
    ]


def load_task_ratings(today: date, window_days: int) -> List[TaskRating]:
    since = datetime.combine(today - timedelta(days=window_days), datetime.min.time())
    rows = (EmployeeTask.query
            .filter(EmployeeTask.status == "completed")
            .filter(EmployeeTask.rating.isnot(None))
            .filter(EmployeeTask.completed_at >= since)
            .all())
    return [TaskRating(employee_id=t.employee_id, completed_at=t.completed_at,
                       rating=Decimal(str(t.rating))) for t in rows]


def increment_sheet(today: date, policy: Optional[PayrollPolicy] = None,
                    merge_tasks: bool = False) -> Tuple[IncrementSheet, Dict[int, Decimal]]:
    policy = policy or PayrollPolicy()
    sheet = evaluate_increments(load_employee_records(), today, policy)
    extra = task_rating_increments(load_task_ratings(today, policy.rating_window_days), today, policy)
    if merge_tasks:
        sheet.merge_task_increments(extra)
    return sheet, extra
