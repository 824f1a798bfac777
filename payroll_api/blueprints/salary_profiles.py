from __future__ import annotations

from flask import Blueprint, request

from payroll_api.common.errors import NotFoundError
from payroll_api.common.http import ok
from payroll_api.services.payroll_store import (
    get_employee,
    get_profile_row,
    load_library,
    replace_profile,
    to_assigned,
)
from payroll_api.services.salary_resolver import AssignedComponent, resolve_profile

bp = Blueprint("salary_profiles", __name__, url_prefix="/api/v1/employee-salary-profiles")


def _row(employee_id, prof, resolved):
    return {
        "employee_id": employee_id,
        "updated_at": prof.updated_at.isoformat() if prof.updated_at else None,
        "basic_salary": float(resolved.basic_salary),
        "components": [c.to_dict() for c in resolved.components],
    }


@bp.get("/<int:employee_id>")
def get_profile(employee_id: int):
    """Saved profile with amounts re-resolved against the current library."""
    get_employee(employee_id)
    prof = get_profile_row(employee_id)
    if prof is None:
        raise NotFoundError(f"No salary profile for employee {employee_id}")
    resolved = resolve_profile(to_assigned(prof.components), load_library())
    return ok(_row(employee_id, prof, resolved))


@bp.put("/<int:employee_id>")
def put_profile(employee_id: int):
    j = request.get_json(silent=True) or {}
    prof, resolved = replace_profile(employee_id, j.get("components"))
    return ok(_row(employee_id, prof, resolved), message="Salary profile saved")


@bp.post("/<int:employee_id>/preview")
def preview_profile(employee_id: int):
    """Resolve a draft component list without saving it."""
    get_employee(employee_id)
    j = request.get_json(silent=True) or {}
    items = j.get("components") or []
    resolved = resolve_profile([AssignedComponent.from_dict(x or {}) for x in items], load_library())
    return ok(resolved.to_dict())
