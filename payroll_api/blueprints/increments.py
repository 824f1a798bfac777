from __future__ import annotations
from datetime import date

from flask import Blueprint, current_app, request

from payroll_api.common.errors import ValidationError
from payroll_api.common.http import ok
from payroll_api.services.payroll_policy import PayrollPolicy
from payroll_api.services.payroll_store import increment_sheet

bp = Blueprint("increments", __name__, url_prefix="/api/v1/increments")

def _today():
    raw = request.args.get("today")
    if not raw:
        return date.today()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError("today must be YYYY-MM-DD")

@bp.get("/eligible")
def eligible():
    """Tenure-based list; ?merge_tasks=1 adds the task-rating percent (applied once)."""
    merge = str(request.args.get("merge_tasks", "")).lower() in ("1", "true", "yes", "y")
    sheet, _ = increment_sheet(_today(), PayrollPolicy.from_config(current_app.config), merge_tasks=merge)
    return ok(sheet.to_dict())

@bp.get("/task-eligible")
def task_eligible():
    on = _today()
    _, extra = increment_sheet(on, PayrollPolicy.from_config(current_app.config))
    return ok([{"employee_id": eid, "increment": float(pct)} for eid, pct in sorted(extra.items())])
