from __future__ import annotations

from flask import Blueprint, current_app, request, send_file

from payroll_api.common.errors import ValidationError
from payroll_api.common.http import batch, ok
from payroll_api.models.payroll.payslip import Payslip
from payroll_api.services.payroll_policy import PayrollPolicy
from payroll_api.services.payroll_register import build_register
from payroll_api.services.payroll_store import (
    generate_and_save,
    generate_bulk_and_save,
    payslip_row_dict,
)

bp = Blueprint("payroll", __name__, url_prefix="/api/v1/payroll")

# ---------- helpers ----------
def _int(j: dict, *keys, required=True):
    for k in keys:
        v = j.get(k)
        if v not in (None, ""):
            try:
                return int(v)
            except (TypeError, ValueError):
                raise ValidationError(f"{keys[0]} must be an integer")
    if required:
        raise ValidationError(f"{keys[0]} is required")
    return None

def _policy(j: dict) -> PayrollPolicy:
    return PayrollPolicy.from_config(current_app.config, loss_of_pay_mode=j.get("loss_of_pay_mode"))

# ---------- routes ----------
@bp.post("/generate")
def generate():
    j = request.get_json(silent=True) or {}
    employee_id = _int(j, "employee_id", "employeeId")
    month = _int(j, "month")
    year = _int(j, "year")
    slip = generate_and_save(employee_id, month, year, _policy(j))
    return ok(slip.to_dict(), message=f"Payslip generated for {month:02d}/{year}")

@bp.post("/generate/bulk")
def generate_bulk():
    """
    Payslips for every active employee. Failures are reported next to the
    successes; HTTP 207 when at least one employee failed.
    """
    j = request.get_json(silent=True) or {}
    month = _int(j, "month")
    year = _int(j, "year")
    result = generate_bulk_and_save(month, year, _policy(j))
    return batch([s.to_dict() for s in result.payslips],
                 [e.to_dict() for e in result.errors],
                 result.skipped,
                 message=f"Processed {len(result.payslips)} payslip(s) with {len(result.errors)} error(s)",
                 **result.summary())

@bp.get("/payslips")
def list_payslips():
    month = _int(request.args, "month")
    year = _int(request.args, "year")
    q = Payslip.query.filter_by(month=month, year=year)
    emp_id = _int(request.args, "employee_id", required=False)
    if emp_id is not None:
        q = q.filter_by(employee_id=emp_id)
    rows = q.order_by(Payslip.employee_id.asc()).all()
    return ok([payslip_row_dict(r) for r in rows], total=len(rows))

@bp.get("/payslips/export")
def export_payslips():
    """Payroll register for a month as XLSX."""
    month = _int(request.args, "month")
    year = _int(request.args, "year")
    rows = Payslip.query.filter_by(month=month, year=year).order_by(Payslip.employee_id.asc()).all()
    bio = build_register([payslip_row_dict(r) for r in rows], month, year)
    filename = f"payroll_register_{year}_{month:02d}.xlsx"
    return send_file(bio, mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                     as_attachment=True, download_name=filename)
