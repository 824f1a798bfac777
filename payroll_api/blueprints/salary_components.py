from __future__ import annotations

from flask import Blueprint, request

from payroll_api.common.errors import NotFoundError, ValidationError
from payroll_api.common.http import ok
from payroll_api.extensions import db
from payroll_api.models.payroll.components import SalaryComponent
from payroll_api.services.component_library import normalize_calculation_type, normalize_category
from payroll_api.services.money import dec
from payroll_api.services.payroll_store import load_library, referenced_component_ids

bp = Blueprint("salary_components", __name__, url_prefix="/api/v1/salary-components")

# ---------- helpers ----------
def _bool(x):
    if isinstance(x, bool):
        return x
    if x is None:
        return None
    return str(x).lower() in ("1", "true", "yes", "y")

def _row(c: SalaryComponent, in_use: set | None = None):
    return {
        "id": c.id,
        "name": c.name,
        "category": c.category,
        "is_pro_rata": bool(c.is_pro_rata),
        "is_basic_salary": c.is_basic_salary,
        "calculation_type": c.calculation_type,
        "default_value": float(c.default_value) if c.default_value is not None else None,
        "in_use": (c.id in in_use) if in_use is not None else None,
    }

def _get_or_404(component_id: int) -> SalaryComponent:
    c = db.session.get(SalaryComponent, component_id)
    if not c:
        raise NotFoundError(f"Salary component {component_id} not found")
    return c

def _apply(c: SalaryComponent, j: dict, creating: bool):
    if creating or "name" in j:
        name = (j.get("name") or "").strip()
        if not name:
            raise ValidationError("name is required")
        c.name = name
    if creating or "category" in j or "type" in j:
        # the UI posts the category as "type"
        c.category = normalize_category(j.get("category", j.get("type")))
    if "is_pro_rata" in j or "isProRata" in j:
        c.is_pro_rata = bool(_bool(j.get("is_pro_rata", j.get("isProRata"))))
    elif creating:
        c.is_pro_rata = False
    if "is_basic_salary" in j:
        c.is_basic_salary = _bool(j.get("is_basic_salary"))
    calc = j.get("calculation_type", j.get("calculationType"))
    if calc:
        c.calculation_type = normalize_calculation_type(calc)
    if j.get("default_value", j.get("value")) not in (None, ""):
        c.default_value = dec(j.get("default_value", j.get("value")), field="default_value")

# ---------- routes ----------
@bp.get("")
def list_components():
    in_use = referenced_component_ids()
    rows = SalaryComponent.query.order_by(SalaryComponent.category.asc(), SalaryComponent.name.asc()).all()
    return ok([_row(c, in_use) for c in rows])

@bp.post("")
def create_component():
    j = request.get_json(silent=True) or {}
    c = SalaryComponent()
    _apply(c, j, creating=True)
    db.session.add(c)
    db.session.commit()
    return ok(_row(c), 201)

@bp.get("/<int:component_id>")
def get_component(component_id: int):
    return ok(_row(_get_or_404(component_id), referenced_component_ids()))

@bp.put("/<int:component_id>")
def update_component(component_id: int):
    """Name/category/flag edits; definitions stay referenced by id so profiles keep working."""
    c = _get_or_404(component_id)
    _apply(c, request.get_json(silent=True) or {}, creating=False)
    db.session.commit()
    return ok(_row(c))

@bp.delete("/<int:component_id>")
def delete_component(component_id: int):
    _get_or_404(component_id)
    load_library().ensure_deletable(component_id, referenced_component_ids())
    SalaryComponent.query.filter_by(id=component_id).delete()
    db.session.commit()
    return ok({"deleted": component_id})
