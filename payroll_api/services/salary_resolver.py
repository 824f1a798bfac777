# payroll_api/services/salary_resolver.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence

from payroll_api.common.errors import ValidationError
from payroll_api.services.component_library import (
    FIXED,
    PERCENTAGE,
    ComponentLibrary,
    normalize_calculation_type,
)
from payroll_api.services.money import HUNDRED, dec, percent_of, q2


@dataclass(frozen=True)
class AssignedComponent:
    component_id: int
    calculation_type: str
    value: Decimal
    # None inherits the definition's is_pro_rata
    pro_rated: Optional[bool] = None

    @classmethod
    def from_dict(cls, d: dict) -> "AssignedComponent":
        """Accepts both snake_case and the camelCase the UI posts."""
        cid = d.get("component_id", d.get("componentId", d.get("component")))
        if cid is None:
            raise ValidationError("component_id is required for every assigned component")
        if isinstance(cid, str) and cid.strip().isdigit():
            cid = int(cid)
        calc = normalize_calculation_type(d.get("calculation_type", d.get("calculationType")))
        pro = d.get("pro_rated", d.get("proRated"))
        return cls(
            component_id=cid,
            calculation_type=calc,
            value=dec(d.get("value"), field="value"),
            pro_rated=None if pro is None else bool(pro),
        )


@dataclass(frozen=True)
class ResolvedComponent:
    component_id: int
    name: str
    category: str
    calculation_type: str
    value: Decimal
    amount: Decimal
    pro_rated: bool
    is_basic: bool = False

    def to_dict(self) -> dict:
        return {
            "component_id": self.component_id,
            "component": self.name,
            "category": self.category,
            "calculation_type": self.calculation_type,
            "value": float(self.value),
            "amount": float(self.amount),
            "pro_rated": self.pro_rated,
            "is_basic": self.is_basic,
        }


@dataclass(frozen=True)
class ResolvedProfile:
    basic_salary: Decimal
    components: List[ResolvedComponent]

    def to_dict(self) -> dict:
        return {
            "basic_salary": float(self.basic_salary),
            "components": [c.to_dict() for c in self.components],
        }


def resolve_profile(assigned: Sequence[AssignedComponent], library: ComponentLibrary) -> ResolvedProfile:
    """
    Resolve every assigned component to a currency amount.

    Two passes: the Basic Salary is located and validated first, then every
    other component is computed against it. Basic must be Fixed, so a
    Percentage component can never depend on itself.

    Raises:
      ValidationError          - duplicate ids, missing/invalid Basic Salary,
                                 percentage outside [0, 100], negative amounts
      ComponentReferenceError  - an id that is not in the library
    """
    seen = set()
    defs = []
    for a in assigned:
        if a.component_id in seen:
            raise ValidationError(f"component {a.component_id!r} is assigned more than once")
        seen.add(a.component_id)
        defs.append(library.get(a.component_id))

    basics = [(a, d) for a, d in zip(assigned, defs) if library.is_basic(d)]
    if not basics:
        raise ValidationError("Basic Salary component missing from salary profile")
    if len(basics) > 1:
        names = ", ".join(d.name for _, d in basics)
        raise ValidationError(f"Salary profile has more than one Basic Salary component ({names})")

    basic, basic_def = basics[0]
    if basic.calculation_type != FIXED:
        raise ValidationError(f"Basic Salary component {basic_def.name!r} must be Fixed, not {basic.calculation_type}")
    basic_salary = dec(basic.value, field=f"value of {basic_def.name!r}")
    if basic_salary <= 0:
        raise ValidationError(f"Basic Salary component {basic_def.name!r} must be greater than zero")
    basic_salary = q2(basic_salary)

    out: List[ResolvedComponent] = []
    for a, d in zip(assigned, defs):
        is_basic = a.component_id == basic.component_id
        value = dec(a.value, field=f"value of {d.name!r}")
        if is_basic:
            amount = basic_salary
        elif a.calculation_type == PERCENTAGE:
            if value < 0 or value > HUNDRED:
                raise ValidationError(f"Percentage for {d.name!r} must be between 0 and 100, got {value}")
            amount = percent_of(basic_salary, value)
        else:
            if value < 0:
                raise ValidationError(f"Fixed amount for {d.name!r} cannot be negative")
            amount = q2(value)

        pro = d.is_pro_rata if a.pro_rated is None else a.pro_rated
        out.append(ResolvedComponent(
            component_id=d.id,
            name=d.name,
            category=d.category,
            calculation_type=a.calculation_type,
            value=value,
            amount=amount,
            pro_rated=bool(pro),
            is_basic=is_basic,
        ))

    return ResolvedProfile(basic_salary=basic_salary, components=out)
