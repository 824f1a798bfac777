# payroll_api/services/component_library.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Optional

from payroll_api.common.errors import (
    ComponentInUseError,
    ComponentReferenceError,
    ValidationError,
)

EARNING = "Earning"
DEDUCTION = "Deduction"
CATEGORIES = (EARNING, DEDUCTION)

FIXED = "Fixed"
PERCENTAGE = "Percentage"
CALCULATION_TYPES = (FIXED, PERCENTAGE)

BASIC_MARKER = "basic"


def normalize_category(raw) -> str:
    s = str(raw or "").strip().lower()
    for c in CATEGORIES:
        if s == c.lower():
            return c
    raise ValidationError(f"category must be one of {', '.join(CATEGORIES)}, got {raw!r}")


def normalize_calculation_type(raw) -> str:
    s = str(raw or "").strip().lower()
    for c in CALCULATION_TYPES:
        if s == c.lower():
            return c
    raise ValidationError(f"calculationType must be Fixed or Percentage, got {raw!r}")


@dataclass(frozen=True)
class ComponentDefinition:
    id: int
    name: str
    category: str
    is_pro_rata: bool = False
    # None means "not declared": fall back to the name rule
    is_basic_salary: Optional[bool] = None
    calculation_type: Optional[str] = None
    default_value: Optional[Decimal] = None

    def name_says_basic(self) -> bool:
        return BASIC_MARKER in (self.name or "").lower()


class ComponentLibrary:
    """
    Read-only mapping of component id -> ComponentDefinition.

    Basic Salary detection: when any definition declares ``is_basic_salary``
    the flag is authoritative for the whole library; otherwise a definition is
    Basic when its name contains "basic" (case-insensitive).
    """

    def __init__(self, definitions: Iterable[ComponentDefinition]):
        by_id: Dict[int, ComponentDefinition] = {}
        names = set()
        for d in definitions:
            if d.id in by_id:
                raise ValidationError(f"duplicate component id {d.id!r} in library")
            key = (d.name or "").strip().lower()
            if not key:
                raise ValidationError(f"component {d.id!r} has no name")
            if key in names:
                raise ValidationError(f"duplicate component name {d.name!r} in library")
            if d.category not in CATEGORIES:
                raise ValidationError(f"component {d.name!r} has invalid category {d.category!r}")
            names.add(key)
            by_id[d.id] = d
        self._by_id = by_id
        self._flagged = any(d.is_basic_salary is not None for d in by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[ComponentDefinition]:
        return iter(self._by_id.values())

    def __contains__(self, component_id) -> bool:
        return component_id in self._by_id

    def get(self, component_id) -> ComponentDefinition:
        try:
            return self._by_id[component_id]
        except KeyError:
            raise ComponentReferenceError(component_id) from None

    def is_basic(self, definition: ComponentDefinition) -> bool:
        if self._flagged:
            return bool(definition.is_basic_salary)
        return definition.name_says_basic()

    def default_assignment(self, component_id) -> dict:
        """Starting values when HR first ticks a component onto a profile."""
        d = self.get(component_id)
        if self.is_basic(d):
            calc = FIXED
        else:
            calc = d.calculation_type or PERCENTAGE
        return {
            "component_id": d.id,
            "calculation_type": calc,
            "value": d.default_value if d.default_value is not None else Decimal("0"),
            "pro_rated": None,
        }

    def ensure_deletable(self, component_id, referenced_ids: Iterable) -> None:
        d = self.get(component_id)
        if component_id in set(referenced_ids):
            raise ComponentInUseError(
                f"Salary component {d.name!r} is assigned to an employee salary profile and cannot be deleted",
                payload={"component_id": component_id},
            )
