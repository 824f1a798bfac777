# payroll_api/services/increment_evaluator.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from payroll_api.services.money import HUNDRED, dec, q0
from payroll_api.services.payroll_policy import PayrollPolicy

log = logging.getLogger(__name__)

_YEARS_RE = re.compile(r"(\d+)")


@dataclass(frozen=True)
class EmployeeRecord:
    employee_id: int
    name: str
    date_of_joining: Optional[date]
    experience: Optional[str]
    salary: Decimal
    status: str = "active"


@dataclass(frozen=True)
class TaskRating:
    employee_id: int
    completed_at: datetime
    rating: Decimal


@dataclass(frozen=True)
class EligibleEmployee:
    employee_id: int
    name: str
    salary: Decimal
    days_since_joining: int
    experience_years: int
    increment_percent: Decimal
    increment_amount: Decimal
    new_salary: Decimal
    task_percent: Decimal = Decimal("0")

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "salary": float(self.salary),
            "days_since_joining": self.days_since_joining,
            "experience_years": self.experience_years,
            "increment_percent": float(self.increment_percent),
            "increment_amount": float(self.increment_amount),
            "new_salary": float(self.new_salary),
            "task_percent": float(self.task_percent),
        }


def experience_years(raw) -> int:
    """First whole number in a free-text experience string ("4.5 years" -> 4)."""
    m = _YEARS_RE.search(str(raw or ""))
    return int(m.group(1)) if m else 0


def _amounts(salary: Decimal, percent: Decimal):
    inc = q0(salary * percent / HUNDRED)
    return inc, salary + inc


@dataclass
class IncrementSheet:
    """
    The eligible list for one review session. Task-based increments can be
    merged into it once; ``merged`` is the single-merge guard.
    """
    today: date
    employees: List[EligibleEmployee] = field(default_factory=list)
    merged: bool = False

    def by_employee(self) -> Dict[int, EligibleEmployee]:
        return {e.employee_id: e for e in self.employees}

    def merge_task_increments(self, extra: Mapping[int, Decimal]) -> bool:
        """
        Add each employee's task-based percent on top of the tenure percent.
        Returns False (and changes nothing) when the sheet was already merged.
        """
        if self.merged:
            log.info("[increments] task increments already merged for %s; ignoring", self.today)
            return False
        updated = []
        for e in self.employees:
            bonus = dec(extra.get(e.employee_id) or 0)
            if bonus > 0:
                pct = e.increment_percent + bonus
                inc, new_salary = _amounts(e.salary, pct)
                e = replace(e, increment_percent=pct, increment_amount=inc,
                            new_salary=new_salary, task_percent=bonus)
            updated.append(e)
        self.employees = updated
        self.merged = True
        return True

    def to_dict(self) -> dict:
        return {
            "today": self.today.isoformat(),
            "merged": self.merged,
            "employees": [e.to_dict() for e in self.employees],
        }


def evaluate_increments(employees: Iterable[EmployeeRecord], today: date,
                        policy: Optional[PayrollPolicy] = None) -> IncrementSheet:
    """
    Tenure-based increments. An employee qualifies after ``min_tenure_days``
    since joining and when their full years of experience map to a non-zero
    percent (1:5, 2:8, 3:10, 4-5:15; 0 or more than 5 years get nothing).
    """
    policy = policy or PayrollPolicy()
    out: List[EligibleEmployee] = []
    for emp in employees:
        if (emp.status or "active").lower() != "active" or not emp.date_of_joining:
            continue
        days = (today - emp.date_of_joining).days
        if days < policy.min_tenure_days:
            continue
        years = experience_years(emp.experience)
        pct = Decimal(policy.tenure_percent(years))
        if pct <= 0:
            continue
        salary = dec(emp.salary, field="salary")
        inc, new_salary = _amounts(salary, pct)
        out.append(EligibleEmployee(
            employee_id=emp.employee_id,
            name=emp.name,
            salary=salary,
            days_since_joining=days,
            experience_years=years,
            increment_percent=pct,
            increment_amount=inc,
            new_salary=new_salary,
        ))
    return IncrementSheet(today=today, employees=out)


def average_ratings(ratings: Iterable[TaskRating], today: date, window_days: int) -> Dict[int, Decimal]:
    """Average rating per employee over tasks completed in the trailing window (inclusive of today)."""
    since = today - timedelta(days=window_days)
    sums: Dict[int, Decimal] = {}
    counts: Dict[int, int] = {}
    for r in ratings:
        if r.rating is None or r.completed_at is None:
            continue
        done = r.completed_at.date() if isinstance(r.completed_at, datetime) else r.completed_at
        if done < since or done > today:
            continue
        sums[r.employee_id] = sums.get(r.employee_id, Decimal("0")) + dec(r.rating, field="rating")
        counts[r.employee_id] = counts.get(r.employee_id, 0) + 1
    return {eid: sums[eid] / counts[eid] for eid in sums}


def task_rating_increments(ratings: Iterable[TaskRating], today: date,
                           policy: Optional[PayrollPolicy] = None) -> Dict[int, Decimal]:
    """employee_id -> extra percent earned from recent task ratings (only non-zero entries)."""
    policy = policy or PayrollPolicy()
    out = {}
    for eid, avg in average_ratings(ratings, today, policy.rating_window_days).items():
        pct = policy.rating_percent(avg)
        if pct > 0:
            out[eid] = pct
    return out
