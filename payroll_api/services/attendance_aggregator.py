# payroll_api/services/attendance_aggregator.py
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional, Tuple

from payroll_api.common.errors import ValidationError
from payroll_api.services.money import qfrac

log = logging.getLogger(__name__)

PRESENT = "Present"
ABSENT = "Absent"
ON_LEAVE = "OnLeave"
HOLIDAY = "Holiday"
HALF_DAY = "HalfDay"
STATUSES = (PRESENT, ABSENT, ON_LEAVE, HOLIDAY, HALF_DAY)

PAID = "Paid"
UNPAID = "Unpaid"

HALF = Decimal("0.5")
ONE = Decimal("1")

# UI / legacy spellings -> canonical status
_STATUS_ALIASES = {
    "present": PRESENT, "p": PRESENT,
    "absent": ABSENT, "a": ABSENT,
    "onleave": ON_LEAVE, "on leave": ON_LEAVE, "on_leave": ON_LEAVE, "leave": ON_LEAVE,
    "holiday": HOLIDAY, "h": HOLIDAY,
    "halfday": HALF_DAY, "half day": HALF_DAY, "half_day": HALF_DAY, "half-day": HALF_DAY,
}


def normalize_status(raw) -> str:
    s = str(raw or "").strip().lower()
    st = _STATUS_ALIASES.get(s)
    if not st:
        raise ValidationError(f"unknown attendance status {raw!r}")
    return st


def normalize_leave_category(raw) -> Optional[str]:
    if raw is None or raw == "":
        return None
    s = str(raw).strip().lower()
    if s == "paid":
        return PAID
    if s == "unpaid":
        return UNPAID
    raise ValidationError(f"leave category must be Paid or Unpaid, got {raw!r}")


def month_range(year: int, month: int) -> Tuple[date, date]:
    if not 1 <= int(month) <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {month!r}")
    last = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last)


@dataclass(frozen=True)
class AttendanceRecord:
    day: date
    status: str
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    # only meaningful for OnLeave days
    leave_type: Optional[str] = None
    leave_category: Optional[str] = None

    def work_minutes(self) -> int:
        if self.status not in (PRESENT, HALF_DAY):
            return 0
        if not (self.check_in and self.check_out) or self.check_out <= self.check_in:
            return 0
        return int(round((self.check_out - self.check_in).total_seconds() / 60.0))


@dataclass(frozen=True)
class AttendanceAggregate:
    employee_id: int
    start: date
    end: date
    total_days: int
    present: int = 0
    absent: int = 0
    missing: int = 0
    half_day: int = 0
    on_leave_paid: int = 0
    on_leave_unpaid: int = 0
    holiday: int = 0
    work_minutes: int = 0
    leave_types: Dict[str, int] = field(default_factory=dict)

    @property
    def working_days(self) -> int:
        return self.total_days - self.holiday

    @property
    def present_days(self) -> Decimal:
        return Decimal(self.present) + HALF * self.half_day

    @property
    def paid_days(self) -> Decimal:
        return self.present_days + self.on_leave_paid

    @property
    def unpaid_leave_days(self) -> int:
        return self.absent + self.on_leave_unpaid

    @property
    def worked_fraction(self) -> Decimal:
        if self.working_days <= 0:
            return ONE
        return qfrac(self.paid_days / Decimal(self.working_days))

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "total_days": self.total_days,
            "working_days": self.working_days,
            "present": self.present,
            "absent": self.absent,
            "missing": self.missing,
            "half_day": self.half_day,
            "on_leave_paid": self.on_leave_paid,
            "on_leave_unpaid": self.on_leave_unpaid,
            "holiday": self.holiday,
            "present_days": float(self.present_days),
            "paid_days": float(self.paid_days),
            "unpaid_leave_days": self.unpaid_leave_days,
            "worked_fraction": float(self.worked_fraction),
            "work_minutes": self.work_minutes,
            "leave_types": dict(self.leave_types),
        }


def _classify_leave(rec: AttendanceRecord, leave_categories: Mapping[str, str]) -> str:
    cat = normalize_leave_category(rec.leave_category)
    if cat:
        return cat
    if rec.leave_type:
        cat = normalize_leave_category(leave_categories.get(rec.leave_type))
        if cat:
            return cat
    # no classification available: silence is not paid
    return UNPAID


def aggregate_attendance(
    employee_id: int,
    start: date,
    end: date,
    records: Iterable[AttendanceRecord],
    leave_categories: Optional[Mapping[str, str]] = None,
) -> AttendanceAggregate:
    """
    Count attendance statuses over the closed range [start, end].

    Days with no record are counted as Absent (and reported in ``missing``).
    Holiday days are excluded from working days; weekends get no special
    treatment. OnLeave days are Paid or Unpaid by the record's own category,
    else by ``leave_categories`` (leave_type -> category), else Unpaid.
    """
    if end < start:
        raise ValidationError(f"attendance range end {end} is before start {start}")
    leave_categories = leave_categories or {}

    by_day: Dict[date, AttendanceRecord] = {}
    for rec in records:
        if rec.day < start or rec.day > end:
            continue
        if rec.day in by_day:
            raise ValidationError(f"more than one attendance record for employee {employee_id} on {rec.day}")
        by_day[rec.day] = rec

    counts = {"present": 0, "absent": 0, "missing": 0, "half_day": 0,
              "on_leave_paid": 0, "on_leave_unpaid": 0, "holiday": 0}
    leave_types: Dict[str, int] = {}
    minutes = 0
    total = (end - start).days + 1

    d = start
    while d <= end:
        rec = by_day.get(d)
        if rec is None:
            counts["absent"] += 1
            counts["missing"] += 1
        elif rec.status == PRESENT:
            counts["present"] += 1
        elif rec.status == HALF_DAY:
            counts["half_day"] += 1
        elif rec.status == HOLIDAY:
            counts["holiday"] += 1
        elif rec.status == ON_LEAVE:
            if _classify_leave(rec, leave_categories) == PAID:
                counts["on_leave_paid"] += 1
            else:
                counts["on_leave_unpaid"] += 1
            if rec.leave_type:
                leave_types[rec.leave_type] = leave_types.get(rec.leave_type, 0) + 1
        else:
            counts["absent"] += 1
        if rec is not None:
            minutes += rec.work_minutes()
        d += timedelta(days=1)

    if counts["missing"]:
        log.debug("[attendance] employee %s: %s day(s) without a record in %s..%s counted absent",
                  employee_id, counts["missing"], start, end)

    return AttendanceAggregate(
        employee_id=employee_id,
        start=start,
        end=end,
        total_days=total,
        work_minutes=minutes,
        leave_types=leave_types,
        **counts,
    )
