from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from payroll_api.common.errors import ValidationError
from payroll_api.services.attendance_aggregator import (
    AttendanceRecord,
    aggregate_attendance,
    month_range,
    normalize_status,
)

START, END = month_range(2026, 6)  # 30 days


def _days(status, n, offset=0, **kw):
    return [AttendanceRecord(day=START + timedelta(days=offset + i), status=status, **kw) for i in range(n)]


def test_month_range_handles_leap_february():
    assert month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(ValidationError):
        month_range(2024, 13)


def test_full_attendance_is_fraction_one():
    agg = aggregate_attendance(1, START, END, _days("Present", 30))
    assert agg.present == 30
    assert agg.working_days == 30
    assert agg.worked_fraction == Decimal("1")


def test_missing_days_count_as_absent():
    agg = aggregate_attendance(1, START, END, _days("Present", 20))
    assert agg.absent == 10
    assert agg.missing == 10
    assert agg.unpaid_leave_days == 10


def test_holidays_are_not_working_days():
    recs = _days("Holiday", 5) + _days("Present", 25, offset=5)
    agg = aggregate_attendance(1, START, END, recs)
    assert agg.holiday == 5
    assert agg.working_days == 25
    assert agg.worked_fraction == Decimal("1")


def test_half_day_counts_half():
    recs = _days("HalfDay", 2) + _days("Present", 28, offset=2)
    agg = aggregate_attendance(1, START, END, recs)
    assert agg.half_day == 2
    assert agg.present_days == Decimal("29.0")
    assert agg.worked_fraction == Decimal("0.966667")


def test_leave_classification_record_then_map_then_unpaid():
    recs = (
        _days("OnLeave", 1, leave_type="Sick", leave_category="Paid")
        + _days("OnLeave", 1, offset=1, leave_type="Casual")
        + _days("OnLeave", 1, offset=2, leave_type="Sabbatical")
        + _days("Present", 27, offset=3)
    )
    agg = aggregate_attendance(1, START, END, recs, {"Casual": "Paid"})
    assert agg.on_leave_paid == 2
    assert agg.on_leave_unpaid == 1
    assert agg.leave_types == {"Sick": 1, "Casual": 1, "Sabbatical": 1}
    assert agg.paid_days == Decimal("29")


def test_records_outside_range_are_ignored():
    recs = _days("Present", 30) + [AttendanceRecord(day=END + timedelta(days=1), status="Absent")]
    agg = aggregate_attendance(1, START, END, recs)
    assert agg.absent == 0


def test_duplicate_day_rejected():
    with pytest.raises(ValidationError):
        aggregate_attendance(1, START, END, _days("Present", 1) + _days("Absent", 1))


def test_inverted_range_rejected():
    with pytest.raises(ValidationError):
        aggregate_attendance(1, END, START, [])


def test_all_holiday_range_pays_in_full():
    agg = aggregate_attendance(1, START, START, _days("Holiday", 1))
    assert agg.working_days == 0
    assert agg.worked_fraction == Decimal("1")


def test_work_minutes_from_check_times():
    d = START
    rec = AttendanceRecord(day=d, status="Present",
                           check_in=datetime(2026, 6, 1, 9, 0), check_out=datetime(2026, 6, 1, 17, 30))
    assert rec.work_minutes() == 510
    agg = aggregate_attendance(1, START, START, [rec])
    assert agg.work_minutes == 510


def test_status_aliases():
    assert normalize_status("Half Day") == "HalfDay"
    assert normalize_status("on leave") == "OnLeave"
    with pytest.raises(ValidationError):
        normalize_status("remote")
