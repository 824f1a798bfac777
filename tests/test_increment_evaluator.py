from datetime import date, datetime, timedelta
from decimal import Decimal

from payroll_api.services.increment_evaluator import (
    EmployeeRecord,
    TaskRating,
    average_ratings,
    evaluate_increments,
    experience_years,
    task_rating_increments,
)
from payroll_api.services.payroll_policy import PayrollPolicy

TODAY = date(2026, 10, 1)


def _emp(eid, exp, days, salary="50000", status="active"):
    return EmployeeRecord(employee_id=eid, name=f"E{eid}", date_of_joining=TODAY - timedelta(days=days),
                          experience=exp, salary=Decimal(salary), status=status)


def _rating(eid, days_ago, rating):
    return TaskRating(employee_id=eid, completed_at=datetime.combine(TODAY - timedelta(days=days_ago),
                                                                    datetime.min.time()),
                      rating=Decimal(rating))


def test_experience_years_takes_first_whole_number():
    assert experience_years("4.5 years") == 4
    assert experience_years("2 yrs") == 2
    assert experience_years(None) == 0
    assert experience_years("fresher") == 0


def test_tenure_increment_for_four_and_a_half_years():
    sheet = evaluate_increments([_emp(1, "4.5 years", 200)], TODAY)
    [e] = sheet.employees
    assert e.increment_percent == Decimal("15")
    assert e.increment_amount == Decimal("7500")
    assert e.new_salary == Decimal("57500")
    assert e.days_since_joining == 200


def test_short_tenure_and_zero_years_are_excluded():
    sheet = evaluate_increments([
        _emp(1, "3 years", 179),
        _emp(2, "0.5 years", 400),
        _emp(3, "6 years", 400),
        _emp(4, "2 years", 400, status="inactive"),
        _emp(5, "1 year", 180),
    ], TODAY)
    assert [e.employee_id for e in sheet.employees] == [5]
    assert sheet.employees[0].increment_percent == Decimal("5")


def test_min_tenure_is_configurable():
    policy = PayrollPolicy(min_tenure_days=365)
    assert evaluate_increments([_emp(1, "2 years", 200)], TODAY, policy).employees == []


def test_increment_amount_rounds_half_up():
    # 12345 * 10% = 1234.5 -> 1235
    [e] = evaluate_increments([_emp(1, "3 years", 300, salary="12345")], TODAY).employees
    assert e.increment_amount == Decimal("1235")


def test_average_ratings_respect_window():
    ratings = [_rating(1, 10, "5"), _rating(1, 20, "4"), _rating(1, 200, "1"), _rating(2, 5, "3")]
    avgs = average_ratings(ratings, TODAY, 180)
    assert avgs == {1: Decimal("4.5"), 2: Decimal("3")}


def test_task_increments_only_for_good_ratings():
    ratings = [_rating(1, 10, "4.6"), _rating(2, 10, "4.0"), _rating(3, 10, "3.0")]
    assert task_rating_increments(ratings, TODAY) == {1: Decimal("5"), 2: Decimal("3")}


def test_merge_adds_task_percent_once():
    sheet = evaluate_increments([_emp(1, "4 years", 300), _emp(2, "1 year", 300)], TODAY)
    assert sheet.merge_task_increments({1: Decimal("5")}) is True
    first = sheet.by_employee()
    assert first[1].increment_percent == Decimal("20")
    assert first[1].task_percent == Decimal("5")
    assert first[1].new_salary == Decimal("60000")
    assert first[2].increment_percent == Decimal("5")

    assert sheet.merge_task_increments({1: Decimal("5")}) is False
    assert sheet.by_employee()[1].increment_percent == Decimal("20")
    assert sheet.to_dict()["merged"] is True
