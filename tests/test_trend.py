from __future__ import annotations

from datetime import date, datetime, timedelta

from glucose_tracker.config import AnalyticsConfig
from glucose_tracker.model import ChangeDirection, MealContext, Reading
from glucose_tracker.trend import (
    _round_tenth,
    chart_series,
    compare,
    day_over_day,
    percent_change,
    week_over_week,
    week_start,
)


def _at(day: date, hour: int, value: float) -> Reading:
    return Reading(value=value, timestamp=datetime(day.year, day.month, day.day, hour))


def test_percent_change_without_baseline() -> None:
    result = percent_change(current=0.0, previous=0.0)
    assert result.direction is ChangeDirection.NO_COMPARISON
    assert result.magnitude is None
    assert not result.has_comparison
    assert result.signum == 0
    assert result.text == "No comparison"
    assert not percent_change(120.0, -5.0).has_comparison


def test_percent_change_increase() -> None:
    result = percent_change(current=110.0, previous=100.0)
    assert result.direction is ChangeDirection.INCREASE
    assert result.magnitude == 10.0
    assert result.signum == 1
    assert result.text == "↑ 10.0%"


def test_percent_change_decrease_reports_absolute_magnitude() -> None:
    result = percent_change(current=90.0, previous=100.0)
    assert result.direction is ChangeDirection.DECREASE
    assert result.magnitude == 10.0
    assert result.signum == -1
    assert result.text == "↓ 10.0%"


def test_percent_change_unchanged() -> None:
    result = percent_change(100.0, 100.0)
    assert result.direction is ChangeDirection.UNCHANGED
    assert result.text == "No change"


def test_percent_change_rounds_to_one_decimal() -> None:
    result = percent_change(current=130.0, previous=120.0)
    assert result.magnitude == 8.3


def test_round_tenth_is_half_away_from_zero() -> None:
    assert _round_tenth(0.25) == 0.3
    assert _round_tenth(-0.25) == -0.3
    assert _round_tenth(0.24) == 0.2


def test_compare_missing_average_has_no_comparison() -> None:
    assert not compare(None, 100.0).has_comparison
    assert not compare(100.0, None).has_comparison
    assert compare(110.0, 100.0).direction is ChangeDirection.INCREASE


def test_week_start_sunday_and_monday() -> None:
    wednesday = date(2026, 10, 21)
    assert week_start(wednesday) == date(2026, 10, 18)
    assert week_start(date(2026, 10, 18)) == date(2026, 10, 18)
    monday_first = AnalyticsConfig(first_weekday=0)
    assert week_start(wednesday, config=monday_first) == date(2026, 10, 19)


def test_week_over_week() -> None:
    readings = [
        _at(date(2026, 10, 12), 7, 100.0),
        _at(date(2026, 10, 19), 7, 100.0),
        _at(date(2026, 10, 20), 8, 120.0),
        _at(date(2026, 10, 20), 14, 200.0),
        _at(date(2026, 10, 25), 7, 300.0),
    ]
    result = week_over_week(readings, MealContext.BEFORE_MEAL, date(2026, 10, 21))
    assert result.current_average == 110.0
    assert result.previous_average == 100.0
    assert result.has_comparison
    assert result.percent_change.magnitude == 10.0
    assert result.current_range.start == date(2026, 10, 18)
    assert result.current_range.end == date(2026, 10, 24)
    assert result.previous_range.start == date(2026, 10, 11)
    assert result.previous_range.end == date(2026, 10, 17)
    assert result.current_range.label == "Oct 18 - Oct 24"


def test_week_over_week_without_previous_week() -> None:
    readings = [_at(date(2026, 10, 19), 7, 100.0)]
    result = week_over_week(readings, MealContext.BEFORE_MEAL, date(2026, 10, 19))
    assert result.current_average == 100.0
    assert result.previous_average is None
    assert not result.has_comparison


def test_day_over_day() -> None:
    day = date(2026, 10, 19)
    readings = [
        _at(day - timedelta(days=1), 13, 150.0),
        _at(day, 13, 120.0),
    ]
    result = day_over_day(readings, MealContext.AFTER_MEAL, day)
    assert result.current_average == 120.0
    assert result.previous_average == 150.0
    assert result.percent_change.direction is ChangeDirection.DECREASE
    assert result.percent_change.magnitude == 20.0


def test_chart_series_omits_empty_days() -> None:
    day0 = date(2026, 10, 12)
    day2 = day0 + timedelta(days=2)
    readings = [
        _at(day0, 13, 120.0),
        _at(day0, 7, 85.0),
        _at(day0, 3, 70.0),
        _at(day2, 8, 95.0),
        _at(day2, 9, 105.0),
        _at(day0 + timedelta(days=5), 8, 999.0),
    ]
    points = chart_series(readings, day0, day2)
    assert [(p.day, p.meal_context, p.value) for p in points] == [
        (day0, MealContext.BEFORE_MEAL, 85.0),
        (day0, MealContext.AFTER_MEAL, 120.0),
        (day2, MealContext.BEFORE_MEAL, 100.0),
    ]


def test_chart_series_empty() -> None:
    assert chart_series([], date(2026, 10, 1), date(2026, 10, 31)) == []
