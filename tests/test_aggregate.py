from __future__ import annotations

from datetime import date, datetime, timedelta

from dateutil import tz

from glucose_tracker.aggregate import (
    average,
    build_calendar,
    daily_averages,
    daily_metrics,
    period_average,
    readings_on,
    readings_to_frame,
    weekly_bucket,
    weekly_metrics,
)
from glucose_tracker.model import MealContext, Reading

DAY0 = date(2026, 10, 12)


def _at(
    day: date, hour: int, value: float, ctx: MealContext | None = None
) -> Reading:
    ts = datetime(day.year, day.month, day.day, hour, 0)
    return Reading(value=value, timestamp=ts, meal_context=ctx)


def _sample() -> list[Reading]:
    day1 = DAY0 + timedelta(days=1)
    return [
        _at(DAY0, 7, 85.0),
        _at(DAY0, 13, 120.0),
        _at(day1, 7, 95.0),
    ]


def test_readings_to_frame_empty_has_columns() -> None:
    df = readings_to_frame([])
    assert df.empty
    assert list(df.columns) == ["datetime", "date", "hour", "value", "meal_context"]


def test_readings_to_frame_orders_and_classifies() -> None:
    readings = [_at(DAY0, 13, 120.0), _at(DAY0, 7, 85.0)]
    df = readings_to_frame(readings)
    assert list(df["value"]) == [85.0, 120.0]
    assert list(df["meal_context"]) == ["before_meal", "after_meal"]
    assert list(df["date"]) == [DAY0, DAY0]


def test_build_calendar_inclusive() -> None:
    cal = build_calendar(date(2025, 12, 15), date(2025, 12, 17))
    assert list(cal["date"]) == [
        date(2025, 12, 15),
        date(2025, 12, 16),
        date(2025, 12, 17),
    ]


def test_average_empty_is_none() -> None:
    assert average([], MealContext.BEFORE_MEAL, DAY0) is None


def test_average_filters_by_day_and_context() -> None:
    readings = _sample()
    assert average(readings, MealContext.BEFORE_MEAL, DAY0) == 85.0
    assert average(readings, MealContext.AFTER_MEAL, DAY0) == 120.0
    assert average(readings, MealContext.AFTER_MEAL, DAY0 + timedelta(days=1)) is None
    assert average(readings, MealContext.UNSPECIFIED, DAY0) is None


def test_average_is_order_independent() -> None:
    readings = [_at(DAY0, 7, 90.0), _at(DAY0, 8, 110.0), _at(DAY0, 9, 100.0)]
    forward = average(readings, MealContext.BEFORE_MEAL, DAY0)
    backward = average(list(reversed(readings)), MealContext.BEFORE_MEAL, DAY0)
    assert forward == backward == 100.0


def test_average_honours_explicit_tag() -> None:
    readings = [
        _at(DAY0, 7, 90.0),
        _at(DAY0, 14, 110.0, MealContext.BEFORE_MEAL),
    ]
    assert average(readings, MealContext.BEFORE_MEAL, DAY0) == 100.0
    assert average(readings, MealContext.AFTER_MEAL, DAY0) is None


def test_period_average_spans_days() -> None:
    readings = _sample()
    got = period_average(
        readings, MealContext.BEFORE_MEAL, DAY0, DAY0 + timedelta(days=1)
    )
    assert got == 90.0


def test_daily_averages_groups_all_contexts_ascending() -> None:
    readings = list(reversed(_sample()))
    assert daily_averages(readings) == [
        (DAY0, 102.5),
        (DAY0 + timedelta(days=1), 95.0),
    ]
    assert daily_averages([]) == []


def test_weekly_bucket_empty_returns_seven_zero_days() -> None:
    buckets = weekly_bucket([], DAY0)
    assert len(buckets) == 7
    assert [b.day for b in buckets] == [DAY0 + timedelta(days=i) for i in range(7)]
    assert all(b.value == 0.0 and not b.has_data for b in buckets)


def test_weekly_bucket_only_covers_requested_week() -> None:
    start = DAY0 - timedelta(days=2)
    readings = [_at(start + timedelta(days=i), 8, 100.0 + i) for i in range(10)]
    buckets = weekly_bucket(readings, DAY0)
    assert len(buckets) == 7
    assert [b.value for b in buckets] == [102.0 + i for i in range(7)]
    assert all(b.has_data for b in buckets)


def test_weekly_bucket_zero_fills_gaps() -> None:
    readings = [
        _at(DAY0, 8, 100.0),
        _at(DAY0, 9, 110.0),
        _at(DAY0 + timedelta(days=2), 8, 120.0),
    ]
    buckets = weekly_bucket(readings, DAY0)
    assert buckets[0].value == 105.0
    assert buckets[0].has_data
    assert buckets[0].weekday == "Mon"
    assert buckets[1].value == 0.0
    assert not buckets[1].has_data
    assert buckets[2].value == 120.0


def test_daily_metrics_reports_every_context() -> None:
    metrics = daily_metrics(_sample(), DAY0)
    assert metrics.period_start == DAY0
    assert metrics.period_end == DAY0
    assert metrics.category_averages == {
        MealContext.BEFORE_MEAL: 85.0,
        MealContext.AFTER_MEAL: 120.0,
        MealContext.UNSPECIFIED: None,
    }
    assert metrics.sample_counts[MealContext.UNSPECIFIED] == 0
    assert metrics.sample_counts[MealContext.BEFORE_MEAL] == 1


def test_weekly_metrics_empty() -> None:
    metrics = weekly_metrics([], DAY0)
    assert metrics.period_end == DAY0 + timedelta(days=6)
    assert all(v is None for v in metrics.category_averages.values())
    assert all(n == 0 for n in metrics.sample_counts.values())


def test_readings_on_newest_first() -> None:
    readings = _sample()
    got = readings_on(readings, DAY0)
    assert [r.value for r in got] == [120.0, 85.0]
    assert readings_on(readings, DAY0 - timedelta(days=1)) == []


def test_readings_to_frame_sorts_mixed_naive_and_aware() -> None:
    readings = [
        Reading(value=100.0, timestamp=datetime(2026, 10, 12, 8, 0, tzinfo=tz.UTC)),
        Reading(value=90.0, timestamp=datetime(2026, 10, 12, 7, 0)),
    ]
    df = readings_to_frame(readings)
    assert list(df["value"]) == [90.0, 100.0]
    assert list(df["hour"]) == [7, 8]
