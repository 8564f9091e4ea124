"""Period-over-period change and chart series for glucose averages."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date, timedelta

from glucose_tracker.aggregate import days_mask, period_average, readings_to_frame
from glucose_tracker.config import DEFAULT_CONFIG, AnalyticsConfig
from glucose_tracker.model import (
    NO_COMPARISON,
    TRACKED_CONTEXTS,
    ChangeDirection,
    ChartPoint,
    DateRange,
    MealContext,
    PercentChange,
    Reading,
    TrendResult,
)


def _round_tenth(x: float) -> float:
    """Round half away from zero to one decimal."""
    return math.copysign(math.floor(abs(x) * 10 + 0.5) / 10, x)


def percent_change(current: float, previous: float) -> PercentChange:
    """Relative change of current over previous, in percent.

    A previous value <= 0 means there is no baseline; the result then carries
    no magnitude and must not be formatted as a percentage.
    """
    if previous <= 0:
        return NO_COMPARISON

    change = (current - previous) / previous * 100
    rounded = abs(_round_tenth(change))
    if change > 0:
        return PercentChange(ChangeDirection.INCREASE, rounded)
    if change < 0:
        return PercentChange(ChangeDirection.DECREASE, rounded)
    return PercentChange(ChangeDirection.UNCHANGED, 0.0)


def compare(current: float | None, previous: float | None) -> PercentChange:
    """percent_change for optional averages; missing data means no comparison."""
    if current is None or previous is None:
        return NO_COMPARISON
    return percent_change(current, previous)


def week_start(day: date, *, config: AnalyticsConfig = DEFAULT_CONFIG) -> date:
    """First day of the week containing day, per config.first_weekday."""
    offset = (day.weekday() - config.first_weekday) % 7
    return day - timedelta(days=offset)


def _trend(
    readings: Sequence[Reading],
    meal_context: MealContext,
    current: DateRange,
    previous: DateRange,
    config: AnalyticsConfig,
) -> TrendResult:
    current_avg = period_average(
        readings, meal_context, current.start, current.end, config=config
    )
    previous_avg = period_average(
        readings, meal_context, previous.start, previous.end, config=config
    )
    return TrendResult(
        current_average=current_avg,
        previous_average=previous_avg,
        percent_change=compare(current_avg, previous_avg),
        current_range=current,
        previous_range=previous,
    )


def week_over_week(
    readings: Sequence[Reading],
    meal_context: MealContext,
    reference_date: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> TrendResult:
    """Compare the week containing reference_date with the week before it."""
    start = week_start(reference_date, config=config)
    current = DateRange(start, start + timedelta(days=6))
    previous = DateRange(start - timedelta(days=7), start - timedelta(days=1))
    return _trend(readings, meal_context, current, previous, config)


def day_over_day(
    readings: Sequence[Reading],
    meal_context: MealContext,
    day: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> TrendResult:
    """Compare day with the day before it."""
    yesterday = day - timedelta(days=1)
    current = DateRange(day, day)
    previous = DateRange(yesterday, yesterday)
    return _trend(readings, meal_context, current, previous, config)


def chart_series(
    readings: Sequence[Reading],
    start: date,
    end: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[ChartPoint]:
    """Daily means per tracked meal context over [start, end].

    Days without readings for a context produce no point for it, so each day
    yields zero, one or two points, ordered by day then context.
    """
    df = readings_to_frame(readings, config=config)
    if df.empty:
        return []

    tracked = [c.value for c in TRACKED_CONTEXTS]
    mask = days_mask(df, start, end) & df["meal_context"].isin(tracked)
    means = df.loc[mask].groupby(["date", "meal_context"])["value"].mean()

    points = [
        ChartPoint(day=day, meal_context=MealContext(ctx), value=float(avg))
        for (day, ctx), avg in means.items()
    ]
    order = {c: i for i, c in enumerate(TRACKED_CONTEXTS)}
    return sorted(points, key=lambda p: (p.day, order[p.meal_context]))
