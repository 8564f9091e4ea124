"""Grouping of readings by calendar day and meal context."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

import pandas as pd

from glucose_tracker.classify import classify
from glucose_tracker.config import DEFAULT_CONFIG, AnalyticsConfig
from glucose_tracker.model import MealContext, PeriodMetrics, Reading, WeekdayBucket

_WEEKDAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

FRAME_COLUMNS = ["datetime", "date", "hour", "value", "meal_context"]


def readings_to_frame(
    readings: Sequence[Reading], *, config: AnalyticsConfig = DEFAULT_CONFIG
) -> pd.DataFrame:
    """Convert readings to a DataFrame keyed by local day and meal context.

    Returns:
        DataFrame with columns datetime (naive local wall clock), date, hour,
        value, meal_context (the MealContext value string), sorted by datetime.
    """
    rows = []
    for r in readings:
        local = config.local_time(r.timestamp)
        rows.append(
            {
                "datetime": local.replace(tzinfo=None),
                "date": local.date(),
                "hour": local.hour,
                "value": float(r.value),
                "meal_context": classify(r, config=config).value,
            }
        )
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("datetime", kind="stable").reset_index(drop=True)


def build_calendar(min_day: date, max_day: date) -> pd.DataFrame:
    """Build inclusive day calendar DataFrame."""
    days = pd.date_range(start=min_day, end=max_day, freq="D")
    return pd.DataFrame({"date": days.date})


def days_mask(df: pd.DataFrame, start: date, end: date) -> pd.Series:
    """Boolean mask of frame rows whose local day is within [start, end]."""
    return (df["date"] >= start) & (df["date"] <= end)


def _mean_or_none(values: pd.Series) -> float | None:
    if values.empty:
        return None
    return float(values.mean())


def average(
    readings: Sequence[Reading],
    meal_context: MealContext,
    on: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> float | None:
    """Mean value of readings on day `on` classified as meal_context."""
    return period_average(readings, meal_context, on, on, config=config)


def period_average(
    readings: Sequence[Reading],
    meal_context: MealContext,
    start: date,
    end: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> float | None:
    """Mean value for meal_context over inclusive days; None when empty."""
    df = readings_to_frame(readings, config=config)
    if df.empty:
        return None
    mask = days_mask(df, start, end) & (df["meal_context"] == meal_context.value)
    return _mean_or_none(df.loc[mask, "value"])


def daily_averages(
    readings: Sequence[Reading], *, config: AnalyticsConfig = DEFAULT_CONFIG
) -> list[tuple[date, float]]:
    """Per-day mean of all readings regardless of meal context, ascending."""
    df = readings_to_frame(readings, config=config)
    if df.empty:
        return []
    means = df.groupby("date")["value"].mean().sort_index()
    return [(day, float(avg)) for day, avg in means.items()]


def weekly_bucket(
    readings: Sequence[Reading],
    week_start: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[WeekdayBucket]:
    """Zero-filled daily means for the 7 days starting at week_start.

    Readings are expected to be filtered to one meal context by the caller.
    Days without readings get value 0.0 and has_data False.
    """
    week_end = week_start + timedelta(days=6)
    cal = build_calendar(week_start, week_end)

    df = readings_to_frame(readings, config=config)
    week = df.loc[days_mask(df, week_start, week_end)] if not df.empty else df
    if not week.empty:
        daily = week.groupby("date", as_index=False).agg(
            value=("value", "mean"), count=("value", "count")
        )
        cal = cal.merge(daily, on="date", how="left")

    out: list[WeekdayBucket] = []
    for _, row in cal.iterrows():
        day = row["date"]
        mean = row.get("value")
        has_data = mean is not None and not pd.isna(mean)
        out.append(
            WeekdayBucket(
                day=day,
                weekday=_WEEKDAYS[day.weekday()],
                value=float(mean) if has_data else 0.0,
                has_data=has_data,
            )
        )
    return out


def period_metrics(
    readings: Sequence[Reading],
    start: date,
    end: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> PeriodMetrics:
    """Averages and sample counts for every meal context over inclusive days."""
    averages: dict[MealContext, float | None] = {c: None for c in MealContext}
    counts: dict[MealContext, int] = {c: 0 for c in MealContext}

    df = readings_to_frame(readings, config=config)
    if not df.empty:
        period = df.loc[days_mask(df, start, end)]
        g = period.groupby("meal_context")["value"].agg(["mean", "count"])
        for key, row in g.iterrows():
            context = MealContext(key)
            averages[context] = float(row["mean"])
            counts[context] = int(row["count"])

    return PeriodMetrics(
        period_start=start,
        period_end=end,
        category_averages=averages,
        sample_counts=counts,
    )


def daily_metrics(
    readings: Sequence[Reading],
    day: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> PeriodMetrics:
    """Fasting/post-meal/other averages for a single day."""
    return period_metrics(readings, day, day, config=config)


def weekly_metrics(
    readings: Sequence[Reading],
    week_start: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> PeriodMetrics:
    """Per-context averages for the 7 days starting at week_start."""
    return period_metrics(
        readings, week_start, week_start + timedelta(days=6), config=config
    )


def readings_on(
    readings: Sequence[Reading],
    day: date,
    *,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[Reading]:
    """Readings taken on the given local day, newest first."""
    same_day = [r for r in readings if config.local_time(r.timestamp).date() == day]
    return sorted(same_day, key=lambda r: r.timestamp, reverse=True)
