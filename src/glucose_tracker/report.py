"""Report facade: averages, trends and chart series for a time window."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum

from glucose_tracker.aggregate import daily_averages, period_metrics, weekly_bucket
from glucose_tracker.classify import classify
from glucose_tracker.config import DEFAULT_CONFIG, AnalyticsConfig
from glucose_tracker.errors import DataUnavailable
from glucose_tracker.model import (
    TRACKED_CONTEXTS,
    ChartPoint,
    DateRange,
    MealContext,
    PercentChange,
    Reading,
    WeekdayBucket,
)
from glucose_tracker.sources.base import ReadingSource
from glucose_tracker.trend import chart_series, compare

logger = logging.getLogger(__name__)


class TimeRange(Enum):
    """Preset report windows."""

    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    NINETY_DAYS = "90d"

    @property
    def days(self) -> int:
        return int(self.value[:-1])

    @property
    def display_name(self) -> str:
        return f"{self.days} Days"


class ChartMode(Enum):
    """WEEKLY zero-fills 7 daily buckets; RANGE omits days without data."""

    WEEKLY = "weekly"
    RANGE = "range"


@dataclass(frozen=True)
class ReportWindow(DateRange):
    """Inclusive range of local days a report covers."""

    @classmethod
    def last_days(cls, days: int, today: date) -> ReportWindow:
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")
        return cls(today - timedelta(days=days - 1), today)

    @classmethod
    def from_range(cls, time_range: TimeRange, today: date) -> ReportWindow:
        return cls.last_days(time_range.days, today)

    @classmethod
    def between(cls, start: date, end: date) -> ReportWindow:
        return cls(start, end)

    def previous(self) -> ReportWindow:
        """Window of equal length ending the day before this one starts."""
        length = timedelta(days=self.days)
        return ReportWindow(self.start - length, self.end - length)


ChartSeries = Sequence[ChartPoint] | Sequence[WeekdayBucket]


@dataclass(frozen=True)
class CategoryReport:
    """Ready-to-render summary of one meal context."""

    meal_context: MealContext
    label: str
    average: float | None
    previous_average: float | None
    percent_change: PercentChange
    chart_points: ChartSeries
    sample_count: int

    @property
    def formatted_average(self) -> str:
        if self.average is None:
            return "--"
        return f"{self.average:.1f}"


@dataclass(frozen=True)
class Report:
    """Summary of a report window for every tracked meal context."""

    window: ReportWindow
    previous_window: ReportWindow
    mode: ChartMode
    categories: tuple[CategoryReport, ...]
    daily_averages: tuple[tuple[date, float], ...]
    reading_count: int
    source_error: str | None = None

    def category(self, meal_context: MealContext) -> CategoryReport:
        for c in self.categories:
            if c.meal_context is meal_context:
                return c
        raise KeyError(meal_context)


def _not_after(ts: datetime, now: datetime, config: AnalyticsConfig) -> bool:
    ts, now = config.local_time(ts), config.local_time(now)
    if (ts.tzinfo is None) != (now.tzinfo is None):
        ts, now = ts.replace(tzinfo=None), now.replace(tzinfo=None)
    return ts <= now


def _in_window(
    readings: Sequence[Reading], window: DateRange, config: AnalyticsConfig
) -> list[Reading]:
    return [
        r for r in readings if window.contains(config.local_time(r.timestamp).date())
    ]


def _chart(
    current: Sequence[Reading],
    meal_context: MealContext,
    window: ReportWindow,
    mode: ChartMode,
    config: AnalyticsConfig,
) -> ChartSeries:
    if not current:
        return []
    if mode is ChartMode.WEEKLY:
        # Last 7 days of the window; shorter windows get one bucket per day.
        start = max(window.start, window.end - timedelta(days=6))
        same_context = [
            r for r in current if classify(r, config=config) is meal_context
        ]
        buckets = weekly_bucket(same_context, start, config=config)
        return [b for b in buckets if window.contains(b.day)]
    points = chart_series(current, window.start, window.end, config=config)
    return [p for p in points if p.meal_context is meal_context]


def build_report(
    readings: Sequence[Reading],
    window: ReportWindow,
    *,
    mode: ChartMode = ChartMode.RANGE,
    now: datetime | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> Report:
    """Summarize readings over window against the preceding window.

    Readings are expected to cover both windows; anything outside them, or
    after `now`, is ignored. Never raises for empty input: averages are None,
    changes report no comparison and chart series are empty.
    """
    if now is not None:
        readings = [r for r in readings if _not_after(r.timestamp, now, config)]
    previous_window = window.previous()
    current = _in_window(readings, window, config)
    prior = _in_window(readings, previous_window, config)

    current_metrics = period_metrics(current, window.start, window.end, config=config)
    prior_metrics = period_metrics(
        prior, previous_window.start, previous_window.end, config=config
    )

    categories = []
    for ctx in TRACKED_CONTEXTS:
        avg = current_metrics.category_averages[ctx]
        prev = prior_metrics.category_averages[ctx]
        categories.append(
            CategoryReport(
                meal_context=ctx,
                label=ctx.label,
                average=avg,
                previous_average=prev,
                percent_change=compare(avg, prev),
                chart_points=_chart(current, ctx, window, mode, config),
                sample_count=current_metrics.sample_counts[ctx],
            )
        )

    return Report(
        window=window,
        previous_window=previous_window,
        mode=mode,
        categories=tuple(categories),
        daily_averages=tuple(daily_averages(current, config=config)),
        reading_count=len(current),
    )


def load_report(
    source: ReadingSource,
    window: ReportWindow,
    *,
    mode: ChartMode = ChartMode.RANGE,
    now: datetime | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> Report:
    """Fetch readings for window and its predecessor, then build the report.

    A DataUnavailable from the source is logged and reported through
    Report.source_error; the report is then built from no readings.
    """
    since = datetime.combine(window.previous().start, time.min)
    if config.tz is not None:
        since = since.replace(tzinfo=config.tz)

    error: str | None = None
    try:
        readings = source.fetch(since)
    except DataUnavailable as exc:
        logger.warning("Readings unavailable (code %s): %s", exc.code, exc)
        readings = []
        error = exc.user_message

    logger.debug("Building report for %s with %d readings", window.label, len(readings))
    report = build_report(readings, window, mode=mode, now=now, config=config)
    return replace(report, source_error=error)
