"""Typed value objects for glucose readings and derived aggregates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from glucose_tracker.config import LOW_THRESHOLD_MG_DL, TARGET_RANGES_MG_DL

_MEAL_LABELS: dict[str, str] = {
    "before_meal": "Before Meal (Fasting)",
    "after_meal": "After Meal",
    "unspecified": "Other",
}


class MealContext(Enum):
    """When a reading was taken relative to meals."""

    BEFORE_MEAL = "before_meal"
    AFTER_MEAL = "after_meal"
    UNSPECIFIED = "unspecified"

    @property
    def label(self) -> str:
        return _MEAL_LABELS[self.value]

    @property
    def target_range(self) -> tuple[float, float]:
        return TARGET_RANGES_MG_DL[self.value]

    @property
    def low_threshold(self) -> float:
        return LOW_THRESHOLD_MG_DL


class Status(Enum):
    """Clinical status of a single value against its target range."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Reading:
    """One glucose measurement in mg/dL (value > 0 is assumed)."""

    value: float
    timestamp: datetime
    meal_context: MealContext | None = None

    @property
    def formatted_value(self) -> str:
        return f"{self.value:.1f}"


@dataclass(frozen=True)
class PeriodMetrics:
    """Per-category averages and sample counts over inclusive days."""

    period_start: date
    period_end: date
    category_averages: dict[MealContext, float | None] = field(default_factory=dict)
    sample_counts: dict[MealContext, int] = field(default_factory=dict)


DailyAverage = PeriodMetrics
WeeklyMetrics = PeriodMetrics


class ChangeDirection(Enum):
    """Direction of a period-over-period change."""

    INCREASE = "increase"
    DECREASE = "decrease"
    UNCHANGED = "unchanged"
    NO_COMPARISON = "no_comparison"


@dataclass(frozen=True)
class PercentChange:
    """Rounded percent change; magnitude is None when there is no baseline."""

    direction: ChangeDirection
    magnitude: float | None = None

    @property
    def has_comparison(self) -> bool:
        return self.direction is not ChangeDirection.NO_COMPARISON

    @property
    def signum(self) -> int:
        if self.direction is ChangeDirection.INCREASE:
            return 1
        if self.direction is ChangeDirection.DECREASE:
            return -1
        return 0

    @property
    def text(self) -> str:
        if self.direction is ChangeDirection.INCREASE:
            return f"↑ {self.magnitude:.1f}%"
        if self.direction is ChangeDirection.DECREASE:
            return f"↓ {self.magnitude:.1f}%"
        if self.direction is ChangeDirection.UNCHANGED:
            return "No change"
        return "No comparison"


NO_COMPARISON = PercentChange(ChangeDirection.NO_COMPARISON)


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"end {self.end} is before start {self.start}")

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def iter_days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range(self.days)]

    @property
    def label(self) -> str:
        return f"{self.start:%b %d} - {self.end:%b %d}"


@dataclass(frozen=True)
class TrendResult:
    """Averages of two adjacent periods and the change between them."""

    current_average: float | None
    previous_average: float | None
    percent_change: PercentChange
    current_range: DateRange
    previous_range: DateRange

    @property
    def has_comparison(self) -> bool:
        return self.percent_change.has_comparison


@dataclass(frozen=True)
class ChartPoint:
    """Mean value of one meal context on one day (omit-empty series)."""

    day: date
    meal_context: MealContext
    value: float


@dataclass(frozen=True)
class WeekdayBucket:
    """One day of a zero-filled weekly series."""

    day: date
    weekday: str
    value: float
    has_data: bool


TRACKED_CONTEXTS: tuple[MealContext, ...] = (
    MealContext.BEFORE_MEAL,
    MealContext.AFTER_MEAL,
)
