"""Six-week month grid marking the days that have readings."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from glucose_tracker.config import DEFAULT_CONFIG, AnalyticsConfig
from glucose_tracker.model import Reading

GRID_CELLS = 42


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the month grid."""

    day: date
    has_data: bool
    is_current_month: bool
    is_today: bool
    is_selected: bool


@dataclass(frozen=True)
class CalendarMonth:
    """A month laid out as 6 rows of 7 days."""

    year: int
    month: int
    days: tuple[CalendarDay, ...]

    @property
    def display_name(self) -> str:
        return f"{date(self.year, self.month, 1):%B %Y}"

    def weeks(self) -> list[tuple[CalendarDay, ...]]:
        return [self.days[i : i + 7] for i in range(0, len(self.days), 7)]


def days_with_data(
    readings: Sequence[Reading], *, config: AnalyticsConfig = DEFAULT_CONFIG
) -> set[date]:
    """Local calendar days that have at least one reading."""
    return {config.local_time(r.timestamp).date() for r in readings}


def month_grid(
    readings: Sequence[Reading],
    year: int,
    month: int,
    *,
    selected: date | None = None,
    today: date | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> CalendarMonth:
    """Build the grid for year/month starting on config.first_weekday.

    Leading cells come from the previous month and trailing cells from the
    next one, so the grid always has 42 days.
    """
    first = date(year, month, 1)
    leading = (first.weekday() - config.first_weekday) % 7
    grid_start = first - timedelta(days=leading)
    marked = days_with_data(readings, config=config)
    today = today or date.today()

    cells = []
    for i in range(GRID_CELLS):
        day = grid_start + timedelta(days=i)
        cells.append(
            CalendarDay(
                day=day,
                has_data=day in marked,
                is_current_month=(day.year, day.month) == (year, month),
                is_today=day == today,
                is_selected=day == selected,
            )
        )
    return CalendarMonth(year=year, month=month, days=tuple(cells))
