"""Calibration constants and calendar configuration for the analytics."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, tzinfo

from dateutil import tz

LOW_THRESHOLD_MG_DL = 80.0

# Keyed by MealContext value; [low, high] inclusive.
TARGET_RANGES_MG_DL: dict[str, tuple[float, float]] = {
    "before_meal": (80.0, 130.0),
    "after_meal": (80.0, 180.0),
    "unspecified": (80.0, 140.0),
}

FASTING_HOURS = (6, 9)
POST_MEAL_HOURS = (10, 23)

MMOL_TO_MG_DL = 18.0

SUNDAY = 6

_TZ_ENV = "GLUCOSE_TRACKER_TZ"
_FIRST_WEEKDAY_ENV = "GLUCOSE_TRACKER_FIRST_WEEKDAY"


@dataclass(frozen=True)
class AnalyticsConfig:
    """Calendar settings used to turn timestamps into local days and hours."""

    tz: tzinfo | None = None
    first_weekday: int = SUNDAY

    def __post_init__(self) -> None:
        if not 0 <= self.first_weekday <= 6:
            raise ValueError(f"first_weekday must be 0-6, got {self.first_weekday}")

    @classmethod
    def from_env(cls) -> AnalyticsConfig:
        """Build config from GLUCOSE_TRACKER_TZ / GLUCOSE_TRACKER_FIRST_WEEKDAY.

        Raises:
            ValueError: If the timezone is unknown or the weekday is not 0-6.
        """
        tz_name = os.environ.get(_TZ_ENV, "").strip()
        local_tz: tzinfo | None = None
        if tz_name:
            local_tz = tz.gettz(tz_name)
            if local_tz is None:
                raise ValueError(f"Unknown timezone: {tz_name}")

        raw_weekday = os.environ.get(_FIRST_WEEKDAY_ENV, "").strip()
        first_weekday = int(raw_weekday) if raw_weekday else SUNDAY
        return cls(tz=local_tz, first_weekday=first_weekday)

    def local_time(self, ts: datetime) -> datetime:
        """Return ts on the local calendar (naive timestamps are already local)."""
        if self.tz is None or ts.tzinfo is None:
            return ts
        return ts.astimezone(self.tz)


DEFAULT_CONFIG = AnalyticsConfig()
