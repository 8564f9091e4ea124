"""Meal-context classification of readings."""

from __future__ import annotations

from glucose_tracker.config import (
    DEFAULT_CONFIG,
    FASTING_HOURS,
    POST_MEAL_HOURS,
    AnalyticsConfig,
)
from glucose_tracker.model import MealContext, Reading


def classify_hour(hour: int) -> MealContext:
    """Map an hour of day (0-23) to its meal context."""
    if FASTING_HOURS[0] <= hour <= FASTING_HOURS[1]:
        return MealContext.BEFORE_MEAL
    if POST_MEAL_HOURS[0] <= hour <= POST_MEAL_HOURS[1]:
        return MealContext.AFTER_MEAL
    return MealContext.UNSPECIFIED


def classify(
    reading: Reading, *, config: AnalyticsConfig = DEFAULT_CONFIG
) -> MealContext:
    """Return the explicit tag, or derive one from the local hour of day."""
    if reading.meal_context is not None:
        return reading.meal_context
    return classify_hour(config.local_time(reading.timestamp).hour)
