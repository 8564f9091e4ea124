"""Low/normal/high evaluation against meal-context target ranges."""

from __future__ import annotations

from glucose_tracker.classify import classify
from glucose_tracker.config import DEFAULT_CONFIG, AnalyticsConfig
from glucose_tracker.model import MealContext, Reading, Status


def status(value: float, meal_context: MealContext) -> Status:
    """Classify value against meal_context's threshold and inclusive range."""
    if value < meal_context.low_threshold:
        return Status.LOW
    low, high = meal_context.target_range
    if low <= value <= high:
        return Status.NORMAL
    return Status.HIGH


def glucose_status(
    reading: Reading, *, config: AnalyticsConfig = DEFAULT_CONFIG
) -> Status:
    """Status of a reading under its classified meal context."""
    return status(reading.value, classify(reading, config=config))
