"""Error taxonomy for reading sources and the write path."""

from __future__ import annotations


class GlucoseTrackerError(Exception):
    """Base error with a stable code and a message safe to show users."""

    code = 9999
    user_message = "Something went wrong. Please try again."
    suggested_actions: tuple[str, ...] = ("Try again",)


class DataUnavailable(GlucoseTrackerError):
    """A reading source could not supply readings."""

    code = 2000
    user_message = "Unable to load your health data. Please try again."


class SourceNotAvailable(DataUnavailable):
    """The data source does not exist on this system."""

    code = 1001
    user_message = "The glucose data source is not available."
    suggested_actions = ("Check the configured data path",)


class AccessDenied(DataUnavailable):
    """Access to the data source was refused."""

    code = 1003
    user_message = "Please allow access to your glucose data to continue."
    suggested_actions = ("Check file permissions", "Try again")


class ReadFailed(DataUnavailable):
    """The source exists but its content could not be read."""

    code = 2001
    suggested_actions = ("Check the export file", "Try again")


class InvalidReading(GlucoseTrackerError):
    """A reading was rejected at the write boundary."""

    code = 3001
    user_message = "Please check your input and try again."
    suggested_actions = ("Enter a value above zero", "Do not use a future time")
