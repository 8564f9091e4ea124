"""Clases base para fuentes de lecturas."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from glucose_tracker.model import Reading


@dataclass(frozen=True)
class SourcePaths:
    """Container for source directories."""

    root: Path


class ReadingSource(ABC):
    """Abstract supplier of glucose readings."""

    @abstractmethod
    def fetch(self, since: datetime) -> list[Reading]:
        """Return readings taken at or after `since`, oldest first.

        Raises:
            DataUnavailable: If the source cannot supply readings.
        """
