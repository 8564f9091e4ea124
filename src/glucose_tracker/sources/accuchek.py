"""Lectura de exportaciones JSON de Accu-Chek."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any

from dateutil import tz

from glucose_tracker.config import MMOL_TO_MG_DL
from glucose_tracker.errors import ReadFailed, SourceNotAvailable
from glucose_tracker.model import MealContext, Reading
from glucose_tracker.sources.base import ReadingSource, SourcePaths

logger = logging.getLogger(__name__)

# Meter tags, lowercased. Anything else is left for the hour-of-day classifier.
_TAG_MEAL_CONTEXT: dict[str, MealContext] = {
    "ayuno": MealContext.BEFORE_MEAL,
    "antes comida": MealContext.BEFORE_MEAL,
    "fasting": MealContext.BEFORE_MEAL,
    "before meal": MealContext.BEFORE_MEAL,
    "pre-meal": MealContext.BEFORE_MEAL,
    "desp. comida": MealContext.AFTER_MEAL,
    "después comida": MealContext.AFTER_MEAL,
    "after meal": MealContext.AFTER_MEAL,
    "post-meal": MealContext.AFTER_MEAL,
    "otro": MealContext.UNSPECIFIED,
    "other": MealContext.UNSPECIFIED,
}


@dataclass(frozen=True)
class AccuChekPaths(SourcePaths):
    """Paths for Accu-Chek JSON exports."""

    # root: folder containing accuchek_*.json


class AccuChekSource(ReadingSource):
    """Accu-Chek JSON reading source."""

    def __init__(self, paths: AccuChekPaths, local_tz: tzinfo | None = None) -> None:
        """Create the source.

        Args:
            paths: Export folder configuration.
            local_tz: Timezone of the meter clock (default: system local).
        """
        self._paths = paths
        self._tz = local_tz or tz.tzlocal()

    def validate(self) -> None:
        """Validate that the Accu-Chek export directory exists."""
        if not self._paths.root.exists():
            raise SourceNotAvailable(str(self._paths.root))

    def newest_json(self) -> Path:
        """Return newest accuchek_*.json by mtime."""
        files = sorted(
            self._paths.root.glob("accuchek_*.json"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        if not files:
            raise SourceNotAvailable(f"No accuchek_*.json in {self._paths.root}")
        return files[0]

    def load_readings(self, path: Path) -> list[Reading]:
        """Parse Accu-Chek JSON into typed readings.

        Args:
            path: Path to JSON file.

        Returns:
            Readings sorted by timestamp.

        Raises:
            ReadFailed: If the file is unreadable, its JSON shape is invalid or
                an item carries a malformed value or timestamp.
        """
        try:
            text = path.read_text(encoding="utf-8")
            raw = _extract_json_list(text)
            if not isinstance(raw, list):
                raise ValueError("Accu-Chek JSON must be a list")

            out: list[Reading] = []
            for item in raw:
                reading = _item_to_reading(item, self._tz)
                if reading is not None:
                    out.append(reading)
        except (OSError, ValueError, TypeError, OverflowError) as exc:
            raise ReadFailed(f"{path}: {exc}") from exc
        out.sort(key=lambda r: r.timestamp)
        logger.debug("Loaded %d readings from %s", len(out), path)
        return out

    def fetch(self, since: datetime) -> list[Reading]:
        """Readings from the newest export taken at or after `since`."""
        self.validate()
        path = self.newest_json()
        if since.tzinfo is None:
            since = since.replace(tzinfo=self._tz)
        return [r for r in self.load_readings(path) if r.timestamp >= since]


def _parse_meal_context(item: dict[str, Any]) -> MealContext | None:
    """Map the item's tag to a meal context (empty or unknown -> None)."""
    tag_val = item.get("tag")
    if tag_val is None:
        return None
    tag = str(tag_val).strip().lower()
    if not tag:
        return None
    return _TAG_MEAL_CONTEXT.get(tag)


def _parse_value(item: dict[str, Any]) -> float | None:
    mg_dl = item.get("mg/dL")
    if mg_dl is not None:
        return float(mg_dl)
    mmol_l = item.get("mmol/L")
    if mmol_l is not None:
        return float(mmol_l) * MMOL_TO_MG_DL
    return None


def _item_to_reading(item: Any, local_tz: tzinfo) -> Reading | None:
    """Convierte un ítem dict en Reading; None si falta el valor o no es positivo."""
    if not isinstance(item, dict):
        return None
    value = _parse_value(item)
    if value is None:
        return None
    if value <= 0:
        logger.warning("Skipping non-positive glucose value %s", value)
        return None
    ts = _parse_timestamp(item.get("timestamp"), item.get("epoch"), local_tz)
    return Reading(value=value, timestamp=ts, meal_context=_parse_meal_context(item))


def _extract_json_list(text: str) -> Any:
    """Extract JSON array from text, tolerating leading non-JSON (e.g. log lines)."""
    start = text.find("[")
    if start >= 0:
        return json.loads(text[start:])
    return json.loads(text)


def _parse_timestamp(ts_str: Any, epoch: Any, local_tz: tzinfo) -> datetime:
    """Parses the timestamps to get the date and time."""
    if isinstance(ts_str, str) and ts_str.strip():
        dt = datetime.strptime(ts_str, "%Y/%m/%d %H:%M")
        return dt.replace(tzinfo=local_tz)

    if epoch is not None:
        return datetime.fromtimestamp(int(epoch), tz=local_tz)

    raise ValueError("Missing timestamp and epoch")
