"""Persistencia SQLite para lecturas cargadas a mano."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone, tzinfo
from hashlib import sha256
from pathlib import Path

from dateutil import tz

from glucose_tracker.errors import InvalidReading, ReadFailed, SourceNotAvailable
from glucose_tracker.model import MealContext, Reading
from glucose_tracker.sources.base import ReadingSource

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS readings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    row_hash TEXT NOT NULL,
    created_at TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    value REAL NOT NULL,
    meal_context TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_readings_row_hash_unique
ON readings(row_hash);

CREATE INDEX IF NOT EXISTS idx_readings_timestamp
ON readings(timestamp);
"""


class SQLiteReadingStore(ReadingSource):
    """Repositorio SQLite de lecturas; los timestamps se guardan en UTC."""

    def __init__(self, db_path: Path, local_tz: tzinfo | None = None) -> None:
        """Create the store. The database is opened on first use."""
        self._db_path = db_path
        self._tz = local_tz or tz.tzlocal()
        self._schema_ready = False

    def _open(self) -> sqlite3.Connection:
        """Open the database, creating the schema on first use.

        Raises:
            SourceNotAvailable: If the database file cannot be opened.
        """
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._db_path)
        except (OSError, sqlite3.Error) as exc:
            raise SourceNotAvailable(f"{self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        if not self._schema_ready:
            try:
                conn.executescript(SCHEMA_SQL)
            except sqlite3.Error as exc:
                conn.close()
                raise SourceNotAvailable(f"{self._db_path}: {exc}") from exc
            self._schema_ready = True
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success and is always closed."""
        conn = self._open()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _to_utc(self, ts: datetime) -> datetime:
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=self._tz)
        return ts.astimezone(timezone.utc)

    def add(self, reading: Reading, now: datetime | None = None) -> int | None:
        """Store a reading. Returns its row id, or None if already stored.

        Raises:
            InvalidReading: If the value is not positive or the timestamp is
                in the future.
        """
        if reading.value <= 0:
            raise InvalidReading(f"Glucose value must be positive: {reading.value}")
        ts = self._to_utc(reading.timestamp)
        now_utc = self._to_utc(now or datetime.now(tz=self._tz))
        if ts > now_utc:
            raise InvalidReading(f"Reading timestamp is in the future: {ts}")

        values = _row_values(ts, reading)
        row_hash = _row_hash(values)
        with self._connect() as conn:
            exists = conn.execute(
                "SELECT 1 FROM readings WHERE row_hash = ?", (row_hash,)
            ).fetchone()
            if exists is not None:
                logger.info("Duplicate reading, already stored for %s", ts)
                return None
            cur = conn.execute(
                """
                INSERT INTO readings(
                    row_hash, created_at, timestamp, value, meal_context
                )
                VALUES (?, ?, ?, ?, ?)
                """,
                (row_hash, now_utc.isoformat(timespec="seconds"), *values),
            )
        return int(cur.lastrowid)

    def delete(self, reading: Reading) -> bool:
        """Delete a stored reading. Returns False if it was not stored."""
        row_hash = _row_hash(_row_values(self._to_utc(reading.timestamp), reading))
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM readings WHERE row_hash = ?", (row_hash,))
        return cur.rowcount > 0

    def fetch(self, since: datetime) -> list[Reading]:
        """Readings at or after `since`, oldest first."""
        since_key = _ts_key(self._to_utc(since))
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT timestamp, value, meal_context
                    FROM readings
                    WHERE timestamp >= ?
                    ORDER BY timestamp
                    """,
                    (since_key,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise ReadFailed(str(exc)) from exc
        return [self._row_to_reading(row) for row in rows]

    def latest(self) -> Reading | None:
        """Obtiene la lectura mas reciente."""
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT timestamp, value, meal_context
                FROM readings ORDER BY timestamp DESC LIMIT 1
                """
            ).fetchone()
        if row is None:
            return None
        return self._row_to_reading(row)

    def _row_to_reading(self, row: sqlite3.Row) -> Reading:
        ts = datetime.fromisoformat(row["timestamp"]).astimezone(self._tz)
        raw_context = row["meal_context"]
        return Reading(
            value=float(row["value"]),
            timestamp=ts,
            meal_context=MealContext(raw_context) if raw_context else None,
        )


def _ts_key(ts: datetime) -> str:
    return ts.isoformat(timespec="microseconds")


def _row_values(ts_utc: datetime, reading: Reading) -> tuple[str, float, str | None]:
    context = reading.meal_context.value if reading.meal_context else None
    return (_ts_key(ts_utc), float(reading.value), context)


def _row_hash(values: tuple[object, ...]) -> str:
    payload = json.dumps(values, ensure_ascii=True, sort_keys=False, default=str)
    return sha256(payload.encode("utf-8")).hexdigest()
