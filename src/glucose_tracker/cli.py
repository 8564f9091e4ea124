"""CLI para resumir glucosa (ayuno / post comida) de una fuente de lecturas."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path

from glucose_tracker.config import AnalyticsConfig
from glucose_tracker.report import (
    ChartMode,
    Report,
    ReportWindow,
    TimeRange,
    load_report,
)
from glucose_tracker.sources.accuchek import AccuChekPaths, AccuChekSource
from glucose_tracker.sources.base import ReadingSource
from glucose_tracker.storage import SQLiteReadingStore

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

_DATA_DIR = Path.home() / "proyectos" / "salud" / "glucosa" / "datos"
_DEFAULT_PATHS = {
    "accuchek": _DATA_DIR,
    "sqlite": _DATA_DIR / "glucosa.sqlite3",
}


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Resumen de glucosa: promedios, tendencia y serie diaria."
    )
    parser.add_argument(
        "--source",
        choices=["accuchek", "sqlite"],
        default="accuchek",
        help="Fuente de lecturas (default: accuchek).",
    )
    parser.add_argument(
        "--path",
        default=None,
        help=(
            "Carpeta de exportaciones Accu-Chek o archivo SQLite "
            f"(default: {_DATA_DIR}, o glucosa.sqlite3 dentro de ella)."
        ),
    )
    parser.add_argument(
        "--range",
        choices=[t.value for t in TimeRange],
        default=TimeRange.SEVEN_DAYS.value,
        help="Ventana del reporte (default: 7d).",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ChartMode],
        default=ChartMode.RANGE.value,
        help="weekly: 7 días con ceros; range: solo días con datos.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log DEBUG.")
    return parser.parse_args()


def build_source(kind: str, path: Path, config: AnalyticsConfig) -> ReadingSource:
    """Create the reading source selected on the command line."""
    if kind == "sqlite":
        return SQLiteReadingStore(path, local_tz=config.tz)
    return AccuChekSource(AccuChekPaths(root=path), local_tz=config.tz)


def format_report(report: Report) -> list[str]:
    """Plain-text lines for a report, one block per meal context."""
    lines = [
        f"Window: {report.window.label} ({report.reading_count} readings)",
        f"Compared with: {report.previous_window.label}",
    ]
    for cat in report.categories:
        lines.append("")
        lines.append(f"{cat.label}: {cat.formatted_average} mg/dL")
        lines.append(f"  Change: {cat.percent_change.text}")
        for point in cat.chart_points:
            lines.append(f"  {point.day.isoformat()}  {point.value:.1f}")
    return lines


def main() -> int:
    """Run the report CLI.

    Returns:
        Exit code (0 on success, 1 if the source could not be read).
    """
    ns = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO, format=_LOG_FORMAT
    )
    config = AnalyticsConfig.from_env()
    raw_path = Path(ns.path) if ns.path else _DEFAULT_PATHS[ns.source]
    path = raw_path.expanduser().resolve()
    source = build_source(ns.source, path, config)
    logger.info("Reading %s source at %s", ns.source, path)

    today = datetime.now(tz=config.tz).date()
    window = ReportWindow.from_range(TimeRange(ns.range), today)
    report = load_report(source, window, mode=ChartMode(ns.mode), config=config)

    for line in format_report(report):
        print(line)
    if report.source_error is not None:
        print(f"ERROR: {report.source_error}")
        return 1
    return 0
