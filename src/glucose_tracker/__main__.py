"""Punto de entrada del CLI de reportes."""

from __future__ import annotations

from glucose_tracker.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
