# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for pagepulse.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- signals.py: heatmap, rage, dead and errors over exported files
- trends.py: hourly trends
- heatmaps.py: rebuilding stored heatmaps
- alerts.py: alert rules and evaluation
- config.py, db.py: configuration and schema setup
"""

from pagepulse.cli.shared import (
    C,
    Colors,
    I,
    Icons,
    format_ms,
    load_records,
    print_empty,
    print_json,
    to_jsonable,
)

__all__ = [
    "C",
    "Colors",
    "I",
    "Icons",
    "format_ms",
    "load_records",
    "print_empty",
    "print_json",
    "to_jsonable",
]
