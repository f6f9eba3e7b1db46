# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared utilities, constants, and helper functions used across CLI command modules.

This module provides:
- ANSI color codes and status icons
- Loading of exported event files (JSON array, wrapped JSON, NDJSON)
- Output helpers for JSON mode and timestamps
"""

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel

from pagepulse.core.models import to_datetime

# ==============================================================================
# ANSI Colors and Icons
# ==============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Colors
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"
    BULLET = "•"
    ARROW = "→"


# Module-level aliases for convenience
C, I = Colors, Icons


# ==============================================================================
# Input Files
# ==============================================================================

# Keys under which exporters wrap record lists
_WRAPPER_KEYS = ("events", "interactions", "samples", "metrics", "data", "items")


def load_records(path: Path) -> list[Any]:
    """
    Load raw records from an exported file.

    Accepts a JSON array, a JSON object wrapping the array under a common key
    (``events``, ``samples``, ``data``, ...), or newline-delimited JSON.

    Raises:
        typer.BadParameter: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise typer.BadParameter(f"Cannot read {path}: {e}") from e

    stripped = text.strip()
    if not stripped:
        return []

    try:
        document = json.loads(stripped)
    except json.JSONDecodeError:
        return _load_ndjson(path, stripped)

    if isinstance(document, list):
        return document
    if isinstance(document, dict):
        for key in _WRAPPER_KEYS:
            if isinstance(document.get(key), list):
                return document[key]
        return [document]
    raise typer.BadParameter(f"{path} does not contain JSON records")


def _load_ndjson(path: Path, text: str) -> list[Any]:
    records = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"{path}:{line_no}: invalid JSON ({e.msg})") from e
    return records


# ==============================================================================
# Output Helpers
# ==============================================================================


def to_jsonable(value: Any) -> Any:
    """Convert models (and lists of them) to JSON-ready structures."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def print_json(value: Any) -> None:
    print(json.dumps(to_jsonable(value), indent=2, default=str))


def format_ms(timestamp_ms: int) -> str:
    """Format epoch milliseconds as a UTC wall-clock time."""
    return to_datetime(timestamp_ms).strftime("%Y-%m-%d %H:%M:%S")


def print_empty(message: str) -> None:
    print(f"\n  {C.BRIGHT_YELLOW}{I.WARN} {message}{C.RESET}\n")


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
