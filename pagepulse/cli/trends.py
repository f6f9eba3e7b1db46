# ==============================================================================
# Trend Commands
# ==============================================================================
"""
Hourly trend commands for the pagepulse CLI.

Hours without signal are omitted from the output.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from pagepulse.cli.shared import C, load_records, print_empty, print_json
from pagepulse.core import error_trend, parse_interactions, parse_samples, rage_trend
from pagepulse.core.models import TrendBucket
from pagepulse.utils.config import get_settings

FileArgument = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="Exported records (JSON or NDJSON)"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]

_BAR_WIDTH = 30


def _print_trend(title: str, unit: str, buckets: list[TrendBucket]) -> None:
    if not buckets:
        print_empty(f"No {unit} in the data")
        return

    peak = max(b.count for b in buckets)
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Hour (UTC)", justify="left")
    table.add_column("Count", justify="right")
    table.add_column("", justify="left", style="cyan")

    for bucket in buckets:
        bar = "█" * max(1, round(bucket.count / peak * _BAR_WIDTH))
        table.add_row(f"{bucket.hour}:00", f"{bucket.count:,}", bar)

    print()
    Console().print(table)
    print(f"  {C.BOLD}Total:{C.RESET}  {sum(b.count for b in buckets):,} {unit}")
    print()


# ==============================================================================
# Commands
# ==============================================================================


def trends_rage(
    file: FileArgument,
    window_ms: Annotated[
        Optional[int], typer.Option("--window-ms", help="Burst window in milliseconds")
    ] = None,
    threshold: Annotated[
        Optional[int], typer.Option("--threshold", help="Clicks needed for a burst")
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Sessions with at least one rage-click burst, per hour.

    Examples:
        pagepulse trends rage events.json
    """
    detection = get_settings().detection
    window_ms = detection.rage_window_ms if window_ms is None else window_ms
    threshold = detection.rage_threshold if threshold is None else threshold

    events = parse_interactions(load_records(file))
    buckets = rage_trend(events, window_ms=window_ms, threshold=threshold)

    if json_output:
        print_json(buckets)
        return
    _print_trend("Rage sessions per hour", "rage sessions", buckets)


def trends_errors(
    file: FileArgument,
    json_output: JsonOption = False,
) -> None:
    """JavaScript errors reported per hour.

    Examples:
        pagepulse trends errors samples.json --json
    """
    buckets = error_trend(parse_samples(load_records(file)))

    if json_output:
        print_json(buckets)
        return
    _print_trend("JS errors per hour", "errors", buckets)
