# ==============================================================================
# Signal Commands
# ==============================================================================
"""
Behavioral signal commands for the pagepulse CLI.

Each command reads an exported event file (JSON or NDJSON) and prints the
derived signal as a table, or as JSON with --json.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from pagepulse.cli.shared import C, format_ms, load_records, print_empty, print_json
from pagepulse.core import (
    aggregate_heatmap,
    detect_dead_clicks,
    detect_rage_clicks,
    normalized_intensity,
    parse_interactions,
    parse_samples,
    summarize_dead_spots,
    summarize_rage_spots,
    top_error_groups,
)
from pagepulse.core.heatmap import HEATMAP_TYPES
from pagepulse.utils.config import get_settings

FileArgument = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="Exported events (JSON or NDJSON)"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


def _truncate(text: str | None, width: int = 40) -> str:
    if not text:
        return ""
    return text if len(text) <= width else text[: width - 1] + "…"


# ==============================================================================
# Commands
# ==============================================================================


def heatmap(
    file: FileArgument,
    page: Annotated[str, typer.Option("--page", "-p", help="Page URL to aggregate")],
    heatmap_type: Annotated[
        str, typer.Option("--type", "-t", help="Heatmap type: click, scroll, hover, mousemove")
    ] = "click",
    radius: Annotated[
        Optional[float], typer.Option("--radius", "-r", help="Clustering radius in px")
    ] = None,
    device: Annotated[str, typer.Option("--device", help="Device class label")] = "unknown",
    json_output: JsonOption = False,
) -> None:
    """Cluster interaction points for one page into a heatmap.

    Examples:
        pagepulse heatmap events.json --page /pricing
        pagepulse heatmap events.ndjson --page /pricing --type hover --radius 30 --json
    """
    if heatmap_type not in HEATMAP_TYPES:
        raise typer.BadParameter(
            f"Invalid heatmap type: '{heatmap_type}'. Use one of: {', '.join(HEATMAP_TYPES)}"
        )
    if radius is None:
        radius = get_settings().detection.cluster_radius

    events = list(parse_interactions(load_records(file)))
    aggregate = aggregate_heatmap(events, page, heatmap_type, device=device, radius=radius)

    if json_output:
        print_json(aggregate)
        return

    if not aggregate.points:
        print_empty(f"No {heatmap_type} points for {page}")
        return

    table = Table(title=f"{heatmap_type.title()} heatmap — {page}", show_header=True, header_style="bold")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Count", justify="right")
    table.add_column("Intensity", justify="right")
    table.add_column("Relative", justify="right")

    relative = normalized_intensity(aggregate.points)
    for cluster, ratio in zip(aggregate.points, relative):
        table.add_row(
            f"{cluster.x:g}",
            f"{cluster.y:g}",
            f"{cluster.count:,}",
            f"{cluster.intensity:g}",
            f"{ratio:.0%}",
        )

    meta = aggregate.metadata
    print()
    Console().print(table)
    print(f"  {C.BOLD}Raw points:{C.RESET}  {meta.total_interactions:,}")
    print(f"  {C.BOLD}Clusters:{C.RESET}    {len(aggregate.points):,}")
    print(f"  {C.BOLD}Sessions:{C.RESET}    {meta.session_count:,}")
    print(f"  {C.BOLD}Users:{C.RESET}       {meta.unique_users:,}")
    print()


def rage(
    file: FileArgument,
    window_ms: Annotated[
        Optional[int], typer.Option("--window-ms", help="Burst window in milliseconds")
    ] = None,
    threshold: Annotated[
        Optional[int], typer.Option("--threshold", help="Clicks needed for a burst")
    ] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Max spots shown")] = None,
    json_output: JsonOption = False,
) -> None:
    """Find rage-click hotspots (repeated clicks on one element).

    Examples:
        pagepulse rage events.json
        pagepulse rage events.json --window-ms 2000 --threshold 4 --json
    """
    detection = get_settings().detection
    window_ms = detection.rage_window_ms if window_ms is None else window_ms
    threshold = detection.rage_threshold if threshold is None else threshold
    limit = detection.spot_limit if limit is None else limit

    events = list(parse_interactions(load_records(file)))
    incidents = detect_rage_clicks(events, window_ms=window_ms, threshold=threshold)
    spots = summarize_rage_spots(incidents, limit=limit)

    if json_output:
        print_json({"incidents": incidents, "spots": spots})
        return

    if not spots:
        print_empty("No rage clicks found")
        return

    table = Table(title="Rage clicks", show_header=True, header_style="bold")
    table.add_column("Page", justify="left")
    table.add_column("Selector", justify="left")
    table.add_column("Incidents", justify="right")
    table.add_column("Clicks", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Last seen", justify="left")
    table.add_column("Text", justify="left", style="dim")

    for spot in spots:
        table.add_row(
            _truncate(spot.page_url),
            _truncate(spot.selector, 30),
            f"{spot.incidents:,}",
            f"{spot.clicks:,}",
            f"{spot.sessions:,}",
            format_ms(spot.last_seen),
            _truncate(spot.sample_text, 30),
        )

    print()
    Console().print(table)
    print(f"  {C.BOLD}Incidents:{C.RESET}  {len(incidents):,}")
    print(f"  {C.DIM}Window {window_ms} ms, threshold {threshold} clicks{C.RESET}")
    print()


def dead(
    file: FileArgument,
    idle_ms: Annotated[
        Optional[int], typer.Option("--idle-ms", help="Idle window after a click in milliseconds")
    ] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Max spots shown")] = None,
    json_output: JsonOption = False,
) -> None:
    """Find dead-click hotspots (clicks with no visible effect).

    Examples:
        pagepulse dead events.json
        pagepulse dead events.json --idle-ms 1500 --limit 20
    """
    detection = get_settings().detection
    idle_ms = detection.dead_idle_ms if idle_ms is None else idle_ms
    limit = detection.spot_limit if limit is None else limit

    events = list(parse_interactions(load_records(file)))
    records = detect_dead_clicks(events, idle_ms=idle_ms)
    spots = summarize_dead_spots(records, limit=limit)

    if json_output:
        print_json({"dead_clicks": records, "spots": spots})
        return

    if not spots:
        print_empty("No dead clicks found")
        return

    table = Table(title="Dead clicks", show_header=True, header_style="bold")
    table.add_column("Page", justify="left")
    table.add_column("Selector", justify="left")
    table.add_column("Dead clicks", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Last seen", justify="left")
    table.add_column("Text", justify="left", style="dim")

    for spot in spots:
        table.add_row(
            _truncate(spot.page_url),
            _truncate(spot.selector, 30),
            f"{spot.dead_clicks:,}",
            f"{spot.sessions:,}",
            format_ms(spot.last_seen),
            _truncate(spot.sample_text, 30),
        )

    print()
    Console().print(table)
    print(f"  {C.BOLD}Dead clicks:{C.RESET}  {len(records):,}")
    print()


def errors(
    file: FileArgument,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Max groups shown")] = None,
    json_output: JsonOption = False,
) -> None:
    """Group JavaScript errors from performance samples by fingerprint.

    Examples:
        pagepulse errors samples.json
        pagepulse errors samples.ndjson --limit 10 --json
    """
    limit = get_settings().detection.error_group_limit if limit is None else limit

    samples = list(parse_samples(load_records(file)))
    groups = top_error_groups(samples, limit=limit)

    if json_output:
        print_json(groups)
        return

    if not groups:
        print_empty("No JavaScript errors found")
        return

    table = Table(title="Error groups", show_header=True, header_style="bold")
    table.add_column("Error", justify="left")
    table.add_column("Message", justify="left")
    table.add_column("Count", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Pages", justify="right")
    table.add_column("Last seen", justify="left")

    for group in groups:
        table.add_row(
            _truncate(group.name, 24),
            _truncate(group.message, 50),
            f"{group.count:,}",
            f"{len(group.sessions):,}",
            f"{len(group.pages):,}",
            format_ms(group.last_seen),
        )

    print()
    Console().print(table)
    print()
