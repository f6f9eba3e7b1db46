# ==============================================================================
# Heatmap Store Commands
# ==============================================================================
"""
Commands that rebuild stored heatmaps from PostgreSQL into Valkey.
"""

import time
from typing import Annotated, Optional

import typer

from pagepulse.cli.shared import C, I
from pagepulse.utils.config import get_settings


def heatmap_regenerate(
    page: Annotated[str, typer.Argument(help="Page URL to rebuild")],
    project_id: Annotated[
        Optional[str], typer.Option("--project", help="Project id (default: ALERTS_PROJECT_ID)")
    ] = None,
    days: Annotated[int, typer.Option("--days", help="Days of interactions to include")] = 30,
) -> None:
    """Rebuild and store every heatmap type for one page.

    Examples:
        pagepulse heatmaps regenerate /pricing
        pagepulse heatmaps regenerate /pricing --days 7
    """
    from pagepulse.infrastructure.repositories import (
        PostgreSQLInteractionSource,
        ValkeyHeatmapRepository,
        check_postgresql_connection,
    )
    from pagepulse.infrastructure.store import ValkeyDocumentStore, check_valkey_connection
    from pagepulse.services import HeatmapService

    settings = get_settings()

    if not check_postgresql_connection(settings):
        print(f"{C.BRIGHT_RED}{I.CROSS} PostgreSQL is not reachable{C.RESET}")
        raise typer.Exit(1)
    if not check_valkey_connection(settings.valkey):
        print(f"{C.BRIGHT_RED}{I.CROSS} Valkey is not reachable at {settings.valkey.host}:{settings.valkey.port}{C.RESET}")
        raise typer.Exit(1)

    source = PostgreSQLInteractionSource(settings)
    source.connect()
    store = ValkeyDocumentStore(settings.valkey)
    try:
        service = HeatmapService(
            source,
            ValkeyHeatmapRepository(store, ttl_seconds=settings.valkey.heatmap_ttl_hours * 3600),
            project_id=project_id or settings.alerts.project_id,
            radius=settings.detection.cluster_radius,
            lookback_ms=days * 24 * 60 * 60 * 1000,
        )
        results = service.regenerate_page(page, int(time.time() * 1000))
    finally:
        source.close()
        store.close()

    print()
    for result in results:
        if result.success:
            print(f"{C.BRIGHT_GREEN}{I.CHECK} {result.type:<10}{C.RESET} {result.point_count:,} clusters")
        else:
            print(f"{C.BRIGHT_RED}{I.CROSS} {result.type:<10} {result.error}{C.RESET}")
    print()

    if not all(r.success for r in results):
        raise typer.Exit(1)
