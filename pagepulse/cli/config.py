# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the pagepulse CLI.
"""

import json
from typing import Annotated

import typer

from pagepulse.cli.shared import C
from pagepulse.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    if json_output:
        config = {
            "postgresql": {
                "host": settings.postgres.host,
                "port": settings.postgres.port,
                "database": settings.postgres.database,
                "schema": settings.postgres.schema_name,
                "user": settings.postgres.user,
                "password": settings.postgres.password,
                "sslmode": settings.postgres.sslmode,
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
                "heatmap_ttl_hours": settings.valkey.heatmap_ttl_hours,
            },
            "detection": settings.detection.model_dump(),
            "alerts": settings.alerts.model_dump(),
            "log_level": settings.log_level,
            "debug": settings.debug,
        }
        print(json.dumps(config, indent=2))
        return

    detection = settings.detection
    alerts = settings.alerts

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    # PostgreSQL
    print(f"{C.CYAN}PostgreSQL{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.postgres.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.postgres.port}{C.RESET}")
    print(f"  Database:   {C.WHITE}{settings.postgres.database}{C.RESET}")
    print(f"  Schema:     {C.WHITE}{settings.postgres.schema_name}{C.RESET}")
    print(f"  User:       {C.WHITE}{settings.postgres.user}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{settings.postgres.sslmode}{C.RESET}")
    print()

    # Valkey
    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.valkey.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.valkey.port}{C.RESET}")
    valkey_ssl = "enabled" if settings.valkey.ssl else "disabled"
    print(f"  SSL:        {C.WHITE}{valkey_ssl}{C.RESET}")
    print(f"  Heatmaps:   {C.WHITE}expire after {settings.valkey.heatmap_ttl_hours}h{C.RESET}")
    print()

    # Detection
    print(f"{C.CYAN}Detection{C.RESET}")
    print(
        f"  Rage:       {C.WHITE}{detection.rage_threshold} clicks / "
        f"{detection.rage_window_ms} ms{C.RESET}"
    )
    print(f"  Dead:       {C.WHITE}{detection.dead_idle_ms} ms idle{C.RESET}")
    print(f"  Radius:     {C.WHITE}{detection.cluster_radius:g} px{C.RESET}")
    print(f"  Limits:     {C.WHITE}{detection.spot_limit} spots, {detection.error_group_limit} error groups{C.RESET}")
    print()

    # Alerts
    print(f"{C.CYAN}Alerts{C.RESET}")
    print(f"  Interval:   {C.WHITE}{alerts.interval_seconds:g}s{C.RESET}")
    print(f"  Timeout:    {C.WHITE}{alerts.webhook_timeout:g}s{C.RESET}")
    print(f"  Rules:      {C.WHITE}{alerts.rule_store}{C.RESET}")
    print(f"  Project:    {C.WHITE}{alerts.project_id}{C.RESET}")
    print()
