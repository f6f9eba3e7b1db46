# ==============================================================================
# Database Commands
# ==============================================================================
"""
Database commands for the pagepulse CLI.
"""

from typing import Annotated

import typer

from pagepulse.cli.shared import C, I
from pagepulse.infrastructure.repositories import check_postgresql_connection
from pagepulse.utils.config import get_settings
from pagepulse.utils.db import ensure_schema, render_schema_sql


def db_init(
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Print the rendered SQL instead of applying it")
    ] = False,
) -> None:
    """Create the PostgreSQL schema and tables (idempotent).

    Examples:
        pagepulse db init
        pagepulse db init --dry-run
    """
    settings = get_settings()
    schema_name = settings.postgres.schema_name

    if dry_run:
        print(render_schema_sql(schema_name))
        return

    if not check_postgresql_connection(settings):
        print(
            f"{C.BRIGHT_RED}{I.CROSS} PostgreSQL is not reachable at "
            f"{settings.postgres.host}:{settings.postgres.port}{C.RESET}"
        )
        raise typer.Exit(1)

    try:
        ensure_schema(settings)
    except RuntimeError as e:
        print(f"{C.BRIGHT_RED}{I.CROSS} {e}{C.RESET}")
        raise typer.Exit(1)

    print(f"{C.BRIGHT_GREEN}{I.CHECK} Schema '{schema_name}' initialized{C.RESET}")
