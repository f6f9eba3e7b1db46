# ==============================================================================
# PagePulse CLI
# ==============================================================================
"""
Command-line interface for the PagePulse behavioral signal engine.

Usage:
    pagepulse --help
    pagepulse heatmap events.json --page /pricing
    pagepulse rage events.json
    pagepulse dead events.json
    pagepulse errors samples.json
    pagepulse trends rage events.json
    pagepulse trends errors samples.json
    pagepulse heatmaps regenerate /pricing
    pagepulse alerts add --name "Traffic spike" --threshold 100
    pagepulse alerts list
    pagepulse alerts evaluate
    pagepulse alerts run
    pagepulse config show
    pagepulse db init
"""

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
import os

import typer

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="pagepulse",
    help="PagePulse behavioral signal engine CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Signal commands operate on exported event files
from pagepulse.cli.signals import dead, errors, heatmap, rage

app.command("heatmap")(heatmap)
app.command("rage")(rage)
app.command("dead")(dead)
app.command("errors")(errors)

trends_app = typer.Typer(
    help="Hourly signal trends",
    no_args_is_help=True,
)
app.add_typer(trends_app, name="trends")

from pagepulse.cli.trends import trends_errors, trends_rage

trends_app.command("rage")(trends_rage)
trends_app.command("errors")(trends_errors)

heatmaps_app = typer.Typer(
    help="Stored heatmap operations",
    no_args_is_help=True,
)
app.add_typer(heatmaps_app, name="heatmaps")

from pagepulse.cli.heatmaps import heatmap_regenerate

heatmaps_app.command("regenerate")(heatmap_regenerate)

alerts_app = typer.Typer(
    help="Alert rules and evaluation",
    no_args_is_help=True,
)
app.add_typer(alerts_app, name="alerts")

from pagepulse.cli.alerts import (
    alerts_add,
    alerts_evaluate,
    alerts_list,
    alerts_remove,
    alerts_run,
)

alerts_app.command("run")(alerts_run)
alerts_app.command("evaluate")(alerts_evaluate)
alerts_app.command("list")(alerts_list)
alerts_app.command("add")(alerts_add)
alerts_app.command("remove")(alerts_remove)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from pagepulse.cli.config import config_show

config_app.command("show")(config_show)

db_app = typer.Typer(
    help="Database operations",
    no_args_is_help=True,
)
app.add_typer(db_app, name="db")

from pagepulse.cli.db import db_init

db_app.command("init")(db_init)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
