# ==============================================================================
# Alert Commands
# ==============================================================================
"""
Alert rule management and evaluation commands for the pagepulse CLI.

Rules are stored in the backend selected by ALERTS_RULE_STORE (valkey or
postgres). Evaluation reads interactions and samples from PostgreSQL.
"""

from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from pagepulse.alerts.evaluator import RuleEvaluation
from pagepulse.alerts.factory import create_evaluator, get_rule_repository
from pagepulse.alerts.runner import AlertsRunner
from pagepulse.cli.shared import C, I, format_ms, print_empty, print_json
from pagepulse.core.models import AlertRule, Channel, Comparator
from pagepulse.utils.config import get_settings

JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


def _close(repo) -> None:
    close = getattr(repo, "close", None)
    if close is not None:
        close()


def _status(result: RuleEvaluation) -> str:
    if result.error:
        return f"[red]{I.CROSS} error[/red]"
    if result.fired:
        return f"[green]{I.CHECK} fired[/green]"
    if result.triggered:
        return "[yellow]triggered (cooldown or no target)[/yellow]"
    return "[dim]ok[/dim]"


# ==============================================================================
# Commands
# ==============================================================================


def alerts_run() -> None:
    """Run the alert evaluator in the foreground until Ctrl+C.

    Evaluates once at startup, then every ALERTS_INTERVAL_SECONDS.
    """
    print(f"{C.BRIGHT_CYAN}{I.ARROW} Starting alert evaluator (Ctrl+C to stop)...{C.RESET}")
    AlertsRunner().run()


def alerts_evaluate(json_output: JsonOption = False) -> None:
    """Evaluate every active rule once and show the outcome.

    Fired rules are notified and marked exactly as in the scheduled loop.
    """
    evaluator = create_evaluator()
    try:
        results = evaluator.evaluate()
    finally:
        evaluator.close()

    if json_output:
        print_json([vars(r) for r in results])
        return

    if not results:
        print_empty("No active alert rules")
        return

    table = Table(title="Alert evaluation", show_header=True, header_style="bold")
    table.add_column("Rule", justify="left")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="left")

    for result in results:
        value = "—" if result.value is None else f"{result.value:.2f}"
        table.add_row(result.rule_name, value, _status(result))

    print()
    Console().print(table)
    for result in results:
        if result.error:
            print(f"  {C.BRIGHT_RED}{I.CROSS} {result.rule_name}: {result.error}{C.RESET}")
    print()


def alerts_list(json_output: JsonOption = False) -> None:
    """List active alert rules."""
    repo = get_rule_repository()
    try:
        rules = repo.list_active()
    finally:
        _close(repo)

    if json_output:
        print_json(rules)
        return

    if not rules:
        print_empty("No active alert rules")
        return

    table = Table(title="Alert rules", show_header=True, header_style="bold")
    table.add_column("ID", justify="left", style="dim")
    table.add_column("Name", justify="left")
    table.add_column("Condition", justify="left")
    table.add_column("Window", justify="right")
    table.add_column("Channel", justify="left")
    table.add_column("Last fired", justify="left")

    for rule in rules:
        last = format_ms(rule.last_triggered_at) if rule.last_triggered_at else "never"
        table.add_row(
            rule.id,
            rule.name,
            f"{rule.metric} {rule.comparator.value} {rule.threshold:g}",
            f"{rule.window_minutes:g}m",
            rule.channel.value,
            last,
        )

    print()
    Console().print(table)
    print()


def alerts_add(
    name: Annotated[str, typer.Option("--name", help="Rule name")],
    threshold: Annotated[float, typer.Option("--threshold", help="Threshold value")],
    metric: Annotated[
        str,
        typer.Option(
            "--metric",
            help="events_per_minute, js_errors_per_minute or <field>_p75 (e.g. lcp_p75)",
        ),
    ] = "events_per_minute",
    comparator: Annotated[
        Comparator, typer.Option("--comparator", help="Comparison operator")
    ] = Comparator.GT,
    window_minutes: Annotated[
        float, typer.Option("--window-minutes", help="Trailing window in minutes")
    ] = 5,
    cooldown_ms: Annotated[
        int, typer.Option("--cooldown-ms", help="Minimum time between firings in ms")
    ] = 300_000,
    channel: Annotated[Channel, typer.Option("--channel", help="Notification channel")] = Channel.SLACK,
    url: Annotated[
        Optional[str], typer.Option("--url", help="Slack or webhook URL for the channel")
    ] = None,
    project_id: Annotated[
        Optional[str], typer.Option("--project", help="Project id (default: ALERTS_PROJECT_ID)")
    ] = None,
) -> None:
    """Create an alert rule.

    Examples:
        pagepulse alerts add --name "Traffic spike" --threshold 100
        pagepulse alerts add --name "Slow LCP" --metric lcp_p75 --threshold 2500 \\
            --channel webhook --url https://example.com/hook
    """
    try:
        rule = AlertRule(
            name=name,
            project_id=project_id or get_settings().alerts.project_id,
            metric=metric,
            comparator=comparator,
            threshold=threshold,
            window_minutes=window_minutes,
            cooldown_ms=cooldown_ms,
            channel=channel,
            slack_webhook=url if channel == Channel.SLACK else None,
            webhook_url=url if channel == Channel.WEBHOOK else None,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e

    repo = get_rule_repository()
    try:
        repo.save(rule)
    finally:
        _close(repo)

    print(f"{C.BRIGHT_GREEN}{I.CHECK} Alert rule '{rule.name}' created{C.RESET}")
    print(f"  ID: {C.WHITE}{rule.id}{C.RESET}")
    if url is None:
        print(f"  {C.DIM}No {channel.value} URL set; the rule is evaluated but never dispatched{C.RESET}")


def alerts_remove(
    rule_id: Annotated[str, typer.Argument(help="Rule ID")],
) -> None:
    """Delete an alert rule."""
    repo = get_rule_repository()
    try:
        deleted = repo.delete(rule_id)
    finally:
        _close(repo)

    if not deleted:
        print(f"{C.BRIGHT_RED}{I.CROSS} Rule '{rule_id}' not found{C.RESET}")
        raise typer.Exit(1)
    print(f"{C.BRIGHT_GREEN}{I.CHECK} Rule '{rule_id}' deleted{C.RESET}")
