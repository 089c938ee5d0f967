"""Policy inspection CLI command."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.table import Table

from ..policy import Policy, PolicyError, parse_policy
from .core import app, err_console, fatal, get_settings


@app.command("policy")
def policy_command(
    ctx: typer.Context,
    rules: Optional[List[str]] = typer.Argument(None, help="Retention rules N@unit:X (defaults to the config file)"),
    explain: bool = typer.Option(False, "--explain", "-x", help="Show each rule as a table on stderr"),
) -> None:
    """Print the canonical form of a retention policy."""
    s = get_settings(ctx)
    try:
        policy = parse_policy(*rules) if rules else s.get_policy()
    except PolicyError as e:
        fatal(f"invalid policy: {e}")
    if not len(policy):
        fatal("no retention policy given (pass rules or set 'policy' in the config file)")

    typer.echo(policy.to_text())

    if explain:
        table = Table(title="Retention policy")
        table.add_column("Rule", style="cyan", no_wrap=True)
        table.add_column("Period", style="green")
        table.add_column("Count", style="yellow", justify="right")
        for period, count in policy.each():
            single = Policy()
            single.set(period, count)
            table.add_row(
                single.to_text(),
                str(period),
                "inf" if count < 0 else str(count),
            )
        err_console.print(table)
