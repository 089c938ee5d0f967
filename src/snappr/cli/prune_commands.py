"""Snapshot pruning CLI command."""

from __future__ import annotations

from typing import List, Optional

import typer

from ..logger import get_logger, log_extra
from ..policy import PolicyError, parse_policy
from ..prune import prune
from ..report import select_lines, summary_lines, why_lines
from ..scan import compile_extract, scan_lines
from .core import app, err, fatal, get_settings

log = get_logger(__name__)


@app.command("prune")
def prune_command(
    ctx: typer.Context,
    rules: Optional[List[str]] = typer.Argument(
        None, help="Retention rules N@unit:X (defaults to the policy in the config file)"
    ),
    input_file: typer.FileText = typer.Option("-", "--input", "-i", help="Read snapshot lines from this file instead of stdin"),
    extract: Optional[str] = typer.Option(
        None, "--extract", "-e", help="Extract the timestamp from each line using this regexp (up to one capture group)"
    ),
    only: bool = typer.Option(False, "--only", "-o", help="Only print the part of the line matching the regexp"),
    parse: Optional[str] = typer.Option(
        None, "--parse", "-p", help="Parse timestamps with this strptime format, or 'iso', instead of unix seconds"
    ),
    local_time: bool = typer.Option(
        False, "--local-time", "-L", help="Use the local timezone rather than UTC if no offset is parsed"
    ),
    invert: bool = typer.Option(False, "--invert", "-v", help="Print the snapshots to keep instead of the ones to prune"),
    why: bool = typer.Option(False, "--why", "-w", help="Explain why each snapshot is kept (stderr)"),
    summarize: bool = typer.Option(False, "--summarize", "-s", help="Summarize the policy results (stderr)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not warn about invalid or unmatched input lines"),
) -> None:
    """
    Filter snapshot lines from stdin, printing the ones the policy does not need.

    Rules are N@unit:X, keeping the last N snapshots every X units. Omit N@ to
    keep infinitely many, omit :X for an interval of 1. Units: last (X must be
    1), secondly (X may be a duration like 1h30m), daily, monthly, yearly.
    Snapshots are ordered by absolute time; timezones only decide where
    calendar days/months/years are split.
    """
    s = get_settings(ctx)

    try:
        policy = parse_policy(*rules) if rules else s.get_policy()
    except PolicyError as e:
        fatal(f"invalid policy: {e}")
    if not len(policy):
        fatal("no retention policy given (pass rules or set 'policy' in the config file)")

    extract = extract if extract is not None else s.input.extract
    rx = None
    if extract:
        try:
            rx = compile_extract(extract)
        except ValueError as e:
            fatal(f"--extract regexp is invalid: {e}")

    result = scan_lines(
        input_file,
        extract=rx,
        layout=parse if parse is not None else s.input.parse,
        local_time=local_time or s.input.local_time,
        only=only or s.input.only,
    )
    if not (quiet or s.output.quiet):
        for warning in result.warnings:
            err(f"snappr: warning: {warning}")

    snapshots, index = result.snapshots()
    keep, need = prune(snapshots, policy)

    for line in select_lines(result.lines, index, keep, invert=invert or s.output.invert):
        typer.echo(line)

    if why or s.output.why:
        for line in why_lines(snapshots, keep):
            err(line)
    if summarize or s.output.summarize:
        for line in summary_lines(policy, need, keep):
            err(line)

    log.info(
        "Pruning %d/%d snapshots",
        sum(1 for reason in keep if not reason),
        len(keep),
        extra=log_extra(policy=policy.to_text(), lines=len(result.lines)),
    )
