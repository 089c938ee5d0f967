"""Core CLI application and shared utilities."""

from __future__ import annotations

from typing import NoReturn, Optional

import typer
import yaml
from click import get_current_context
from rich.console import Console

from ..config import Settings, load_settings
from ..logger import configure_logging, get_logger

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# stderr diagnostics are a line protocol: no markup, highlighting or wrapping
err_console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)

log = get_logger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to snappr.yaml"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    """snappr - decide which snapshots a retention policy keeps."""
    configure_logging(level=log_level)
    ctx.obj = {"config": config}


def get_config_path(ctx: typer.Context | None = None) -> str | None:
    """Get config path from context."""
    context = ctx or get_current_context(silent=True)
    return context.obj.get("config") if context and context.obj else None


def err(message: str) -> None:
    err_console.print(message, markup=False)


def fatal(message: str, code: int = 2) -> NoReturn:
    err(f"snappr: fatal: {message}")
    raise typer.Exit(code)


def get_settings(ctx: typer.Context) -> Settings:
    try:
        return load_settings(get_config_path(ctx))
    except (OSError, ValueError, yaml.YAMLError) as e:
        # pydantic's ValidationError is a ValueError
        fatal(f"invalid config: {e}")
