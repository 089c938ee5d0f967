"""CLI commands for snappr."""

# These imports register CLI commands with the app via decorators
from . import policy_commands, prune_commands  # noqa: F401
from .core import app


def main() -> None:
    """Console entry point for the snappr CLI."""
    app()


__all__ = ["app", "main"]
