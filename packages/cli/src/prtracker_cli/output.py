"""Helpers shared by the command modules."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime

import click
from rich.console import Console

from prtracker_core.errors import CommandError

console = Console()

STATUS_STYLE = {
    "Waiting": "yellow",
    "Reviewing": "cyan",
    "Approved": "green",
    "archived": "dim",
}


def get_tracker(ctx: click.Context):
    return ctx.obj["tracker"]


@contextmanager
def command_errors():
    """Show a CommandError as a normal CLI failure (message on stderr, exit 1)."""
    try:
        yield
    except CommandError as e:
        raise click.ClickException(str(e)) from e


def fmt_time(ts: int | None) -> str:
    if not ts:
        return ""
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def styled_status(status: str) -> str:
    style = STATUS_STYLE.get(status, "white")
    return f"[{style}]{status}[/{style}]"
