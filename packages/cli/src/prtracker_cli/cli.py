"""CLI entry point for prtracker.

Commands:
  db       — create, wipe or seed the local database
  project  — manage the projects PRs are filed under
  member   — list the PR authors seen so far
  pr       — add PRs from GitHub URLs and track their review status
  token    — manage the GitHub token kept in the OS keychain
"""

from __future__ import annotations

import importlib.metadata
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from prtracker_cli.commands.db import db_group
from prtracker_cli.commands.members import member_group
from prtracker_cli.commands.projects import project_group
from prtracker_cli.commands.prs import pr_group
from prtracker_cli.commands.token import token_group


def _default_db_path() -> str:
    """Per-user database location, e.g. ~/.config/prtracker/database.sqlite on Linux."""
    return str(Path(click.get_app_dir("PRTracker")) / "database.sqlite")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_tracker(config: dict):
    """Instantiate the command surface from the merged configuration.

    This factory lives in cli.py so prtracker_core never needs to know where
    a desktop user's data directory is.
    """
    from prtracker_core.tracker import Tracker

    if not config.get("db_path"):
        config["db_path"] = _default_db_path()
    return Tracker(config)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prtracker"),
    prog_name="prtracker",
)
@click.option(
    "--config",
    "config_path",
    default=".prtracker.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRTRACKER_CONFIG",
)
@click.option("--db", "db_path", default=None, help="Path to the SQLite database. Overrides config and PRTRACKER_DB.")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, db_path: str | None, verbose: bool):
    """Track pull request review status across projects."""
    from prtracker_core.config import load_config
    from prtracker_core.errors import CommandError

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path, cli_overrides={"db_path": db_path})
    tracker = _build_tracker(config)
    try:
        tracker.init_database()
    except CommandError as e:
        raise click.ClickException(str(e))

    ctx.obj["tracker"] = tracker
    ctx.obj["config"] = config
    ctx.call_on_close(tracker.close)


main.add_command(db_group)
main.add_command(project_group)
main.add_command(member_group)
main.add_command(pr_group)
main.add_command(token_group)
