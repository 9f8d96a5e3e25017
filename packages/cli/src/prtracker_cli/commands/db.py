"""db commands — create, wipe or seed the local database."""

from __future__ import annotations

import click

from prtracker_cli.output import command_errors, console, get_tracker


@click.group("db")
def db_group():
    """Manage the local SQLite database."""


@db_group.command("init")
@click.pass_context
def init_cmd(ctx):
    """Create the database and its tables if they do not exist yet."""
    # The group callback already opened (and so created or migrated) the database.
    tracker = get_tracker(ctx)
    console.print(f"[green]Database ready at {tracker.db_path}[/green]")


@db_group.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def clear_cmd(ctx, yes: bool):
    """Delete every project, member, pull request and history entry."""
    if not yes:
        click.confirm("This deletes all tracked data. Continue?", abort=True)
    with command_errors():
        get_tracker(ctx).clear_all_data()
    console.print("[green]All data cleared.[/green]")


@db_group.command("seed")
@click.pass_context
def seed_cmd(ctx):
    """Add demo projects, members and pull requests to an empty database."""
    with command_errors():
        get_tracker(ctx).seed_sample_data()
    console.print("[green]Sample data added.[/green]")
