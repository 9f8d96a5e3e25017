"""member commands — list PR authors."""

from __future__ import annotations

import click
from rich.table import Table

from prtracker_cli.output import command_errors, console, fmt_time, get_tracker


@click.group("member")
def member_group():
    """Team members (created automatically from PR authors)."""


@member_group.command("list")
@click.pass_context
def list_cmd(ctx):
    """List team members by GitHub username."""
    with command_errors():
        members = get_tracker(ctx).get_team_members()

    if not members:
        console.print("[yellow]No team members yet. They are added with their first PR.[/yellow]")
        return

    table = Table(title="Team Members", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", width=5)
    table.add_column("Username", style="bold")
    table.add_column("Name")
    table.add_column("Since", width=16)
    for m in members:
        table.add_row(str(m.id), m.github_username, m.display_name or "", fmt_time(m.created_at))
    console.print(table)
