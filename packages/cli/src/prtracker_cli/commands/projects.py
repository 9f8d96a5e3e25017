"""project commands — list, create, edit and delete projects."""

from __future__ import annotations

import click
from rich.table import Table

from prtracker_cli.output import command_errors, console, fmt_time, get_tracker


@click.group("project")
def project_group():
    """Manage projects."""


@project_group.command("list")
@click.pass_context
def list_cmd(ctx):
    """List all projects by name."""
    with command_errors():
        projects = get_tracker(ctx).get_projects()

    if not projects:
        console.print("[yellow]No projects yet. Add one with `prtracker project add NAME`.[/yellow]")
        return

    table = Table(title="Projects", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", width=5)
    table.add_column("Name", style="bold")
    table.add_column("Description", max_width=40)
    table.add_column("Created", width=16)
    for p in projects:
        table.add_row(str(p.id), p.name, p.description or "", fmt_time(p.created_at))
    console.print(table)


@project_group.command("add")
@click.argument("name")
@click.option("--description", "-d", default=None, help="Optional description.")
@click.pass_context
def add_cmd(ctx, name: str, description: str | None):
    """Create a project."""
    with command_errors():
        project = get_tracker(ctx).add_project(name, description)
    console.print(f"[green]Added project {project.name} (ID: {project.id})[/green]")


@project_group.command("show")
@click.argument("project_id", type=int)
@click.pass_context
def show_cmd(ctx, project_id: int):
    """Show one project and the pull requests assigned to it."""
    tracker = get_tracker(ctx)
    with command_errors():
        project = tracker.get_project_by_id(project_id)
        if project is None:
            raise click.ClickException(f"Project {project_id} not found.")
        prs = tracker.get_pull_requests(project_id=project_id)

    console.print(f"[bold]{project.name}[/bold] (ID: {project.id})")
    if project.description:
        console.print(project.description)
    console.print(f"Created: {fmt_time(project.created_at)}")
    console.print(f"Pull requests: {len(prs)}")


@project_group.command("update")
@click.argument("project_id", type=int)
@click.option("--name", default=None, help="New name. Defaults to the current name.")
@click.option("--description", "-d", default=None, help="New description. Pass an empty string to clear it.")
@click.pass_context
def update_cmd(ctx, project_id: int, name: str | None, description: str | None):
    """Rename a project or change its description."""
    tracker = get_tracker(ctx)
    with command_errors():
        current = tracker.get_project_by_id(project_id)
        if current is None:
            raise click.ClickException("Project not found")
        project = tracker.update_project(
            project_id,
            name if name is not None else current.name,
            description if description is not None else current.description,
        )
    console.print(f"[green]Updated project {project.name} (ID: {project.id})[/green]")


@project_group.command("delete")
@click.argument("project_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def delete_cmd(ctx, project_id: int, yes: bool):
    """Delete a project. Refused while pull requests are assigned to it."""
    if not yes:
        click.confirm(f"Delete project {project_id}?", abort=True)
    with command_errors():
        get_tracker(ctx).delete_project(project_id)
    console.print(f"[green]Deleted project {project_id}[/green]")
