"""pr commands — add pull requests from GitHub and move them through review."""

from __future__ import annotations

import click
from rich.table import Table

from prtracker_cli.output import command_errors, console, fmt_time, get_tracker, styled_status
from prtracker_store.models import STATUS_APPROVED, STATUS_ARCHIVED


@click.group("pr")
def pr_group():
    """Track pull requests."""


@pr_group.command("list")
@click.option("--project", "project_id", type=int, default=None, help="Only PRs assigned to this project ID.")
@click.option("--status", default=None, help="Only PRs with this status (case-insensitive).")
@click.option("--all", "show_all", is_flag=True, help="Include archived PRs.")
@click.pass_context
def list_cmd(ctx, project_id: int | None, status: str | None, show_all: bool):
    """List tracked pull requests, most recently updated first."""
    with command_errors():
        prs = get_tracker(ctx).get_pull_requests(project_id=project_id)

    if status:
        prs = [p for p in prs if p.status.lower() == status.lower()]
    elif not show_all:
        prs = [p for p in prs if p.status != STATUS_ARCHIVED]

    if not prs:
        console.print("[yellow]No pull requests found.[/yellow]")
        return

    table = Table(title="Pull Requests", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", width=5)
    table.add_column("PR", style="bold")
    table.add_column("Title", max_width=40)
    table.add_column("Author")
    table.add_column("Project")
    table.add_column("Status")
    table.add_column("Score", justify="right", width=5)
    table.add_column("Updated", width=16)

    for p in prs:
        repo = f"{p.repository_owner}/{p.repository_name}" if p.repository_name else ""
        table.add_row(
            str(p.id),
            f"{repo}#{p.pr_number}",
            p.title or "",
            p.author_display_name or p.author_name or "",
            p.project_name or "",
            styled_status(p.status),
            "" if p.score is None else str(p.score),
            fmt_time(p.last_updated_at),
        )
    console.print(table)


@pr_group.command("add")
@click.argument("url")
@click.option("--project", "project_id", type=int, required=True, help="Project ID to file the PR under.")
@click.option("--token", default=None, help="GitHub token. Defaults to keychain, GITHUB_TOKEN, then gh CLI.")
@click.pass_context
def add_cmd(ctx, url: str, project_id: int, token: str | None):
    """Add a pull request from its GitHub URL.

    \b
    Example:
      prtracker pr add https://github.com/acme/widgets/pull/42 --project 1
    """
    from prtracker_cli.auth import resolve_github_token

    tracker = get_tracker(ctx)
    token = token or resolve_github_token(tracker)
    if not token:
        raise click.UsageError(
            "No GitHub token found. Run `prtracker token save`, set GITHUB_TOKEN, or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    with command_errors():
        pr = tracker.add_pr_from_github_url(url, project_id, token)

    console.print(
        f"[green]Added PR #{pr.pr_number} '{pr.title or 'Untitled'}' by {pr.author_name} "
        f"to {pr.project_name} (ID: {pr.id})[/green]"
    )


@pr_group.command("check")
@click.argument("github_id", type=int)
@click.pass_context
def check_cmd(ctx, github_id: int):
    """Check whether a PR with this GitHub ID is already tracked."""
    with command_errors():
        pr = get_tracker(ctx).check_pr_exists_by_github_id(github_id)
    if pr is None:
        console.print(f"GitHub PR {github_id} is not tracked.")
        return
    console.print(
        f"GitHub PR {github_id} is tracked as ID {pr.id}: #{pr.pr_number} {pr.title or 'Untitled'} "
        f"({pr.project_name or 'no project'}, {pr.status})"
    )
    if pr.url:
        console.print(pr.url)


@pr_group.command("status")
@click.argument("pr_id", type=int)
@click.argument("status")
@click.pass_context
def status_cmd(ctx, pr_id: int, status: str):
    """Set the review status of a PR (e.g. Waiting, Reviewing, Approved)."""
    with command_errors():
        get_tracker(ctx).update_pr_status(pr_id, status)
    console.print(f"PR {pr_id} → {styled_status(status)}")


@pr_group.command("score")
@click.argument("pr_id", type=int)
@click.argument("score", type=int)
@click.pass_context
def score_cmd(ctx, pr_id: int, score: int):
    """Set the review score of a PR."""
    with command_errors():
        get_tracker(ctx).update_pr_score(pr_id, score)
    console.print(f"PR {pr_id} scored {score}")


@pr_group.command("assign")
@click.argument("pr_id", type=int)
@click.argument("project_id", type=int)
@click.pass_context
def assign_cmd(ctx, pr_id: int, project_id: int):
    """Move a PR to another project."""
    with command_errors():
        get_tracker(ctx).update_pr_project(pr_id, project_id)
    console.print(f"PR {pr_id} assigned to project {project_id}")


@pr_group.command("approve")
@click.argument("pr_id", type=int)
@click.option("--score", type=int, default=None, help="Review score to record with the approval.")
@click.pass_context
def approve_cmd(ctx, pr_id: int, score: int | None):
    """Mark a PR as Approved, optionally with a score."""
    tracker = get_tracker(ctx)
    with command_errors():
        tracker.update_pr_status(pr_id, STATUS_APPROVED)
        if score is not None:
            tracker.update_pr_score(pr_id, score)
    console.print(f"PR {pr_id} → {styled_status(STATUS_APPROVED)}")


@pr_group.command("archive")
@click.argument("pr_id", type=int)
@click.pass_context
def archive_cmd(ctx, pr_id: int):
    """Archive a PR so it is hidden from `pr list`."""
    with command_errors():
        get_tracker(ctx).update_pr_status(pr_id, STATUS_ARCHIVED)
    console.print(f"PR {pr_id} archived")


@pr_group.command("history")
@click.argument("pr_id", type=int)
@click.pass_context
def history_cmd(ctx, pr_id: int):
    """Show the status changes recorded for a PR."""
    with command_errors():
        entries = get_tracker(ctx).get_review_history(pr_id)

    if not entries:
        console.print("[yellow]No review history found.[/yellow]")
        return

    table = Table(title=f"Review History — PR {pr_id}", show_header=True, header_style="bold cyan")
    table.add_column("When", width=16)
    table.add_column("Action")
    for h in entries:
        table.add_row(fmt_time(h.performed_at), styled_status(h.action))
    console.print(table)
