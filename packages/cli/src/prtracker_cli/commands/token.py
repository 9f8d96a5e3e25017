"""token commands — the GitHub token kept in the OS keychain."""

from __future__ import annotations

import click

from prtracker_cli.output import command_errors, console, get_tracker


def _mask(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}{'*' * (len(token) - 8)}{token[-4:]}"


def _print_token_info(info) -> None:
    if not info.valid:
        console.print("[red]Token is not valid.[/red]")
    else:
        user = info.user
        label = f"{user.login} ({user.name})" if user.name else user.login
        console.print(f"[green]Token is valid for {label}[/green]")
        console.print(f"  Scopes: {', '.join(info.scopes) if info.scopes else '(fine-grained or none)'}")
    if info.rate_limit_remaining is not None or info.rate_limit_total is not None:
        remaining = "?" if info.rate_limit_remaining is None else info.rate_limit_remaining
        total = "?" if info.rate_limit_total is None else info.rate_limit_total
        console.print(f"  Rate limit: {remaining}/{total}")


@click.group("token")
def token_group():
    """Manage the GitHub token."""


@token_group.command("save")
@click.argument("token", required=False)
@click.option("--no-verify", is_flag=True, help="Store the token without checking it against GitHub first.")
@click.pass_context
def save_cmd(ctx, token: str | None, no_verify: bool):
    """Verify a token and store it in the OS keychain.

    Prompts for the token when it is not given as an argument.
    """
    if not token:
        token = click.prompt("GitHub token", hide_input=True)
    tracker = get_tracker(ctx)
    with command_errors():
        if not no_verify:
            info = tracker.verify_github_token(token)
            _print_token_info(info)
            if not info.valid:
                raise click.ClickException("Token was not saved.")
        tracker.save_github_token(token)
    console.print("[green]GitHub token saved to keychain.[/green]")


@token_group.command("show")
@click.option("--reveal", is_flag=True, help="Print the full token instead of a masked one.")
@click.pass_context
def show_cmd(ctx, reveal: bool):
    """Show the stored token (masked)."""
    with command_errors():
        token = get_tracker(ctx).get_github_token()
    if token is None:
        console.print("[yellow]No GitHub token stored.[/yellow]")
        return
    click.echo(token if reveal else _mask(token))


@token_group.command("delete")
@click.pass_context
def delete_cmd(ctx):
    """Remove the stored token."""
    with command_errors():
        get_tracker(ctx).delete_github_token()
    console.print("GitHub token removed from keychain.")


@token_group.command("verify")
@click.argument("token", required=False)
@click.pass_context
def verify_cmd(ctx, token: str | None):
    """Check a token against GitHub without storing it.

    Without an argument, prompts for the token.
    """
    if not token:
        token = click.prompt("GitHub token", hide_input=True)
    with command_errors():
        info = get_tracker(ctx).verify_github_token(token)
    _print_token_info(info)
    if not info.valid:
        ctx.exit(1)


@token_group.command("test")
@click.pass_context
def test_cmd(ctx):
    """Check the stored token against GitHub."""
    with command_errors():
        info = get_tracker(ctx).test_github_connection()
    _print_token_info(info)
    if not info.valid:
        ctx.exit(1)
