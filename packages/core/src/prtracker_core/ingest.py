"""Add a pull request to the tracker from its GitHub URL."""

from __future__ import annotations

import logging

from prtracker_core.errors import DuplicatePullRequestError
from prtracker_core.gh.pull_request import (
    DEFAULT_API_URL,
    DEFAULT_USER_AGENT,
    PRAuthor,
    fetch_pull_request_data,
    parse_pr_url,
)
from prtracker_store.errors import NotFoundError
from prtracker_store.models import STATUS_WAITING, PullRequest
from prtracker_store.sqlite import SQLiteStore

logger = logging.getLogger(__name__)


def ensure_team_member(store: SQLiteStore, author: PRAuthor) -> int:
    """Return the member id for a PR author, creating or refreshing the row.

    An existing member is only written to when the avatar URL or display
    name reported by GitHub differs from what is stored.
    """
    existing = store.get_team_member_by_username(author.login)
    if existing is None:
        member = store.add_team_member(author.login, author.avatar_url, author.name)
        logger.info("Added team member %s", author.login)
        return member.id

    if existing.avatar_url != author.avatar_url or existing.display_name != author.name:
        store.update_team_member_info(existing.id, author.avatar_url, author.name)
        logger.debug("Refreshed profile of team member %s", author.login)
    return existing.id


def add_pr_from_github_url(
    store: SQLiteStore,
    pr_url: str,
    project_id: int,
    token: str,
    api_url: str = DEFAULT_API_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> PullRequest:
    """Fetch a PR from GitHub and record it under a project with 'Waiting' status.

    Nothing is written when the PR is already tracked; the
    DuplicatePullRequestError message describes the existing row.
    """
    if store.get_project(project_id) is None:
        raise NotFoundError("Project not found")

    url_parts = parse_pr_url(pr_url)
    logger.debug("Parsed URL - owner: %s, repo: %s, PR: %d", url_parts.owner, url_parts.repo, url_parts.number)

    pr_data = fetch_pull_request_data(token, url_parts, base_url=api_url, user_agent=user_agent)

    existing = store.get_pull_request_by_github_id(pr_data.github_id)
    if existing is not None:
        logger.info("PR %d already tracked as row %d", pr_data.github_id, existing.id)
        raise DuplicatePullRequestError(
            "This PR is already added to the system!\n\n"
            f"PR: {existing.title or 'Untitled'} ({url_parts.number})\n"
            f"Project: {existing.project_name or 'Unknown Project'}\n"
            f"Status: {existing.status}"
        )

    author_id = ensure_team_member(store, pr_data.author)

    pr = store.add_pull_request(
        github_id=pr_data.github_id,
        pr_number=url_parts.number,
        title=pr_data.title,
        author_id=author_id,
        project_id=project_id,
        branch=pr_data.branch,
        status=STATUS_WAITING,
        repository_owner=url_parts.owner,
        repository_name=url_parts.repo,
    )
    logger.info("Added PR %s#%d as row %d", url_parts.full_name, url_parts.number, pr.id)
    return pr
