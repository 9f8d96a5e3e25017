"""Tracker data models.

Decoupled from prtracker_core so the store layer can be used independently
and prtracker_core has no knowledge of SQL.
All timestamps are Unix seconds (UTC).
"""

from __future__ import annotations

from dataclasses import dataclass

STATUS_WAITING = "Waiting"
STATUS_REVIEWING = "Reviewing"
STATUS_APPROVED = "Approved"
STATUS_ARCHIVED = "archived"


@dataclass
class Project:
    id: int
    name: str
    description: str | None
    created_at: int


@dataclass
class TeamMember:
    """A GitHub user that authored at least one tracked pull request."""

    id: int
    github_username: str
    avatar_url: str | None
    display_name: str | None
    created_at: int


@dataclass
class PullRequest:
    """A tracked pull request joined with its author and project display fields.

    ``github_id`` is GitHub's immutable id; ``pr_number`` is the per-repository
    number shown in URLs.
    """

    id: int
    github_id: int
    pr_number: int
    title: str | None
    author_id: int
    project_id: int | None
    last_updated_at: int
    status: str = STATUS_WAITING
    branch: str | None = None
    score: int | None = None
    repository_owner: str | None = None
    repository_name: str | None = None
    author_name: str | None = None
    author_avatar: str | None = None
    author_display_name: str | None = None
    project_name: str | None = None

    @property
    def url(self) -> str | None:
        if not self.repository_owner or not self.repository_name:
            return None
        return f"https://github.com/{self.repository_owner}/{self.repository_name}/pull/{self.pr_number}"


@dataclass
class ReviewHistory:
    id: int
    pr_id: int
    action: str
    performed_at: int
