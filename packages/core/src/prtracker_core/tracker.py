"""Command surface of the tracker.

Each public method of Tracker is one request/response operation for a shell
(the prtracker CLI, or any GUI front end). A method either returns a typed
payload or raises CommandError whose message can be shown as-is.

All database access goes through a single SQLiteStore guarded by one lock.
Every operation holds the lock for its whole duration, including
add_pr_from_github_url's two GitHub requests, so operations never interleave.
"""

from __future__ import annotations

import functools
import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator

from prtracker_core.errors import CommandError, PRTrackerError
from prtracker_core.gh.pull_request import DEFAULT_API_URL, DEFAULT_USER_AGENT
from prtracker_core.gh.token import KEYCHAIN_ACCOUNT, KEYCHAIN_SERVICE, TokenInfo, TokenManager
from prtracker_core.ingest import add_pr_from_github_url
from prtracker_store.errors import StoreError
from prtracker_store.models import Project, PullRequest, ReviewHistory, TeamMember
from prtracker_store.sqlite import SQLiteStore

logger = logging.getLogger(__name__)


def _command(fn):
    """Convert any tracker, store or sqlite failure into CommandError."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except CommandError:
            raise
        except (PRTrackerError, StoreError, sqlite3.Error) as e:
            logger.debug("%s failed: %s", fn.__name__, e)
            raise CommandError(str(e)) from e

    return wrapper


class Tracker:
    """Owns the configuration, the shared store and the token manager."""

    def __init__(self, config: dict, token_manager: TokenManager | None = None):
        self._config = config
        self._lock = threading.Lock()
        self._store: SQLiteStore | None = None
        self._api_url = config.get("github_api_url") or DEFAULT_API_URL
        self._user_agent = config.get("user_agent") or DEFAULT_USER_AGENT
        self._tokens = token_manager or TokenManager(
            service=config.get("keychain_service") or KEYCHAIN_SERVICE,
            account=config.get("keychain_account") or KEYCHAIN_ACCOUNT,
            api_url=self._api_url,
            user_agent=self._user_agent,
        )

    @property
    def db_path(self) -> str | None:
        return self._config.get("db_path")

    @contextmanager
    def _db(self) -> Iterator[SQLiteStore]:
        with self._lock:
            if self._store is None:
                raise CommandError("Database not initialized")
            yield self._store

    # ------------------------------------------------------------------
    # Database lifecycle
    # ------------------------------------------------------------------

    @_command
    def init_database(self) -> None:
        db_path = self.db_path
        if not db_path:
            raise CommandError("No database path configured.")
        store = SQLiteStore(db_path)
        with self._lock:
            if self._store is not None:
                self._store.close()
            self._store = store
        logger.info("Database initialized at %s", db_path)

    @_command
    def clear_all_data(self) -> None:
        with self._db() as db:
            db.clear_all_data()

    @_command
    def seed_sample_data(self) -> None:
        with self._db() as db:
            db.add_sample_data()

    def close(self) -> None:
        with self._lock:
            if self._store is not None:
                self._store.close()
                self._store = None

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @_command
    def get_projects(self) -> list[Project]:
        with self._db() as db:
            return db.list_projects()

    @_command
    def add_project(self, name: str, description: str | None = None) -> Project:
        name = (name or "").strip()
        if not name:
            raise CommandError("Project name must not be empty.")
        with self._db() as db:
            return db.add_project(name, description or None)

    @_command
    def update_project(self, project_id: int, name: str, description: str | None = None) -> Project:
        name = (name or "").strip()
        if not name:
            raise CommandError("Project name must not be empty.")
        with self._db() as db:
            return db.update_project(project_id, name, description or None)

    @_command
    def delete_project(self, project_id: int) -> None:
        with self._db() as db:
            db.delete_project(project_id)

    @_command
    def get_project_by_id(self, project_id: int) -> Project | None:
        with self._db() as db:
            return db.get_project(project_id)

    # ------------------------------------------------------------------
    # Team members and pull requests
    # ------------------------------------------------------------------

    @_command
    def get_team_members(self) -> list[TeamMember]:
        with self._db() as db:
            return db.list_team_members()

    @_command
    def get_pull_requests(self, project_id: int | None = None) -> list[PullRequest]:
        with self._db() as db:
            return db.list_pull_requests(project_id=project_id)

    @_command
    def update_pr_status(self, pr_id: int, status: str) -> None:
        status = (status or "").strip()
        if not status:
            raise CommandError("Status must not be empty.")
        with self._db() as db:
            db.update_pr_status(pr_id, status)

    @_command
    def update_pr_score(self, pr_id: int, score: int) -> None:
        with self._db() as db:
            db.update_pr_score(pr_id, score)

    @_command
    def update_pr_project(self, pr_id: int, project_id: int) -> None:
        with self._db() as db:
            db.update_pr_project(pr_id, project_id)

    @_command
    def check_pr_exists_by_github_id(self, github_id: int) -> PullRequest | None:
        with self._db() as db:
            return db.get_pull_request_by_github_id(github_id)

    @_command
    def get_review_history(self, pr_id: int) -> list[ReviewHistory]:
        with self._db() as db:
            return db.list_review_history(pr_id)

    @_command
    def add_pr_from_github_url(self, pr_url: str, project_id: int, token: str) -> PullRequest:
        if not token:
            raise CommandError("No GitHub token provided. Save one with `prtracker token save` first.")
        logger.debug("Adding PR from %s to project %d (token length: %d chars)", pr_url, project_id, len(token))
        with self._db() as db:
            return add_pr_from_github_url(
                db,
                pr_url,
                project_id,
                token,
                api_url=self._api_url,
                user_agent=self._user_agent,
            )

    # ------------------------------------------------------------------
    # GitHub token
    # ------------------------------------------------------------------

    @_command
    def save_github_token(self, token: str) -> None:
        if not (token or "").strip():
            raise CommandError("GitHub token must not be empty.")
        self._tokens.save_token(token)

    @_command
    def get_github_token(self) -> str | None:
        return self._tokens.get_token()

    @_command
    def delete_github_token(self) -> None:
        self._tokens.delete_token()

    @_command
    def verify_github_token(self, token: str) -> TokenInfo:
        return self._tokens.verify_token(token)

    @_command
    def test_github_connection(self) -> TokenInfo:
        return self._tokens.test_stored_token()
