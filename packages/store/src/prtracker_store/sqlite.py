"""SQLiteStore — the local single-file database behind the tracker.

Why SQLite:
- Batteries included: ships with Python, no server to run next to a desktop app.
- One file per user, easy to back up or wipe.

Schema:
  projects        — named buckets PRs are assigned to.
  team_members    — GitHub authors, created lazily on first ingested PR.
  pull_requests   — one row per GitHub PR (unique on github_id).
  review_history  — one row per status change of a PR.

Referential integrity between projects and pull_requests is enforced here in
Python (see delete_project), not by SQLite foreign keys.

The store does no locking of its own. Callers that share one instance across
threads must serialise access (prtracker_core.tracker.Tracker does).
"""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

from prtracker_store.errors import ConstraintError, NotFoundError
from prtracker_store.models import STATUS_REVIEWING, STATUS_WAITING, Project, PullRequest, ReviewHistory, TeamMember

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS team_members (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    github_username TEXT UNIQUE NOT NULL,
    avatar_url      TEXT,
    display_name    TEXT,
    created_at      INTEGER DEFAULT (strftime('%s', 'now'))
);
CREATE TABLE IF NOT EXISTS projects (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT UNIQUE NOT NULL,
    description TEXT,
    created_at  INTEGER DEFAULT (strftime('%s', 'now'))
);
CREATE TABLE IF NOT EXISTS pull_requests (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    github_id        INTEGER UNIQUE NOT NULL,
    pr_number        INTEGER NOT NULL,
    title            TEXT,
    author_id        INTEGER NOT NULL,
    project_id       INTEGER,
    last_updated_at  INTEGER NOT NULL,
    status           TEXT DEFAULT 'Waiting',
    branch           TEXT,
    score            INTEGER,
    repository_owner TEXT,
    repository_name  TEXT,
    FOREIGN KEY (author_id) REFERENCES team_members(id),
    FOREIGN KEY (project_id) REFERENCES projects(id)
);
CREATE TABLE IF NOT EXISTS review_history (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    pr_id        INTEGER NOT NULL,
    action       TEXT NOT NULL,
    performed_at INTEGER NOT NULL,
    FOREIGN KEY (pr_id) REFERENCES pull_requests(id)
);
"""

# Columns added after the first release. Databases created by older versions
# get them via ALTER TABLE on open; new databases already have them.
_ADDED_COLUMNS = [
    ("team_members", "avatar_url", "TEXT"),
    ("team_members", "display_name", "TEXT"),
    ("pull_requests", "status", "TEXT DEFAULT 'Waiting'"),
    ("pull_requests", "branch", "TEXT"),
    ("pull_requests", "score", "INTEGER"),
    ("pull_requests", "repository_owner", "TEXT"),
    ("pull_requests", "repository_name", "TEXT"),
]

_PR_SELECT = """
SELECT
    pr.id, pr.github_id, pr.pr_number, pr.title, pr.author_id,
    pr.project_id, pr.last_updated_at, pr.status, pr.branch, pr.score,
    pr.repository_owner, pr.repository_name,
    tm.github_username AS author_name,
    tm.avatar_url      AS author_avatar,
    tm.display_name    AS author_display_name,
    p.name             AS project_name
FROM pull_requests pr
LEFT JOIN team_members tm ON pr.author_id = tm.id
LEFT JOIN projects p ON pr.project_id = p.id
"""

_SAMPLE_PROJECTS = [
    ("Frontend Core", "Main React application"),
    ("Backend API", "REST API and services"),
    ("Mobile App", "iOS and Android applications"),
    ("DevOps Tools", "CI/CD and deployment tools"),
]

_SAMPLE_MEMBERS = ["Alex Chen", "Sarah Liao", "Michael Wu"]


def _now() -> int:
    return int(time.time())


class SQLiteStore:
    """Projects, team members and pull requests in a local SQLite file.

    Pass ``":memory:"`` for a throwaway database.
    """

    def __init__(self, db_path: str):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Opening database at %s", db_path)
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._migrate()
        self._conn.commit()

    def _migrate(self) -> None:
        for table, column, decl in _ADDED_COLUMNS:
            existing = {row["name"] for row in self._conn.execute(f"PRAGMA table_info({table})")}
            if column not in existing:
                self._conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {decl}")
                logger.info("Added %s column to %s table", column, table)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self) -> list[Project]:
        rows = self._conn.execute("SELECT id, name, description, created_at FROM projects ORDER BY name").fetchall()
        return [self._row_to_project(r) for r in rows]

    def add_project(self, name: str, description: str | None = None) -> Project:
        now = _now()
        try:
            with self._conn:
                cur = self._conn.execute(
                    "INSERT INTO projects (name, description, created_at) VALUES (?, ?, ?)",
                    (name, description, now),
                )
        except sqlite3.IntegrityError as e:
            raise ConstraintError(f"A project named {name!r} already exists.") from e
        return Project(id=cur.lastrowid, name=name, description=description, created_at=now)

    def get_project(self, project_id: int) -> Project | None:
        row = self._conn.execute(
            "SELECT id, name, description, created_at FROM projects WHERE id = ?",
            (project_id,),
        ).fetchone()
        return self._row_to_project(row) if row else None

    def update_project(self, project_id: int, name: str, description: str | None) -> Project:
        try:
            with self._conn:
                cur = self._conn.execute(
                    "UPDATE projects SET name = ?, description = ? WHERE id = ?",
                    (name, description, project_id),
                )
        except sqlite3.IntegrityError as e:
            raise ConstraintError(f"A project named {name!r} already exists.") from e
        if cur.rowcount == 0:
            raise NotFoundError("Project not found")
        return self.get_project(project_id)

    def delete_project(self, project_id: int) -> None:
        """Delete a project that no pull request references.

        Raises ConstraintError naming the number of assigned PRs, or
        NotFoundError if the project does not exist.
        """
        (pr_count,) = self._conn.execute(
            "SELECT COUNT(*) FROM pull_requests WHERE project_id = ?", (project_id,)
        ).fetchone()
        if pr_count > 0:
            raise ConstraintError(
                f"Cannot delete project: {pr_count} pull requests are assigned to this project. "
                "Please reassign them first."
            )

        with self._conn:
            cur = self._conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        if cur.rowcount == 0:
            raise NotFoundError("Project not found")

    # ------------------------------------------------------------------
    # Team members
    # ------------------------------------------------------------------

    def list_team_members(self) -> list[TeamMember]:
        rows = self._conn.execute(
            "SELECT id, github_username, avatar_url, display_name, created_at "
            "FROM team_members ORDER BY github_username"
        ).fetchall()
        return [self._row_to_member(r) for r in rows]

    def get_team_member_by_username(self, username: str) -> TeamMember | None:
        row = self._conn.execute(
            "SELECT id, github_username, avatar_url, display_name, created_at "
            "FROM team_members WHERE github_username = ?",
            (username,),
        ).fetchone()
        return self._row_to_member(row) if row else None

    def get_or_create_team_member(self, username: str) -> TeamMember:
        existing = self.get_team_member_by_username(username)
        if existing is not None:
            return existing
        return self.add_team_member(username)

    def add_team_member(
        self,
        username: str,
        avatar_url: str | None = None,
        display_name: str | None = None,
    ) -> TeamMember:
        now = _now()
        try:
            with self._conn:
                cur = self._conn.execute(
                    "INSERT INTO team_members (github_username, avatar_url, display_name, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (username, avatar_url, display_name, now),
                )
        except sqlite3.IntegrityError as e:
            raise ConstraintError(f"Team member {username!r} already exists.") from e
        return TeamMember(
            id=cur.lastrowid,
            github_username=username,
            avatar_url=avatar_url,
            display_name=display_name,
            created_at=now,
        )

    def update_team_member_info(self, member_id: int, avatar_url: str | None, display_name: str | None) -> None:
        with self._conn:
            self._conn.execute(
                "UPDATE team_members SET avatar_url = ?, display_name = ? WHERE id = ?",
                (avatar_url, display_name, member_id),
            )

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def list_pull_requests(self, project_id: int | None = None) -> list[PullRequest]:
        if project_id is not None:
            rows = self._conn.execute(
                _PR_SELECT + " WHERE pr.project_id = ? ORDER BY pr.last_updated_at DESC, pr.id DESC",
                (project_id,),
            ).fetchall()
        else:
            rows = self._conn.execute(_PR_SELECT + " ORDER BY pr.last_updated_at DESC, pr.id DESC").fetchall()
        return [self._row_to_pull_request(r) for r in rows]

    def get_pull_request(self, pr_id: int) -> PullRequest | None:
        row = self._conn.execute(_PR_SELECT + " WHERE pr.id = ?", (pr_id,)).fetchone()
        return self._row_to_pull_request(row) if row else None

    def get_pull_request_by_github_id(self, github_id: int) -> PullRequest | None:
        row = self._conn.execute(_PR_SELECT + " WHERE pr.github_id = ?", (github_id,)).fetchone()
        return self._row_to_pull_request(row) if row else None

    def add_pull_request(
        self,
        github_id: int,
        pr_number: int,
        title: str | None,
        author_id: int,
        project_id: int | None = None,
        branch: str | None = None,
        status: str = STATUS_WAITING,
        repository_owner: str | None = None,
        repository_name: str | None = None,
    ) -> PullRequest:
        try:
            with self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO pull_requests
                      (github_id, pr_number, title, author_id, project_id, branch, status,
                       repository_owner, repository_name, last_updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        github_id,
                        pr_number,
                        title,
                        author_id,
                        project_id,
                        branch,
                        status,
                        repository_owner,
                        repository_name,
                        _now(),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ConstraintError(f"Pull request with GitHub id {github_id} is already tracked.") from e
        return self.get_pull_request(cur.lastrowid)

    def update_pr_status(self, pr_id: int, status: str) -> None:
        """Set a PR's status and record the change in review_history."""
        with self._conn:
            cur = self._conn.execute("UPDATE pull_requests SET status = ? WHERE id = ?", (status, pr_id))
            if cur.rowcount == 0:
                raise NotFoundError("Pull request not found")
            self._conn.execute(
                "INSERT INTO review_history (pr_id, action, performed_at) VALUES (?, ?, ?)",
                (pr_id, status, _now()),
            )

    def update_pr_score(self, pr_id: int, score: int) -> None:
        with self._conn:
            cur = self._conn.execute("UPDATE pull_requests SET score = ? WHERE id = ?", (score, pr_id))
        if cur.rowcount == 0:
            raise NotFoundError("Pull request not found")

    def update_pr_project(self, pr_id: int, project_id: int) -> None:
        if self.get_project(project_id) is None:
            raise NotFoundError("Project not found")
        with self._conn:
            cur = self._conn.execute("UPDATE pull_requests SET project_id = ? WHERE id = ?", (project_id, pr_id))
        if cur.rowcount == 0:
            raise NotFoundError("Pull request not found")

    # ------------------------------------------------------------------
    # Review history
    # ------------------------------------------------------------------

    def list_review_history(self, pr_id: int) -> list[ReviewHistory]:
        rows = self._conn.execute(
            "SELECT id, pr_id, action, performed_at FROM review_history WHERE pr_id = ? ORDER BY performed_at, id",
            (pr_id,),
        ).fetchall()
        return [
            ReviewHistory(id=r["id"], pr_id=r["pr_id"], action=r["action"], performed_at=r["performed_at"])
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear_all_data(self) -> None:
        """Delete every row, dependents first."""
        with self._conn:
            for table in ("review_history", "pull_requests", "team_members", "projects"):
                self._conn.execute(f"DELETE FROM {table}")
        logger.info("Cleared all data from %s", self._db_path)

    def add_sample_data(self) -> None:
        """Seed demo projects, members and PRs into an empty database.

        Projects are only added when there are none; members and their PRs
        only when there are no members.
        """
        (project_count,) = self._conn.execute("SELECT COUNT(*) FROM projects").fetchone()
        if project_count == 0:
            for name, description in _SAMPLE_PROJECTS:
                self.add_project(name, description)

        (member_count,) = self._conn.execute("SELECT COUNT(*) FROM team_members").fetchone()
        if member_count:
            return

        first_project = self._conn.execute("SELECT id FROM projects ORDER BY id LIMIT 1").fetchone()
        project_id = first_project["id"] if first_project else None
        for name in _SAMPLE_MEMBERS:
            member = self.get_or_create_team_member(name)
            pr = self.add_pull_request(
                github_id=1000 + member.id,
                pr_number=1000 + member.id,
                title=f"Sample PR from {name}",
                author_id=member.id,
                project_id=project_id,
                branch=f"feature/sample-{member.id}",
            )
            self.update_pr_status(pr.id, STATUS_REVIEWING)
            if member.id % 2 == 0:
                self.update_pr_score(pr.id, 9)
        logger.info("Seeded sample data into %s", self._db_path)

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_member(row: sqlite3.Row) -> TeamMember:
        return TeamMember(
            id=row["id"],
            github_username=row["github_username"],
            avatar_url=row["avatar_url"],
            display_name=row["display_name"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_pull_request(row: sqlite3.Row) -> PullRequest:
        return PullRequest(
            id=row["id"],
            github_id=row["github_id"],
            pr_number=row["pr_number"],
            title=row["title"],
            author_id=row["author_id"],
            project_id=row["project_id"],
            last_updated_at=row["last_updated_at"],
            status=row["status"] or STATUS_WAITING,
            branch=row["branch"],
            score=row["score"],
            repository_owner=row["repository_owner"],
            repository_name=row["repository_name"],
            author_name=row["author_name"],
            author_avatar=row["author_avatar"],
            author_display_name=row["author_display_name"],
            project_name=row["project_name"],
        )
