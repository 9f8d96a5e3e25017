"""Shared fixtures for prtracker_core tests."""

from __future__ import annotations

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from prtracker_store.sqlite import SQLiteStore


class MemoryKeyring(KeyringBackend):
    """Process-local keyring so tests never touch the real OS keychain."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.secrets: dict[tuple[str, str], str] = {}

    def get_password(self, service, username):
        return self.secrets.get((service, username))

    def set_password(self, service, username, password):
        self.secrets[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.secrets[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found")


@pytest.fixture
def memory_keyring():
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(db_path=str(tmp_path / "tracker.db"))
    yield s
    s.close()


def pr_payload(github_id=9001, title="Add widget cache", login="octocat", name="The Octocat", branch="feature/cache"):
    """A trimmed GitHub pull request JSON payload."""
    return {
        "id": github_id,
        "number": 42,
        "title": title,
        "user": {"login": login, "avatar_url": f"https://avatars.example/{login}", "name": name},
        "head": {"ref": branch},
    }


@pytest.fixture
def make_pr_payload():
    return pr_payload
