"""Errors raised by prtracker_core.

Every message is written for the person at the keyboard: the command surface
passes ``str(exc)`` straight through to the shell.
"""

from __future__ import annotations


class PRTrackerError(Exception):
    """Base class for all tracker errors outside the store layer."""


class InvalidPRUrlError(PRTrackerError):
    """The URL does not look like https://github.com/<owner>/<repo>/pull/<number>."""


class GitHubAPIError(PRTrackerError):
    """A GitHub request failed. ``status`` is None when no response arrived."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class CredentialStoreError(PRTrackerError):
    """The OS keychain backend refused a read or write."""


class DuplicatePullRequestError(PRTrackerError):
    """The pull request is already tracked locally."""


class CommandError(PRTrackerError):
    """Terminal failure of one command, carrying a user-facing message."""
