"""GitHub token resolution for commands that call the GitHub API.

Resolution order (stops at first success):
  1. The token saved in the OS keychain (`prtracker token save`)
  2. GITHUB_TOKEN environment variable
  3. `gh auth token` (GitHub CLI session — works after `gh auth login`)

An explicit --token flag on a command bypasses all of these.
"""

from __future__ import annotations

import logging
import os
import subprocess

from prtracker_core.errors import CommandError

logger = logging.getLogger(__name__)


def resolve_github_token(tracker=None) -> str | None:
    """Return a GitHub token or None if no source has one.

    Never raises: a keychain that cannot be read is skipped.
    """
    if tracker is not None:
        try:
            token = tracker.get_github_token()
        except CommandError as e:
            logger.warning("Could not read the keychain: %s", e)
            token = None
        if token:
            logger.debug("Resolved GitHub token from keychain.")
            return token

    token = os.environ.get("GITHUB_TOKEN")
    if token:
        logger.debug("Resolved GitHub token from GITHUB_TOKEN.")
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or timed out.
        pass

    return None
