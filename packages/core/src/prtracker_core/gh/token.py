"""GitHub token storage and verification.

The token lives in the OS keychain (macOS Keychain, Windows Credential
Locker, Secret Service on Linux) through the ``keyring`` library, under one
service/account pair. Verification is a single authenticated GET /user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import keyring
import requests
from github import GithubException
from keyring.errors import KeyringError, PasswordDeleteError

from prtracker_core.errors import CredentialStoreError, GitHubAPIError
from prtracker_core.gh.pull_request import DEFAULT_API_URL, DEFAULT_USER_AGENT, get_client

logger = logging.getLogger(__name__)

KEYCHAIN_SERVICE = "PRTracker"
KEYCHAIN_ACCOUNT = "github_token"


@dataclass
class GitHubUser:
    login: str
    id: int
    avatar_url: str
    name: str | None = None
    email: str | None = None
    company: str | None = None


@dataclass
class TokenInfo:
    """Outcome of a token check. ``valid`` is False for any non-2xx answer."""

    valid: bool
    user: GitHubUser | None = None
    scopes: list[str] = field(default_factory=list)
    rate_limit_remaining: int | None = None
    rate_limit_total: int | None = None


def _lower_keys(headers) -> dict:
    return {str(k).lower(): v for k, v in (headers or {}).items()}


def _header_int(headers: dict, name: str) -> int | None:
    try:
        return int(headers[name])
    except (KeyError, TypeError, ValueError):
        return None


def _parse_scopes(headers: dict) -> list[str]:
    raw = headers.get("x-oauth-scopes") or ""
    return [scope.strip() for scope in raw.split(",") if scope.strip()]


def verify_token(
    token: str,
    base_url: str = DEFAULT_API_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> TokenInfo:
    """Check a token against GET /user and report scopes and rate limits.

    An HTTP error status is a normal answer (valid=False). Only a transport
    failure raises.
    """
    if not token:
        return TokenInfo(valid=False)
    logger.debug("Verifying GitHub token (length: %d chars)", len(token))
    client = get_client(token, base_url=base_url, user_agent=user_agent)
    try:
        authenticated = client.get_user()
        data = authenticated.raw_data
        headers = _lower_keys(authenticated.raw_headers)
    except GithubException as e:
        headers = _lower_keys(e.headers)
        logger.warning("GitHub token verification failed: %s", e.status)
        return TokenInfo(
            valid=False,
            rate_limit_remaining=_header_int(headers, "x-ratelimit-remaining"),
            rate_limit_total=_header_int(headers, "x-ratelimit-limit"),
        )
    except requests.RequestException as e:
        raise GitHubAPIError(f"Failed to reach GitHub: {e}") from e

    user = GitHubUser(
        login=data["login"],
        id=data["id"],
        avatar_url=data.get("avatar_url", ""),
        name=data.get("name"),
        email=data.get("email"),
        company=data.get("company"),
    )
    info = TokenInfo(
        valid=True,
        user=user,
        scopes=_parse_scopes(headers),
        rate_limit_remaining=_header_int(headers, "x-ratelimit-remaining"),
        rate_limit_total=_header_int(headers, "x-ratelimit-limit"),
    )
    logger.info(
        "GitHub token verified for user %s (rate limit %s/%s)",
        user.login,
        info.rate_limit_remaining,
        info.rate_limit_total,
    )
    return info


class TokenManager:
    """Keeps one GitHub token in the OS keychain."""

    def __init__(
        self,
        service: str = KEYCHAIN_SERVICE,
        account: str = KEYCHAIN_ACCOUNT,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.service = service
        self.account = account
        self._api_url = api_url
        self._user_agent = user_agent

    def save_token(self, token: str) -> None:
        try:
            keyring.set_password(self.service, self.account, token)
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to save token to keychain: {e}") from e
        logger.info("Saved GitHub token to keychain (service: %s, account: %s)", self.service, self.account)

    def get_token(self) -> str | None:
        """Return the stored token, or None when nothing is stored."""
        try:
            token = keyring.get_password(self.service, self.account)
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to retrieve token from keychain: {e}") from e
        if token is None:
            logger.debug("No GitHub token found in keychain (service: %s, account: %s)", self.service, self.account)
        return token

    def delete_token(self) -> None:
        """Remove the stored token. Deleting a missing token is not an error."""
        try:
            keyring.delete_password(self.service, self.account)
        except PasswordDeleteError:
            logger.debug("No GitHub token found in keychain to delete")
            return
        except KeyringError as e:
            raise CredentialStoreError(f"Failed to delete token from keychain: {e}") from e
        logger.info("Deleted GitHub token from keychain")

    def verify_token(self, token: str) -> TokenInfo:
        return verify_token(token, base_url=self._api_url, user_agent=self._user_agent)

    def test_stored_token(self) -> TokenInfo:
        token = self.get_token()
        if token is None:
            return TokenInfo(valid=False)
        return self.verify_token(token)
