from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

import requests
from github import Auth, Github, GithubException

from prtracker_core.errors import GitHubAPIError, InvalidPRUrlError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "PRTracker/1.0"

_PR_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")
_CLASSIC_TOKEN_BLOCKED = "forbids access via a personal access token (classic)"


@dataclass
class PRUrl:
    owner: str
    repo: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class PRAuthor:
    login: str
    avatar_url: str | None
    name: str | None = None


@dataclass
class PullRequestData:
    """The subset of GitHub's pull request payload the tracker stores."""

    github_id: int
    number: int
    title: str
    branch: str | None
    author: PRAuthor


def parse_pr_url(url: str) -> PRUrl:
    """Extract owner, repo and number from a GitHub pull request URL."""
    match = _PR_URL_RE.search(url or "")
    if not match:
        raise InvalidPRUrlError("Invalid GitHub PR URL format. Expected: https://github.com/owner/repo/pull/123")
    owner, repo, number = match.groups()
    return PRUrl(owner=owner, repo=repo, number=int(number))


def get_client(token: str, base_url: str = DEFAULT_API_URL, user_agent: str = DEFAULT_USER_AGENT) -> Github:
    # retry=None: a failed request is reported, never replayed.
    return Github(auth=Auth.Token(token), base_url=base_url, user_agent=user_agent, retry=None)


def get_repo(client: Github, owner: str, repo: str):
    return client.get_repo(f"{owner}/{repo}")


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def error_body(exc: GithubException) -> str:
    """Render the response body of a failed GitHub call as text."""
    data = exc.data
    if data is None:
        return ""
    if isinstance(data, (dict, list)):
        return json.dumps(data)
    return str(data)


def describe_pull_error(status: int | None, body: str, pr_url: PRUrl) -> str:
    """Turn a failed pull request lookup into guidance for the user."""
    if status == 404:
        return (
            f"PR #{pr_url.number} not found in repository {pr_url.full_name}. Possible reasons:\n"
            "• PR number doesn't exist\n"
            "• PR might be in 'draft' state\n"
            "• Fine-grained token doesn't have 'Pull requests' read permission\n"
            "• Token doesn't have access to this specific repository\n"
            "\nPlease check:\n"
            f"1. The PR URL is correct: https://github.com/{pr_url.full_name}/pull/{pr_url.number}\n"
            "2. Your fine-grained token has 'Pull requests' read permission\n"
            f"3. Your token has access to the {pr_url.repo} repository"
        )
    if status == 401:
        return "GitHub token is invalid or expired. Please update your token in settings."
    if status == 403:
        if _CLASSIC_TOKEN_BLOCKED in body:
            return (
                "Organization requires fine-grained token. This organization blocks classic tokens. "
                "Please create a fine-grained personal access token at "
                "GitHub Settings > Personal Access Tokens > Fine-grained tokens."
            )
        return (
            "Access forbidden. For private repositories, your GitHub token needs the 'repo' scope. "
            "Please go to GitHub Settings > Personal Access Tokens and create a new token with 'repo' permission."
        )
    return f"GitHub API error: {status} - {body}"


def fetch_pull_request_data(
    token: str,
    pr_url: PRUrl,
    base_url: str = DEFAULT_API_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> PullRequestData:
    """Fetch a pull request, checking repository access first.

    Two requests: GET /repos/{owner}/{repo}, then GET /repos/{owner}/{repo}/pulls/{number}.
    Failures are raised as GitHubAPIError with a message fit for the user.
    """
    client = get_client(token, base_url=base_url, user_agent=user_agent)

    logger.debug("Testing repository access: %s", pr_url.full_name)
    try:
        repo = get_repo(client, pr_url.owner, pr_url.repo)
    except GithubException as e:
        logger.warning("Repository access error for %s: %s", pr_url.full_name, e.status)
        raise GitHubAPIError(
            f"Cannot access repository {pr_url.full_name}. Status: {e.status} - {error_body(e)}",
            status=e.status,
        ) from e
    except requests.RequestException as e:
        raise GitHubAPIError(f"Failed to test repository access: {e}") from e

    logger.debug("Fetching PR #%d from %s", pr_url.number, pr_url.full_name)
    try:
        pull = get_pull(repo, pr_url.number)
        data = pull.raw_data
    except GithubException as e:
        logger.warning("GitHub API error fetching PR #%d: %s", pr_url.number, e.status)
        raise GitHubAPIError(describe_pull_error(e.status, error_body(e), pr_url), status=e.status) from e
    except requests.RequestException as e:
        raise GitHubAPIError(f"Failed to fetch PR data: {e}") from e

    try:
        user = data["user"]
        result = PullRequestData(
            github_id=int(data["id"]),
            number=pr_url.number,
            title=data.get("title") or "",
            branch=(data.get("head") or {}).get("ref"),
            author=PRAuthor(login=user["login"], avatar_url=user.get("avatar_url"), name=user.get("name")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise GitHubAPIError(f"Failed to parse GitHub API response: {e}") from e

    logger.debug("Fetched PR %r by %s", result.title, result.author.login)
    return result
