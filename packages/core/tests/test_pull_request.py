"""Tests for GitHub pull request URL parsing and fetching."""

from unittest.mock import MagicMock

import pytest
import requests
from github import GithubException

from prtracker_core.errors import GitHubAPIError, InvalidPRUrlError
from prtracker_core.gh.pull_request import (
    PRUrl,
    describe_pull_error,
    error_body,
    fetch_pull_request_data,
    parse_pr_url,
)

URL = PRUrl(owner="acme", repo="widgets", number=42)


class TestParsePrUrl:
    def test_parses_owner_repo_number(self):
        parts = parse_pr_url("https://github.com/acme/widgets/pull/42")
        assert parts.owner == "acme"
        assert parts.repo == "widgets"
        assert parts.number == 42

    def test_accepts_trailing_path_and_query(self):
        parts = parse_pr_url("https://github.com/acme/widgets/pull/7/files?diff=split")
        assert (parts.owner, parts.repo, parts.number) == ("acme", "widgets", 7)

    def test_accepts_url_without_scheme(self):
        assert parse_pr_url("github.com/acme/widgets/pull/3").number == 3

    def test_full_name(self):
        assert parse_pr_url("https://github.com/acme/widgets/pull/42").full_name == "acme/widgets"

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/acme/widgets/issues/42",
            "https://github.com/acme/widgets/pull/",
            "https://github.com/acme/pull/42",
            "https://gitlab.com/acme/widgets/pull/42",
            "not a url",
            "",
        ],
    )
    def test_malformed_url_rejected(self, url):
        with pytest.raises(InvalidPRUrlError, match="Invalid GitHub PR URL format"):
            parse_pr_url(url)


class TestDescribePullError:
    def test_404_lists_causes(self):
        msg = describe_pull_error(404, "", URL)
        assert "PR #42 not found in repository acme/widgets" in msg
        assert "https://github.com/acme/widgets/pull/42" in msg

    def test_401_token_invalid(self):
        assert "invalid or expired" in describe_pull_error(401, "", URL)

    def test_403_classic_token_blocked(self):
        body = '{"message": "Resource forbids access via a personal access token (classic)."}'
        assert "fine-grained token" in describe_pull_error(403, body, URL)

    def test_403_missing_scope(self):
        assert "'repo' scope" in describe_pull_error(403, '{"message": "Forbidden"}', URL)

    def test_other_status_generic(self):
        assert describe_pull_error(500, "boom", URL) == "GitHub API error: 500 - boom"


class TestErrorBody:
    def test_dict_rendered_as_json(self):
        assert error_body(GithubException(404, {"message": "Not Found"}, {})) == '{"message": "Not Found"}'

    def test_none_is_empty(self):
        assert error_body(GithubException(500, None, {})) == ""


def _patch_client(mocker, raw_data=None):
    client = MagicMock()
    repo = MagicMock()
    client.get_repo.return_value = repo
    repo.get_pull.return_value = MagicMock(raw_data=raw_data)
    mocker.patch("prtracker_core.gh.pull_request.Github", return_value=client)
    return client, repo


class TestFetchPullRequestData:
    def test_returns_mapped_data(self, mocker, make_pr_payload):
        client, repo = _patch_client(mocker, raw_data=make_pr_payload())

        data = fetch_pull_request_data("tok", URL)

        client.get_repo.assert_called_once_with("acme/widgets")
        repo.get_pull.assert_called_once_with(42)
        assert data.github_id == 9001
        assert data.number == 42
        assert data.title == "Add widget cache"
        assert data.branch == "feature/cache"
        assert data.author.login == "octocat"
        assert data.author.avatar_url == "https://avatars.example/octocat"
        assert data.author.name == "The Octocat"

    def test_missing_author_name_is_none(self, mocker, make_pr_payload):
        payload = make_pr_payload()
        del payload["user"]["name"]
        _patch_client(mocker, raw_data=payload)

        assert fetch_pull_request_data("tok", URL).author.name is None

    def test_repository_access_failure(self, mocker):
        client, repo = _patch_client(mocker)
        client.get_repo.side_effect = GithubException(404, {"message": "Not Found"}, {})

        with pytest.raises(GitHubAPIError, match="Cannot access repository acme/widgets. Status: 404") as exc:
            fetch_pull_request_data("tok", URL)

        assert exc.value.status == 404
        repo.get_pull.assert_not_called()

    def test_pull_not_found_gets_guidance(self, mocker):
        _, repo = _patch_client(mocker)
        repo.get_pull.side_effect = GithubException(404, {"message": "Not Found"}, {})

        with pytest.raises(GitHubAPIError, match="PR #42 not found"):
            fetch_pull_request_data("tok", URL)

    def test_pull_unauthorized(self, mocker):
        _, repo = _patch_client(mocker)
        repo.get_pull.side_effect = GithubException(401, {"message": "Bad credentials"}, {})

        with pytest.raises(GitHubAPIError, match="invalid or expired") as exc:
            fetch_pull_request_data("tok", URL)
        assert exc.value.status == 401

    def test_network_failure(self, mocker):
        client, _ = _patch_client(mocker)
        client.get_repo.side_effect = requests.ConnectionError("no route to host")

        with pytest.raises(GitHubAPIError, match="Failed to test repository access"):
            fetch_pull_request_data("tok", URL)

    def test_malformed_payload(self, mocker):
        _patch_client(mocker, raw_data={"title": "no id"})

        with pytest.raises(GitHubAPIError, match="Failed to parse"):
            fetch_pull_request_data("tok", URL)

    def test_client_built_with_config(self, mocker, make_pr_payload):
        github_cls = mocker.patch("prtracker_core.gh.pull_request.Github")
        github_cls.return_value.get_repo.return_value.get_pull.return_value = MagicMock(raw_data=make_pr_payload())

        fetch_pull_request_data("tok", URL, base_url="https://ghe.example/api/v3", user_agent="test/1")

        kwargs = github_cls.call_args.kwargs
        assert kwargs["base_url"] == "https://ghe.example/api/v3"
        assert kwargs["user_agent"] == "test/1"
        assert kwargs["retry"] is None
