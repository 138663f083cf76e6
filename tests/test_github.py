"""Tests for cargo_release_pr.github."""

from __future__ import annotations

import json

import httpx
import pytest

from cargo_release_pr.errors import ConfigurationError, GitHubError
from cargo_release_pr.github import GitHubClient


def _client(handler) -> GitHubClient:
    return GitHubClient("ghs_token", "octo/widgets", transport=httpx.MockTransport(handler))


class TestGitHubClient:
    """Tests for GitHubClient."""

    def test_get_default_branch(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"default_branch": "trunk"})

        assert _client(handler).get_default_branch() == "trunk"
        assert seen[0].method == "GET"
        assert seen[0].url == "https://api.github.com/repos/octo/widgets"
        assert seen[0].headers["Authorization"] == "Bearer ghs_token"

    def test_create_pull_request(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repos/octo/widgets/pulls"
            bodies.append(json.loads(request.content))
            return httpx.Response(
                201,
                json={
                    "number": 42,
                    "url": "https://api.github.com/repos/octo/widgets/pulls/42",
                    "html_url": "https://github.com/octo/widgets/pull/42",
                    "state": "open",
                },
            )

        pr = _client(handler).create_pull_request(
            title="release: foo v1.0.0",
            body="body",
            head="release/1.0.0",
            base="main",
            maintainer_can_modify=True,
            draft=False,
        )

        assert pr.number == 42
        assert pr.html_url == "https://github.com/octo/widgets/pull/42"
        assert bodies == [
            {
                "title": "release: foo v1.0.0",
                "body": "body",
                "head": "release/1.0.0",
                "base": "main",
                "maintainer_can_modify": True,
                "draft": False,
            }
        ]

    def test_add_labels(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repos/octo/widgets/issues/7/labels"
            assert json.loads(request.content) == {"labels": ["release"]}
            return httpx.Response(200, json=[{"name": "release"}])

        _client(handler).add_labels(7, ["release"])

    def test_error_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"message": "A pull request already exists"})

        with pytest.raises(GitHubError, match="already exists") as excinfo:
            _client(handler).get_default_branch()

        assert excinfo.value.status_code == 422

    def test_error_without_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(GitHubError, match="502"):
            _client(handler).get_default_branch()

    def test_error_with_list_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json=[{"message": "invalid"}])

        with pytest.raises(GitHubError, match="failed with 422$"):
            _client(handler).get_default_branch()

    def test_missing_default_branch(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"name": "widgets"})

        with pytest.raises(GitHubError, match="default branch"):
            _client(handler).get_default_branch()

    def test_non_json_success_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>sign in</html>")

        with pytest.raises(GitHubError, match="non-JSON"):
            _client(handler).get_default_branch()

    def test_unexpected_pull_request_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"id": 1})

        with pytest.raises(GitHubError, match="unexpected body"):
            _client(handler).create_pull_request(
                title="t", body="b", head="release/patch", base="main",
                maintainer_can_modify=True, draft=False,
            )

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GitHubError, match="request failed"):
            _client(handler).get_default_branch()

    def test_custom_api_url(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://ghe.example.com/api/v3/repos/octo/widgets"
            return httpx.Response(200, json={"default_branch": "main"})

        client = GitHubClient(
            "t", "octo/widgets", "https://ghe.example.com/api/v3/", httpx.MockTransport(handler)
        )
        assert client.get_default_branch() == "main"

    @pytest.mark.parametrize("repository", ["", "octo", "octo/", "/widgets", "a/b/c"])
    def test_invalid_repository(self, repository: str) -> None:
        with pytest.raises(ConfigurationError, match="repository"):
            GitHubClient("t", repository)

    def test_missing_token(self) -> None:
        with pytest.raises(ConfigurationError, match="github-token"):
            GitHubClient("", "octo/widgets")
