"""GitHub REST API client.

Only the three calls the release needs: read the default branch, open the
pull request, and label it.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from .actions import debug
from .errors import ConfigurationError, GitHubError
from .models import PullRequest

DEFAULT_API_URL = "https://api.github.com"


class GitHubClient:
    """Client for one repository, authenticated with a token.

    Args:
        token: GitHub token with contents and pull-requests write access.
        repository: "owner/name" slug.
        api_url: REST API root (differs on GitHub Enterprise).
        transport: Optional httpx transport, used by tests.
    """

    TIMEOUT = 30

    def __init__(
        self,
        token: str,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not token:
            raise ConfigurationError("github-token is required")
        owner, _, name = repository.partition("/")
        if not owner or not name or "/" in name:
            raise ConfigurationError(
                f"Invalid repository {repository!r}, expected 'owner/name'"
            )
        self.owner = owner
        self.repo = name
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "cargo-release-pr",
            },
            timeout=self.TIMEOUT,
            transport=transport,
        )

    def _request(
        self, method: str, endpoint: str, json_data: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request and return the decoded JSON body.

        Raises:
            GitHubError: On transport failures, non-2xx responses and bodies
                that are not JSON.
        """
        debug(f"API {method} {endpoint}")
        try:
            response = self._client.request(method, endpoint, json=json_data)
        except httpx.TimeoutException as e:
            raise GitHubError(f"GitHub API request timed out: {method} {endpoint}") from e
        except httpx.RequestError as e:
            raise GitHubError(f"GitHub API request failed: {e}") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            message = payload.get("message", "") if isinstance(payload, dict) else ""
            raise GitHubError(
                f"GitHub API {method} {endpoint} failed with {response.status_code}"
                + (f": {message}" if message else ""),
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise GitHubError(f"GitHub API {method} {endpoint} returned a non-JSON body") from e

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def get_default_branch(self) -> str:
        debug("asking github API for repo's default branch")
        data = self._request("GET", self._repo_path)
        if not isinstance(data, dict) or not data.get("default_branch"):
            raise GitHubError(f"GitHub API GET {self._repo_path} did not return a default branch")
        return str(data["default_branch"])

    def create_pull_request(
        self,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
        maintainer_can_modify: bool,
        draft: bool,
    ) -> PullRequest:
        data = self._request(
            "POST",
            f"{self._repo_path}/pulls",
            {
                "title": title,
                "body": body,
                "head": head,
                "base": base,
                "maintainer_can_modify": maintainer_can_modify,
                "draft": draft,
            },
        )
        try:
            return PullRequest.model_validate(data)
        except ValidationError as e:
            raise GitHubError(
                f"GitHub API POST {self._repo_path}/pulls returned an unexpected body: {e}"
            ) from e

    def add_labels(self, number: int, labels: list[str]) -> None:
        """Apply labels to a PR (through the issues API, as GitHub requires)."""
        self._request("POST", f"{self._repo_path}/issues/{number}/labels", {"labels": labels})

    def close(self) -> None:
        self._client.close()
