"""GitHub pull request API client.

The action only needs to read a pull request's description and write it
back, so the protocol is just those two calls. Conflicts between
concurrent runs against the same PR are not detected.

GitHub API docs: https://docs.github.com/en/rest/pulls/pulls
"""

from __future__ import annotations

from typing import Protocol

import httpx

from drupal_release_notes.schemas import PullRequest

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class PullRequestClientProtocol(Protocol):
    """Read-modify-write access to a pull request description."""

    async def get_pull_request(self, number: int) -> PullRequest:
        """Fetch the pull request.

        Args:
            number: Pull request number

        Returns:
            The PR number and its current body (``None`` when empty)
        """
        ...

    async def update_pull_request_body(self, number: int, body: str) -> None:
        """Replace the pull request description with ``body``."""
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubPullRequestClient:
    """Pull request client for the GitHub REST API using httpx.

    Usage:
        client = GitHubPullRequestClient(token="ghp_...", repository="myorg/site")
        pr = await client.get_pull_request(123)
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str,
        repository: str,
        base_url: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: GitHub token with pull request write access
            repository: Repository in "owner/name" format
            base_url: API root, for GitHub Enterprise Server
        """
        self._repository = repository
        self._base_url = base_url or self.BASE_URL
        self._headers: dict[str, str] = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=30.0,
        )

    async def get_pull_request(self, number: int) -> PullRequest:
        """Fetch a pull request.

        Raises:
            httpx.HTTPStatusError: If the GitHub API call fails
            ValueError: If the response body is not a JSON object
        """
        async with self._client() as client:
            resp = await client.get(f"/repos/{self._repository}/pulls/{number}")
            resp.raise_for_status()
            data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected pull request payload: {type(data).__name__}")
        return PullRequest(number=data.get("number", number), body=data.get("body"))

    async def update_pull_request_body(self, number: int, body: str) -> None:
        """Write a new pull request description.

        Raises:
            httpx.HTTPStatusError: If the GitHub API call fails
        """
        async with self._client() as client:
            resp = await client.patch(
                f"/repos/{self._repository}/pulls/{number}",
                json={"body": body},
            )
            resp.raise_for_status()


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockPullRequestClient:
    """In-memory pull request with a recorded history of updates.

    Usage:
        pulls = MockPullRequestClient(body="Bumps drupal/token ...")
        await pulls.update_pull_request_body(1, "new body")
        assert pulls.updates == [(1, "new body")]
    """

    def __init__(self, body: str | None = None) -> None:
        self.body = body
        self.reads: list[int] = []
        self.updates: list[tuple[int, str]] = []

    async def get_pull_request(self, number: int) -> PullRequest:
        self.reads.append(number)
        return PullRequest(number=number, body=self.body)

    async def update_pull_request_body(self, number: int, body: str) -> None:
        self.updates.append((number, body))
        self.body = body
