"""Minimal GitHub REST API client.

Only the endpoints svcheck needs are implemented: pull request files and
metadata, and issue comments.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

API_VERSION = "2022-11-28"
PER_PAGE = 100


class GitHubError(Exception):
    """Raised when a GitHub API request fails.

    Attributes:
        status_code: HTTP status code, or None for transport errors.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class GitHubClient:
    """GitHub API client for a single repository.

    Example usage:
        with GitHubClient(token, "ghostdevv", "svelte-check-action") as client:
            files = client.list_pull_request_files(12)
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = "https://api.github.com",
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            token: GitHub access token.
            owner: Repository owner.
            repo: Repository name.
            api_url: REST API base URL.
            transport: Optional httpx transport (used by tests).
            timeout: Request timeout in seconds.
        """
        self.owner = owner
        self.repo = repo
        self._client = httpx.Client(
            base_url=api_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
            transport=transport,
            timeout=timeout,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GitHubError(
                f"GitHub API {method} {e.request.url} failed with "
                f"{e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub API {method} {url} failed: {e}") from e
        return response

    def _paginate(self, url: str) -> list[dict]:
        """Fetch every page of a list endpoint by following ``Link`` headers."""
        items: list[dict] = []
        next_url: Optional[str] = url
        params: Optional[dict] = {"per_page": PER_PAGE}

        while next_url:
            response = self._request("GET", next_url, params=params)
            items.extend(response.json())
            next_url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

        return items

    def get_pull_request(self, number: int) -> dict:
        """Get pull request metadata."""
        return self._request("GET", f"{self._repo_path}/pulls/{number}").json()

    def list_pull_request_files(self, number: int) -> list[dict]:
        """List every file changed in a pull request."""
        return self._paginate(f"{self._repo_path}/pulls/{number}/files")

    def list_issue_comments(self, number: int) -> list[dict]:
        """List every comment on an issue or pull request."""
        return self._paginate(f"{self._repo_path}/issues/{number}/comments")

    def create_issue_comment(self, number: int, body: str) -> dict:
        """Create a comment on an issue or pull request."""
        return self._request(
            "POST",
            f"{self._repo_path}/issues/{number}/comments",
            json={"body": body},
        ).json()

    def update_issue_comment(self, comment_id: int, body: str) -> dict:
        """Replace the body of an existing comment."""
        return self._request(
            "PATCH",
            f"{self._repo_path}/issues/comments/{comment_id}",
            json={"body": body},
        ).json()
