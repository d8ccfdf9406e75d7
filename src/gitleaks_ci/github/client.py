"""Minimal GitHub REST API client backed by httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gitleaks_ci import __version__
from gitleaks_ci.errors import CommentPostError, GitHubAPIError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100


class GitHubClient:
    """Synchronous wrapper around the few endpoints the action needs.

    Example:
        with GitHubClient(token) as client:
            tag = client.get_latest_release("zricethezav", "gitleaks")["tag_name"]
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"gitleaks-ci/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.Client(timeout=timeout)
        self._client.headers.update(headers)
        self.api_url = api_url.rstrip("/")

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if not url.startswith("http"):
            url = f"{self.api_url}{url}"
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GitHubAPIError(
                f"{method} {url} failed with HTTP {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"{method} {url} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                f"{response.request.method} {response.request.url} returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e

    def _paginate(self, path: str) -> list[dict[str, Any]]:
        """Collect every page of a list endpoint by following Link headers."""
        items: list[dict[str, Any]] = []
        url: str | None = path
        params: dict[str, Any] | None = {"per_page": PER_PAGE}
        while url:
            response = self._request("GET", url, params=params)
            page = self._json(response)
            if not isinstance(page, list):
                raise GitHubAPIError(
                    f"GET {response.request.url} did not return a list",
                    status_code=response.status_code,
                )
            items.extend(page)
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string.
            params = None
        return items

    def get_latest_release(self, owner: str, repo: str) -> dict[str, Any]:
        response = self._request("GET", f"/repos/{owner}/{repo}/releases/latest")
        return self._json(response)

    def list_pull_request_commits(
        self, owner: str, repo: str, pull_number: int
    ) -> list[dict[str, Any]]:
        return self._paginate(f"/repos/{owner}/{repo}/pulls/{pull_number}/commits")

    def list_review_comments(
        self, owner: str, repo: str, pull_number: int
    ) -> list[dict[str, Any]]:
        return self._paginate(f"/repos/{owner}/{repo}/pulls/{pull_number}/comments")

    def create_review_comment(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        *,
        body: str,
        commit_id: str,
        path: str,
        line: int,
        side: str = "RIGHT",
    ) -> dict[str, Any]:
        """Create a single-line review comment on a pull request.

        Raises:
            CommentPostError: If GitHub rejects the comment (commonly because
                the line is outside the diff).
        """
        try:
            response = self._request(
                "POST",
                f"/repos/{owner}/{repo}/pulls/{pull_number}/comments",
                json={
                    "body": body,
                    "commit_id": commit_id,
                    "path": path,
                    "line": line,
                    "side": side,
                },
            )
            return self._json(response)
        except GitHubAPIError as e:
            raise CommentPostError(str(e), status_code=e.status_code) from e
