"""Tests for the httpx-backed GitHub client."""

from __future__ import annotations

import json

import httpx
import pytest

from gitleaks_ci.errors import CommentPostError, GitHubAPIError
from gitleaks_ci.github.client import GitHubClient


def _client(handler, token: str | None = "ghs_test") -> GitHubClient:
    transport = httpx.MockTransport(handler)
    return GitHubClient(token, client=httpx.Client(transport=transport))


def test_latest_release_request():
    """Latest release is fetched with auth and API version headers."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tag_name": "v8.30.0"})

    with _client(handler) as client:
        release = client.get_latest_release("zricethezav", "gitleaks")

    assert release["tag_name"] == "v8.30.0"
    assert str(seen[0].url) == "https://api.github.com/repos/zricethezav/gitleaks/releases/latest"
    assert seen[0].headers["Authorization"] == "Bearer ghs_test"
    assert seen[0].headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_no_auth_header_without_token():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tag_name": "v1.0.0"})

    _client(handler, token=None).get_latest_release("o", "r")
    assert "Authorization" not in seen[0].headers


def test_custom_api_url():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    client = GitHubClient(
        "t",
        api_url="https://ghe.example.com/api/v3/",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    client.list_pull_request_commits("o", "r", 3)

    assert seen[0].url.path == "/api/v3/repos/o/r/pulls/3/commits"
    assert seen[0].url.params["per_page"] == "100"


def test_list_review_comments_follows_pagination():
    """Every page is collected by following the Link header."""
    base = "https://api.github.com/repos/o/r/pulls/1/comments"

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("page") == "2":
            return httpx.Response(200, json=[{"id": 3}])
        return httpx.Response(
            200,
            json=[{"id": 1}, {"id": 2}],
            headers={"Link": f'<{base}?per_page=100&page=2>; rel="next"'},
        )

    comments = _client(handler).list_review_comments("o", "r", 1)

    assert [c["id"] for c in comments] == [1, 2, 3]


def test_create_review_comment_payload():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": 10})

    result = _client(handler).create_review_comment(
        "o", "r", 5, body="hi", commit_id="bbb2222", path="config.yml", line=12
    )

    assert result == {"id": 10}
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/repos/o/r/pulls/5/comments"
    assert json.loads(seen[0].content) == {
        "body": "hi",
        "commit_id": "bbb2222",
        "path": "config.yml",
        "line": 12,
        "side": "RIGHT",
    }


def test_create_review_comment_rejection():
    """A 422 (line outside the diff) surfaces as CommentPostError."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "Validation Failed"})

    with pytest.raises(CommentPostError) as exc_info:
        _client(handler).create_review_comment(
            "o", "r", 5, body="hi", commit_id="c", path="p", line=1
        )
    assert exc_info.value.status_code == 422


def test_http_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    with pytest.raises(GitHubAPIError, match="HTTP 404"):
        _client(handler).get_latest_release("o", "r")


def test_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GitHubAPIError, match="connection refused") as exc_info:
        _client(handler).list_review_comments("o", "r", 1)
    assert exc_info.value.status_code is None


def _html_page(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text="<html>proxy login</html>")


def test_invalid_json_release():
    with pytest.raises(GitHubAPIError, match="invalid JSON") as exc_info:
        _client(_html_page).get_latest_release("o", "r")
    assert exc_info.value.status_code == 200


def test_invalid_json_list_page():
    with pytest.raises(GitHubAPIError, match="invalid JSON"):
        _client(_html_page).list_review_comments("o", "r", 1)


def test_list_page_must_be_array():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "Moved"})

    with pytest.raises(GitHubAPIError, match="did not return a list"):
        _client(handler).list_pull_request_commits("o", "r", 1)


def test_invalid_json_after_comment_post():
    """An unreadable reply to a posted comment is a failed post, not a crash."""
    with pytest.raises(CommentPostError, match="invalid JSON"):
        _client(_html_page).create_review_comment(
            "o", "r", 5, body="hi", commit_id="c", path="p", line=1
        )
