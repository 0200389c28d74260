"""Tests for creating and updating the results comment."""

import json

import httpx

from svcheck.github.client import GitHubClient
from svcheck.github.comment import COMMENT_HEADING, find_last_comment, send
from svcheck.github.context import ActionContext


def make_ctx():
    return ActionContext(repo_root="/workspace", owner="o", repo="r", pr_number=3, token="t")


class FakeApi:
    """Records requests against an in-memory list of comments."""

    def __init__(self, comments):
        self.comments = comments
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=self.comments)
        body = json.loads(request.content)["body"]
        if request.method == "POST":
            return httpx.Response(201, json={"id": 100, "body": body})
        comment_id = int(request.url.path.rsplit("/", 1)[-1])
        return httpx.Response(200, json={"id": comment_id, "body": body})

    def client(self):
        return GitHubClient("t", "o", "r", transport=httpx.MockTransport(self))


class TestFindLastComment:
    """Tests for find_last_comment."""

    def test_newest_matching_comment(self):
        comments = [
            {"id": 1, "body": f"{COMMENT_HEADING}\nold", "created_at": "2024-01-01T10:00:00Z"},
            {"id": 2, "body": "LGTM", "created_at": "2024-01-03T10:00:00Z"},
            {"id": 3, "body": f"{COMMENT_HEADING}\nnew", "created_at": "2024-01-02T10:00:00Z"},
        ]
        assert find_last_comment(comments)["id"] == 3

    def test_heading_must_start_the_body(self):
        comments = [
            {"id": 1, "body": f"quote:\n{COMMENT_HEADING}", "created_at": "2024-01-01T10:00:00Z"},
            {"id": 2, "body": None, "created_at": "2024-01-01T10:00:00Z"},
        ]
        assert find_last_comment(comments) is None

    def test_no_comments(self):
        assert find_last_comment([]) is None


class TestSend:
    """Tests for send."""

    def test_creates_comment(self):
        """Without an earlier comment a new one is posted."""
        api = FakeApi([{"id": 5, "body": "Nice!", "created_at": "2024-01-01T10:00:00Z"}])

        comment_id = send(api.client(), make_ctx(), f"{COMMENT_HEADING}\nbody")

        assert comment_id == 100
        post = api.requests[-1]
        assert post.method == "POST"
        assert post.url.path == "/repos/o/r/issues/3/comments"

    def test_updates_last_comment(self):
        """An earlier results comment is edited in place."""
        api = FakeApi([
            {"id": 8, "body": f"{COMMENT_HEADING}\nold", "created_at": "2024-01-01T10:00:00Z"},
            {"id": 9, "body": f"{COMMENT_HEADING}\nolder", "created_at": "2023-12-01T10:00:00Z"},
        ])

        comment_id = send(api.client(), make_ctx(), f"{COMMENT_HEADING}\nbody")

        assert comment_id == 8
        patch = api.requests[-1]
        assert patch.method == "PATCH"
        assert patch.url.path == "/repos/o/r/issues/comments/8"
        assert json.loads(patch.content) == {"body": f"{COMMENT_HEADING}\nbody"}
        assert [r.method for r in api.requests] == ["GET", "PATCH"]
