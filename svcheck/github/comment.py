"""The pull request summary comment."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from svcheck.github.client import GitHubClient
from svcheck.github.context import ActionContext

COMMENT_HEADING = "# Svelte Check Results"


def _created_at(comment: dict) -> datetime:
    return datetime.fromisoformat(comment["created_at"].replace("Z", "+00:00"))


def find_last_comment(comments: list[dict]) -> Optional[dict]:
    """Find the most recent svcheck comment.

    Args:
        comments: Comments as returned by the API.

    Returns:
        The newest comment whose body starts with the results heading,
        or None.
    """
    ours = [c for c in comments if (c.get("body") or "").startswith(COMMENT_HEADING)]
    if not ours:
        return None
    return max(ours, key=_created_at)


def send(client: GitHubClient, ctx: ActionContext, body: str) -> int:
    """Send a message to the current PR, editing the last one if there is one.

    Args:
        client: GitHub API client.
        ctx: Run context.
        body: Markdown body.

    Returns:
        The id of the created or updated comment.
    """
    last_comment = find_last_comment(client.list_issue_comments(ctx.pr_number))

    if last_comment:
        comment = client.update_issue_comment(last_comment["id"], body)
    else:
        comment = client.create_issue_comment(ctx.pr_number, body)

    return comment["id"]
