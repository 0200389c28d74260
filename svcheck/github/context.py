"""Run context for a GitHub Actions pull request workflow."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"


class ContextError(Exception):
    """Raised when the run context cannot be determined."""


@dataclass(frozen=True)
class ActionContext:
    """Everything needed to talk to GitHub about the current pull request.

    Attributes:
        repo_root: Absolute path of the repository checkout.
        owner: Repository owner.
        repo: Repository name.
        pr_number: Number of the pull request being checked.
        token: GitHub access token.
        api_url: REST API base URL.
        server_url: Web base URL, used for blob links.
    """

    repo_root: str
    owner: str
    repo: str
    pr_number: int
    token: str
    api_url: str = DEFAULT_API_URL
    server_url: str = DEFAULT_SERVER_URL

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def redacted(self) -> dict:
        """Context as a dict with the token hidden, for debug output."""
        return {
            "repo_root": self.repo_root,
            "owner": self.owner,
            "repo": self.repo,
            "pr_number": self.pr_number,
            "token": "(hidden)",
            "api_url": self.api_url,
            "server_url": self.server_url,
        }


def read_event_pr_number(event_path: Optional[str]) -> Optional[int]:
    """Read the pull request number from the workflow event payload.

    Args:
        event_path: Path of the JSON event payload (``GITHUB_EVENT_PATH``).

    Returns:
        The pull request number, or None if the event has no pull request.

    Raises:
        ContextError: If the payload cannot be read or is not JSON.
    """
    if not event_path or not Path(event_path).exists():
        return None

    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        raise ContextError(f'Unable to read the workflow event "{event_path}": {e}') from e
    if not isinstance(payload, dict):
        return None

    pull_request = payload.get("pull_request") or {}
    number = pull_request.get("number")
    return int(number) if number else None


def get_context(
    token: Optional[str] = None,
    repo_root: Optional[str] = None,
    repository: Optional[str] = None,
    pr_number: Optional[int] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ActionContext:
    """Build the run context from explicit values and the Actions environment.

    Explicit arguments take precedence over the environment.

    Args:
        token: GitHub token.
        repo_root: Repository checkout directory (``GITHUB_WORKSPACE``).
        repository: ``owner/repo`` (``GITHUB_REPOSITORY``).
        pr_number: Pull request number (read from ``GITHUB_EVENT_PATH``).
        env: Environment to read from. Defaults to ``os.environ``.

    Returns:
        The run context.

    Raises:
        ContextError: If the token, workspace, repository or pull request
            cannot be determined.
    """
    env = os.environ if env is None else env

    token = token or env.get("GITHUB_TOKEN")
    if not token:
        raise ContextError(
            "Unable to find a GitHub token. Please set the `token` option if required."
        )

    repo_root = repo_root or env.get("GITHUB_WORKSPACE")
    if not repo_root:
        raise ContextError("Missing GITHUB_WORKSPACE environment variable")

    repository = repository or env.get("GITHUB_REPOSITORY")
    if not repository or "/" not in repository:
        raise ContextError("Missing GITHUB_REPOSITORY environment variable (expected owner/repo)")
    owner, _, repo = repository.partition("/")

    if pr_number is None:
        pr_number = read_event_pr_number(env.get("GITHUB_EVENT_PATH"))
    if not pr_number:
        raise ContextError("Can't find a pull request, are you running this on a pr?")

    return ActionContext(
        repo_root=os.path.abspath(repo_root),
        owner=owner,
        repo=repo,
        pr_number=pr_number,
        token=token,
        api_url=(env.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
        server_url=(env.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL).rstrip("/"),
    )
