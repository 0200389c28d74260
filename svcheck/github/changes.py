"""Changed-file information for the current pull request."""

from __future__ import annotations

import os
from typing import Optional

from rich.console import Console
from rich.markup import escape

from svcheck.core.policy import ScopeFilter
from svcheck.github.client import GitHubClient, GitHubError
from svcheck.github.context import ActionContext


def get_pr_files(
    client: GitHubClient,
    ctx: ActionContext,
    scope_filter: ScopeFilter,
    console: Console,
) -> Optional[frozenset[str]]:
    """Get the absolute paths of every file changed in the pull request.

    Args:
        client: GitHub API client.
        ctx: Run context.
        scope_filter: The ``filterChanges`` setting. Nothing is fetched when
            filtering is disabled.
        console: Console for warnings.

    Returns:
        The changed paths (possibly empty), or None when change information
        was not requested or could not be fetched.
    """
    if not scope_filter.enabled:
        return None

    try:
        files = client.list_pull_request_files(ctx.pr_number)
    except GitHubError as e:
        console.print(
            f"[yellow]Warning:[/yellow] Unable to list the pull request's files, "
            f"change filtering is disabled for this run. ({escape(str(e))})"
        )
        return None

    return frozenset(
        os.path.normpath(os.path.join(ctx.repo_root, f["filename"]))
        for f in files
    )


def get_blob_base(client: GitHubClient, ctx: ActionContext) -> str:
    """Get the URL prefix for linking to files at the pull request's head.

    Uses the head repository so links work for pull requests from forks.

    Args:
        client: GitHub API client.
        ctx: Run context.

    Returns:
        A URL ending in ``/blob/<sha>/``.
    """
    pull = client.get_pull_request(ctx.pr_number)
    head = pull["head"]
    full_name = (head.get("repo") or {}).get("full_name") or ctx.full_name
    return f"{ctx.server_url}/{full_name}/blob/{head['sha']}/"
