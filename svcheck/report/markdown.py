"""Markdown rendering of the collected diagnostics for the PR comment."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from svcheck.github.comment import COMMENT_HEADING
from svcheck.models.diagnostic import Diagnostic, Severity
from svcheck.utils.git import get_latest_commit
from svcheck.utils.paths import fmt_path

if TYPE_CHECKING:
    from svcheck.core.store import DiagnosticStore


def pretty_type(severity: Severity) -> str:
    """Prettify the diagnostic severity."""
    return "Error" if severity is Severity.ERROR else "Warn"


def pl(num: int, word: str) -> str:
    """Render number + word taking into account simple plural."""
    return f"**{num}** {word}{'' if num == 1 else 's'}"


def ordinal(day: int) -> str:
    """Render a day of the month as 1st, 2nd, 3rd, 4th, ..."""
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_timestamp(now: datetime) -> str:
    """Render e.g. ``17th October at 18:12``."""
    return f"{ordinal(now.day)} {now:%B} at {now:%H:%M}"


def render_diagnostic(
    diagnostic: Diagnostic,
    readable_path: str,
    lines: list[str],
    blob_base: str,
) -> str:
    """Render one diagnostic as a linked heading and a code block.

    Args:
        diagnostic: The diagnostic to render.
        readable_path: Repository-relative path of its file.
        lines: The file's lines, used for the snippet.
        blob_base: URL prefix for file links.

    Returns:
        Markdown for the diagnostic.
    """
    start, end = diagnostic.start, diagnostic.end
    anchor = f"L{start.line}" + (f"-L{end.line}" if start.line != end.line else "")
    snippet = "\n".join(lines[start.line - 1:end.line]).strip()

    return (
        f"#### [{readable_path}:{start.line}:{start.character}]"
        f"({blob_base}{readable_path}#{anchor})\n\n"
        f"```ts\n"
        f"{pretty_type(diagnostic.severity)}: {diagnostic.message}\n\n"
        f"{snippet}\n"
        f"```\n"
    )


def render(
    store: DiagnosticStore,
    *,
    repo_root: str,
    blob_base: str,
    filter_changes: bool,
    now: Optional[datetime] = None,
    commit: Optional[str] = None,
) -> str:
    """Render a set of diagnostics to markdown.

    Args:
        store: The populated diagnostic store.
        repo_root: Repository root, for display paths.
        blob_base: URL prefix for file links (ends in ``/blob/<sha>/``).
        filter_changes: True when every diagnostic was scoped to the PR's
            changed files, which is mentioned in the summary line.
        now: Timestamp for the footer. Defaults to the current time.
        commit: Commit for the footer. Defaults to the checkout's HEAD.

    Returns:
        The comment body.
    """
    now = now or datetime.now(timezone.utc)
    commit = commit or get_latest_commit(Path(repo_root))
    output = [f"{COMMENT_HEADING}\n"]

    if store.count == 0:
        output.append("No issues found! 🎉")
    else:
        output.append(
            f"Found {pl(store.error_count, 'error')} "
            f"and {pl(store.warning_count, 'warning')} "
            f"({store.count} total)"
            + (" with the files in this PR" if filter_changes else "")
            + ".\n"
        )

        for path, diagnostics in store.entries():
            readable_path = fmt_path(path, repo_root)
            lines = Path(path).read_text(encoding="utf-8", errors="replace").split("\n")

            diagnostics_markdown = "\n".join(
                render_diagnostic(d, readable_path, lines, blob_base) for d in diagnostics
            )
            output.append(
                f"\n\n<details>\n<summary>{readable_path}</summary>\n\n"
                f"{diagnostics_markdown}\n</details>"
            )

    output.append("\n---\n")
    output.append(
        f'Last Updated: <span title="{now.isoformat()}">{format_timestamp(now)}</span> ({commit})'
    )

    return "\n".join(output)
