"""JSON summary report (``--report``)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from svcheck.utils.paths import fmt_path

if TYPE_CHECKING:
    from svcheck.core.config import Config
    from svcheck.core.store import DiagnosticStore
    from svcheck.github.context import ActionContext


def build_report(
    store: DiagnosticStore,
    config: Config,
    ctx: ActionContext,
    failure: Optional[str],
) -> dict:
    """Generate a summary report as a dictionary.

    Args:
        store: The populated diagnostic store.
        config: Effective configuration.
        ctx: Run context.
        failure: Failure message from the threshold check, or None.

    Returns:
        Dictionary containing the report.
    """
    issues = []
    for path, diagnostics in store.entries():
        readable_path = fmt_path(path, ctx.repo_root)
        for d in diagnostics:
            issues.append({
                "path": readable_path,
                "severity": d.severity.value,
                "start": {"line": d.start.line, "character": d.start.character},
                "end": {"line": d.end.line, "character": d.end.character},
                "message": d.message,
                "code": d.code,
                "source": d.source,
            })

    return {
        "metadata": {
            "repository": ctx.full_name,
            "pr_number": ctx.pr_number,
            "paths": [fmt_path(p, ctx.repo_root) for p in config.diagnostic_paths(ctx.repo_root)],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        "exit_code": 1 if failure else 0,
        "failure": failure,
        "summary": {
            "total": store.count,
            "errors": store.error_count,
            "warnings": store.warning_count,
            "filtered_total": store.filtered_count,
            "filtered_errors": store.filtered_error_count,
            "filtered_warnings": store.filtered_warning_count,
        },
        "issues": issues,
    }


def write_report(report: dict, path: Path) -> None:
    """Write a report as indented JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2))
