"""Pass/fail decision for a run."""

from __future__ import annotations

from typing import Optional

from svcheck.core.store import DiagnosticStore


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _describe(key: str, enabled: bool, count: int) -> str:
    return f"`{key}` is {'enabled' if enabled else 'disabled'} ({_plural(count, 'issue')})"


def check_failure(
    store: DiagnosticStore,
    fail_on_error: bool,
    fail_on_warning: bool,
) -> Optional[str]:
    """Decide whether the run fails.

    Only diagnostics matching the fail filter are considered.

    Args:
        store: The populated diagnostic store.
        fail_on_error: Fail when there is at least one filtered error.
        fail_on_warning: Fail when there is at least one filtered warning.

    Returns:
        The failure message, or None if the run passes.
    """
    failed = (fail_on_error and store.filtered_error_count > 0) or (
        fail_on_warning and store.filtered_warning_count > 0
    )
    if not failed:
        return None

    return (
        f"Failed with {_plural(store.filtered_count, 'filtered issue')} "
        f"({store.count} total). "
        f"{_describe('failOnError', fail_on_error, store.filtered_error_count)} & "
        f"{_describe('failOnWarning', fail_on_warning, store.filtered_warning_count)}."
    )
