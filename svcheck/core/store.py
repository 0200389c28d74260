"""Accumulation of diagnostics across svelte-check runs.

The DiagnosticStore groups diagnostics by file while keeping running counts.
Diagnostics outside the pull request's changed files may be skipped entirely
(scope filter), and a second, independent filter decides which of the kept
diagnostics count towards the failure thresholds.

Note that the two inputs use different path conventions: changed-file
membership is tested with the raw absolute path, while both glob filters see
the repository-relative display path.
"""

from __future__ import annotations

from typing import ItemsView, Iterable, Optional

from svcheck.core.policy import FilterPolicy
from svcheck.models.diagnostic import Diagnostic, Severity
from svcheck.utils.paths import fmt_path


class DiagnosticStore:
    """Stores the diagnostics in an easy to use way, whilst keeping track of counts.

    Attributes:
        policy: The scope and fail filters for this run.
        changed_files: Absolute paths changed in the pull request, or None
            when no change information is available.
        repo_root: Repository root used to build display paths.
        error_count: Number of kept errors.
        warning_count: Number of kept warnings.
        filtered_error_count: Kept errors matching the fail filter.
        filtered_warning_count: Kept warnings matching the fail filter.
    """

    def __init__(
        self,
        policy: FilterPolicy,
        changed_files: Optional[Iterable[str]],
        repo_root: str,
    ):
        self.policy = policy
        self.changed_files = frozenset(changed_files) if changed_files is not None else None
        self.repo_root = repo_root

        self._groups: dict[str, list[Diagnostic]] = {}

        self.error_count = 0
        self.warning_count = 0
        self.filtered_error_count = 0
        self.filtered_warning_count = 0

    @property
    def count(self) -> int:
        return self.error_count + self.warning_count

    @property
    def filtered_count(self) -> int:
        return self.filtered_error_count + self.filtered_warning_count

    def __len__(self) -> int:
        return self.count

    def should_skip(self, diagnostic: Diagnostic) -> bool:
        """Decide whether the scope filter drops a diagnostic.

        Args:
            diagnostic: The diagnostic to check.

        Returns:
            True if the diagnostic must not be stored.
        """
        scope = self.policy.scope_filter
        if not scope.enabled or self.changed_files is None:
            return False

        if not scope.applies_to(fmt_path(diagnostic.path, self.repo_root)):
            return False

        return diagnostic.path not in self.changed_files

    def add(self, diagnostic: Diagnostic) -> bool:
        """Add a diagnostic, unless the scope filter skips it.

        Args:
            diagnostic: The diagnostic to add.

        Returns:
            True if the diagnostic was kept.
        """
        if self.should_skip(diagnostic):
            return False

        self._groups.setdefault(diagnostic.path, []).append(diagnostic)

        counted = self.policy.fail_filter.matches(fmt_path(diagnostic.path, self.repo_root))

        if diagnostic.severity is Severity.ERROR:
            self.error_count += 1
            if counted:
                self.filtered_error_count += 1
        else:
            self.warning_count += 1
            if counted:
                self.filtered_warning_count += 1

        return True

    def entries(self) -> ItemsView[str, list[Diagnostic]]:
        """Get (path, diagnostics) pairs in the order paths were first seen."""
        return self._groups.items()

    def list(self) -> list[Diagnostic]:
        """Get every kept diagnostic, flattened in ``entries()`` order."""
        return [d for diagnostics in self._groups.values() for d in diagnostics]
