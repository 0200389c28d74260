"""Filtering policies applied while diagnostics are collected.

Two independent policies exist:

- The *scope filter* (``filterChanges``) decides which diagnostics are kept
  at all, based on whether their file changed in the pull request.
- The *fail filter* (``failFilter``) never drops anything; it only selects
  which kept diagnostics count towards the failure thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from svcheck.core.matcher import MATCH_ALL, PathMatcher


class ScopeFilterMode(Enum):
    """How the scope filter treats diagnostics outside the changed files."""

    DISABLED = "disabled"
    UNCONDITIONAL = "unconditional"
    GLOB = "glob"


@dataclass(frozen=True)
class ScopeFilter:
    """The ``filterChanges`` setting.

    Attributes:
        mode: Disabled (never skip), unconditional (skip anything not
            changed) or glob (skip only matching paths that did not change).
        matcher: Paths the glob mode applies to. None for the other modes.
    """

    mode: ScopeFilterMode
    matcher: Optional[PathMatcher] = None

    @classmethod
    def disabled(cls) -> ScopeFilter:
        return cls(ScopeFilterMode.DISABLED)

    @classmethod
    def unconditional(cls) -> ScopeFilter:
        return cls(ScopeFilterMode.UNCONDITIONAL)

    @classmethod
    def glob(cls, patterns: Iterable[str]) -> ScopeFilter:
        return cls(ScopeFilterMode.GLOB, PathMatcher.from_patterns(patterns))

    @property
    def enabled(self) -> bool:
        return self.mode is not ScopeFilterMode.DISABLED

    def applies_to(self, display_path: str) -> bool:
        """Check whether the filter has any say over a path.

        Args:
            display_path: Repository-relative path of the diagnostic.

        Returns:
            False when disabled, True when unconditional, and the glob
            result otherwise.
        """
        if self.mode is ScopeFilterMode.DISABLED:
            return False
        if self.mode is ScopeFilterMode.GLOB:
            return self.matcher is not None and self.matcher.matches(display_path)
        return True


@dataclass(frozen=True)
class FilterPolicy:
    """Both filtering policies for a run.

    Attributes:
        scope_filter: Which diagnostics to keep given the changed files.
        fail_filter: Which kept diagnostics count towards failure.
    """

    scope_filter: ScopeFilter = field(default_factory=ScopeFilter.unconditional)
    fail_filter: PathMatcher = MATCH_ALL
