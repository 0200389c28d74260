"""Glob matching for repository-relative paths.

Patterns follow the usual CI glob dialect: ``**`` crosses directories,
``{a,b}`` expands alternatives and extglob groups such as ``!(src)`` are
supported. A pattern starting with ``!`` (other than an extglob group)
matches every path the rest of the pattern does not. Wildcards do not match
dot-files unless the pattern names them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from wcmatch import glob

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.EXTGLOB | glob.FORCEUNIX


def _match_pattern(path: str, pattern: str) -> bool:
    # A leading "!" negates the whole pattern; "!(...)" is an extglob group
    if pattern.startswith("!") and not pattern.startswith("!("):
        return not glob.globmatch(path, pattern[1:], flags=GLOB_FLAGS)
    return glob.globmatch(path, pattern, flags=GLOB_FLAGS)


@dataclass(frozen=True)
class PathMatcher:
    """A set of glob patterns; a path matches if any pattern matches it.

    Attributes:
        patterns: The glob patterns. An empty set matches nothing.
    """

    patterns: tuple[str, ...]

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> PathMatcher:
        """Build a matcher, dropping blank patterns."""
        return cls(tuple(p.strip() for p in patterns if p.strip()))

    def matches(self, path: str) -> bool:
        """Check whether a display path matches any of the patterns.

        Args:
            path: Repository-relative, forward-slash path.

        Returns:
            True if any pattern matches.
        """
        return any(_match_pattern(path, pattern) for pattern in self.patterns)

    def __call__(self, path: str) -> bool:
        return self.matches(path)


MATCH_ALL = PathMatcher(("**",))
