"""Git repository utilities for svcheck.

This module provides functions for detecting and querying git repositories.
"""

import os
import subprocess
from pathlib import Path
from typing import Optional


def find_git_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find the root directory of a git repository.

    Walks up from the start path (or current working directory) looking for
    a .git directory. The SVCHECK_GIT_ROOT environment variable can be used
    to override detection.

    Args:
        start_path: Directory to start searching from. If None, uses the
            current working directory.

    Returns:
        Path to the git root directory, or None if not in a git repository.
    """
    env_override = os.environ.get("SVCHECK_GIT_ROOT")
    if env_override:
        return Path(env_override)

    if start_path is None:
        start_path = Path.cwd()
    else:
        start_path = Path(start_path).resolve()

    current = start_path
    while current != current.parent:
        if (current / ".git").exists():
            return current
        current = current.parent

    if (current / ".git").exists():
        return current

    return None


def get_latest_commit(cwd: Optional[Path] = None) -> str:
    """Get the short hash of the current HEAD commit.

    Args:
        cwd: Directory to run git in. Defaults to the working directory.

    Returns:
        The abbreviated commit hash, or "unknown" if git is unavailable
        or the directory is not a repository.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return result.stdout.strip() or "unknown"
