"""Path helpers shared by the store, the renderers and the orchestrator."""

import os
from pathlib import PurePath


def fmt_path(path: str, repo_root: str) -> str:
    """Convert an absolute path into a repository-relative display path.

    The result always uses forward slashes so it can be matched against
    glob patterns and used in blob URLs.

    Args:
        path: Absolute filesystem path.
        repo_root: Absolute path of the repository root.

    Returns:
        The path relative to ``repo_root``.
    """
    return PurePath(os.path.relpath(path, repo_root)).as_posix()


def is_subdir(parent: str, child: str) -> bool:
    """Check whether ``child`` is ``parent`` or lies somewhere below it.

    Args:
        parent: Absolute directory path.
        child: Absolute path to test.

    Returns:
        True if ``child`` is inside ``parent``.
    """
    relative = os.path.relpath(child, parent)
    return relative == "." or not (
        relative == ".." or relative.startswith(".." + os.sep) or os.path.isabs(relative)
    )
