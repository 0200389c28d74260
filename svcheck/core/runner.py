"""Running svelte-check and turning its output into diagnostics.

svelte-check is run with ``--output=machine-verbose``, which prints one record
per line, each prefixed with a timestamp::

    1590680325583 START "/home/user/app"
    1590680326283 {"type":"ERROR","filename":"src/a.svelte",...}
    1590680326807 COMPLETED 20 FILES 1 ERRORS 0 WARNINGS 1 FILES_WITH_PROBLEMS
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console

from svcheck.models.diagnostic import Diagnostic, RawDiagnostic
from svcheck.report.workflow import group

SVELTE_CHECK_COMMAND = ["npx", "-y", "svelte-check@4", "--output=machine-verbose"]
SVELTE_KIT_SYNC_COMMAND = ["npx", "-y", "svelte-kit", "sync"]


class DiagnosticToolError(Exception):
    """Raised when svelte-check itself fails to run.

    Attributes:
        cwd: Directory svelte-check was run in.
        stderr: Captured standard error.
    """

    def __init__(self, cwd: str, stderr: str):
        self.cwd = cwd
        self.stderr = stderr
        super().__init__(f'Failed to run svelte-check in "{cwd}": "{stderr.strip()}"')


def try_run_svelte_kit_sync(cwd: str, console: Console) -> bool:
    """Run ``svelte-kit sync`` when the project depends on SvelteKit.

    SvelteKit generates types svelte-check relies on, so they must exist
    before checking. A failing sync is reported but not fatal.

    Args:
        cwd: Project directory.
        console: Console for progress output.

    Returns:
        True if sync was run.
    """
    pkg_path = Path(cwd) / "package.json"
    if not pkg_path.exists():
        return False

    try:
        pkg = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        console.print(f'[red]svelte-kit sync skipped[/red], unable to read "{pkg_path}"')
        console.print(str(e), markup=False)
        return False
    if not isinstance(pkg, dict):
        return False

    dependencies = pkg.get("dependencies") or {}
    dev_dependencies = pkg.get("devDependencies") or {}

    if "@sveltejs/kit" not in dependencies and "@sveltejs/kit" not in dev_dependencies:
        return False

    console.print(f'running svelte-kit sync at "{cwd}"', markup=False)
    result = subprocess.run(
        SVELTE_KIT_SYNC_COMMAND,
        cwd=cwd,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        console.print(f'[red]svelte-kit sync failed[/red] in "{cwd}"')
        console.print(result.stderr, markup=False)
    return True


def parse_machine_output(
    output: str,
    cwd: str,
    console: Optional[Console] = None,
) -> list[Diagnostic]:
    """Parse machine-verbose svelte-check output.

    Lines that cannot be decoded are reported and discarded.

    Args:
        output: svelte-check's standard output.
        cwd: Directory svelte-check ran in; relative file names are joined to it.
        console: Console used to report unparseable lines.

    Returns:
        Diagnostics in output order.
    """
    console = console or Console(stderr=True)
    diagnostics: list[Diagnostic] = []

    for line in output.splitlines():
        _, _, tail = line.strip().partition(" ")
        tail = tail.strip()

        if not tail or tail.startswith("START") or tail.startswith("COMPLETED"):
            continue

        try:
            raw = RawDiagnostic.model_validate(json.loads(tail))
        except (json.JSONDecodeError, ValidationError) as e:
            with group("failed to parse a diagnostic"):
                console.print(f'cwd: "{cwd}"', markup=False)
                console.print(f'line: "{line}"', markup=False)
                console.print(f"error: {e}", markup=False)
            continue

        diagnostics.append(raw.to_diagnostic(cwd))

    return diagnostics


def get_diagnostics(cwd: str, console: Console) -> list[Diagnostic]:
    """Run svelte-check in a directory and return every issue it finds.

    Args:
        cwd: The directory to run svelte-check in.
        console: Console for progress output.

    Returns:
        Parsed diagnostics.

    Raises:
        DiagnosticToolError: If svelte-check exits with a code above 1
            (0 means clean, 1 means problems were found).
    """
    try_run_svelte_kit_sync(cwd, console)

    result = subprocess.run(
        SVELTE_CHECK_COMMAND,
        cwd=cwd,
        capture_output=True,
        text=True,
    )
    if result.returncode > 1:
        raise DiagnosticToolError(cwd, result.stderr)

    return parse_machine_output(result.stdout, cwd, console)
