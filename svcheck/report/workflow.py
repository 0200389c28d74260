"""GitHub Actions workflow commands.

Workflow commands (``::error file=...::message``) are written straight to
stdout with ``click.echo`` so that no console markup or line wrapping can
corrupt them.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional, Union

import click

from svcheck.models.diagnostic import Diagnostic, Severity

if TYPE_CHECKING:
    from svcheck.core.store import DiagnosticStore

ANNOTATION_TITLE = "svelte-check"


def escape_data(value: str) -> str:
    """Escape a command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a command property value."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_command(
    command: str,
    message: str = "",
    **properties: Optional[Union[str, int]],
) -> str:
    """Build a workflow command line.

    Properties whose value is None are left out.

    Args:
        command: Command name, e.g. "error" or "group".
        message: Command message.
        **properties: Command properties, in the order given.

    Returns:
        The command string, e.g. ``::warning file=a.svelte,line=3::msg``.
    """
    props = ",".join(
        f"{key}={escape_property(str(value))}"
        for key, value in properties.items()
        if value is not None
    )
    head = f"::{command} {props}" if props else f"::{command}"
    return f"{head}::{escape_data(message)}"


def annotation(diagnostic: Diagnostic, path: Optional[str] = None) -> str:
    """Format an inline annotation for a diagnostic.

    Args:
        diagnostic: The diagnostic to annotate.
        path: File to attach the annotation to. Defaults to the
            diagnostic's absolute path.

    Returns:
        An ``::error`` or ``::warning`` workflow command.
    """
    command = "error" if diagnostic.severity is Severity.ERROR else "warning"
    return format_command(
        command,
        diagnostic.message,
        title=ANNOTATION_TITLE,
        file=path or diagnostic.path,
        line=diagnostic.start.line,
        endLine=diagnostic.end.line,
        col=diagnostic.start.character,
        endColumn=diagnostic.end.character,
    )


def emit_annotations(store: DiagnosticStore) -> int:
    """Write one annotation per kept diagnostic.

    Args:
        store: The populated diagnostic store.

    Returns:
        Number of annotations written.
    """
    written = 0
    for path, diagnostics in store.entries():
        for diagnostic in diagnostics:
            click.echo(annotation(diagnostic, path))
            written += 1
    return written


@contextmanager
def group(title: str) -> Iterator[None]:
    """Wrap output in a collapsible log group."""
    click.echo(format_command("group", title))
    try:
        yield
    finally:
        click.echo(format_command("endgroup"))


def set_failed(message: str) -> None:
    """Report a failure message as an error annotation."""
    click.echo(format_command("error", message))
