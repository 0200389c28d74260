"""Diagnostic data models for svcheck.

``RawDiagnostic`` mirrors one JSON object from svelte-check's
``--output=machine-verbose`` stream. ``Diagnostic`` is the normalized,
immutable record the rest of the app works with: absolute path, 1-based
lines and a typed severity.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class Severity(str, Enum):
    """Severity of a svelte-check diagnostic."""

    ERROR = "error"
    WARNING = "warning"


class Position(BaseModel):
    """A (line, character) location in a source file.

    Attributes:
        line: 1-based line number.
        character: 0-based column.
    """

    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class Diagnostic(BaseModel):
    """A single svelte-check issue, patched to include an absolute file path.

    Attributes:
        severity: Error or warning.
        path: Absolute, normalized path of the file. Used as the grouping key.
        file_name: File name as reported by svelte-check, prefixed with ``./``.
        start: Start of the reported range (1-based line).
        end: End of the reported range (1-based line).
        message: Human readable message.
        code: Optional diagnostic code (e.g. a TypeScript error number).
        source: Optional originating sub-tool (e.g. "ts", "svelte", "css").
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    path: str
    file_name: str
    start: Position
    end: Position
    message: str
    code: Optional[Union[int, str]] = None
    source: Optional[str] = None


class RawPosition(BaseModel):
    """A position exactly as svelte-check reports it (0-based line)."""

    line: int
    character: int


class RawDiagnostic(BaseModel):
    """Schema for one machine-verbose svelte-check record."""

    type: Severity
    filename: str
    start: RawPosition
    end: RawPosition
    message: str
    code: Optional[Union[int, str]] = None
    source: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: object) -> object:
        """svelte-check reports ``ERROR``/``WARNING``; accept any casing."""
        if isinstance(v, str):
            return v.lower()
        return v

    def to_diagnostic(self, cwd: str) -> Diagnostic:
        """Normalize this record relative to the directory svelte-check ran in.

        Args:
            cwd: Directory svelte-check was run from.

        Returns:
            Diagnostic with an absolute path and 1-based lines.
        """
        file_name = f"./{self.filename}"
        return Diagnostic(
            severity=self.type,
            path=os.path.normpath(os.path.join(cwd, file_name)),
            file_name=file_name,
            start=Position(line=self.start.line + 1, character=self.start.character),
            end=Position(line=self.end.line + 1, character=self.end.character),
            message=self.message,
            code=self.code,
            source=self.source,
        )
