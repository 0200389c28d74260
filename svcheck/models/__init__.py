"""Data models for svcheck."""

from svcheck.models.diagnostic import (
    Diagnostic,
    Position,
    RawDiagnostic,
    RawPosition,
    Severity,
)

__all__ = [
    "Diagnostic",
    "Position",
    "RawDiagnostic",
    "RawPosition",
    "Severity",
]
