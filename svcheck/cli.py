"""Main CLI module for svcheck.

This module re-exports the CLI for convenience. The main implementation
is in __main__.py.
"""

from svcheck.__main__ import cli

__all__ = ["cli"]
