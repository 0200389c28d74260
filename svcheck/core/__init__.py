"""Core logic for svcheck.

This module provides the core functionality:
- DiagnosticStore: Diagnostic accumulation, change scoping and counts
- ScopeFilter / FilterPolicy: The change and fail filters
- PathMatcher: Glob matching of display paths
- ConfigLoader: Configuration file loading
- get_diagnostics: Running svelte-check and parsing its output
- check_failure: Pass/fail decision
"""

from svcheck.core.config import (
    CheckConfig,
    Config,
    ConfigError,
    ConfigLoader,
    FailConfig,
    parse_boolean,
    parse_filter_changes,
)
from svcheck.core.matcher import MATCH_ALL, PathMatcher
from svcheck.core.policy import FilterPolicy, ScopeFilter, ScopeFilterMode
from svcheck.core.runner import DiagnosticToolError, get_diagnostics, parse_machine_output
from svcheck.core.store import DiagnosticStore
from svcheck.core.thresholds import check_failure

__all__ = [
    "CheckConfig",
    "Config",
    "ConfigError",
    "ConfigLoader",
    "DiagnosticStore",
    "DiagnosticToolError",
    "FailConfig",
    "FilterPolicy",
    "MATCH_ALL",
    "PathMatcher",
    "ScopeFilter",
    "ScopeFilterMode",
    "check_failure",
    "get_diagnostics",
    "parse_boolean",
    "parse_filter_changes",
    "parse_machine_output",
]
