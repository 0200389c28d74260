"""Configuration loading and parsing for svcheck.

This module provides the ConfigLoader class for reading ``svcheck.toml`` files,
the Config dataclasses holding the settings, and helpers for parsing GitHub
Action style inputs. Values given on the command line or through the action's
``INPUT_*`` environment variables override file values.
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Sequence, Union

import tomli

from svcheck.core.matcher import MATCH_ALL, PathMatcher
from svcheck.core.policy import FilterPolicy, ScopeFilter
from svcheck.utils.git import find_git_root

CONFIG_FILE_NAME = "svcheck.toml"

# The boolean literals accepted by GitHub Actions' getBooleanInput
TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


class ConfigError(Exception):
    """Exception raised for configuration parsing errors.

    Attributes:
        message: Error description
        line: Line number where error occurred (if available)
        path: Path to the config file (if available)
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        path: Optional[Path] = None
    ):
        self.line = line
        self.path = path

        parts = []
        if path:
            parts.append(f"Error in {path}")
        if line is not None:
            parts.append(f"at line {line}")
        if parts:
            full_message = f"{' '.join(parts)}: {message}"
        else:
            full_message = message

        super().__init__(full_message)


def parse_boolean(value: str, name: str) -> bool:
    """Parse a boolean input the way GitHub Actions does.

    Args:
        value: The raw input value.
        name: Input name, used in the error message.

    Returns:
        The boolean value.

    Raises:
        ConfigError: If the value is not one of the accepted literals.
    """
    value = value.strip()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def parse_filter_changes(value: Union[bool, Sequence[str]]) -> ScopeFilter:
    """Parse the ``filterChanges`` setting.

    A single boolean literal enables or disables filtering for every file.
    Anything else is a list of globs restricting filtering to matching files.
    An empty value falls back to the default (enabled).

    Args:
        value: A boolean (from TOML) or the input's lines.

    Returns:
        The scope filter.
    """
    if isinstance(value, bool):
        return ScopeFilter.unconditional() if value else ScopeFilter.disabled()

    lines = [line.strip() for line in value if line.strip()]
    if not lines:
        return ScopeFilter.unconditional()

    if len(lines) == 1 and lines[0] in TRUE_VALUES + FALSE_VALUES:
        return parse_filter_changes(parse_boolean(lines[0], "filterChanges"))

    return ScopeFilter.glob(lines)


def _string_list(data: dict, key: str, section: str) -> Optional[list[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"[{section}] {key} must be a list of strings")
    return value


def _bool(data: dict, key: str, section: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"[{section}] {key} must be a boolean")
    return value


@dataclass
class CheckConfig:
    """Which projects to check and how to scope their diagnostics.

    Attributes:
        paths: Project roots to run svelte-check in, relative to the
            repository root. Empty means the repository root itself.
        filter_changes: True to keep only diagnostics in changed files,
            False to keep everything, or a list of globs limiting the
            filtering to matching files.
    """

    paths: list[str] = field(default_factory=list)
    filter_changes: Union[bool, list[str]] = True

    @classmethod
    def from_dict(cls, data: dict) -> "CheckConfig":
        """Create CheckConfig from a dictionary."""
        filter_changes = data.get("filter_changes", True)
        if not isinstance(filter_changes, bool):
            filter_changes = _string_list(data, "filter_changes", "check")
        return cls(
            paths=_string_list(data, "paths", "check") or [],
            filter_changes=filter_changes,
        )


@dataclass
class FailConfig:
    """When the run should fail.

    Attributes:
        on_error: Fail when a counted error exists.
        on_warning: Fail when a counted warning exists.
        filter: Globs selecting which diagnostics are counted.
    """

    on_error: bool = False
    on_warning: bool = False
    filter: list[str] = field(default_factory=lambda: ["**"])

    @classmethod
    def from_dict(cls, data: dict) -> "FailConfig":
        """Create FailConfig from a dictionary."""
        return cls(
            on_error=_bool(data, "on_error", "fail", False),
            on_warning=_bool(data, "on_warning", "fail", False),
            filter=_string_list(data, "filter", "fail") or ["**"],
        )


@dataclass
class Config:
    """Complete svcheck configuration.

    Attributes:
        check: Paths and change filtering
        fail: Failure thresholds and fail filter
    """

    check: CheckConfig = field(default_factory=CheckConfig)
    fail: FailConfig = field(default_factory=FailConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create Config from a dictionary.

        Args:
            data: Dictionary parsed from TOML file

        Returns:
            Config instance with values from dictionary

        Raises:
            ConfigError: If a value has the wrong type
        """
        return cls(
            check=CheckConfig.from_dict(data.get("check", {})),
            fail=FailConfig.from_dict(data.get("fail", {})),
        )

    def with_overrides(
        self,
        paths: Optional[Sequence[str]] = None,
        filter_changes: Optional[Union[bool, Sequence[str]]] = None,
        fail_filter: Optional[Sequence[str]] = None,
        fail_on_error: Optional[bool] = None,
        fail_on_warning: Optional[bool] = None,
    ) -> "Config":
        """Return a copy with higher-precedence values applied.

        Arguments left as None keep the current value.
        """
        check = self.check
        if paths is not None:
            check = replace(check, paths=list(paths))
        if filter_changes is not None:
            check = replace(
                check,
                filter_changes=filter_changes if isinstance(filter_changes, bool) else list(filter_changes),
            )

        fail = self.fail
        if fail_filter is not None:
            fail = replace(fail, filter=list(fail_filter))
        if fail_on_error is not None:
            fail = replace(fail, on_error=fail_on_error)
        if fail_on_warning is not None:
            fail = replace(fail, on_warning=fail_on_warning)

        return Config(check=check, fail=fail)

    @property
    def scope_filter(self) -> ScopeFilter:
        return parse_filter_changes(self.check.filter_changes)

    @property
    def fail_filter(self) -> PathMatcher:
        matcher = PathMatcher.from_patterns(self.fail.filter)
        return matcher if matcher.patterns else MATCH_ALL

    @property
    def policy(self) -> FilterPolicy:
        return FilterPolicy(scope_filter=self.scope_filter, fail_filter=self.fail_filter)

    def diagnostic_paths(self, repo_root: str) -> list[str]:
        """Resolve the configured project roots.

        Args:
            repo_root: Absolute repository root.

        Returns:
            Absolute paths, or ``[repo_root]`` when none are configured.
        """
        paths = [
            os.path.normpath(os.path.join(repo_root, p.strip()))
            for p in self.check.paths
            if p.strip()
        ]
        return paths or [repo_root]


class ConfigLoader:
    """Loader for svcheck TOML configuration files.

    Example usage:
        loader = ConfigLoader()
        config = loader.load(Path("svcheck.toml"))

        # Or merge every discovered file
        config = loader.load_merged(Path.cwd())
    """

    def load(self, path: Optional[Path]) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: Path to the TOML configuration file, or None to use defaults

        Returns:
            Config instance with values from file or defaults

        Raises:
            ConfigError: If the file contains invalid TOML or invalid values
            FileNotFoundError: If the path is specified but file doesn't exist
        """
        if path is None:
            return Config()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        return self._from_data(self._read(path), path)

    def _read(self, path: Path) -> dict:
        try:
            return tomli.loads(path.read_text(encoding="utf-8"))
        except tomli.TOMLDecodeError as e:
            line = self._extract_line_number(str(e))
            raise ConfigError(str(e), line=line, path=path) from e

    def _from_data(self, data: dict, path: Optional[Path]) -> Config:
        try:
            return Config.from_dict(data)
        except ConfigError as e:
            if path is None or e.path is not None:
                raise
            raise ConfigError(str(e), path=path) from e

    def _extract_line_number(self, error_message: str) -> Optional[int]:
        """Extract line number from tomli error message.

        Args:
            error_message: The error message from tomli

        Returns:
            Line number if found, None otherwise
        """
        match = re.search(r"(?:at )?line (\d+)", error_message, re.IGNORECASE)
        if match:
            return int(match.group(1))
        return None

    def discover_configs(self, start_path: Optional[Path] = None) -> list[Path]:
        """Discover configuration files in order of precedence.

        Precedence order (lowest to highest):
        1. Git root: <git_root>/svcheck.toml
        2. Local (start_path): <start_path>/svcheck.toml

        Action inputs and CLI arguments have highest precedence but are
        handled separately.

        Args:
            start_path: Starting directory for local config search. If None,
                uses current working directory.

        Returns:
            List of existing config file paths in precedence order (lowest first).
        """
        if start_path is None:
            start_path = Path.cwd()
        else:
            start_path = Path(start_path).resolve()

        configs: list[Path] = []

        git_root = find_git_root(start_path)
        if git_root:
            git_config = git_root / CONFIG_FILE_NAME
            if git_config.exists():
                configs.append(git_config)

        local_config = start_path / CONFIG_FILE_NAME
        if local_config.exists():
            if local_config.resolve() not in [c.resolve() for c in configs]:
                configs.append(local_config)

        return configs

    def load_merged(self, start_path: Optional[Path] = None) -> Config:
        """Load and merge configuration from all discovered config files.

        Later (higher precedence) files override values from earlier files;
        unspecified values fall through to lower precedence files or defaults.

        Args:
            start_path: Starting directory for config discovery. If None,
                uses current working directory.

        Returns:
            Config instance with merged values from all sources.

        Raises:
            ConfigError: If any config file contains invalid TOML or values.
        """
        merged_data: dict = {}
        last_path: Optional[Path] = None

        for config_path in self.discover_configs(start_path):
            merged_data = self._deep_merge(merged_data, self._read(config_path))
            last_path = config_path

        return self._from_data(merged_data, last_path)

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries.

        Values from override take precedence over base. Nested dictionaries
        are merged recursively. Lists and other values are replaced entirely.

        Args:
            base: Base dictionary (lower precedence)
            override: Override dictionary (higher precedence)

        Returns:
            New dictionary with merged values.
        """
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
