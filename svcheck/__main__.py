"""Entry point for svcheck CLI."""

import os
from pathlib import Path
from typing import Optional

import rich_click as click
from click.core import ParameterSource
from click.types import StringParamType
from rich.console import Console
from rich.markup import escape

from svcheck.core.config import Config, ConfigError, ConfigLoader
from svcheck.core.policy import ScopeFilterMode
from svcheck.core.runner import DiagnosticToolError, get_diagnostics
from svcheck.core.store import DiagnosticStore
from svcheck.core.thresholds import check_failure
from svcheck.github.changes import get_blob_base, get_pr_files
from svcheck.github.client import GitHubClient, GitHubError
from svcheck.github.comment import send
from svcheck.github.context import ActionContext, ContextError, get_context
from svcheck.report.json_report import build_report, write_report
from svcheck.report.markdown import render
from svcheck.report.workflow import emit_annotations, set_failed
from svcheck.utils.paths import is_subdir

click.rich_click.TEXT_MARKUP = "rich"

# Sources that override values from svcheck.toml
_EXPLICIT_SOURCES = (
    ParameterSource.COMMANDLINE,
    ParameterSource.ENVIRONMENT,
)


class LinesParamType(StringParamType):
    """Text whose environment value holds one entry per line.

    Multiline action inputs are split on newlines, so entries may contain
    spaces.
    """

    envvar_list_splitter = "\n"


LINES = LinesParamType()


def _create_client(action_ctx: ActionContext) -> GitHubClient:
    """Create the GitHub API client for the run."""
    return GitHubClient(
        action_ctx.token,
        action_ctx.owner,
        action_ctx.repo,
        api_url=action_ctx.api_url,
    )


def _explicit(ctx: click.Context, name: str, value):
    """Return a parameter's value if the user set it, None otherwise."""
    if ctx.get_parameter_source(name) in _EXPLICIT_SOURCES:
        return value
    return None


def _load_config(
    ctx: click.Context,
    config_file: Optional[str],
    repo_root: str,
    paths: tuple[str, ...],
    filter_changes: tuple[str, ...],
    fail_filter: tuple[str, ...],
    fail_on_error: bool,
    fail_on_warning: bool,
) -> Config:
    """Load svcheck.toml and apply action inputs and CLI options on top.

    Args:
        ctx: Click context, used to tell explicit values from defaults.
        config_file: Explicit config file, or None to discover one.
        repo_root: Repository root to start discovery from.
        paths: ``--path`` values.
        filter_changes: ``--filter-changes`` values.
        fail_filter: ``--fail-filter`` values.
        fail_on_error: ``--fail-on-error`` value.
        fail_on_warning: ``--fail-on-warning`` value.

    Returns:
        The effective configuration.

    Raises:
        ConfigError: If a config file or input is invalid.
    """
    loader = ConfigLoader()
    if config_file:
        config = loader.load(Path(config_file))
    else:
        config = loader.load_merged(Path(repo_root))

    return config.with_overrides(
        paths=_explicit(ctx, "paths", paths),
        filter_changes=_explicit(ctx, "filter_changes", filter_changes),
        fail_filter=_explicit(ctx, "fail_filter", fail_filter),
        fail_on_error=_explicit(ctx, "fail_on_error", fail_on_error),
        fail_on_warning=_explicit(ctx, "fail_on_warning", fail_on_warning),
    )


def _collect(
    console: Console,
    config: Config,
    action_ctx: ActionContext,
    changed_files: Optional[frozenset[str]],
) -> DiagnosticStore:
    """Run svelte-check in every configured root and collect the results.

    Roots that contain none of the changed files are skipped entirely.

    Args:
        console: Console for progress output.
        config: Effective configuration.
        action_ctx: Run context.
        changed_files: Changed files, or None when unknown.

    Returns:
        The populated store.
    """
    store = DiagnosticStore(config.policy, changed_files, action_ctx.repo_root)

    for root_path in config.diagnostic_paths(action_ctx.repo_root):
        has_changed_files = (
            changed_files is None
            or any(is_subdir(root_path, pr_file) for pr_file in changed_files)
        )

        console.print(
            f'{"checking" if has_changed_files else "skipped"} "{root_path}"',
            markup=False,
        )

        if has_changed_files:
            for diagnostic in get_diagnostics(root_path, console):
                store.add(diagnostic)

    return store


def _print_debug(
    console: Console,
    store: DiagnosticStore,
    changed_files: Optional[frozenset[str]],
    config: Config,
    action_ctx: ActionContext,
) -> None:
    """Dump the run state for troubleshooting."""
    console.print("[bold]debug[/bold]")
    console.print({
        "counts": {
            "errors": store.error_count,
            "warnings": store.warning_count,
            "filtered_errors": store.filtered_error_count,
            "filtered_warnings": store.filtered_warning_count,
        },
        "files": [path for path, _ in store.entries()],
        "changed_files": sorted(changed_files) if changed_files is not None else None,
        "config": {
            "paths": config.diagnostic_paths(action_ctx.repo_root),
            "filter_changes": config.check.filter_changes,
            "fail_filter": config.fail.filter,
            "fail_on_error": config.fail.on_error,
            "fail_on_warning": config.fail.on_warning,
        },
        "ctx": action_ctx.redacted(),
    })


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--version", is_flag=True, help="Show version and exit.")
@click.option(
    "--path",
    "-p",
    "paths",
    type=LINES,
    multiple=True,
    envvar="INPUT_PATHS",
    help="Project root to run svelte-check in, relative to the repository root (can be repeated)."
)
@click.option(
    "--filter-changes",
    "filter_changes",
    type=LINES,
    multiple=True,
    envvar="INPUT_FILTERCHANGES",
    help="'true' to only report files changed in the PR, 'false' to report everything, "
    "or globs limiting the filtering to matching files (can be repeated)."
)
@click.option(
    "--fail-filter",
    "fail_filter",
    type=LINES,
    multiple=True,
    envvar="INPUT_FAILFILTER",
    help="Glob selecting which files count towards --fail-on-error/--fail-on-warning (can be repeated)."
)
@click.option(
    "--fail-on-error/--no-fail-on-error",
    default=False,
    envvar="INPUT_FAILONERROR",
    help="Fail when there is at least one error."
)
@click.option(
    "--fail-on-warning/--no-fail-on-warning",
    default=False,
    envvar="INPUT_FAILONWARNING",
    help="Fail when there is at least one warning."
)
@click.option(
    "--token",
    type=str,
    envvar="INPUT_TOKEN",
    help="GitHub token used to read the PR and post the comment."
)
@click.option(
    "--repo-root",
    type=click.Path(file_okay=False),
    envvar="GITHUB_WORKSPACE",
    help="Repository checkout directory."
)
@click.option(
    "--repository",
    type=str,
    envvar="GITHUB_REPOSITORY",
    help="Repository as owner/repo."
)
@click.option(
    "--pr",
    "pr_number",
    type=int,
    help="Pull request number. Read from the workflow event by default."
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to an svcheck.toml. Discovered at the repository root by default."
)
@click.option(
    "--comment/--no-comment",
    default=True,
    help="Post or update the results comment on the PR."
)
@click.option(
    "--annotations/--no-annotations",
    default=True,
    help="Emit inline workflow annotations."
)
@click.option(
    "--report",
    "report_file",
    type=click.Path(),
    help="Write JSON summary report to this file."
)
@click.option(
    "--debug",
    is_flag=True,
    envvar="RUNNER_DEBUG",
    help="Print the collected state for troubleshooting."
)
@click.pass_context
def cli(
    ctx: click.Context,
    version: bool,
    paths: tuple[str, ...],
    filter_changes: tuple[str, ...],
    fail_filter: tuple[str, ...],
    fail_on_error: bool,
    fail_on_warning: bool,
    token: Optional[str],
    repo_root: Optional[str],
    repository: Optional[str],
    pr_number: Optional[int],
    config_file: Optional[str],
    comment: bool,
    annotations: bool,
    report_file: Optional[str],
    debug: bool,
) -> None:
    """svcheck - Report svelte-check results on pull requests.

    Runs svelte-check in each project root, comments the results on the
    pull request and fails the build according to the configured thresholds.
    """
    console = Console()

    if version:
        from svcheck import __version__
        click.echo(f"svcheck {__version__}")
        return

    try:
        if not token and os.environ.get("GITHUB_TOKEN"):
            console.print(
                "[yellow]Warning:[/yellow] Support for the GITHUB_TOKEN environment variable "
                "will be removed in the next major version, set the `token` input instead."
            )

        action_ctx = get_context(
            token=token,
            repo_root=repo_root,
            repository=repository,
            pr_number=pr_number,
        )
        config = _load_config(
            ctx,
            config_file,
            action_ctx.repo_root,
            paths,
            filter_changes,
            fail_filter,
            fail_on_error,
            fail_on_warning,
        )

        with _create_client(action_ctx) as client:
            changed_files = get_pr_files(client, action_ctx, config.scope_filter, console)
            store = _collect(console, config, action_ctx, changed_files)

            if debug:
                _print_debug(console, store, changed_files, config, action_ctx)

            if annotations:
                emit_annotations(store)

            failure = check_failure(store, config.fail.on_error, config.fail.on_warning)

            if comment:
                markdown = render(
                    store,
                    repo_root=action_ctx.repo_root,
                    blob_base=get_blob_base(client, action_ctx),
                    filter_changes=config.scope_filter.mode is ScopeFilterMode.UNCONDITIONAL,
                )
                send(client, action_ctx, markdown)

        if report_file:
            write_report(build_report(store, config, action_ctx, failure), Path(report_file))

    except (ConfigError, ContextError, DiagnosticToolError, GitHubError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        set_failed(str(e))
        ctx.exit(1)

    if failure:
        console.print(f"[red]{escape(failure)}[/red]")
        set_failed(failure)
        ctx.exit(1)

    console.print("Finished")


if __name__ == "__main__":
    cli()
