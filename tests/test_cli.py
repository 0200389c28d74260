"""Tests for the svcheck command line interface."""

import json

import httpx
import pytest
from click.testing import CliRunner

import svcheck.__main__ as main
from svcheck.__main__ import cli
from svcheck.core.runner import DiagnosticToolError, parse_machine_output
from svcheck.github.client import GitHubClient

ACTION_ENV = (
    "GITHUB_TOKEN",
    "GITHUB_WORKSPACE",
    "GITHUB_REPOSITORY",
    "GITHUB_EVENT_PATH",
    "GITHUB_API_URL",
    "GITHUB_SERVER_URL",
    "INPUT_TOKEN",
    "INPUT_PATHS",
    "INPUT_FILTERCHANGES",
    "INPUT_FAILFILTER",
    "INPUT_FAILONERROR",
    "INPUT_FAILONWARNING",
    "RUNNER_DEBUG",
)


class FakeGitHub:
    """An in-memory GitHub API for one pull request."""

    def __init__(self, files):
        self.files = files
        self.comments = []
        self.updated = {}
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/pulls/7/files"):
            return httpx.Response(200, json=[{"filename": f} for f in self.files])
        if path.endswith("/pulls/7"):
            return httpx.Response(200, json={
                "head": {"sha": "abc123", "repo": {"full_name": "ghostdevv/app"}},
            })
        if path.endswith("/issues/7/comments") and request.method == "GET":
            return httpx.Response(200, json=self.comments)
        if path.endswith("/issues/7/comments") and request.method == "POST":
            body = json.loads(request.content)["body"]
            self.comments.append({"id": 1, "body": body, "created_at": "2024-10-17T18:12:00Z"})
            return httpx.Response(201, json={"id": 1})
        if "/issues/comments/" in path and request.method == "PATCH":
            comment_id = int(path.rsplit("/", 1)[-1])
            self.updated[comment_id] = json.loads(request.content)["body"]
            return httpx.Response(200, json={"id": comment_id})
        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def posted(self):
        return [json.loads(r.content)["body"] for r in self.requests if r.method == "POST"]


@pytest.fixture
def action(monkeypatch, svelte_repo, event_file, machine_output):
    """A pull request run with svelte-check and the GitHub API faked out."""
    for name in ACTION_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("INPUT_TOKEN", "t0ken")
    monkeypatch.setenv("GITHUB_WORKSPACE", str(svelte_repo))
    monkeypatch.setenv("GITHUB_REPOSITORY", "ghostdevv/app")
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(event_file))
    monkeypatch.setenv("SVCHECK_GIT_ROOT", str(svelte_repo))

    api = FakeGitHub(files=["src/routes/+page.svelte"])
    monkeypatch.setattr(
        main,
        "_create_client",
        lambda ctx: GitHubClient(ctx.token, ctx.owner, ctx.repo, transport=httpx.MockTransport(api)),
    )

    runs = []

    def fake_get_diagnostics(cwd, console):
        runs.append(cwd)
        return parse_machine_output(machine_output, cwd, console)

    monkeypatch.setattr(main, "get_diagnostics", fake_get_diagnostics)
    monkeypatch.setattr("svcheck.report.markdown.get_latest_commit", lambda cwd: "abc1234")

    api.runs = runs
    return api


class TestBasics:
    """Tests for options that don't run a check."""

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "svcheck 0.1.0" in result.output

    def test_help_lists_options(self):
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        for option in ("--filter-changes", "--fail-filter", "--fail-on-error", "--report"):
            assert option in result.output


class TestRun:
    """Tests for a full run against a pull request."""

    def test_passes_by_default(self, action, svelte_repo):
        """Without thresholds the run passes and comments the results."""
        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert "Finished" in result.output
        assert action.runs == [str(svelte_repo)]

        [body] = action.posted
        assert body.startswith("# Svelte Check Results")
        assert "Found **1** error and **0** warnings (1 total) with the files in this PR." in body
        assert "https://github.com/ghostdevv/app/blob/abc123/src/routes/+page.svelte#L4" in body
        assert "Image.svelte" not in body

    def test_annotations(self, action):
        """Kept diagnostics become inline annotations."""
        result = CliRunner().invoke(cli, [])

        assert "::error title=svelte-check,file=" in result.output
        assert "::warning title=svelte-check" not in result.output

    def test_no_annotations(self, action):
        result = CliRunner().invoke(cli, ["--no-annotations"])

        assert "title=svelte-check" not in result.output

    def test_filter_changes_disabled(self, action):
        """With filtering off every diagnostic is reported."""
        result = CliRunner().invoke(cli, ["--filter-changes", "false"])

        assert result.exit_code == 0, result.output
        [body] = action.posted
        assert "Found **1** error and **1** warning (2 total)." in body
        assert not any(r.url.path.endswith("/files") for r in action.requests)

    def test_filter_changes_globs(self, action):
        """Only files matching the globs are limited to changed files."""
        result = CliRunner().invoke(cli, ["--filter-changes", "src/routes/**"])

        assert result.exit_code == 0, result.output
        [body] = action.posted
        assert "(2 total)." in body
        assert "with the files in this PR" not in body

    def test_fail_on_error(self, action):
        result = CliRunner().invoke(cli, ["--fail-on-error"])

        assert result.exit_code == 1
        assert (
            "::error::Failed with 1 filtered issue (1 total). "
            "`failOnError` is enabled (1 issue) & `failOnWarning` is disabled (0 issues)."
        ) in result.output
        assert len(action.posted) == 1

    def test_fail_on_warning_from_action_input(self, action, monkeypatch):
        """Action inputs arrive as INPUT_* environment variables."""
        monkeypatch.setenv("INPUT_FAILONWARNING", "true")
        monkeypatch.setenv("INPUT_FILTERCHANGES", "false")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "`failOnWarning` is enabled (1 issue)" in result.output

    def test_fail_filter(self, action):
        """Errors outside the fail filter don't fail the run."""
        result = CliRunner().invoke(cli, ["--fail-on-error", "--fail-filter", "lib/**"])

        assert result.exit_code == 0, result.output

    def test_no_comment(self, action):
        result = CliRunner().invoke(cli, ["--no-comment"])

        assert result.exit_code == 0, result.output
        assert action.posted == []

    def test_updates_existing_comment(self, action):
        """A second run edits the first comment instead of posting again."""
        action.comments.append({
            "id": 55,
            "body": "# Svelte Check Results\nold",
            "created_at": "2024-10-16T10:00:00Z",
        })

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        patches = [r for r in action.requests if r.method == "PATCH"]
        assert [r.url.path for r in patches] == ["/repos/ghostdevv/app/issues/comments/55"]
        assert action.updated[55].startswith("# Svelte Check Results")
        assert "(1 total) with the files in this PR." in action.updated[55]
        assert action.posted == []

    def test_multiline_inputs_split_on_newlines(self, action, svelte_repo, monkeypatch):
        """Entries of multiline action inputs may contain spaces."""
        (svelte_repo / "web app").mkdir()
        action.files = ["web app/src/a.svelte"]
        monkeypatch.setenv("INPUT_PATHS", "web app\n\n")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert action.runs == [str(svelte_repo / "web app")]

    def test_multiline_fail_filter(self, action, monkeypatch):
        """Each line of the fail filter input is one glob."""
        monkeypatch.setenv("INPUT_FAILFILTER", "lib/**\n!src/routes/**")
        monkeypatch.setenv("INPUT_FAILONERROR", "true")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output

    def test_skips_roots_without_changes(self, action, svelte_repo):
        """Project roots with no changed files are not checked."""
        (svelte_repo / "apps" / "docs").mkdir(parents=True)

        result = CliRunner().invoke(cli, ["--path", "apps/docs", "--path", "src"])

        assert result.exit_code == 0, result.output
        assert action.runs == [str(svelte_repo / "src")]
        assert "skipped" in result.output

    def test_report(self, action, tmp_path):
        report_path = tmp_path / "reports" / "svcheck.json"

        result = CliRunner().invoke(cli, ["--fail-on-error", "--report", str(report_path)])

        assert result.exit_code == 1
        report = json.loads(report_path.read_text())
        assert report["exit_code"] == 1
        assert report["summary"]["errors"] == 1
        assert report["metadata"]["repository"] == "ghostdevv/app"
        assert report["metadata"]["pr_number"] == 7

    def test_debug(self, action):
        result = CliRunner().invoke(cli, ["--debug"])

        assert result.exit_code == 0, result.output
        assert "debug" in result.output
        assert "(hidden)" in result.output
        assert "t0ken" not in result.output


class TestConfigFile:
    """Tests for svcheck.toml handling."""

    def test_config_file_thresholds(self, action, svelte_repo):
        """Settings are discovered at the repository root."""
        (svelte_repo / "svcheck.toml").write_text("[fail]\non_error = true\n")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1

    def test_cli_overrides_config_file(self, action, svelte_repo):
        (svelte_repo / "svcheck.toml").write_text("[fail]\non_error = true\n")

        result = CliRunner().invoke(cli, ["--no-fail-on-error"])

        assert result.exit_code == 0, result.output

    def test_invalid_config_file(self, action, svelte_repo):
        (svelte_repo / "svcheck.toml").write_text('[fail]\non_error = "yes"\n')

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "on_error must be a boolean" in result.output


class TestErrors:
    """Tests for fatal errors."""

    def test_missing_token(self, action, monkeypatch):
        monkeypatch.delenv("INPUT_TOKEN")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "::error::Unable to find a GitHub token" in result.output

    def test_github_token_fallback_warns(self, action, monkeypatch):
        """The deprecated GITHUB_TOKEN variable still works, with a warning."""
        monkeypatch.delenv("INPUT_TOKEN")
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert "GITHUB_TOKEN" in result.output

    def test_not_a_pull_request(self, action, monkeypatch):
        monkeypatch.delenv("GITHUB_EVENT_PATH")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "Can't find a pull request" in result.output

    def test_corrupt_event_payload(self, action, event_file):
        """A workflow event that is not JSON fails the run cleanly."""
        event_file.write_text("{not json")

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "::error::Unable to read the workflow event" in result.output

    def test_svelte_check_failure(self, action, monkeypatch):
        def failing(cwd, console):
            raise DiagnosticToolError(cwd, "npm ERR! could not resolve")

        monkeypatch.setattr(main, "get_diagnostics", failing)

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "::error::Failed to run svelte-check" in result.output
        assert action.posted == []
