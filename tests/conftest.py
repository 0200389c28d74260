"""Shared pytest fixtures for svcheck tests."""

import json

import pytest
from pathlib import Path


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def machine_output():
    """svelte-check machine-verbose output with one error and one warning."""
    error = {
        "type": "ERROR",
        "filename": "src/routes/+page.svelte",
        "start": {"line": 3, "character": 8},
        "end": {"line": 3, "character": 13},
        "message": "Type 'number' is not assignable to type 'string'.",
        "code": 2322,
        "source": "ts",
    }
    warning = {
        "type": "WARNING",
        "filename": "src/lib/Image.svelte",
        "start": {"line": 10, "character": 0},
        "end": {"line": 11, "character": 6},
        "message": "<img> element should have an alt attribute",
        "code": "a11y-missing-attribute",
        "source": "svelte",
    }
    return "\n".join([
        '1590680325583 START "/home/user/app"',
        f"1590680326283 {json.dumps(error)}",
        f"1590680326778 {json.dumps(warning)}",
        "1590680326807 COMPLETED 20 FILES 1 ERRORS 1 WARNINGS 2 FILES_WITH_PROBLEMS",
    ])


@pytest.fixture
def svelte_repo(tmp_path):
    """A checkout with a SvelteKit app whose files the diagnostics point at."""
    repo = tmp_path / "repo"
    routes = repo / "src" / "routes"
    routes.mkdir(parents=True)
    (routes / "+page.svelte").write_text(
        "<script lang=\"ts\">\n"
        "  let count: string = '';\n"
        "\n"
        "  count = 42;\n"
        "</script>\n"
    )
    lib = repo / "src" / "lib"
    lib.mkdir(parents=True)
    (lib / "Image.svelte").write_text(
        "\n".join(f"<!-- line {i} -->" for i in range(1, 11))
        + "\n<img\n  src=\"a.png\" />\n"
    )
    (repo / "package.json").write_text(json.dumps({"devDependencies": {"svelte": "^5"}}))
    return repo


@pytest.fixture
def event_file(tmp_path):
    """A pull_request workflow event payload for PR #7."""
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"action": "synchronize", "pull_request": {"number": 7}}))
    return path


# Pytest markers
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")
