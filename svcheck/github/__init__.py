"""GitHub integration: run context, REST client, changed files and the PR comment."""
