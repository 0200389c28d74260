"""svcheck - svelte-check reporting for pull requests."""

__version__ = "0.1.0"
