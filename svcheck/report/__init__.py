"""Output formats: PR comment markdown, workflow annotations and JSON reports."""
