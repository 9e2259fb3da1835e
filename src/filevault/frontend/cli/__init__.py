"""Command-line adapter for FileVault."""
