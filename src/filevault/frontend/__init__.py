"""User-facing adapters for FileVault."""
