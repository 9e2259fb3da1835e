"""Core package of FileVault: engine, storage, naming and configuration."""
