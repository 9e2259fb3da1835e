""" Naming policy for encrypted artifacts. """

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_EXTENSION = ".enc"
# appended when decrypting a name that carries no marker extension
FALLBACK_DECRYPTED_SUFFIX = ".dec"


@dataclass(frozen=True)
class NamingPolicy:
    """Maps a source name to its default encrypted / decrypted destination name."""

    extension: str = DEFAULT_EXTENSION

    def __post_init__(self):
        if not self.extension or not self.extension.startswith("."):
            raise ValueError(f"Extension must start with '.', got {self.extension!r}")

    def encrypted_name(self, name: str) -> str:
        return name + self.extension

    def decrypted_name(self, name: str) -> str:
        if name.endswith(self.extension) and len(name) > len(self.extension):
            return name[: -len(self.extension)]
        return name + FALLBACK_DECRYPTED_SUFFIX
