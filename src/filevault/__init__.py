"""FileVault: chunked streaming file encryption with bounded memory."""

from .core.exceptions import (
    FileVaultError,
    InvalidKeyError,
    UnsupportedCipherError,
    StorageError,
    SourceNotFoundError,
    StorageIOError,
    InvalidPathError,
    TruncatedStreamError,
    CorruptChunkError,
)
from .core.naming import NamingPolicy
from .core.storage import LocalStorage, StorageBackend
from .core.vault import FileVault
from .core.config import VaultSettings, build_vault
from .security import VaultKey, StreamCodec

__version__ = "0.1.0"

__all__ = [
    "FileVault",
    "VaultKey",
    "StreamCodec",
    "LocalStorage",
    "StorageBackend",
    "NamingPolicy",
    "VaultSettings",
    "build_vault",
    "FileVaultError",
    "InvalidKeyError",
    "UnsupportedCipherError",
    "StorageError",
    "SourceNotFoundError",
    "StorageIOError",
    "InvalidPathError",
    "TruncatedStreamError",
    "CorruptChunkError",
]
