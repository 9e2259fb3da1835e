"""
Exceptions for the FileVault engine
Everything derives from FileVaultError so callers have one general error catcher
"""

import builtins


class FileVaultError(Exception):
    # general container for errors
    pass


class InvalidKeyError(FileVaultError, ValueError):
    # raised when key bytes do not match the cipher's key size, or cannot be decoded
    pass


class UnsupportedCipherError(FileVaultError, ValueError):
    # raised when a cipher name is not in the registry
    pass


class StorageError(FileVaultError):
    # raised if storage fails in some way
    pass


class SourceNotFoundError(StorageError, builtins.FileNotFoundError):
    # raised when the source file is missing before the pipeline starts
    pass


class StorageIOError(StorageError):
    # raised when a read/write handle fails mid-pipeline
    pass


class InvalidPathError(StorageError):
    # raised when a name escapes the storage root, or source == destination
    pass


class TruncatedStreamError(FileVaultError):
    # raised when a record is shorter than its declared length
    pass


class CorruptChunkError(FileVaultError):
    # raised when a chunk fails to decrypt (wrong key, tampering, bad padding)
    pass
