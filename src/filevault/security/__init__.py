"""Security primitives: keys, per-chunk ciphers, record framing and streaming.

This package provides the byte-level core of the vault:
- VaultKey generation, decoding and per-call resolution
- Per-chunk cipher suites (AES-GCM, ChaCha20-Poly1305, AES-CBC)
- Length-prefixed record framing
- The chunked StreamCodec that drives both pipelines

Key persistence in the OS keyring lives in :mod:`filevault.security.keystore`
and is imported on demand.
"""

from .keys import VaultKey, resolve_key
from .ciphers import (
    DEFAULT_CIPHER,
    SUPPORTED_CIPHERS,
    ChunkCipher,
    get_cipher,
)
from .framing import ChunkFramer
from .stream import (
    DEFAULT_CHUNK_SIZE,
    MAX_CHUNK_SIZE,
    Direction,
    StreamCodec,
    encrypt_stream,
    decrypt_stream,
)

__all__ = [
    "VaultKey",
    "resolve_key",
    "DEFAULT_CIPHER",
    "SUPPORTED_CIPHERS",
    "ChunkCipher",
    "get_cipher",
    "ChunkFramer",
    "DEFAULT_CHUNK_SIZE",
    "MAX_CHUNK_SIZE",
    "Direction",
    "StreamCodec",
    "encrypt_stream",
    "decrypt_stream",
]
