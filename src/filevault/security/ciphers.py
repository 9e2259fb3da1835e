"""Per-chunk cipher suites.

Each suite encrypts or decrypts exactly one bounded chunk given a key and a
per-chunk IV (nonce). Suites are looked up by name with :func:`get_cipher`:

- ``AES-256-GCM`` (default), ``AES-128-GCM``, ``CHACHA20-POLY1305``:
  AEAD, 12-byte nonce, 16-byte tag appended to the ciphertext.
- ``AES-256-CBC``, ``AES-128-CBC``: 16-byte IV, PKCS#7 padding. A chunk whose
  length is already a multiple of the block size gets one full padding block.

Every call validates the key length and raises :class:`InvalidKeyError` on a
mismatch. Any decryption failure surfaces as :class:`CorruptChunkError`.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from filevault.core.exceptions import (
    CorruptChunkError,
    InvalidKeyError,
    UnsupportedCipherError,
)
from .keys import VaultKey

DEFAULT_CIPHER = "AES-256-GCM"


class ChunkCipher:
    """Base class for a cipher suite operating on one chunk at a time."""

    name: str = ""
    key_size: int = 32
    iv_size: int = 16
    # worst-case ciphertext growth over the plaintext length
    overhead: int = 0

    def new_iv(self) -> bytes:
        """Return a fresh random IV for one chunk."""
        return os.urandom(self.iv_size)

    def check_key(self, key: VaultKey) -> bytes:
        raw = bytes(key)
        if len(raw) != self.key_size:
            raise InvalidKeyError(
                f"{self.name} requires a {self.key_size}-byte key, got {len(raw)}"
            )
        return raw

    def _check_iv(self, iv: bytes) -> None:
        if len(iv) != self.iv_size:
            raise CorruptChunkError(
                f"{self.name} requires a {self.iv_size}-byte IV, got {len(iv)}"
            )

    def ciphertext_length(self, plaintext_length: int) -> int:
        raise NotImplementedError

    def encrypt_chunk(
        self, key: VaultKey, iv: bytes, plaintext: bytes, associated_data: Optional[bytes] = None
    ) -> bytes:
        raise NotImplementedError

    def decrypt_chunk(
        self, key: VaultKey, iv: bytes, ciphertext: bytes, associated_data: Optional[bytes] = None
    ) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class AeadChunkCipher(ChunkCipher):
    """
    AEAD suite (AES-GCM or ChaCha20-Poly1305).

    The tag is appended to the ciphertext by :mod:`cryptography`, so a chunk
    grows by exactly ``overhead`` bytes. ``associated_data`` is authenticated
    but not stored.
    """

    iv_size = 12
    overhead = 16

    def __init__(self, name: str, aead_cls: type, key_size: int):
        self.name = name
        self.key_size = key_size
        self._aead_cls = aead_cls

    def ciphertext_length(self, plaintext_length: int) -> int:
        return plaintext_length + self.overhead

    def encrypt_chunk(self, key, iv, plaintext, associated_data=None):
        aead = self._aead_cls(self.check_key(key))
        self._check_iv(iv)
        return aead.encrypt(iv, plaintext, associated_data)

    def decrypt_chunk(self, key, iv, ciphertext, associated_data=None):
        aead = self._aead_cls(self.check_key(key))
        self._check_iv(iv)
        try:
            return aead.decrypt(iv, ciphertext, associated_data)
        except InvalidTag as exc:
            raise CorruptChunkError(
                "Chunk authentication failed (wrong key or tampered data)"
            ) from exc


class CbcChunkCipher(ChunkCipher):
    """AES-CBC suite with PKCS#7 padding. ``associated_data`` is ignored."""

    block_size = 16
    iv_size = 16
    overhead = 16

    def __init__(self, name: str, key_size: int):
        self.name = name
        self.key_size = key_size

    def ciphertext_length(self, plaintext_length: int) -> int:
        # always adds 1..block_size bytes of padding
        return (plaintext_length // self.block_size + 1) * self.block_size

    def encrypt_chunk(self, key, iv, plaintext, associated_data=None):
        cipher = Cipher(algorithms.AES(self.check_key(key)), modes.CBC(self._iv(iv)))
        padder = padding.PKCS7(self.block_size * 8).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = cipher.encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    def decrypt_chunk(self, key, iv, ciphertext, associated_data=None):
        cipher = Cipher(algorithms.AES(self.check_key(key)), modes.CBC(self._iv(iv)))
        if not ciphertext or len(ciphertext) % self.block_size:
            raise CorruptChunkError(
                f"Ciphertext length {len(ciphertext)} is not a positive multiple of the block size"
            )
        decryptor = cipher.decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(self.block_size * 8).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise CorruptChunkError(
                "Invalid padding after decryption (wrong key or tampered data)"
            ) from exc

    def _iv(self, iv: bytes) -> bytes:
        self._check_iv(iv)
        return iv


_REGISTRY: Dict[str, ChunkCipher] = {
    "AES-256-GCM": AeadChunkCipher("AES-256-GCM", AESGCM, 32),
    "AES-128-GCM": AeadChunkCipher("AES-128-GCM", AESGCM, 16),
    "CHACHA20-POLY1305": AeadChunkCipher("CHACHA20-POLY1305", ChaCha20Poly1305, 32),
    "AES-256-CBC": CbcChunkCipher("AES-256-CBC", 32),
    "AES-128-CBC": CbcChunkCipher("AES-128-CBC", 16),
}

SUPPORTED_CIPHERS = tuple(_REGISTRY)


def get_cipher(name: str = DEFAULT_CIPHER) -> ChunkCipher:
    """Return the cipher suite registered under ``name`` (case-insensitive)."""
    try:
        return _REGISTRY[name.upper()]
    except (KeyError, AttributeError):
        raise UnsupportedCipherError(
            f"Unsupported cipher {name!r}; expected one of {', '.join(SUPPORTED_CIPHERS)}"
        ) from None
