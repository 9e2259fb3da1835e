"""
FileVault engine: encrypt / decrypt named files through a storage backend.

The engine resolves which key and which names to use, then hands the byte work
to :class:`~filevault.security.stream.StreamCodec`. Lifecycle policy:

- ``encrypt`` / ``decrypt`` move: the source is deleted only after the whole
  pipeline succeeded
- ``encrypt_copy`` / ``decrypt_copy`` keep the source
- ``stream_decrypt`` / ``iter_decrypt`` never touch the source
- the destination is opened lazily on the first write, so a pipeline that fails
  before producing any output does not leave an empty file behind; a partially
  written destination is left as is

``key(..)`` and ``disk(..)`` return views bound to another key or backend. The
engine itself is never mutated.
"""

from __future__ import annotations

import copy
import logging
import sys
from contextlib import closing
from typing import BinaryIO, Iterator, Optional, Union

from ..security.ciphers import DEFAULT_CIPHER, ChunkCipher
from ..security.keys import VaultKey, resolve_key
from ..security.stream import DEFAULT_CHUNK_SIZE, Direction, StreamCodec
from .exceptions import (
    FileVaultError,
    InvalidPathError,
    SourceNotFoundError,
    StorageIOError,
)
from .naming import NamingPolicy
from .storage import StorageBackend

logger = logging.getLogger(__name__)

KeyLike = Union[VaultKey, str, bytes]


class _DeferredWriter:
    """Writable that opens its destination on the first write."""

    def __init__(self, storage: StorageBackend, name: str):
        self._storage = storage
        self._name = name
        self._handle: Optional[BinaryIO] = None
        self.bytes_written = 0

    def write(self, data: bytes) -> int:
        if self._handle is None:
            self._handle = self._storage.open_write(self._name)
        self._handle.write(data)
        self.bytes_written += len(data)
        return len(data)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()


class FileVault:
    """Chunked file encryption over a storage backend with a default key."""

    def __init__(
        self,
        storage: StorageBackend,
        key: KeyLike,
        cipher: Union[ChunkCipher, str] = DEFAULT_CIPHER,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        naming: Optional[NamingPolicy] = None,
    ):
        self.storage = storage
        self.codec = StreamCodec(cipher, chunk_size)
        self.naming = naming or NamingPolicy()
        self._default_key = self._coerce_key(key)
        self._override: Optional[VaultKey] = None

    def __repr__(self) -> str:
        bound = ", key=<override>" if self._override is not None else ""
        return f"FileVault({self.storage!r}, {self.codec!r}{bound})"

    @property
    def cipher(self) -> ChunkCipher:
        return self.codec.cipher

    def _coerce_key(self, key: KeyLike) -> VaultKey:
        return VaultKey.from_encoded(key, key_size=self.cipher.key_size)

    def _current_key(self) -> VaultKey:
        return resolve_key(self._override, self._default_key)

    # ------------------------------------------------------------------
    # Views and keys
    # ------------------------------------------------------------------

    def key(self, key: KeyLike) -> "FileVault":
        """Return a view of this vault that uses ``key`` instead of the default."""
        view = copy.copy(self)
        view._override = self._coerce_key(key)
        return view

    def disk(self, storage: StorageBackend) -> "FileVault":
        """Return a view of this vault that reads and writes through ``storage``."""
        view = copy.copy(self)
        view.storage = storage
        return view

    def generate_key(self) -> VaultKey:
        """Mint a random key sized for this vault's cipher."""
        return VaultKey.generate(self.cipher.key_size)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def encrypt(self, source: str, destination: Optional[str] = None) -> str:
        """Encrypt ``source`` into ``destination`` (default ``source + .enc``) and delete ``source``."""
        return self._transfer(
            source, destination or self.naming.encrypted_name(source), Direction.ENCRYPT, move=True
        )

    def encrypt_copy(self, source: str, destination: Optional[str] = None) -> str:
        """Like :meth:`encrypt` but keeps ``source``."""
        return self._transfer(
            source, destination or self.naming.encrypted_name(source), Direction.ENCRYPT, move=False
        )

    def decrypt(self, source: str, destination: Optional[str] = None) -> str:
        """Decrypt ``source`` into ``destination`` (default: marker stripped) and delete ``source``."""
        return self._transfer(
            source, destination or self.naming.decrypted_name(source), Direction.DECRYPT, move=True
        )

    def decrypt_copy(self, source: str, destination: Optional[str] = None) -> str:
        """Like :meth:`decrypt` but keeps ``source``."""
        return self._transfer(
            source, destination or self.naming.decrypted_name(source), Direction.DECRYPT, move=False
        )

    def stream_decrypt(self, source: str, sink: Optional[BinaryIO] = None) -> int:
        """
        Decrypt ``source`` straight into ``sink`` and return the plaintext size.

        ``sink`` is anything with a binary ``write`` (an HTTP response body, a
        socket file, ...). It defaults to the process standard output. The
        source is never deleted.
        """
        if sink is None:
            sink = sys.stdout.buffer
        key = self._current_key()
        self._require_source(source)

        written = 0
        try:
            with self.storage.open_read(source) as reader:
                for pt in self.codec.iter_decrypt(reader, key):
                    sink.write(pt)
                    written += len(pt)
            flush = getattr(sink, "flush", None)
            if flush is not None:
                flush()
        except FileVaultError:
            raise
        except OSError as exc:
            raise StorageIOError(f"I/O failure while streaming {source!r}: {exc}") from exc

        logger.info("Streamed %s (%d bytes)", source, written)
        return written

    def iter_decrypt(self, source: str) -> Iterator[bytes]:
        """
        Return an iterator over the decrypted chunks of ``source``.

        The source is checked up front; decryption happens lazily as the
        iterator is consumed. Suitable as an iterable response body.
        """
        key = self._current_key()
        self._require_source(source)
        return self._iter_chunks(source, key)

    def _iter_chunks(self, source: str, key: VaultKey) -> Iterator[bytes]:
        try:
            with self.storage.open_read(source) as reader:
                yield from self.codec.iter_decrypt(reader, key)
        except FileVaultError:
            raise
        except OSError as exc:
            raise StorageIOError(f"I/O failure while streaming {source!r}: {exc}") from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_source(self, source: str) -> None:
        if not self.storage.exists(source):
            raise SourceNotFoundError(f"Source file {source!r} does not exist")

    def _transfer(self, source: str, destination: str, direction: Direction, move: bool) -> str:
        if self.storage.full_path(source) == self.storage.full_path(destination):
            raise InvalidPathError(f"Source and destination are the same file: {source!r}")
        key = self._current_key()
        self._require_source(source)

        try:
            with self.storage.open_read(source) as reader, closing(
                _DeferredWriter(self.storage, destination)
            ) as writer:
                chunks = self.codec.run(reader, writer, key, direction)
            if move:
                self.storage.delete(source)
        except FileVaultError:
            raise
        except OSError as exc:
            raise StorageIOError(
                f"I/O failure during {direction.value} of {source!r}: {exc}"
            ) from exc

        logger.info(
            "%s %s -> %s (%d chunks, %d bytes written%s)",
            direction.value.capitalize() + "ed",
            source,
            destination,
            chunks,
            writer.bytes_written,
            ", source removed" if move else "",
        )
        return destination
