"""Chunked streaming encryption and decryption.

:class:`StreamCodec` pumps bytes from a readable binary stream to a writable
one, one chunk at a time, so memory use stays constant regardless of input
size:

- encrypt: read up to ``chunk_size`` bytes, draw a fresh IV, encrypt, write a
  record; stop after the first short chunk. An empty source still yields one
  record holding an empty chunk.
- decrypt: read a record, decrypt, write the plaintext; stop at a clean end
  of stream.

Chunks are bound to their position through the associated data
``chunk:<index>`` (honoured by AEAD suites only).
"""

from __future__ import annotations

import enum
import logging
from typing import BinaryIO, Iterator, Union

from filevault.core.exceptions import TruncatedStreamError
from .ciphers import DEFAULT_CIPHER, ChunkCipher, get_cipher
from .framing import ChunkFramer, read_exact
from .keys import VaultKey

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
MAX_CHUNK_SIZE = 16 * 1024 * 1024


class Direction(enum.Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


def _associated_data(chunk_index: int) -> bytes:
    return f"chunk:{chunk_index}".encode("utf-8")


class StreamCodec:
    """Drives a :class:`ChunkCipher` and a :class:`ChunkFramer` over streams."""

    def __init__(
        self,
        cipher: Union[ChunkCipher, str] = DEFAULT_CIPHER,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if isinstance(cipher, str):
            cipher = get_cipher(cipher)
        if not 0 < chunk_size <= MAX_CHUNK_SIZE:
            raise ValueError(
                f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}, got {chunk_size}"
            )
        self.cipher = cipher
        self.chunk_size = chunk_size
        # decoding accepts records from any valid chunk size, not just ours
        self.framer = ChunkFramer(
            iv_size=cipher.iv_size,
            max_record_size=cipher.iv_size + MAX_CHUNK_SIZE + cipher.overhead,
        )

    def __repr__(self) -> str:
        return f"StreamCodec(cipher={self.cipher.name!r}, chunk_size={self.chunk_size})"

    def run(self, reader: BinaryIO, writer: BinaryIO, key: VaultKey, direction: Direction) -> int:
        """Run one pipeline to completion and return the number of chunks processed."""
        if direction is Direction.ENCRYPT:
            return self.encrypt(reader, writer, key)
        return self.decrypt(reader, writer, key)

    # ------------------------------------------------------------------
    # Encrypt pipeline
    # ------------------------------------------------------------------

    def encrypt(self, reader: BinaryIO, writer: BinaryIO, key: VaultKey) -> int:
        """Encrypt ``reader`` into ``writer`` as a sequence of records."""
        self.cipher.check_key(key)
        chunk_index = 0
        while True:
            chunk = read_exact(reader, self.chunk_size)
            if not chunk and chunk_index > 0:
                break

            iv = self.cipher.new_iv()
            ct = self.cipher.encrypt_chunk(key, iv, chunk, _associated_data(chunk_index))
            self.framer.write_record(writer, iv, ct)
            logger.debug("encrypted chunk %d (%d bytes)", chunk_index, len(chunk))
            chunk_index += 1

            if len(chunk) < self.chunk_size:
                break
        return chunk_index

    # ------------------------------------------------------------------
    # Decrypt pipeline
    # ------------------------------------------------------------------

    def iter_decrypt(self, reader: BinaryIO, key: VaultKey) -> Iterator[bytes]:
        """Yield decrypted chunks from ``reader`` in order."""
        self.cipher.check_key(key)
        chunk_index = 0
        while True:
            record = self.framer.read_record(reader)
            if record is None:
                break
            iv, ct = record
            pt = self.cipher.decrypt_chunk(key, iv, ct, _associated_data(chunk_index))
            logger.debug("decrypted chunk %d (%d bytes)", chunk_index, len(pt))
            chunk_index += 1
            yield pt

        if chunk_index == 0:
            raise TruncatedStreamError("encrypted stream contains no records")

    def decrypt(self, reader: BinaryIO, writer: BinaryIO, key: VaultKey) -> int:
        """Decrypt records from ``reader`` into ``writer``."""
        count = 0
        for pt in self.iter_decrypt(reader, key):
            writer.write(pt)
            count += 1
        return count


def encrypt_stream(
    reader: BinaryIO,
    writer: BinaryIO,
    key: VaultKey,
    cipher: Union[ChunkCipher, str] = DEFAULT_CIPHER,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    return StreamCodec(cipher, chunk_size).encrypt(reader, writer, key)


def decrypt_stream(
    reader: BinaryIO,
    writer: BinaryIO,
    key: VaultKey,
    cipher: Union[ChunkCipher, str] = DEFAULT_CIPHER,
) -> int:
    # records of any valid chunk size are accepted, so none is needed here
    return StreamCodec(cipher).decrypt(reader, writer, key)
