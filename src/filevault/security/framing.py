"""Binary framing for encrypted chunk records.

Record layout (big-endian):
- 4 bytes: length N of the rest of the record (IV + ciphertext)
- iv_size bytes: IV / nonce
- N - iv_size bytes: ciphertext

An encrypted stream is a plain concatenation of records. A reader stops
cleanly when no bytes remain where a length field is expected.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Optional, Tuple

from filevault.core.exceptions import CorruptChunkError, TruncatedStreamError

LENGTH_FORMAT = ">I"
LENGTH_SIZE = struct.calcsize(LENGTH_FORMAT)


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, looping over short reads until EOF."""
    if size <= 0:
        return b""
    parts = []
    remaining = size
    while remaining:
        data = stream.read(remaining)
        if not data:
            break
        parts.append(data)
        remaining -= len(data)
    return b"".join(parts)


class ChunkFramer:
    """Reads and writes whole records, one at a time."""

    def __init__(self, iv_size: int, max_record_size: int):
        self.iv_size = iv_size
        self.max_record_size = max_record_size

    def write_record(self, output: BinaryIO, iv: bytes, ciphertext: bytes) -> int:
        """Write one record and return the number of bytes written."""
        if len(iv) != self.iv_size:
            raise ValueError(f"IV must be {self.iv_size} bytes, got {len(iv)}")
        body_len = len(iv) + len(ciphertext)
        if body_len > self.max_record_size:
            raise ValueError(
                f"Record of {body_len} bytes exceeds the limit of {self.max_record_size}"
            )
        output.write(struct.pack(LENGTH_FORMAT, body_len))
        output.write(iv)
        output.write(ciphertext)
        return LENGTH_SIZE + body_len

    def read_record(self, source: BinaryIO) -> Optional[Tuple[bytes, bytes]]:
        """
        Read the next record from ``source``.

        Returns ``(iv, ciphertext)``, or ``None`` at a clean end of stream.
        Raises :class:`TruncatedStreamError` when the length field or body is
        cut short, and :class:`CorruptChunkError` when the declared length is
        impossible for this framing.
        """
        header = read_exact(source, LENGTH_SIZE)
        if not header:
            return None
        if len(header) < LENGTH_SIZE:
            raise TruncatedStreamError(
                f"truncated record length field ({len(header)} of {LENGTH_SIZE} bytes)"
            )

        (body_len,) = struct.unpack(LENGTH_FORMAT, header)
        if body_len < self.iv_size or body_len > self.max_record_size:
            raise CorruptChunkError(f"Invalid record length {body_len}")

        body = read_exact(source, body_len)
        if len(body) != body_len:
            raise TruncatedStreamError(
                f"truncated record (expected {body_len} bytes, got {len(body)})"
            )
        return body[: self.iv_size], body[self.iv_size:]
