"""Key material for the vault: generation, decoding and per-call resolution.

Keys are raw byte strings wrapped in an immutable :class:`VaultKey`. They can be
minted from the OS CSPRNG or decoded from a configuration value. The
configuration form is ``base64:<data>``; anything without that prefix is taken
as raw key bytes.
"""

from __future__ import annotations

import base64
import binascii
import os
from dataclasses import dataclass
from typing import Optional, Union

from filevault.core.exceptions import InvalidKeyError

DEFAULT_KEY_SIZE = 32
ENCODED_PREFIX = "base64:"


@dataclass(frozen=True)
class VaultKey:
    """Fixed-length secret key. Immutable once constructed."""

    material: bytes

    def __post_init__(self):
        if not isinstance(self.material, (bytes, bytearray)):
            raise InvalidKeyError("Key material must be bytes")
        if not self.material:
            raise InvalidKeyError("Key material must not be empty")
        object.__setattr__(self, "material", bytes(self.material))

    def __repr__(self) -> str:
        # never show key bytes
        return f"VaultKey(<{len(self.material)} bytes>)"

    def __len__(self) -> int:
        return len(self.material)

    def __bytes__(self) -> bytes:
        return self.material

    @classmethod
    def generate(cls, key_size: int = DEFAULT_KEY_SIZE) -> "VaultKey":
        """Return a new random key of ``key_size`` bytes."""
        return cls(os.urandom(key_size))

    @classmethod
    def from_encoded(
        cls, value: Union[str, bytes, "VaultKey"], key_size: Optional[int] = DEFAULT_KEY_SIZE
    ) -> "VaultKey":
        """
        Decode a key from its configuration form.

        ``value`` may be ``base64:<data>``, raw ``bytes`` or a raw ``str``
        (UTF-8 encoded). When ``key_size`` is given the decoded length must
        match it, otherwise :class:`InvalidKeyError` is raised.
        """
        if isinstance(value, VaultKey):
            key = value
        elif isinstance(value, (bytes, bytearray)):
            key = cls(bytes(value))
        elif isinstance(value, str):
            if value.startswith(ENCODED_PREFIX):
                try:
                    raw = base64.b64decode(value[len(ENCODED_PREFIX):], validate=True)
                except (binascii.Error, ValueError) as exc:
                    raise InvalidKeyError("Key is not valid base64") from exc
            else:
                raw = value.encode("utf-8")
            key = cls(raw)
        else:
            raise InvalidKeyError(f"Unsupported key type: {type(value).__name__}")

        if key_size is not None and len(key) != key_size:
            raise InvalidKeyError(
                f"Key must be {key_size} bytes, got {len(key)}"
            )
        return key

    def encode(self) -> str:
        """Return the ``base64:`` configuration form of this key."""
        return ENCODED_PREFIX + base64.b64encode(self.material).decode("ascii")


def resolve_key(explicit: Optional[VaultKey], default: VaultKey) -> VaultKey:
    # explicit override wins for this call only
    return explicit if explicit is not None else default
