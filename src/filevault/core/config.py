"""Settings for building a FileVault from the environment.

Recognised environment variables:

- ``FILEVAULT_KEY``: default key, ``base64:<data>`` or raw
- ``FILEVAULT_CIPHER``: cipher suite name (default ``AES-256-GCM``)
- ``FILEVAULT_CHUNK_SIZE``: plaintext bytes per chunk (default 65536)
- ``FILEVAULT_ROOT``: storage root directory (default ``~/.filevault``)
- ``FILEVAULT_EXTENSION``: marker extension (default ``.enc``)
- ``FILEVAULT_KEYRING_ACCOUNT``: load the key from the OS keyring when
  ``FILEVAULT_KEY`` is not set
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ..security.ciphers import DEFAULT_CIPHER
from ..security.stream import DEFAULT_CHUNK_SIZE
from .exceptions import InvalidKeyError
from .naming import DEFAULT_EXTENSION, NamingPolicy
from .storage import LocalStorage
from .vault import FileVault

logger = logging.getLogger(__name__)

ENV_PREFIX = "FILEVAULT_"


@dataclass
class VaultSettings:
    """Process-level configuration, read once at setup."""

    key: Optional[str] = None
    cipher: str = DEFAULT_CIPHER
    chunk_size: int = DEFAULT_CHUNK_SIZE
    root: Optional[str] = None
    extension: str = DEFAULT_EXTENSION
    keyring_account: Optional[str] = None

    def __repr__(self) -> str:
        key = "<set>" if self.key else None
        return (
            f"VaultSettings(key={key}, cipher={self.cipher!r}, chunk_size={self.chunk_size}, "
            f"root={self.root!r}, extension={self.extension!r}, "
            f"keyring_account={self.keyring_account!r})"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VaultSettings":
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            return value if value else None

        chunk_size = get("CHUNK_SIZE")
        try:
            chunk_size = int(chunk_size) if chunk_size else DEFAULT_CHUNK_SIZE
        except ValueError:
            raise ValueError(f"{ENV_PREFIX}CHUNK_SIZE must be an integer, got {chunk_size!r}") from None

        return cls(
            key=get("KEY"),
            cipher=get("CIPHER") or DEFAULT_CIPHER,
            chunk_size=chunk_size,
            root=get("ROOT"),
            extension=get("EXTENSION") or DEFAULT_EXTENSION,
            keyring_account=get("KEYRING_ACCOUNT"),
        )


def build_vault(settings: Optional[VaultSettings] = None) -> FileVault:
    """
    Build a FileVault over LocalStorage from ``settings`` (default: environment).

    The default key comes from ``settings.key``, or from the OS keyring when only
    ``settings.keyring_account`` is set. Without either, :class:`InvalidKeyError`
    is raised.
    """
    if settings is None:
        settings = VaultSettings.from_env()

    key = settings.key
    if key is None and settings.keyring_account:
        # imported lazily so keyring backends are only probed when asked for
        from ..security.keystore import load_key

        key = load_key(settings.keyring_account)
        if key is None:
            raise InvalidKeyError(
                f"No vault key stored in the keyring for account {settings.keyring_account!r}"
            )
        logger.debug("Loaded default key from keyring account %r", settings.keyring_account)
    if key is None:
        raise InvalidKeyError(
            f"No vault key configured; set {ENV_PREFIX}KEY or {ENV_PREFIX}KEYRING_ACCOUNT"
        )

    return FileVault(
        LocalStorage(settings.root),
        key,
        cipher=settings.cipher,
        chunk_size=settings.chunk_size,
        naming=NamingPolicy(settings.extension),
    )
