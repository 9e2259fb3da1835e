"""OS keystore integration using keyring for optional vault-key persistence.

This module provides a tiny wrapper around `keyring` to store and retrieve
vault keys (base64-encoded) under a service/account pair. It is how a key
minted with :meth:`FileVault.generate_key` can be kept out-of-band. Use this
only for opt-in convenience storage; do not assume keyring provides
hardware-backed security on all platforms.
"""
import base64
import binascii
import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .keys import VaultKey

logger = logging.getLogger(__name__)

SERVICE_NAME = "filevault"


def save_key(account: str, key: VaultKey, service: str = SERVICE_NAME) -> None:
    """Persist ``key`` in the OS keystore under (service, account).

    The key is base64-encoded before storage to keep it string-friendly.
    """
    secret = base64.b64encode(bytes(key)).decode("ascii")
    keyring.set_password(service, account, secret)
    logger.info("Saved vault key for account %r in keyring service %r", account, service)


def assess_keyring_backend() -> tuple[bool, str]:
    """Return (is_secure, message) describing the current keyring backend.

    Heuristics are used because the `keyring` package exposes different backends
    across platforms.
    """
    try:
        backend = keyring.get_keyring()
    except KeyringError as e:
        return False, f"failed to get keyring backend: {e}"

    name = backend.__class__.__name__
    priority = getattr(backend, "priority", None)

    insecure_indicators = ("Plaintext", "Uncrypted", "Simple", "File", "Fail")
    if any(tok in name for tok in insecure_indicators):
        return False, f"insecure backend detected: {name}"

    if priority is not None and priority <= 0:
        return False, f"no suitable secure keyring backend available (priority={priority}, backend={name})"

    # treat known platform backends as acceptable
    if "Win" in name or "Keychain" in name or "SecretService" in name or "KWallet" in name:
        return True, f"backend looks acceptable: {name} (priority={priority})"

    return True, f"unknown backend '{name}', treat with caution (priority={priority})"


def load_key(account: str, service: str = SERVICE_NAME) -> Optional[VaultKey]:
    """Load a persisted key from the OS keystore; returns None if absent or unreadable."""
    secret = keyring.get_password(service, account)
    if secret is None:
        return None
    try:
        return VaultKey(base64.b64decode(secret, validate=True))
    except (binascii.Error, ValueError):
        logger.warning("Keyring entry for account %r is not a valid key", account)
        return None


def delete_key(account: str, service: str = SERVICE_NAME) -> bool:
    """Remove the key from the OS keystore. Returns False if there was none."""
    try:
        keyring.delete_password(service, account)
    except PasswordDeleteError:
        return False
    return True
