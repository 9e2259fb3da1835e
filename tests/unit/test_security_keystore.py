"""
Unit tests for the keystore module.
"""

import base64

import pytest
from unittest.mock import patch
from keyring.errors import KeyringError, PasswordDeleteError

from filevault.security import keystore
from filevault.security.keys import VaultKey


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def mock_keyring_lib():
    """Patches the keyring module within filevault.security.keystore."""
    with patch("filevault.security.keystore.keyring", autospec=True) as mock_lib:
        yield mock_lib


# ==============================================================================
# Tests: save / load / delete
# ==============================================================================

def test_save_key_encodes_and_stores(mock_keyring_lib):
    """Key bytes are base64 encoded before storage under the default service."""
    key = VaultKey(b"\x01" * 32)

    keystore.save_key("alice", key)

    mock_keyring_lib.set_password.assert_called_once_with(
        "filevault", "alice", base64.b64encode(b"\x01" * 32).decode("ascii")
    )


def test_load_key_decodes(mock_keyring_lib):
    mock_keyring_lib.get_password.return_value = base64.b64encode(b"\x02" * 32).decode()

    key = keystore.load_key("alice", service="custom")

    mock_keyring_lib.get_password.assert_called_once_with("custom", "alice")
    assert key == VaultKey(b"\x02" * 32)


def test_load_key_missing(mock_keyring_lib):
    mock_keyring_lib.get_password.return_value = None
    assert keystore.load_key("nobody") is None


def test_load_key_corrupt_entry(mock_keyring_lib):
    mock_keyring_lib.get_password.return_value = "!!!not base64!!!"
    assert keystore.load_key("alice") is None


def test_load_key_empty_entry(mock_keyring_lib):
    mock_keyring_lib.get_password.return_value = ""
    assert keystore.load_key("alice") is None


def test_delete_key(mock_keyring_lib):
    assert keystore.delete_key("alice") is True
    mock_keyring_lib.delete_password.assert_called_once_with("filevault", "alice")


def test_delete_key_missing(mock_keyring_lib):
    mock_keyring_lib.delete_password.side_effect = PasswordDeleteError("gone")
    assert keystore.delete_key("alice") is False


# ==============================================================================
# Tests: backend assessment
# ==============================================================================

def _backend(class_name, priority=None):
    cls = type(class_name, (), {})
    backend = cls()
    if priority is not None:
        backend.priority = priority
    return backend


@pytest.mark.parametrize("name", ["PlaintextKeyring", "FailKeyring", "EncryptedFile"])
def test_assess_insecure_backends(mock_keyring_lib, name):
    mock_keyring_lib.get_keyring.return_value = _backend(name, priority=1)
    is_secure, msg = keystore.assess_keyring_backend()
    assert is_secure is False
    assert "insecure" in msg


def test_assess_zero_priority(mock_keyring_lib):
    mock_keyring_lib.get_keyring.return_value = _backend("Mystery", priority=0)
    is_secure, msg = keystore.assess_keyring_backend()
    assert is_secure is False
    assert "priority=0" in msg


def test_assess_known_backend(mock_keyring_lib):
    mock_keyring_lib.get_keyring.return_value = _backend("SecretServiceKeyring", priority=5)
    is_secure, msg = keystore.assess_keyring_backend()
    assert is_secure is True
    assert "acceptable" in msg


def test_assess_unknown_backend(mock_keyring_lib):
    mock_keyring_lib.get_keyring.return_value = _backend("Mystery", priority=2)
    is_secure, msg = keystore.assess_keyring_backend()
    assert is_secure is True
    assert "caution" in msg


def test_assess_backend_error(mock_keyring_lib):
    mock_keyring_lib.get_keyring.side_effect = KeyringError("boom")
    is_secure, msg = keystore.assess_keyring_backend()
    assert is_secure is False
    assert "boom" in msg
