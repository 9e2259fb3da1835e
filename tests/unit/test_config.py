"""Unit tests for settings and vault construction."""

import pytest
from unittest.mock import patch

from filevault.core.config import VaultSettings, build_vault
from filevault.core.exceptions import InvalidKeyError, UnsupportedCipherError
from filevault.security.keys import VaultKey


def test_from_env_defaults():
    settings = VaultSettings.from_env({})
    assert settings.key is None
    assert settings.cipher == "AES-256-GCM"
    assert settings.chunk_size == 64 * 1024
    assert settings.root is None
    assert settings.extension == ".enc"
    assert settings.keyring_account is None


def test_from_env_values(tmp_path):
    env = {
        "FILEVAULT_KEY": "base64:abc=",
        "FILEVAULT_CIPHER": "AES-128-CBC",
        "FILEVAULT_CHUNK_SIZE": "1024",
        "FILEVAULT_ROOT": str(tmp_path),
        "FILEVAULT_EXTENSION": ".vault",
        "FILEVAULT_KEYRING_ACCOUNT": "ops",
    }
    settings = VaultSettings.from_env(env)
    assert settings.key == "base64:abc="
    assert settings.cipher == "AES-128-CBC"
    assert settings.chunk_size == 1024
    assert settings.root == str(tmp_path)
    assert settings.extension == ".vault"
    assert settings.keyring_account == "ops"


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("FILEVAULT_CIPHER", "CHACHA20-POLY1305")
    assert VaultSettings.from_env().cipher == "CHACHA20-POLY1305"


def test_from_env_bad_chunk_size():
    with pytest.raises(ValueError, match="CHUNK_SIZE"):
        VaultSettings.from_env({"FILEVAULT_CHUNK_SIZE": "lots"})


def test_repr_hides_key():
    settings = VaultSettings(key="base64:c2VjcmV0")
    assert "c2VjcmV0" not in repr(settings)
    assert "<set>" in repr(settings)


def test_build_vault(tmp_path):
    key = VaultKey.generate(16)
    settings = VaultSettings(
        key=key.encode(), cipher="AES-128-GCM", chunk_size=512, root=str(tmp_path), extension=".x"
    )
    vault = build_vault(settings)
    assert vault.cipher.name == "AES-128-GCM"
    assert vault.codec.chunk_size == 512
    assert vault.naming.extension == ".x"
    assert vault.storage.root == tmp_path.resolve()


def test_build_vault_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("FILEVAULT_KEY", VaultKey.generate().encode())
    monkeypatch.setenv("FILEVAULT_ROOT", str(tmp_path))
    vault = build_vault()
    assert vault.storage.root == tmp_path.resolve()


def test_build_vault_without_key(tmp_path):
    with pytest.raises(InvalidKeyError, match="No vault key configured"):
        build_vault(VaultSettings(root=str(tmp_path)))


def test_build_vault_rejects_unknown_cipher(tmp_path):
    settings = VaultSettings(key=VaultKey.generate().encode(), cipher="ROT13", root=str(tmp_path))
    with pytest.raises(UnsupportedCipherError):
        build_vault(settings)


def test_build_vault_from_keyring(tmp_path):
    key = VaultKey.generate()
    with patch("filevault.security.keystore.load_key", return_value=key) as load:
        vault = build_vault(VaultSettings(root=str(tmp_path), keyring_account="ops"))
    load.assert_called_once_with("ops")
    assert vault._current_key() == key


def test_build_vault_keyring_empty(tmp_path):
    with patch("filevault.security.keystore.load_key", return_value=None):
        with pytest.raises(InvalidKeyError, match="keyring"):
            build_vault(VaultSettings(root=str(tmp_path), keyring_account="ops"))
