"""Unit tests for the naming policy."""

import pytest

from filevault.core.naming import NamingPolicy


def test_default_extension():
    policy = NamingPolicy()
    assert policy.encrypted_name("file.txt") == "file.txt.enc"
    assert policy.decrypted_name("file.txt.enc") == "file.txt"


def test_only_trailing_marker_is_stripped():
    policy = NamingPolicy()
    assert policy.decrypted_name("a.enc.b.enc") == "a.enc.b"


def test_name_without_marker_gets_dec_suffix():
    policy = NamingPolicy()
    assert policy.decrypted_name("archive.bin") == "archive.bin.dec"
    assert policy.decrypted_name(".enc") == ".enc.dec"


def test_custom_extension():
    policy = NamingPolicy(".vault")
    assert policy.encrypted_name("x") == "x.vault"
    assert policy.decrypted_name("x.vault") == "x"
    assert policy.decrypted_name("x.enc") == "x.enc.dec"


@pytest.mark.parametrize("ext", ["", "enc"])
def test_invalid_extension(ext):
    with pytest.raises(ValueError):
        NamingPolicy(ext)
