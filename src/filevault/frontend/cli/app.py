"""
Command-line adapter for FileVault.

Thin wrapper that builds a vault from the environment (see
:mod:`filevault.core.config`) plus command-line overrides and forwards to it:

    filevault generate-key [--save ACCOUNT]
    filevault encrypt file.txt [encrypted.enc] [--copy]
    filevault decrypt file.txt.enc [file.txt] [--copy]
    filevault stream file.txt.enc > file.txt
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import BinaryIO, List, Mapping, Optional

from filevault.core.config import VaultSettings, build_vault
from filevault.core.exceptions import FileVaultError
from filevault.security.ciphers import SUPPORTED_CIPHERS, get_cipher
from filevault.security.keys import VaultKey

from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filevault",
        description="Encrypt and decrypt files of any size in constant memory.",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Storage root directory (default: $FILEVAULT_ROOT or ~/.filevault)",
    )
    parser.add_argument(
        "--key",
        default=None,
        help="Key as base64:<data> (default: $FILEVAULT_KEY)",
    )
    parser.add_argument(
        "--cipher",
        default=None,
        type=str.upper,
        choices=SUPPORTED_CIPHERS,
        help="Cipher suite (default: $FILEVAULT_CIPHER or AES-256-GCM)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Plaintext bytes per chunk (default: $FILEVAULT_CHUNK_SIZE or 65536)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate-key", help="Print a new random key")
    gen.add_argument(
        "--save",
        metavar="ACCOUNT",
        default=None,
        help="Also store the key in the OS keyring under this account",
    )

    for name, verb in (("encrypt", "Encrypt"), ("decrypt", "Decrypt")):
        p = sub.add_parser(name, help=f"{verb} a file inside the storage root")
        p.add_argument("source", help="Source file name, relative to the root")
        p.add_argument("destination", nargs="?", default=None, help="Destination file name")
        p.add_argument(
            "--copy",
            action="store_true",
            help="Keep the source file instead of deleting it",
        )

    stream = sub.add_parser("stream", help="Decrypt a file to standard output")
    stream.add_argument("source", help="Encrypted file name, relative to the root")
    return parser


def _settings_from_args(args: argparse.Namespace, environ: Optional[Mapping[str, str]]) -> VaultSettings:
    settings = VaultSettings.from_env(environ)
    if args.root is not None:
        settings.root = args.root
    if args.key is not None:
        settings.key = args.key
    if args.cipher is not None:
        settings.cipher = args.cipher
    if args.chunk_size is not None:
        settings.chunk_size = args.chunk_size
    return settings


def _generate_key(args: argparse.Namespace, settings: VaultSettings) -> None:
    key = VaultKey.generate(get_cipher(settings.cipher).key_size)
    if args.save:
        from filevault.security.keystore import assess_keyring_backend, save_key

        is_secure, message = assess_keyring_backend()
        if not is_secure:
            logger.warning("Keyring backend may be insecure: %s", message)
        save_key(args.save, key)
    print(key.encode())


def main(
    argv: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = _settings_from_args(args, environ)
        if args.command == "generate-key":
            _generate_key(args, settings)
            return 0

        vault = build_vault(settings)
        if args.command == "stream":
            vault.stream_decrypt(args.source, stdout if stdout is not None else sys.stdout.buffer)
            return 0

        if args.command == "encrypt":
            op = vault.encrypt_copy if args.copy else vault.encrypt
        else:
            op = vault.decrypt_copy if args.copy else vault.decrypt
        written = op(args.source, args.destination)
        print(written)
        return 0
    except (FileVaultError, ValueError) as exc:
        print(f"filevault: error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
