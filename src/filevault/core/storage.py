"""
Storage collaborator for the vault engine

The engine only needs sequential byte streams over named files, so any backend
that implements :class:`StorageBackend` will do (local disk, object store, ...).

Structure Map for LocalStorage:
==============================
 - <storage_root>/
      - file.txt
      - file.txt.enc
      - nested/dir/report.csv.enc
==============================
For reference:
> Names are always relative to the storage root, using "/" as separator
> A name that resolves outside the root is rejected
> Parent directories are created on write
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Protocol, runtime_checkable

from .exceptions import InvalidPathError, SourceNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class StorageBackend(Protocol):
    """What the engine requires from a storage backend."""

    def exists(self, name: str) -> bool: ...

    def open_read(self, name: str) -> BinaryIO: ...

    def open_write(self, name: str) -> BinaryIO: ...

    def delete(self, name: str) -> None: ...

    def full_path(self, name: str) -> str: ...


class LocalStorage:
    """Storage rooted in a local directory."""

    def __init__(self, root_path: Optional[str] = None):
        self.root = (
            Path(root_path).expanduser() if root_path else Path.home() / ".filevault"
        )
        self.root.mkdir(parents=True, exist_ok=True)
        self.root = self.root.resolve()

    def __repr__(self) -> str:
        return f"LocalStorage({str(self.root)!r})"

    def path(self, name: str) -> Path:
        if not name:
            raise InvalidPathError("Empty file name")
        p = (self.root / name).resolve()
        if p != self.root and self.root not in p.parents:
            raise InvalidPathError(f"{name!r} resolves outside the storage root")
        return p

    def full_path(self, name: str) -> str:
        return str(self.path(name))

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def open_read(self, name: str) -> BinaryIO:
        p = self.path(name)
        if not p.is_file():
            raise SourceNotFoundError(f"File {name!r} not found in {self.root}")
        return open(p, "rb")

    def open_write(self, name: str) -> BinaryIO:
        p = self.path(name)
        p.parent.mkdir(parents=True, exist_ok=True)
        return open(p, "wb")

    def delete(self, name: str) -> None:
        p = self.path(name)
        if p.exists():
            p.unlink()
            logger.debug("deleted %s", p)

    # Conveniences, not needed by the engine
    def put(self, name: str, data: bytes) -> int:
        with self.open_write(name) as f:
            return f.write(data)

    def get(self, name: str) -> bytes:
        with self.open_read(name) as f:
            return f.read()

    def size(self, name: str) -> int:
        return self.path(name).stat().st_size

    def files(self) -> Iterator[str]:
        """Yield every stored file name, relative to the root, sorted."""
        for p in sorted(self.root.rglob("*")):
            if p.is_file():
                yield p.relative_to(self.root).as_posix()
