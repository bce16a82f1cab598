"""Filesystem gateway used by the binder.

Every primitive is a coroutine. ``LocalFileSystem`` runs the blocking call
in a worker thread so the event loop stays free while disk I/O completes.
"""

from __future__ import annotations

import asyncio
import fnmatch
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class FileStat:
    atime: datetime
    mtime: datetime
    birthtime: datetime


@dataclass(frozen=True)
class WalkEntry:
    """One node found by ``walk``, relative to the walk root."""

    path: str
    is_dir: bool

    @property
    def depth(self) -> int:
        return self.path.count("/") + 1


@runtime_checkable
class FileSystem(Protocol):
    """Primitives the binder consumes. Paths are absolute."""

    async def exists(self, path: Path) -> bool: ...

    async def mkdir_all(self, path: Path) -> None: ...

    async def read_text(self, path: Path) -> str: ...

    async def write_text(self, path: Path, data: str) -> None: ...

    async def move(self, src: Path, dst: Path) -> None:
        """Rename a file or directory tree; parents of ``dst`` are created."""
        ...

    async def remove(self, path: Path) -> None:
        """Delete a file or a whole directory tree. Missing paths are ignored."""
        ...

    async def stat(self, path: Path) -> FileStat: ...

    async def walk(self, root: Path, ignore: Iterable[str] = ()) -> list[WalkEntry]:
        """List everything under ``root`` (pre-order, sorted by name).

        A name matching any ``ignore`` pattern, or starting with ``.``, is
        skipped together with everything beneath it.
        """
        ...


def is_ignored(name: str, ignore: Iterable[str]) -> bool:
    if name.startswith("."):
        return True
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in ignore)


def _stat(path: Path) -> FileStat:
    st = path.stat()
    # st_birthtime only exists on macOS/BSD (and Windows on 3.12+)
    birth = getattr(st, "st_birthtime", None) or st.st_ctime
    return FileStat(
        atime=datetime.fromtimestamp(st.st_atime),
        mtime=datetime.fromtimestamp(st.st_mtime),
        birthtime=datetime.fromtimestamp(birth),
    )


def _walk(root: Path, ignore: tuple[str, ...]) -> list[WalkEntry]:
    entries: list[WalkEntry] = []
    if not root.is_dir():
        return entries

    def visit(directory: Path, prefix: str) -> None:
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            if is_ignored(child.name, ignore):
                continue
            rel = f"{prefix}{child.name}"
            if child.is_dir():
                entries.append(WalkEntry(rel, True))
                visit(child, f"{rel}/")
            else:
                entries.append(WalkEntry(rel, False))

    visit(root, "")
    return entries


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _move(src: Path, dst: Path) -> None:
    if dst.exists():
        raise FileExistsError(f"Destination already exists: {dst}")
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(src), str(dst))


def _write_text(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data, encoding="utf-8")


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(os.path.exists, path)

    async def mkdir_all(self, path: Path) -> None:
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def write_text(self, path: Path, data: str) -> None:
        await asyncio.to_thread(_write_text, path, data)

    async def move(self, src: Path, dst: Path) -> None:
        await asyncio.to_thread(_move, src, dst)

    async def remove(self, path: Path) -> None:
        await asyncio.to_thread(_remove, path)

    async def stat(self, path: Path) -> FileStat:
        return await asyncio.to_thread(_stat, path)

    async def walk(self, root: Path, ignore: Iterable[str] = ()) -> list[WalkEntry]:
        return await asyncio.to_thread(_walk, root, tuple(ignore))
