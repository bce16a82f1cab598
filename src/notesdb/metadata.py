"""Side-channel metadata for artifacts, persisted as one JSON document.

Entries are keyed by the artifact's path relative to the binder data
directory (``section/notebook/filename``; trashed artifacts live under
``Trash/...``). They outlive the artifact file itself.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

from notesdb.artifact import ArtifactMeta
from notesdb.errors import ConfigError
from notesdb.fs import FileSystem
from notesdb.naming import is_under

logger = logging.getLogger(__name__)


class MetadataStore:
    """Mapping of relative artifact path -> ArtifactMeta."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._entries: dict[str, ArtifactMeta] = {}

    def read(self) -> None:
        """Load the side file if present. Called once while opening a binder."""
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise ConfigError(f"Corrupt metadata file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Metadata file {self.path} must hold a JSON object")
        self._entries = {key: ArtifactMeta.from_dict(value) for key, value in data.items()}
        logger.debug("Read metadata for %d artifacts from %s", len(self._entries), self.path)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, key: str) -> ArtifactMeta | None:
        return self._entries.get(key)

    def set(self, key: str, meta: ArtifactMeta) -> None:
        self._entries[key] = meta

    def attach(self, key: str, meta: ArtifactMeta) -> tuple[ArtifactMeta, bool]:
        """Return the stored record for ``key``, seeding it with ``meta`` if absent.

        The boolean is True when the record already existed.
        """
        existing = self._entries.get(key)
        if existing is not None:
            return existing, True
        self._entries[key] = meta
        return meta, False

    def rekey(self, old_prefix: str, new_prefix: str) -> int:
        """Move every entry at or below ``old_prefix`` to ``new_prefix``."""
        moved = 0
        for key in [k for k in self._entries if is_under(k, old_prefix)]:
            new_key = new_prefix + key[len(old_prefix):]
            self._entries[new_key] = self._entries.pop(key)
            moved += 1
        return moved

    def drop(self, prefix: str) -> int:
        doomed = [k for k in self._entries if is_under(k, prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def to_dict(self) -> dict[str, dict]:
        return {key: meta.to_dict() for key, meta in self._entries.items()}

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent="\t", ensure_ascii=False)

    async def save(self, fs: FileSystem) -> None:
        """Overwrite the side file with the whole mapping."""
        logger.debug("Saving metadata: %s", self.path)
        await fs.write_text(self.path, self.dumps())
