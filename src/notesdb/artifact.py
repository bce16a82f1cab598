"""Artifact identity, type classification and the in-memory artifact record."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, Union

from notesdb.errors import SchemaPathError
from notesdb.naming import TreePath, join_parts, parse_tree_path, unique_name


class ArtifactType(IntEnum):
    """Which identity fields are populated, as a bit set (S=1, N=2, A=4)."""

    UNK = 0
    S = 1
    SN = 3
    SNA = 7

    @classmethod
    def classify(cls, section: str = "", notebook: str = "", filename: str = "") -> ArtifactType:
        n = 0
        if section:
            n |= 1
        if notebook:
            n |= 2
        if filename:
            n |= 4
        return cls(n)


def _check_shape(section: str, notebook: str, filename: str) -> None:
    if filename and not notebook:
        raise SchemaPathError(f"Filename '{filename}' given without a notebook")
    if notebook and not section:
        raise SchemaPathError(f"Notebook '{notebook}' given without a section")


@dataclass(frozen=True)
class ArtifactSearch:
    """Identity criteria for a lookup: trailing fields may be left empty."""

    section: str = ""
    notebook: str = ""
    filename: str = ""

    def __post_init__(self) -> None:
        _check_shape(self.section, self.notebook, self.filename)

    @property
    def type(self) -> ArtifactType:
        return ArtifactType.classify(self.section, self.notebook, self.filename)

    @property
    def path(self) -> str:
        return join_parts(self.section, self.notebook, self.filename)

    def info(self) -> str:
        return f"{self.section}|{self.notebook}|{self.filename}"

    @classmethod
    def coerce(cls, obj: SearchLike) -> ArtifactSearch:
        """Build a search from a search, an Artifact, or a mapping of fields."""
        if isinstance(obj, ArtifactSearch):
            return obj
        if isinstance(obj, Artifact):
            return obj.search()
        if isinstance(obj, Mapping):
            return cls(
                section=obj.get("section") or "",
                notebook=obj.get("notebook") or "",
                filename=obj.get("filename") or "",
            )
        raise TypeError(f"Cannot build an artifact search from {type(obj).__name__}")


def is_duplicate_search(src: SearchLike, dst: SearchLike) -> bool:
    """True when two searches name the same identity (case-sensitive)."""
    a = ArtifactSearch.coerce(src)
    b = ArtifactSearch.coerce(dst)
    return (a.section, a.notebook, a.filename) == (b.section, b.notebook, b.filename)


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return datetime.now()


@dataclass
class ArtifactMeta:
    """Metadata kept beside the artifact file, keyed by its relative path."""

    accessed: datetime = field(default_factory=datetime.now)
    created: datetime = field(default_factory=datetime.now)
    updated: datetime = field(default_factory=datetime.now)
    tags: list[str] = field(default_factory=list)
    layout: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update(
            {
                "accessed": self.accessed.isoformat(),
                "created": self.created.isoformat(),
                "updated": self.updated.isoformat(),
                "tags": list(self.tags),
                "layout": self.layout,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ArtifactMeta:
        known = {"accessed", "created", "updated", "tags", "layout"}
        meta = cls(
            accessed=_parse_ts(data.get("accessed")),
            created=_parse_ts(data.get("created")),
            updated=_parse_ts(data.get("updated")),
            layout=dict(data.get("layout") or {}),
            extra={k: v for k, v in data.items() if k not in known},
        )
        for tag in data.get("tags") or []:
            meta.add_tag(tag)
        return meta


class Artifact:
    """A single managed text file (or a section/notebook node) and its state.

    Instances resident in a binder are shared: the schema and the recents
    cache hold the same object, so edits through either are visible to both.
    """

    def __init__(
        self,
        section: str = "",
        notebook: str = "",
        filename: str = "",
        root: Path | None = None,
    ) -> None:
        _check_shape(section, notebook, filename)
        self.section = section
        self.notebook = notebook
        self.filename = filename
        self.root = root
        self.loaded = False
        self.meta = ArtifactMeta()
        self._buf = ""
        self._dirty = False

    # ── Factories ─────────────────────────────────────────────

    @classmethod
    def empty(cls) -> Artifact:
        return cls()

    @classmethod
    def from_fields(cls, search: SearchLike, root: Path | None = None) -> Artifact:
        s = ArtifactSearch.coerce(search)
        return cls(s.section, s.notebook, s.filename, root=root)

    @classmethod
    def from_tree_path(cls, path: str | TreePath, root: Path | None = None) -> Artifact:
        tp = path if isinstance(path, TreePath) else parse_tree_path(path)
        return cls(tp.section, tp.notebook, tp.filename, root=root)

    # ── Identity ──────────────────────────────────────────────

    @property
    def type(self) -> ArtifactType:
        return ArtifactType.classify(self.section, self.notebook, self.filename)

    @property
    def path(self) -> str:
        """Path relative to the namespace root."""
        return join_parts(self.section, self.notebook, self.filename)

    @property
    def absolute(self) -> Path:
        if self.root is None:
            raise ValueError(f"Artifact {self.info()} has no root directory")
        return self.root / self.path

    def search(self) -> ArtifactSearch:
        return ArtifactSearch(self.section, self.notebook, self.filename)

    def info(self) -> str:
        return f"{self.section}|{self.notebook}|{self.filename}"

    def is_equal(self, other: Artifact | ArtifactSearch) -> bool:
        return is_duplicate_search(self, other)

    def is_empty(self) -> bool:
        return not (self.section or self.notebook or self.filename)

    def has_section(self) -> bool:
        return self.section != ""

    def has_notebook(self) -> bool:
        return self.notebook != ""

    def has_filename(self) -> bool:
        return self.filename != ""

    def make_unique(self, now: datetime, attempt: int = 0) -> Artifact:
        """Suffix the last populated identity field so the path is new."""
        if self.type == ArtifactType.SNA:
            self.filename = unique_name(self.filename, now, attempt)
        elif self.type == ArtifactType.SN:
            self.notebook = unique_name(self.notebook, now, attempt)
        elif self.type == ArtifactType.S:
            self.section = unique_name(self.section, now, attempt)
        return self

    def clone(self) -> Artifact:
        return copy.deepcopy(self)

    # ── Content & dirty tracking ──────────────────────────────

    @property
    def buf(self) -> str:
        return self._buf

    @buf.setter
    def buf(self, value: str) -> None:
        self._dirty = True
        self._buf = value

    def load_content(self, text: str) -> None:
        """Replace the buffer with content read from disk; leaves it clean."""
        self._buf = text
        self._dirty = False
        self.loaded = True

    def is_dirty(self) -> bool:
        return self._dirty

    def make_clean(self) -> None:
        self._dirty = False

    def make_dirty(self) -> None:
        self._dirty = True

    # ── Metadata passthrough ──────────────────────────────────

    @property
    def tags(self) -> list[str]:
        return self.meta.tags

    def add_tag(self, tag: str) -> None:
        self.meta.add_tag(tag)

    @property
    def layout(self) -> dict[str, Any]:
        return self.meta.layout

    @property
    def accessed(self) -> datetime:
        return self.meta.accessed

    @accessed.setter
    def accessed(self, value: datetime) -> None:
        self.meta.accessed = value

    @property
    def created(self) -> datetime:
        return self.meta.created

    @created.setter
    def created(self, value: datetime) -> None:
        self.meta.created = value

    @property
    def updated(self) -> datetime:
        return self.meta.updated

    @updated.setter
    def updated(self, value: datetime) -> None:
        self.meta.updated = value

    def __repr__(self) -> str:
        return f"Artifact({self.info()!r}, type={self.type.name})"

    def __str__(self) -> str:
        return (
            f"section: '{self.section}', notebook: '{self.notebook}', "
            f"filename: '{self.filename}', type: {self.type.name}, "
            f"loaded: {self.loaded}, dirty: {self._dirty}, "
            f"accessed: {self.accessed.isoformat()}, created: {self.created.isoformat()}, "
            f"updated: {self.updated.isoformat()}, tags: '{'|'.join(self.tags)}'"
        )


SearchLike = Union[ArtifactSearch, Artifact, Mapping[str, str]]
