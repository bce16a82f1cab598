"""Name validation and relative path handling for binder entries."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath

from notesdb.errors import InvalidNameError, SchemaPathError

# Character class body, as it appears inside a regex [...]
VALID_NAME_CHARS = "-\\.+@_!$&0-9a-zA-Z "

_NAME_RE = re.compile(f"^[{VALID_NAME_CHARS}]+$")

TRASH_NAME = "Trash"
DEFAULT_NAME = "Default"

# Allowed by the character class but resolve to the current or parent directory
RELATIVE_NAMES = (".", "..")


def is_valid_name(name: str) -> bool:
    return bool(name) and name not in RELATIVE_NAMES and _NAME_RE.match(name) is not None


def validate_name(name: str, field: str) -> str:
    """Return ``name`` unchanged or raise InvalidNameError naming the field."""
    if name in RELATIVE_NAMES:
        raise InvalidNameError(
            field, name, VALID_NAME_CHARS, reason="'.' and '..' are not names."
        )
    if not is_valid_name(name):
        raise InvalidNameError(field, name, VALID_NAME_CHARS)
    return name


@dataclass(frozen=True)
class TreePath:
    """A relative binder path split into its three fixed positions."""

    section: str = ""
    notebook: str = ""
    filename: str = ""

    @property
    def depth(self) -> int:
        return sum(1 for part in (self.section, self.notebook, self.filename) if part)

    def __str__(self) -> str:
        return join_parts(self.section, self.notebook, self.filename)


def parse_tree_path(path: str) -> TreePath:
    """Split a relative path into section/notebook/filename.

    Both ``/`` and ``\\`` separate segments. More than three segments is an
    error: nothing below a notebook's files is part of the schema.
    """
    parts = [p for p in re.split(r"[/\\]", path) if p]
    if not parts:
        raise SchemaPathError("Empty path cannot be mapped to a binder entry")
    if len(parts) > 3:
        raise SchemaPathError(
            f"Path '{path}' is nested deeper than section/notebook/filename"
        )
    return TreePath(*parts)


def join_parts(*parts: str) -> str:
    """Join the non-empty parts with ``/``."""
    return str(PurePosixPath(*[p for p in parts if p])) if any(parts) else ""


def unique_name(name: str, now: datetime, attempt: int = 0) -> str:
    """Collision-free variant of ``name`` built from a timestamp.

    The result always starts with ``name``. ``attempt`` disambiguates
    repeated collisions within the same clock tick.
    """
    stamp = now.strftime("%Y%m%d%H%M%S")
    suffix = f".{stamp}" if attempt == 0 else f".{stamp}-{attempt + 1}"
    return f"{name}{suffix}"


def is_under(path: str, prefix: str) -> bool:
    """True when ``path`` equals ``prefix`` or lies beneath it."""
    return path == prefix or path.startswith(prefix + "/")
