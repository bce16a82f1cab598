"""Exception taxonomy for the binder.

I/O failures are not wrapped: they surface as the builtin ``OSError``
subclasses raised by the filesystem layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notesdb.artifact import ArtifactSearch


class NotesDBError(Exception):
    """Base class for every error raised by notesdb."""


class ConfigError(NotesDBError):
    """The binder configuration is missing or unusable. Not recoverable."""


class InvalidNameError(NotesDBError, ValueError):
    """A section, notebook, filename or binder name uses disallowed characters."""

    def __init__(self, field: str, value: str, allowed: str, reason: str | None = None) -> None:
        self.field = field
        self.value = value
        if reason is None:
            reason = f"Can only use '{allowed}'."
        super().__init__(f"Invalid {field} name '{value}'.  {reason}")


class ArtifactNotFoundError(NotesDBError, LookupError):
    """The requested section, notebook, artifact or trash entry is absent."""


class SchemaPathError(NotesDBError, ValueError):
    """A path on disk does not fit the section/notebook/filename shape."""


class BinderStateError(NotesDBError):
    """An operation was rejected before any mutation took place."""


class PartialRenameError(BinderStateError):
    """Rename created the destination but could not remove the source.

    Both entries are present in the binder when this is raised.
    """

    def __init__(self, src: ArtifactSearch, dst: ArtifactSearch) -> None:
        self.src = src
        self.dst = dst
        super().__init__(
            f"Rename partially applied, source still present: "
            f"{src.info()} -> {dst.info()}"
        )
