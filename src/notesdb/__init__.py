"""notesdb: a hierarchical, filesystem-backed store for plain-text notes.

Layout:
    ~/.notesdb/
    ├── config.json                    # Persisted binder configuration
    ├── meta.json                      # Tags/timestamps keyed by relative path
    └── adb/                           # One binder ("adb" by default)
        ├── Default/                   # Section
        │   └── notebook/              # Notebook
        │       └── note.md            # Artifact
        └── Trash/                     # Soft-deleted entries, same shape
"""

from notesdb.artifact import Artifact, ArtifactMeta, ArtifactSearch, ArtifactType
from notesdb.binder import Binder
from notesdb.config import BinderConfig, BinderOptions, load_options
from notesdb.errors import (
    ArtifactNotFoundError,
    BinderStateError,
    ConfigError,
    InvalidNameError,
    NotesDBError,
    PartialRenameError,
    SchemaPathError,
)
from notesdb.events import BinderEvent, EventBus
from notesdb.fs import FileSystem, LocalFileSystem
from notesdb.metadata import MetadataStore
from notesdb.recents import RecentsCache

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "ArtifactMeta",
    "ArtifactNotFoundError",
    "ArtifactSearch",
    "ArtifactType",
    "Binder",
    "BinderConfig",
    "BinderEvent",
    "BinderOptions",
    "BinderStateError",
    "ConfigError",
    "EventBus",
    "FileSystem",
    "InvalidNameError",
    "LocalFileSystem",
    "MetadataStore",
    "NotesDBError",
    "PartialRenameError",
    "RecentsCache",
    "SchemaPathError",
    "load_options",
]
