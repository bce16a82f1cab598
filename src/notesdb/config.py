"""Binder configuration.

``BinderOptions`` are the process-level knobs (environment variables >
notesdb.toml > defaults). ``BinderConfig`` is the record persisted as
``config.json`` beside the metadata file and rewritten on every save.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from notesdb.errors import ConfigError
from notesdb.naming import TRASH_NAME

_DEFAULT_ROOT = Path.home() / ".notesdb"
_CONFIG_FILENAME = "notesdb.toml"

CONFIG_FILE = "config.json"
META_FILE = "meta.json"
DEFAULT_IGNORE = (".DS_Store", ".placeholder", TRASH_NAME)


@dataclass
class BinderOptions:
    """Options used to open or create a binder."""

    binder_name: str = "adb"
    root: Path = _DEFAULT_ROOT
    config_root: Path | None = None
    ignore: list[str] = field(default_factory=list)
    buf_size: int = 64 * 1024
    save_interval: float = 5.0
    max_recents: int = 5

    @property
    def config_dir(self) -> Path:
        return Path(self.config_root) if self.config_root else Path(self.root)

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILE


# Persisted keys use the on-disk (camelCase) names.
_PERSISTED = {
    "binder_name": "binderName",
    "config_file": "configFile",
    "config_root": "configRoot",
    "dbdir": "dbdir",
    "trash": "trash",
    "meta_file": "metaFile",
    "root": "root",
    "logdir": "logdir",
    "save_interval": "saveInterval",
    "buf_size": "bufSize",
    "max_recents": "maxRecents",
}
_REQUIRED = ("configFile", "dbdir")


@dataclass
class BinderConfig:
    """The persisted binder record."""

    binder_name: str
    config_file: Path
    config_root: Path
    dbdir: Path
    trash: Path
    meta_file: Path
    root: Path
    logdir: Path
    save_interval: float = 5.0
    buf_size: int = 64 * 1024
    max_recents: int = 5

    @classmethod
    def initial(cls, options: BinderOptions) -> BinderConfig:
        """Derive the record for a brand new binder."""
        root = Path(options.root)
        config_root = options.config_dir
        dbdir = root / options.binder_name
        return cls(
            binder_name=options.binder_name,
            config_file=config_root / CONFIG_FILE,
            config_root=config_root,
            dbdir=dbdir,
            trash=dbdir / TRASH_NAME,
            meta_file=config_root / META_FILE,
            root=root,
            logdir=config_root,
            save_interval=options.save_interval,
            buf_size=options.buf_size,
            max_recents=options.max_recents,
        )

    @classmethod
    def from_dict(cls, data: dict) -> BinderConfig:
        missing = [key for key in _REQUIRED if not data.get(key)]
        if missing:
            raise ConfigError(f"The binder configuration is missing: {', '.join(missing)}")
        kwargs = {}
        for f in fields(cls):
            key = _PERSISTED[f.name]
            if key not in data:
                continue
            value = data[key]
            if f.type == "Path":
                value = Path(value)
            kwargs[f.name] = value
        dbdir = kwargs["dbdir"]
        config_file = kwargs["config_file"]
        kwargs.setdefault("binder_name", dbdir.name)
        kwargs.setdefault("config_root", config_file.parent)
        kwargs.setdefault("trash", dbdir / TRASH_NAME)
        kwargs.setdefault("meta_file", config_file.parent / META_FILE)
        kwargs.setdefault("root", dbdir.parent)
        kwargs.setdefault("logdir", config_file.parent)
        return cls(**kwargs)

    @classmethod
    def read(cls, path: Path) -> BinderConfig:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Can't read notesdb configuration {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"The notesdb configuration {path} must hold a JSON object")
        return cls.from_dict(data)

    def apply_overrides(self, options: BinderOptions) -> None:
        """Runtime options win over persisted values for these knobs."""
        self.buf_size = options.buf_size
        self.save_interval = options.save_interval
        self.max_recents = options.max_recents

    def to_dict(self) -> dict:
        return {
            _PERSISTED[k]: (str(v) if isinstance(v, Path) else v)
            for k, v in asdict(self).items()
        }

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent="\t")


def load_options(config_path: Path | None = None) -> BinderOptions:
    """Load binder options from environment variables and optional notesdb.toml.

    Priority: environment variables > notesdb.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _DEFAULT_ROOT / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    binder_data = file_data.get("binder", {})
    config_root = os.getenv("NOTESDB_CONFIG_ROOT", binder_data.get("config_root"))

    return BinderOptions(
        binder_name=os.getenv("NOTESDB_NAME", binder_data.get("name", "adb")),
        root=Path(os.getenv("NOTESDB_ROOT", binder_data.get("root", str(_DEFAULT_ROOT)))).expanduser(),
        config_root=Path(config_root).expanduser() if config_root else None,
        ignore=list(binder_data.get("ignore", [])),
        buf_size=int(os.getenv("NOTESDB_BUF_SIZE", binder_data.get("buf_size", 64 * 1024))),
        save_interval=float(
            os.getenv("NOTESDB_SAVE_INTERVAL", binder_data.get("save_interval", 5.0))
        ),
        max_recents=int(os.getenv("NOTESDB_MAX_RECENTS", binder_data.get("max_recents", 5))),
    )
