"""Binder: a filesystem-backed store of plain-text artifacts.

Layout on disk:
    {root}/{binder_name}/
    ├── {section}/{notebook}/{filename}    # active artifacts ("notes")
    └── Trash/{section}/{notebook}/{filename}  # soft-deleted ("trash")

    {config_root}/config.json              # BinderConfig, rewritten on save
    {config_root}/meta.json                # tags/timestamps keyed by path

The directory tree is the source of truth. A SchemaTree mirrors it in
memory; structural changes are applied to the schema only after the disk
operation that backs them has completed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

import frontmatter

from notesdb import events
from notesdb._schema import NOTES, TRASH, AREAS, Namespace, SchemaTree
from notesdb.artifact import (
    Artifact,
    ArtifactMeta,
    ArtifactSearch,
    ArtifactType,
    SearchLike,
    is_duplicate_search,
)
from notesdb.config import DEFAULT_IGNORE, BinderConfig, BinderOptions
from notesdb.errors import (
    ArtifactNotFoundError,
    BinderStateError,
    ConfigError,
    InvalidNameError,
    NotesDBError,
    PartialRenameError,
    SchemaPathError,
)
from notesdb.fs import FileStat, FileSystem, LocalFileSystem, is_ignored
from notesdb.metadata import MetadataStore
from notesdb.naming import (
    DEFAULT_NAME,
    TRASH_NAME,
    VALID_NAME_CHARS,
    is_under,
    join_parts,
    parse_tree_path,
    validate_name,
)
from notesdb.recents import RecentsCache

logger = logging.getLogger(__name__)

SHUTDOWN_MESSAGE = "The database is shutdown."

Clock = Callable[[], datetime]


def _frontmatter_tags(text: str) -> list[str]:
    """Tags declared in a YAML frontmatter block, if the text has one."""
    try:
        post = frontmatter.loads(text)
    except Exception:
        return []
    tags = post.metadata.get("tags")
    if isinstance(tags, str):
        return [tags]
    if isinstance(tags, list):
        return [str(t) for t in tags]
    return []


class Binder:
    """One binder bound to one data directory.

    Construction opens (or creates) the persisted configuration and fails
    fast with ``ConfigError``. ``await load()`` then scans the directory
    tree and starts the periodic save task; ``await shutdown()`` saves
    everything and stops it. Only one Binder may own a root at a time.
    """

    def __init__(
        self,
        options: BinderOptions | None = None,
        *,
        fs: FileSystem | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.options = options or BinderOptions()
        self.events = events.EventBus()
        self.eviction_errors: list[tuple[Artifact, Exception]] = []
        self.ignore: list[str] = list(dict.fromkeys([*self.options.ignore, *DEFAULT_IGNORE]))
        self._fs = fs or LocalFileSystem()
        self._clock = clock or datetime.now
        self._schema = SchemaTree()
        self._artifacts: dict[str, Artifact] = {}
        self._initialized = False
        self._timed_save = False
        self._stop_saving: asyncio.Event | None = None
        self._save_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

        config_file = self.options.config_file
        if config_file.exists():
            self.config = BinderConfig.read(config_file)
            self.config.apply_overrides(self.options)
            self.meta = MetadataStore(self.config.meta_file)
            self.meta.read()
        else:
            validate_name(self.options.binder_name, "binder")
            self.config = BinderConfig.initial(self.options)
            self.meta = MetadataStore(self.config.meta_file)
            self._create_layout()

        self._validate()
        try:
            self.recents = RecentsCache(self.config.max_recents, on_evict=self._on_evict)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    # ── Setup ─────────────────────────────────────────────────

    def _create_layout(self) -> None:
        """Write the initial configuration and directory tree for a new binder."""
        self.config.config_root.mkdir(parents=True, exist_ok=True)
        self.config.config_file.write_text(self.config.dumps(), encoding="utf-8")
        self.config.meta_file.write_text(self.meta.dumps(), encoding="utf-8")
        (self.config.dbdir / DEFAULT_NAME).mkdir(parents=True, exist_ok=True)
        self._trash_root.mkdir(parents=True, exist_ok=True)
        logger.info("Created binder '%s' at %s", self.config.binder_name, self.config.dbdir)

    def _validate(self) -> None:
        if not self.config.config_file.exists():
            raise ConfigError(f"Can't find notesdb configuration: {self.config.config_file}.")
        if not self.config.dbdir.is_dir():
            raise ConfigError(f"No notesdb located @ {self.config.dbdir}.")

    async def load(self) -> Binder:
        """Scan both namespaces from disk and start the periodic save."""
        self._validate()
        await self._fs.mkdir_all(self._trash_root)
        for area in AREAS:
            await self._load_area(area)
        await self._save_binder(include_artifacts=False)
        self._initialized = True
        logger.info("Loaded database '%s'", self.config.binder_name)
        self._start_timer()
        self.events.emit(events.LOADED, binder=self)
        return self

    async def reload(self, area: str = NOTES) -> Binder:
        """Rebuild one namespace from the directory tree."""
        await self._load_area(area)
        return self

    async def __aenter__(self) -> Binder:
        return await self.load()

    async def __aexit__(self, *exc_info) -> None:
        await self.shutdown()

    async def _load_area(self, area: str) -> None:
        root = self._area_root(area)
        entries = await self._fs.walk(root, self._walk_ignore)
        if area == NOTES:
            # the trash subtree is its own namespace
            entries = [e for e in entries if e.path.split("/", 1)[0] != TRASH_NAME]

        previous = {a.path: a for a in self._schema.artifacts(area)}
        namespace: Namespace = {}
        tracked: dict[str, Artifact] = {}

        for entry in entries:
            tp = parse_tree_path(entry.path)
            if tp.depth < 3 and not entry.is_dir:
                logger.debug("Skipping stray file %s in %s", entry.path, area)
                continue
            if tp.depth == 3 and entry.is_dir:
                raise SchemaPathError(f"Expected an artifact file, found a directory: {entry.path}")

            section = namespace.setdefault(validate_name(tp.section, "section"), {})
            if tp.depth == 1:
                continue
            notebook = section.setdefault(validate_name(tp.notebook, "notebook"), {})
            if tp.depth == 2:
                continue

            validate_name(tp.filename, "filename")
            artifact = previous.get(str(tp)) or Artifact.from_tree_path(tp, root=root)
            artifact.root = root
            notebook[tp.filename] = artifact
            if area == NOTES:
                tracked[artifact.path] = artifact

        if area == NOTES:
            namespace.setdefault(TRASH_NAME, {})
            for path, artifact in previous.items():
                if path not in tracked:
                    self.recents.eject(artifact)
            self._artifacts = tracked

        self._schema.replace(area, namespace)
        logger.debug("Loaded %d artifacts into %s", len(list(self._schema.artifacts(area))), area)

    # ── Paths ─────────────────────────────────────────────────

    @property
    def _trash_root(self) -> Path:
        return self.config.dbdir / TRASH_NAME

    def _area_root(self, area: str) -> Path:
        if area == NOTES:
            return self.config.dbdir
        if area == TRASH:
            return self._trash_root
        raise ValueError(f"Unknown namespace '{area}', expected one of {AREAS}")

    @staticmethod
    def _meta_key(path: str, area: str) -> str:
        return path if area == NOTES else join_parts(TRASH_NAME, path)

    def _check_reserved(self, search: ArtifactSearch, area: str) -> None:
        if area == NOTES and search.section == TRASH_NAME:
            raise BinderStateError(
                f"The '{TRASH_NAME}' section is reserved; use trash()/restore() instead"
            )

    @property
    def _walk_ignore(self) -> list[str]:
        # Trash is reserved only as a top-level section, not as a name
        return [p for p in self.ignore if p != TRASH_NAME]

    def _validate_segment(self, name: str, field: str) -> str:
        validate_name(name, field)
        if is_ignored(name, self._walk_ignore):
            raise InvalidNameError(
                field,
                name,
                VALID_NAME_CHARS,
                reason="Hidden and ignored names are skipped when the binder loads.",
            )
        return name

    def _validate_search(self, search: ArtifactSearch) -> None:
        for value, field in (
            (search.section, "section"),
            (search.notebook, "notebook"),
            (search.filename, "filename"),
        ):
            if value:
                self._validate_segment(value, field)

    def _require_initialized(self, what: str) -> None:
        if not self._initialized:
            raise BinderStateError(f"Trying to retrieve {what} from an uninitialized database.")

    # ── Queries ───────────────────────────────────────────────

    def has_section(self, search: SearchLike, area: str = NOTES) -> bool:
        s = ArtifactSearch.coerce(search)
        return self._schema.has_section(area, s.section)

    def has_notebook(self, search: SearchLike, area: str = NOTES) -> bool:
        s = ArtifactSearch.coerce(search)
        return self._schema.has_notebook(area, s.section, s.notebook)

    def has_artifact(self, search: SearchLike, area: str = NOTES) -> bool:
        s = ArtifactSearch.coerce(search)
        return self._schema.has_artifact(area, s.section, s.notebook, s.filename)

    def sections(self, area: str = NOTES) -> list[str]:
        self._require_initialized("sections")
        return self._schema.sections(area)

    def notebooks(self, section: str, area: str = NOTES) -> list[str]:
        self._require_initialized("notebooks")
        if not self._schema.has_section(area, section):
            raise ArtifactNotFoundError(f"Section '{section}' not found in binder.")
        return self._schema.notebooks(area, section)

    def artifact_names(self, section: str, notebook: str, area: str = NOTES) -> list[str]:
        self._require_initialized("artifacts")
        if not self._schema.has_notebook(area, section, notebook):
            raise ArtifactNotFoundError(
                f"Notebook '{notebook}' not found in section '{section}'."
            )
        return self._schema.filenames(area, section, notebook)

    def _lookup(self, search: ArtifactSearch, area: str) -> Artifact:
        t = search.type
        if t == ArtifactType.SNA:
            artifact = self._schema.get_artifact(
                area, search.section, search.notebook, search.filename
            )
            if artifact is not None:
                return artifact
        elif (t == ArtifactType.SN and self.has_notebook(search, area)) or (
            t == ArtifactType.S and self.has_section(search, area)
        ):
            return Artifact.from_fields(search, root=self._area_root(area))
        raise ArtifactNotFoundError(f"Artifact doesn't exist: {search.info()}")

    # ── Create / add ──────────────────────────────────────────

    async def create(self, sections: Iterable[str] | str, area: str = NOTES) -> Binder:
        """Create the given sections. An empty list means ``Default``."""
        names = [sections] if isinstance(sections, str) else list(sections)
        if not names:
            names = [DEFAULT_NAME]
        for name in names:
            self._validate_segment(name, "section")

        for name in names:
            if area == NOTES and name == TRASH_NAME:
                continue
            await self._create_section(name, area)
        if area == NOTES:
            self._schema.add_section(NOTES, TRASH_NAME)
        return self

    async def add(self, search: SearchLike, area: str = NOTES) -> Artifact:
        """Create a section, notebook or artifact, including missing parents."""
        if isinstance(search, Artifact):
            artifact = search
            artifact.root = self._area_root(area)
        else:
            artifact = Artifact.from_fields(search, root=self._area_root(area))
        s = artifact.search()
        if s.type == ArtifactType.UNK:
            raise BinderStateError("Trying to add invalid artifact to DB")
        self._check_reserved(s, area)
        self._validate_search(s)

        await self._create_section(s.section, area)
        if s.type == ArtifactType.S:
            return artifact
        await self._create_notebook(s.section, s.notebook, area)
        if s.type == ArtifactType.SN:
            return artifact

        existing = self._schema.get_artifact(area, s.section, s.notebook, s.filename)
        if existing is not None:
            return existing
        await self._create_artifact(artifact, area)
        return artifact

    async def _create_section(self, section: str, area: str) -> None:
        self._validate_segment(section, "section")
        if self._schema.has_section(area, section):
            return
        dst = self._area_root(area) / section
        if not await self._fs.exists(dst):
            logger.info("Creating section: %s", section)
            await self._fs.mkdir_all(dst)
        self._schema.add_section(area, section)

    async def _create_notebook(self, section: str, notebook: str, area: str) -> None:
        self._validate_segment(notebook, "notebook")
        if self._schema.has_notebook(area, section, notebook):
            return
        dst = self._area_root(area) / section / notebook
        if not await self._fs.exists(dst):
            logger.info("Creating notebook: %s in section %s", notebook, section)
            await self._fs.mkdir_all(dst)
        self._schema.add_notebook(area, section, notebook)

    async def _create_artifact(self, artifact: Artifact, area: str) -> None:
        dst = artifact.absolute
        text: str | None = None
        if await self._fs.exists(dst):
            if not artifact.is_dirty():
                text = await self._fs.read_text(dst)
        else:
            await self._fs.write_text(dst, artifact.buf)
            artifact.make_clean()
        st = await self._fs.stat(dst)

        if text is not None:
            artifact.load_content(text)
        artifact.loaded = True
        self._attach_metadata(artifact, area, st, artifact.buf)
        self._schema.add_artifact(area, artifact)
        if area == NOTES:
            self._artifacts[artifact.path] = artifact
        logger.info("Added artifact: %s", artifact.path)

    # ── Retrieval ─────────────────────────────────────────────

    async def get(self, search: SearchLike, area: str = NOTES) -> Artifact:
        """Look up an entry, reading the artifact's content on first access.

        Sections and notebooks come back as detached node artifacts.
        """
        s = ArtifactSearch.coerce(search)
        artifact = self._lookup(s, area)
        if s.type != ArtifactType.SNA:
            return artifact
        if not artifact.loaded:
            text = await self._fs.read_text(artifact.absolute)
            st = await self._fs.stat(artifact.absolute)
            if not artifact.loaded:
                artifact.load_content(text)
                self._attach_metadata(artifact, area, st, text)
        if area == NOTES:
            self.recents.enqueue(artifact)
        return artifact

    def _attach_metadata(
        self, artifact: Artifact, area: str, st: FileStat | None, text: str | None = None
    ) -> None:
        key = self._meta_key(artifact.path, area)
        meta, existed = self.meta.attach(key, artifact.meta)
        artifact.meta = meta
        if not existed and text:
            for tag in _frontmatter_tags(text):
                artifact.add_tag(tag)
        if st is not None:
            artifact.accessed = st.atime
            artifact.created = st.birthtime
            artifact.updated = st.mtime

    async def find(self, pattern: str) -> list[Artifact]:
        """Artifacts whose full text matches the regular expression, in registration order."""
        regex = re.compile(pattern)
        candidates = list(self._artifacts.values())

        async def content(artifact: Artifact) -> str:
            if artifact.loaded:
                return artifact.buf
            return await self._fs.read_text(artifact.absolute)

        texts = await asyncio.gather(*(content(a) for a in candidates))
        return [a for a, text in zip(candidates, texts) if regex.search(text)]

    # ── Removal / trash ───────────────────────────────────────

    def _forget(self, search: ArtifactSearch, area: str) -> None:
        """Drop an entry (and everything beneath it) from the schema and trackers."""
        t = search.type
        if t == ArtifactType.SNA:
            self._schema.pop_artifact(area, search.section, search.notebook, search.filename)
        elif t == ArtifactType.SN:
            self._schema.pop_notebook(area, search.section, search.notebook)
        elif t == ArtifactType.S:
            self._schema.pop_section(area, search.section)
        if area != NOTES:
            return
        for path in [p for p in self._artifacts if is_under(p, search.path)]:
            artifact = self._artifacts.pop(path)
            self.recents.eject(artifact)

    async def _flush_under(self, search: ArtifactSearch) -> None:
        dirty = [
            a for path, a in self._artifacts.items()
            if is_under(path, search.path) and a.is_dirty()
        ]
        await asyncio.gather(*(self.save_artifact(a) for a in dirty))

    async def _uniquify(self, artifact: Artifact) -> Artifact:
        """Return ``artifact`` or a timestamp-suffixed copy whose path is free."""
        if not await self._fs.exists(artifact.absolute):
            return artifact
        now = self._clock()
        attempt = 0
        while True:
            candidate = artifact.clone().make_unique(now, attempt)
            if not await self._fs.exists(candidate.absolute):
                return candidate
            attempt += 1

    async def remove(self, search: SearchLike, area: str = NOTES) -> Binder:
        """Permanently delete a section, notebook or artifact. No trash step."""
        s = ArtifactSearch.coerce(search)
        self._check_reserved(s, area)
        self._validate_search(s)
        artifact = self._lookup(s, area)
        target = self._area_root(area) / s.path

        self._forget(s, area)
        await self._fs.remove(target)
        logger.info("Removed %s from %s", artifact.info(), area)
        return self

    async def trash(self, search: SearchLike) -> Artifact:
        """Move an entry into the Trash namespace, renaming it on collision."""
        s = ArtifactSearch.coerce(search)
        self._check_reserved(s, NOTES)
        self._validate_search(s)
        src = self._lookup(s, NOTES)
        await self._fs.mkdir_all(self._trash_root)

        dst = await self._uniquify(Artifact.from_fields(s, root=self._trash_root))
        await self._flush_under(s)
        await self._fs.move(self.config.dbdir / s.path, dst.absolute)

        self._forget(s, NOTES)
        self.meta.rekey(s.path, self._meta_key(dst.path, TRASH))
        await self._load_area(TRASH)
        logger.info("Moved %s to trash as %s", src.info(), dst.info())
        return self._schema.get_artifact(TRASH, dst.section, dst.notebook, dst.filename) or dst

    async def restore(self, search: SearchLike) -> Artifact:
        """Move an entry out of Trash back into notes, renaming it on collision."""
        s = ArtifactSearch.coerce(search)
        if s.type == ArtifactType.UNK:
            raise BinderStateError("Trying to restore an invalid artifact")
        self._check_reserved(s, NOTES)
        self._validate_search(s)
        src = Artifact.from_fields(s, root=self._trash_root)
        if not await self._fs.exists(src.absolute):
            raise ArtifactNotFoundError(
                f"This artifact doesn't exist in Trash and can't be restored: {s.info()}"
            )

        dst = await self._uniquify(Artifact.from_fields(s, root=self.config.dbdir))
        await self._fs.move(src.absolute, dst.absolute)

        self.meta.rekey(self._meta_key(s.path, TRASH), dst.path)
        # Full rescan: a restored directory may hold any number of artifacts
        await self._load_area(TRASH)
        await self._load_area(NOTES)
        logger.info("Restored %s from trash as %s", s.info(), dst.info())
        return self._schema.get_artifact(NOTES, dst.section, dst.notebook, dst.filename) or dst

    async def empty_trash(self) -> Binder:
        """Delete everything under Trash and reset the trash namespace."""
        trash = Path(self.config.trash)
        dbdir = Path(self.config.dbdir).resolve()
        resolved = trash.resolve()
        if not (
            await self._fs.exists(trash)
            and trash.name == TRASH_NAME
            and resolved != dbdir
            and dbdir in resolved.parents
        ):
            raise BinderStateError(f"Invalid trash directory, no empty: {self.config.trash}")

        logger.info("Emptying trash: %s", trash)
        await self._fs.remove(trash)
        await self._fs.mkdir_all(trash)
        self._schema.reset(TRASH)
        self.meta.drop(TRASH_NAME)
        return self

    # ── Rename ────────────────────────────────────────────────

    async def rename(self, src: SearchLike, dst: SearchLike) -> Artifact:
        """Give an entry a new identity of the same type.

        Artifacts are copied to the new name and the source is then removed;
        if that removal fails a PartialRenameError is raised and both entries
        remain. Sections and notebooks move as one directory rename.
        """
        s = ArtifactSearch.coerce(src)
        d = ArtifactSearch.coerce(dst)
        if is_duplicate_search(s, d):
            raise BinderStateError("No difference between artifacts in rename request")
        self._check_reserved(s, NOTES)
        self._check_reserved(d, NOTES)
        self._validate_search(s)

        source = await self.get(s)
        if source.type != d.type:
            raise BinderStateError("SRC artifact type does not match DST")
        self._validate_search(d)

        if d.type != ArtifactType.SNA:
            return await self._rename_container(s, d)

        if self.has_artifact(d):
            raise BinderStateError(f"Rename destination already exists: {d.info()}")
        target = await self.add(d)
        target.meta = ArtifactMeta.from_dict(source.meta.to_dict())
        self.meta.set(target.path, target.meta)
        target.buf = source.buf
        await self.save_artifact(target)

        try:
            await self.remove(s)
        except (OSError, NotesDBError) as e:
            logger.error("Rename of %s left the source in place: %s", s.info(), e)
            await self._load_area(NOTES)
            raise PartialRenameError(s, d) from e
        logger.info("Renamed %s to %s", s.info(), d.info())
        return target

    async def _rename_container(self, s: ArtifactSearch, d: ArtifactSearch) -> Artifact:
        dst_path = self.config.dbdir / d.path
        if self._lookup_exists(d) or await self._fs.exists(dst_path):
            raise BinderStateError(f"Rename destination already exists: {d.info()}")

        await self._flush_under(s)
        await self._fs.move(self.config.dbdir / s.path, dst_path)
        self.meta.rekey(s.path, d.path)
        await self._load_area(NOTES)
        logger.info("Renamed %s to %s", s.info(), d.info())
        return Artifact.from_fields(d, root=self.config.dbdir)

    def _lookup_exists(self, search: ArtifactSearch) -> bool:
        if search.type == ArtifactType.SN:
            return self.has_notebook(search)
        return self.has_section(search)

    # ── Persistence ───────────────────────────────────────────

    async def save_artifact(self, artifact: Artifact) -> Artifact:
        """Write one artifact if it is dirty; a clean artifact is a no-op."""
        if not artifact.is_dirty():
            return artifact
        buf = artifact.buf
        await self._fs.write_text(artifact.absolute, buf)
        if artifact.buf == buf:
            artifact.make_clean()
        artifact.updated = self._clock()
        return artifact

    async def _save_config(self) -> None:
        logger.debug("Saving configuration: %s", self.config.config_file)
        await self._fs.write_text(self.config.config_file, self.config.dumps())

    async def _save_binder(self, include_artifacts: bool = True) -> None:
        ops = [self._save_config(), self.meta.save(self._fs)]
        if include_artifacts:
            ops.extend(self.save_artifact(a) for a in list(self._artifacts.values()))
        results = await asyncio.gather(*ops, return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            raise errors[0]

    async def save(self) -> Binder:
        """Write config, metadata and every dirty artifact."""
        await self.wait_evictions()
        await self._save_binder()
        self.events.emit(events.SAVED, binder=self)
        return self

    async def shutdown(self) -> str:
        """Final full save, then stop the periodic save for good."""
        try:
            await self.wait_evictions()
            await self._save_binder()
        finally:
            await self._stop_timer()
            self._initialized = False
        logger.info("Shut down database '%s'", self.config.binder_name)
        self.events.emit(events.SHUTDOWN, binder=self)
        return SHUTDOWN_MESSAGE

    # ── Periodic save ─────────────────────────────────────────

    def _start_timer(self) -> None:
        if self.config.save_interval <= 0 or self._save_task is not None:
            return
        self._stop_saving = asyncio.Event()
        self._save_task = asyncio.get_running_loop().create_task(
            self._save_loop(self._stop_saving, self.config.save_interval)
        )

    async def _save_loop(self, stop: asyncio.Event, interval: float) -> None:
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.save()
                self._timed_save = True
            except Exception as e:
                logger.error("Timed save failure: %s", e)
                self.events.emit(events.TIMED_SAVE_FAILED, error=e)

    async def _stop_timer(self) -> None:
        if self._save_task is None:
            return
        self._stop_saving.set()
        await self._save_task
        self._save_task = None

    # ── Recents eviction ──────────────────────────────────────

    def _on_evict(self, artifact: Artifact) -> None:
        task = asyncio.get_running_loop().create_task(self._flush_evicted(artifact))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _flush_evicted(self, artifact: Artifact) -> None:
        if self._artifacts.get(artifact.path) is not artifact:
            return  # removed, trashed or renamed since it was cached
        try:
            await self.save_artifact(artifact)
            logger.info("Removal save of %s", artifact.absolute)
        except Exception as e:
            logger.error("Removal save failed for %s: %s", artifact.absolute, e)
            self.eviction_errors.append((artifact, e))
            self.events.emit(events.EVICTION_FAILED, artifact=artifact, error=e)
            return
        self.events.emit(events.EVICTED, artifact=artifact)

    async def wait_evictions(self) -> None:
        """Wait for every eviction flush started so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ── Introspection ─────────────────────────────────────────

    @property
    def artifacts(self) -> Mapping[str, Artifact]:
        """Tracked notes artifacts by relative path, in registration order."""
        return MappingProxyType(self._artifacts)

    @property
    def binder_name(self) -> str:
        return self.config.binder_name

    @property
    def config_file(self) -> Path:
        return self.config.config_file

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def timed_save(self) -> bool:
        return self._timed_save

    def to_dict(self) -> dict:
        return {"config": self.config.to_dict(), "schema": self._schema.to_dict()}

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent="\t")
