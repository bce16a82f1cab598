"""Tests for opening, creating and loading a binder."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from conftest import write_note
from notesdb.binder import Binder
from notesdb.config import BinderOptions
from notesdb.errors import (
    ArtifactNotFoundError,
    BinderStateError,
    ConfigError,
    InvalidNameError,
    SchemaPathError,
)
from notesdb.naming import VALID_NAME_CHARS


class TestNewBinder:
    def test_creates_layout(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        assert (options.config_dir / "config.json").is_file()
        assert (options.config_dir / "meta.json").is_file()
        assert (dbdir / "Default").is_dir()
        assert (dbdir / "Trash").is_dir()

    def test_invalid_binder_name(self, tmp_path: Path):
        with pytest.raises(InvalidNameError) as exc_info:
            Binder(BinderOptions(binder_name="bad/name", root=tmp_path, save_interval=0))
        assert str(exc_info.value) == (
            f"Invalid binder name 'bad/name'.  Can only use '{VALID_NAME_CHARS}'."
        )

    def test_invalid_recents_capacity(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            Binder(BinderOptions(root=tmp_path, max_recents=0, save_interval=0))

    @pytest.mark.asyncio
    async def test_context_manager(self, options: BinderOptions):
        async with Binder(options) as binder:
            assert binder.initialized
            assert binder.binder_name == "adb"
        assert not binder.initialized


class TestOpenExisting:
    @pytest.mark.asyncio
    async def test_reopen_keeps_sections(self, options: BinderOptions):
        first = Binder(options)
        await first.load()
        await first.create(["Work"])
        await first.shutdown()

        second = Binder(options)
        await second.load()
        assert set(second.sections()) == {"Default", "Work", "Trash"}
        await second.shutdown()

    def test_missing_data_directory(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        shutil.rmtree(dbdir)
        with pytest.raises(ConfigError, match="No notesdb located"):
            Binder(options)

    def test_corrupt_config(self, options: BinderOptions):
        Binder(options)
        options.config_file.write_text("not json")
        with pytest.raises(ConfigError):
            Binder(options)

    def test_config_missing_required_field(self, options: BinderOptions):
        Binder(options)
        data = json.loads(options.config_file.read_text())
        del data["dbdir"]
        options.config_file.write_text(json.dumps(data))
        with pytest.raises(ConfigError, match="dbdir"):
            Binder(options)

    def test_runtime_options_override_persisted(self, options: BinderOptions):
        Binder(options)
        options.max_recents = 9
        assert Binder(options).config.max_recents == 9


class TestLoad:
    @pytest.mark.asyncio
    async def test_scans_existing_tree(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        write_note(dbdir, "Work/Ideas/a.md", "alpha")
        write_note(dbdir, "Work/Ideas/b.md", "beta")
        (dbdir / "Home" / "Empty").mkdir(parents=True)

        binder = Binder(options)
        await binder.load()

        assert binder.sections() == ["Default", "Home", "Work", "Trash"]
        assert binder.notebooks("Home") == ["Empty"]
        assert binder.artifact_names("Work", "Ideas") == ["a.md", "b.md"]
        assert list(binder.artifacts) == ["Work/Ideas/a.md", "Work/Ideas/b.md"]
        assert not binder.artifacts["Work/Ideas/a.md"].loaded
        await binder.shutdown()

    @pytest.mark.asyncio
    async def test_stray_files_left_alone(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        stray_root = write_note(dbdir, "stray.txt")
        stray_section = write_note(dbdir, "Work/loose.txt")

        binder = Binder(options)
        await binder.load()

        assert "stray.txt" not in binder.sections()
        assert binder.notebooks("Work") == []
        assert stray_root.exists() and stray_section.exists()
        await binder.shutdown()

    @pytest.mark.asyncio
    async def test_ignored_names(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        write_note(dbdir, "Work/Ideas/.DS_Store")
        write_note(dbdir, "Work/Ideas/.placeholder")
        write_note(dbdir, ".hidden/x/y.txt")

        binder = Binder(options)
        await binder.load()

        assert binder.artifact_names("Work", "Ideas") == []
        assert ".hidden" not in binder.sections()
        await binder.shutdown()

    @pytest.mark.asyncio
    async def test_overflow_path_is_an_error(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        write_note(dbdir, "A/B/C/deep.txt")
        with pytest.raises(SchemaPathError):
            await Binder(options).load()

    @pytest.mark.asyncio
    async def test_bad_name_on_disk(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        (dbdir / "bad#name").mkdir()
        with pytest.raises(InvalidNameError, match="section"):
            await Binder(options).load()

    @pytest.mark.asyncio
    async def test_trash_contents_loaded(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        write_note(dbdir, "Trash/Old/Stuff/gone.txt", "bye")

        binder = Binder(options)
        await binder.load()

        assert binder.sections("trash") == ["Old"]
        assert binder.has_artifact(
            {"section": "Old", "notebook": "Stuff", "filename": "gone.txt"}, area="trash"
        )
        assert "Old" not in binder.sections()
        await binder.shutdown()


class TestCreate:
    @pytest.mark.asyncio
    async def test_sections_example(self, binder: Binder):
        await binder.create(["Test1", "Test2"])
        assert set(binder.sections()) == {"Default", "Test1", "Test2", "Trash"}

    @pytest.mark.asyncio
    async def test_empty_list_means_default(self, binder: Binder, dbdir: Path):
        shutil.rmtree(dbdir / "Default")
        await binder.reload()
        assert "Default" not in binder.sections()

        await binder.create([])
        assert "Default" in binder.sections()
        assert (dbdir / "Default").is_dir()

    @pytest.mark.asyncio
    async def test_single_string(self, binder: Binder, dbdir: Path):
        await binder.create("Solo")
        assert (dbdir / "Solo").is_dir()

    @pytest.mark.asyncio
    async def test_trash_section_not_duplicated(self, binder: Binder):
        await binder.create(["Trash"])
        assert binder.sections().count("Trash") == 1

    @pytest.mark.asyncio
    async def test_invalid_section_name(self, binder: Binder):
        with pytest.raises(InvalidNameError) as exc_info:
            await binder.create(["ok", "not/ok"])
        assert str(exc_info.value) == (
            f"Invalid section name 'not/ok'.  Can only use '{VALID_NAME_CHARS}'."
        )
        assert "ok" not in binder.sections()


class TestQueries:
    def test_uninitialized(self, options: BinderOptions):
        binder = Binder(options)
        with pytest.raises(BinderStateError, match="uninitialized"):
            binder.sections()

    @pytest.mark.asyncio
    async def test_unknown_section(self, binder: Binder):
        with pytest.raises(ArtifactNotFoundError) as exc_info:
            binder.notebooks("Nope")
        assert str(exc_info.value) == "Section 'Nope' not found in binder."

    @pytest.mark.asyncio
    async def test_unknown_notebook(self, binder: Binder):
        with pytest.raises(ArtifactNotFoundError):
            binder.artifact_names("Default", "Nope")

    @pytest.mark.asyncio
    async def test_to_dict_and_str(self, binder: Binder):
        await binder.add({"section": "A", "notebook": "B", "filename": "c.txt"})
        data = binder.to_dict()
        assert data["config"]["binderName"] == "adb"
        assert data["schema"]["notes"]["A"] == {"B": ["c.txt"]}
        assert json.loads(str(binder)) == data
