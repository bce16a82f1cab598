"""Tests for entry names at the binder boundary: relative and hidden segments."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import write_note
from notesdb.binder import Binder
from notesdb.config import BinderOptions
from notesdb.errors import InvalidNameError


class TestRelativeSegments:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "search",
        [
            {"section": "..", "notebook": "escaped", "filename": "x.txt"},
            {"section": "A", "notebook": "..", "filename": "x.txt"},
            {"section": "A", "notebook": "B", "filename": ".."},
            {"section": "."},
        ],
    )
    async def test_add_rejected(self, binder: Binder, options: BinderOptions, search):
        with pytest.raises(InvalidNameError, match="are not names"):
            await binder.add(search)
        assert not (Path(options.root) / "escaped").exists()
        assert list(binder.artifacts) == []

    @pytest.mark.asyncio
    async def test_create_rejected(self, binder: Binder):
        with pytest.raises(InvalidNameError):
            await binder.create([".."])

    @pytest.mark.asyncio
    async def test_remove_cannot_reach_parent(self, binder: Binder, options: BinderOptions, dbdir: Path):
        await binder.add({"section": "A", "notebook": "B", "filename": "c.txt"})

        with pytest.raises(InvalidNameError):
            await binder.remove({"section": ".."})

        assert dbdir.is_dir()
        assert (dbdir / "A" / "B" / "c.txt").is_file()
        assert Path(options.root).is_dir()

    @pytest.mark.asyncio
    async def test_rename_rejected(self, binder: Binder, dbdir: Path):
        await binder.add({"section": "A", "notebook": "B", "filename": "c.txt"})

        with pytest.raises(InvalidNameError):
            await binder.rename({"section": "A"}, {"section": ".."})
        with pytest.raises(InvalidNameError):
            await binder.rename({"section": ".."}, {"section": "Z"})

        assert (dbdir / "A" / "B" / "c.txt").is_file()
        assert binder.has_section({"section": "A"})

    @pytest.mark.asyncio
    async def test_trash_and_restore_rejected(self, binder: Binder, dbdir: Path):
        with pytest.raises(InvalidNameError):
            await binder.trash({"section": ".."})
        with pytest.raises(InvalidNameError):
            await binder.restore({"section": ".."})
        assert (dbdir / "Default").is_dir()


class TestHiddenNames:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "search",
        [
            {"section": "A", "notebook": "B", "filename": ".hidden"},
            {"section": "A", "notebook": ".config"},
            {"section": ".secret"},
        ],
    )
    async def test_dotted_names_rejected(self, binder: Binder, search):
        with pytest.raises(InvalidNameError, match="skipped when the binder loads"):
            await binder.add(search)

    @pytest.mark.asyncio
    async def test_configured_ignore_pattern_rejected(self, tmp_path: Path):
        binder = Binder(BinderOptions(root=tmp_path, ignore=["*.bak"], save_interval=0))
        await binder.load()
        with pytest.raises(InvalidNameError):
            await binder.add({"section": "A", "notebook": "B", "filename": "draft.bak"})
        with pytest.raises(InvalidNameError):
            await binder.rename(
                await binder.add({"section": "A", "notebook": "B", "filename": "draft.md"}),
                {"section": "A", "notebook": "B", "filename": "draft.bak"},
            )
        await binder.shutdown()

    @pytest.mark.asyncio
    async def test_trash_below_section_survives_reopen(self, options: BinderOptions):
        nested = {"section": "A", "notebook": "Trash", "filename": "n.txt"}
        first = Binder(options)
        await first.load()
        note = await first.add(nested)
        note.buf = "kept"
        await first.shutdown()

        second = Binder(options)
        await second.load()
        assert second.has_artifact(nested)
        assert (await second.get(nested)).buf == "kept"
        assert "A" not in second.sections("trash")
        await second.shutdown()

    @pytest.mark.asyncio
    async def test_trash_subtree_not_loaded_as_notes(self, options: BinderOptions, dbdir: Path):
        Binder(options)
        write_note(dbdir, "Trash/A/B/c.txt")
        write_note(dbdir, "A/Trash/d.txt")

        binder = Binder(options)
        await binder.load()

        assert binder.sections().count("Trash") == 1
        assert binder.notebooks("A") == ["Trash"]
        assert list(binder.artifacts) == ["A/Trash/d.txt"]
        assert binder.has_artifact(
            {"section": "A", "notebook": "B", "filename": "c.txt"}, area="trash"
        )
        await binder.shutdown()
