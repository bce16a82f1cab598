"""Shared fixtures for binder tests."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from notesdb.binder import Binder
from notesdb.config import BinderOptions

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)
FIXED_STAMP = "20240102030405"


@pytest.fixture
def options(tmp_path: Path) -> BinderOptions:
    # save_interval=0: no background timer unless a test asks for one
    return BinderOptions(
        binder_name="adb",
        root=tmp_path / "root",
        config_root=tmp_path / "config",
        save_interval=0,
    )


@pytest.fixture
def dbdir(options: BinderOptions) -> Path:
    return Path(options.root) / options.binder_name


@pytest.fixture
async def binder(options: BinderOptions):
    b = Binder(options, clock=lambda: FIXED_NOW)
    await b.load()
    yield b
    if b.initialized:
        await b.shutdown()


def write_note(dbdir: Path, rel: str, text: str = "") -> Path:
    path = dbdir / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
