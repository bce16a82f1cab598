"""In-memory mirror of the binder directory tree.

Private to the package: only ``Binder`` mutates a SchemaTree.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notesdb.artifact import Artifact

NOTES = "notes"
TRASH = "trash"
AREAS = (NOTES, TRASH)

Notebook = dict[str, "Artifact"]
Section = dict[str, Notebook]
Namespace = dict[str, Section]


def _check_area(area: str) -> None:
    if area not in AREAS:
        raise ValueError(f"Unknown namespace '{area}', expected one of {AREAS}")


class SchemaTree:
    """Two namespaces of section -> notebook -> filename -> Artifact."""

    def __init__(self) -> None:
        self._areas: dict[str, Namespace] = {NOTES: {}, TRASH: {}}

    def area(self, area: str) -> Namespace:
        _check_area(area)
        return self._areas[area]

    # ── Queries ───────────────────────────────────────────────

    def has_section(self, area: str, section: str) -> bool:
        return section in self.area(area)

    def has_notebook(self, area: str, section: str, notebook: str) -> bool:
        return notebook in self.area(area).get(section, {})

    def has_artifact(self, area: str, section: str, notebook: str, filename: str) -> bool:
        return filename in self.area(area).get(section, {}).get(notebook, {})

    def get_artifact(
        self, area: str, section: str, notebook: str, filename: str
    ) -> Artifact | None:
        return self.area(area).get(section, {}).get(notebook, {}).get(filename)

    def sections(self, area: str) -> list[str]:
        return list(self.area(area))

    def notebooks(self, area: str, section: str) -> list[str]:
        return list(self.area(area)[section])

    def filenames(self, area: str, section: str, notebook: str) -> list[str]:
        return list(self.area(area)[section][notebook])

    def artifacts(self, area: str) -> Iterator[Artifact]:
        for notebooks in self.area(area).values():
            for files in notebooks.values():
                yield from files.values()

    # ── Mutation ──────────────────────────────────────────────

    def add_section(self, area: str, section: str) -> None:
        self.area(area).setdefault(section, {})

    def add_notebook(self, area: str, section: str, notebook: str) -> None:
        self.area(area).setdefault(section, {}).setdefault(notebook, {})

    def add_artifact(self, area: str, artifact: Artifact) -> None:
        files = self.area(area).setdefault(artifact.section, {}).setdefault(artifact.notebook, {})
        files[artifact.filename] = artifact

    def pop_artifact(
        self, area: str, section: str, notebook: str, filename: str
    ) -> Artifact | None:
        return self.area(area).get(section, {}).get(notebook, {}).pop(filename, None)

    def pop_notebook(self, area: str, section: str, notebook: str) -> Notebook | None:
        return self.area(area).get(section, {}).pop(notebook, None)

    def pop_section(self, area: str, section: str) -> Section | None:
        return self.area(area).pop(section, None)

    def replace(self, area: str, namespace: Namespace) -> None:
        _check_area(area)
        self._areas[area] = namespace

    def reset(self, area: str) -> None:
        self.replace(area, {})

    def to_dict(self) -> dict[str, dict[str, dict[str, list[str]]]]:
        return {
            name: {
                section: {notebook: list(files) for notebook, files in notebooks.items()}
                for section, notebooks in namespace.items()
            }
            for name, namespace in self._areas.items()
        }
