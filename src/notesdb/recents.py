"""Bounded, insertion-ordered cache of recently used artifacts."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notesdb.artifact import Artifact

EvictionHook = Callable[["Artifact"], None]


class RecentsCache:
    """Holds non-owning references to resident artifacts, oldest first.

    Membership is by identity (``section/notebook/filename``). When an
    enqueue pushes the size past ``capacity`` the oldest entry is removed
    and handed to ``on_evict``, which is responsible for flushing it.
    """

    def __init__(self, capacity: int = 5, on_evict: EvictionHook | None = None) -> None:
        if capacity < 1:
            raise ValueError(f"Recents capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.on_evict = on_evict
        self._items: OrderedDict[str, Artifact] = OrderedDict()

    @staticmethod
    def _key(artifact: Artifact) -> str:
        return artifact.info()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(list(self._items.values()))

    def __contains__(self, artifact: Artifact) -> bool:
        return self.contains(artifact)

    def contains(self, artifact: Artifact) -> bool:
        return self._key(artifact) in self._items

    def enqueue(self, artifact: Artifact) -> Artifact | None:
        """Add ``artifact`` unless present. Returns the evicted artifact, if any."""
        key = self._key(artifact)
        if key in self._items:
            return None
        self._items[key] = artifact
        if len(self._items) <= self.capacity:
            return None
        _, evicted = self._items.popitem(last=False)
        if self.on_evict is not None:
            self.on_evict(evicted)
        return evicted

    def eject(self, artifact: Artifact) -> bool:
        """Remove ``artifact`` without triggering the eviction hook."""
        return self._items.pop(self._key(artifact), None) is not None
