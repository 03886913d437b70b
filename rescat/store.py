"""Process-wide cache for the resource index snapshot."""

from __future__ import annotations

import threading
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from .logging import get_logger
from .models import ResourceIndex, ResourceMetadata, ResourceType
from .snapshot import read_index


class IndexStore:
    """Loads the snapshot once and serves it for the lifetime of the process.

    There is no refresh path: rewriting the snapshot on disk does not affect a
    store whose cache is already warm.
    """

    def __init__(self, snapshot_path: Path) -> None:
        self.snapshot_path = Path(snapshot_path)
        self._index: Optional[ResourceIndex] = None
        self._lock = threading.Lock()
        self.logger = get_logger("store")

    @property
    def loaded(self) -> bool:
        return self._index is not None

    def load(self) -> ResourceIndex:
        """Return the cached index, reading the snapshot on first use.

        Raises IndexNotGenerated if the snapshot file does not exist.
        """
        index = self._index
        if index is not None:
            return index
        with self._lock:
            if self._index is None:
                self._index = read_index(self.snapshot_path)
                self.logger.info(
                    "Loaded %d resources from %s",
                    self._index.total_count,
                    self.snapshot_path,
                )
            return self._index

    def by_slug(self, slug: str) -> Optional[ResourceMetadata]:
        """Return the first resource with ``slug`` in index order."""
        for resource in self.load().resources:
            if resource.slug == slug:
                return resource
        return None

    def by_type(self, resource_type: ResourceType) -> Tuple[ResourceMetadata, ...]:
        return tuple(resource for resource in self.load().resources if resource.type == resource_type)

    def by_category(
        self, resource_type: ResourceType, category: str
    ) -> Tuple[ResourceMetadata, ...]:
        return tuple(
            resource
            for resource in self.load().resources
            if resource.type == resource_type and resource.category == category
        )


@lru_cache(maxsize=None)
def _store_for(resolved_path: Path) -> IndexStore:
    return IndexStore(resolved_path)


def get_index_store(snapshot_path: Path) -> IndexStore:
    """Return the single process-wide store for ``snapshot_path``."""
    return _store_for(Path(snapshot_path).expanduser().resolve())


__all__ = ["IndexStore", "get_index_store"]
