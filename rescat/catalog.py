"""Query facade tying the index store, search engine and resolver together."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .config import CatalogConfig
from .errors import ResourceNotFound
from .logging import get_logger
from .models import ResourceIndex, ResourceMetadata, ResourceType, SearchFilters
from .resolver import ContentResolver
from .search import SearchIndex, create_search_index, search_resources
from .store import IndexStore, get_index_store


@dataclass(frozen=True)
class ResourceContent:
    """A resource together with its decoded file content."""

    resource: ResourceMetadata
    content: str


class ResourceCatalog:
    """Serves search, slug lookup and content resolution over one index store."""

    def __init__(
        self,
        store: IndexStore,
        resolver: ContentResolver,
        *,
        threshold: float | None = None,
        min_match_length: int | None = None,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self._search_options: Dict[str, float | int] = {}
        if threshold is not None:
            self._search_options["threshold"] = threshold
        if min_match_length is not None:
            self._search_options["min_match_length"] = min_match_length
        self._search_index: Optional[SearchIndex] = None
        self._lock = threading.Lock()
        self.logger = get_logger("catalog")

    @classmethod
    def from_config(cls, config: CatalogConfig) -> "ResourceCatalog":
        return cls(
            get_index_store(config.index_path),
            ContentResolver(config.resource_root),
            threshold=config.search.threshold,
            min_match_length=config.search.min_match_length,
        )

    def index(self) -> ResourceIndex:
        return self.store.load()

    def resources(self) -> Tuple[ResourceMetadata, ...]:
        return self.store.load().resources

    def categories(self) -> Dict[ResourceType, List[str]]:
        return dict(self.store.load().categories)

    def search_index(self) -> SearchIndex:
        """Return the fuzzy index, rebuilding it if the resource collection changed."""
        resources = self.resources()
        current = self._search_index
        if current is not None and current.resources is resources:
            return current
        with self._lock:
            if self._search_index is None or self._search_index.resources is not resources:
                self.logger.debug("Building search index over %d resources", len(resources))
                self._search_index = create_search_index(resources, **self._search_options)
            return self._search_index

    def search(
        self, query: str = "", filters: SearchFilters | None = None
    ) -> List[ResourceMetadata]:
        index = self.search_index()
        return search_resources(index, query, filters, index.resources)

    def by_slug(self, slug: str) -> Optional[ResourceMetadata]:
        return self.store.by_slug(slug)

    def by_type(self, resource_type: ResourceType) -> Sequence[ResourceMetadata]:
        return self.store.by_type(resource_type)

    def resolve_content(self, resource: ResourceMetadata) -> bytes:
        return self.resolver.resolve(resource)

    def content_for_slug(self, slug: str) -> ResourceContent:
        """Look up ``slug`` and read its file; raises ResourceNotFound if either is missing."""
        resource = self.by_slug(slug)
        if resource is None:
            raise ResourceNotFound(f"Resource not found: {slug}")
        return ResourceContent(resource=resource, content=self.resolver.read_text(resource))


__all__ = ["ResourceCatalog", "ResourceContent"]
