"""Weighted fuzzy search with exact filters and deterministic sorting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import List, Optional, Sequence, Tuple

from .config import DEFAULT_MIN_MATCH_LENGTH, DEFAULT_THRESHOLD
from .fuzzy import compile_pattern, field_norm, match_score
from .models import ALL_TYPES, ResourceMetadata, SearchFilters, SortMode


@dataclass(frozen=True)
class SearchKey:
    """A metadata attribute matched by the fuzzy index and its relative weight."""

    name: str
    weight: float


SEARCH_KEYS: Tuple[SearchKey, ...] = (
    SearchKey("title", 0.4),
    SearchKey("description", 0.3),
    SearchKey("search_content", 0.2),
    SearchKey("tags", 0.1),
)


@dataclass(frozen=True)
class SearchHit:
    """One fuzzy match: lower scores are better matches."""

    resource: ResourceMetadata
    score: float
    position: int


@dataclass(frozen=True)
class _FieldEntry:
    weight: float
    values: Tuple[Tuple[str, float], ...]


class SearchIndex:
    """Fuzzy-match structure bound to one resource collection.

    The index keeps a reference to the collection it was built from; callers
    compare that reference to decide when a rebuild is needed.
    """

    def __init__(
        self,
        resources: Sequence[ResourceMetadata],
        *,
        keys: Sequence[SearchKey] = SEARCH_KEYS,
        threshold: float = DEFAULT_THRESHOLD,
        min_match_length: int = DEFAULT_MIN_MATCH_LENGTH,
    ) -> None:
        self.resources = resources
        self.threshold = threshold
        self.min_match_length = min_match_length
        total_weight = sum(key.weight for key in keys) or 1.0
        self._records: List[Tuple[_FieldEntry, ...]] = [
            tuple(
                _FieldEntry(
                    weight=key.weight / total_weight,
                    values=_field_values(resource, key.name),
                )
                for key in keys
            )
            for resource in resources
        ]

    def __len__(self) -> int:
        return len(self._records)

    def search(self, query: str) -> List[SearchHit]:
        """Return matching resources ordered by score, then by collection order."""
        pattern = compile_pattern(
            query, threshold=self.threshold, min_match_length=self.min_match_length
        )
        if pattern is None:
            return []

        hits: List[SearchHit] = []
        for position, fields in enumerate(self._records):
            total = 1.0
            matched = False
            for entry in fields:
                for value, norm in entry.values:
                    score = match_score(pattern, value)
                    if score is None:
                        continue
                    matched = True
                    total *= score ** (entry.weight * norm)
            if matched:
                hits.append(SearchHit(self.resources[position], total, position))

        hits.sort(key=lambda hit: (hit.score, hit.position))
        return hits


def _field_values(resource: ResourceMetadata, name: str) -> Tuple[Tuple[str, float], ...]:
    raw = getattr(resource, name)
    values = raw if isinstance(raw, (list, tuple)) else (raw,)
    return tuple(
        (value, field_norm(value))
        for value in (str(item) for item in values)
        if value.strip()
    )


def create_search_index(
    resources: Sequence[ResourceMetadata],
    *,
    threshold: float = DEFAULT_THRESHOLD,
    min_match_length: int = DEFAULT_MIN_MATCH_LENGTH,
) -> SearchIndex:
    return SearchIndex(resources, threshold=threshold, min_match_length=min_match_length)


def search_resources(
    index: SearchIndex,
    query: str,
    filters: SearchFilters | None = None,
    all_resources: Optional[Sequence[ResourceMetadata]] = None,
) -> List[ResourceMetadata]:
    """Run a query, then apply exact filters and the requested sort.

    A blank query skips fuzzy matching and browses ``all_resources`` (the
    indexed collection when omitted) in its original order.
    """
    filters = filters or SearchFilters()
    if not query.strip():
        source = index.resources if all_resources is None else all_resources
        results = list(source)
    else:
        results = [hit.resource for hit in index.search(query)]

    if filters.type and filters.type != ALL_TYPES:
        results = [resource for resource in results if resource.type == filters.type]

    if filters.category:
        results = [resource for resource in results if resource.category == filters.category]

    if filters.sort_by == SortMode.NAME:
        results.sort(key=lambda resource: (resource.title.casefold(), resource.title))
    elif filters.sort_by == SortMode.RECENT:
        results.sort(key=lambda resource: _created_key(resource.created_at), reverse=True)
    # SortMode.DOWNLOADS has no local field; download counts live outside the index.

    return results


def _created_key(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return datetime.min.replace(tzinfo=UTC)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


__all__ = [
    "SEARCH_KEYS",
    "SearchHit",
    "SearchIndex",
    "SearchKey",
    "create_search_index",
    "search_resources",
]
