"""Core data models shared across rescat components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class ResourceType(str, Enum):
    """Kinds of resources, one per top-level directory of the resource tree."""

    COMMAND = "command"
    RULE = "rule"
    MCP = "mcp"
    HOOK = "hook"

    @property
    def directory(self) -> str:
        return _TYPE_DIRECTORIES[self]


_TYPE_DIRECTORIES: Dict[ResourceType, str] = {
    ResourceType.COMMAND: "commands",
    ResourceType.RULE: "rules",
    ResourceType.MCP: "mcps",
    ResourceType.HOOK: "hooks",
}


class ResourceExtension(str, Enum):
    """File suffixes the scanner indexes."""

    MARKDOWN = ".md"
    CURSOR_RULE = ".mdc"
    JSON = ".json"
    SHELL = ".sh"

    @classmethod
    def from_suffix(cls, suffix: str) -> Optional["ResourceExtension"]:
        for member in cls:
            if member.value == suffix:
                return member
        return None


class SortMode(str, Enum):
    """Sort orders applied after fuzzy ranking."""

    NAME = "name"
    DOWNLOADS = "downloads"
    RECENT = "recent"


ALL_TYPES = "all"


@dataclass(frozen=True)
class ResourceMetadata:
    """Normalized metadata for one indexed resource file."""

    slug: str
    type: ResourceType
    category: str
    title: str
    description: str
    tags: Tuple[str, ...]
    file_path: str
    file_name: str
    extension: ResourceExtension
    file_size: int
    created_at: str
    excerpt: str
    search_content: str
    frontmatter: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ResourceIndex:
    """Immutable snapshot of every scanned resource plus category groupings."""

    resources: Tuple[ResourceMetadata, ...]
    categories: Mapping[ResourceType, List[str]]
    total_count: int
    generated_at: str


@dataclass(frozen=True)
class SearchFilters:
    """Exact-match filters and sort mode layered on top of fuzzy results."""

    type: Union[ResourceType, str, None] = None
    category: Optional[str] = None
    sort_by: Optional[SortMode] = None

    @classmethod
    def from_values(
        cls,
        *,
        type: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> "SearchFilters":
        """Build filters from loosely typed request values.

        Raises ValueError for an unknown type or sort mode.
        """
        resolved_type: Union[ResourceType, str, None] = None
        if type:
            resolved_type = ALL_TYPES if type == ALL_TYPES else ResourceType(type)
        resolved_sort = SortMode(sort_by) if sort_by else None
        return cls(type=resolved_type, category=category or None, sort_by=resolved_sort)


@dataclass
class CategorySummary:
    """Per-type view used when reporting index statistics."""

    type: ResourceType
    categories: List[str] = field(default_factory=list)
    count: int = 0
