"""Catalog, search and serve a tree of commands, rules, MCP configs and hooks."""

from .catalog import ResourceCatalog, ResourceContent
from .models import (
    ResourceExtension,
    ResourceIndex,
    ResourceMetadata,
    ResourceType,
    SearchFilters,
    SortMode,
)

__version__ = "0.1.0"

__all__ = [
    "ResourceCatalog",
    "ResourceContent",
    "ResourceExtension",
    "ResourceIndex",
    "ResourceMetadata",
    "ResourceType",
    "SearchFilters",
    "SortMode",
    "__version__",
]
