"""Factories for hand-built metadata records."""

from __future__ import annotations

from typing import Any

from rescat.models import ResourceExtension, ResourceMetadata, ResourceType


def make_resource(slug: str, **overrides: Any) -> ResourceMetadata:
    """Return a metadata record with sensible defaults for search tests."""
    title = overrides.pop("title", slug.replace("-", " ").title())
    description = overrides.pop("description", "No description available")
    tags = tuple(overrides.pop("tags", ()))
    excerpt = overrides.pop("excerpt", "")
    values: dict[str, Any] = {
        "slug": slug,
        "type": ResourceType.COMMAND,
        "category": "general",
        "title": title,
        "description": description,
        "tags": tags,
        "file_path": f"commands/{slug}.md",
        "file_name": f"{slug}.md",
        "extension": ResourceExtension.MARKDOWN,
        "file_size": 10,
        "created_at": "2024-01-01T00:00:00.000Z",
        "excerpt": excerpt,
        "search_content": " ".join([title, description, excerpt, *tags]),
        "frontmatter": {},
    }
    values.update(overrides)
    return ResourceMetadata(**values)


__all__ = ["make_resource"]
