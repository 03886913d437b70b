"""Serialization of the resource index snapshot."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

from .errors import IndexNotGenerated, SnapshotError
from .models import ResourceExtension, ResourceIndex, ResourceMetadata, ResourceType

SNAPSHOT_VERSION = 1


def index_to_dict(index: ResourceIndex) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "generated_at": index.generated_at,
        "total_count": index.total_count,
        "categories": {
            resource_type.value: list(index.categories.get(resource_type, []))
            for resource_type in ResourceType
        },
        "resources": [resource_to_dict(resource) for resource in index.resources],
    }


def resource_to_dict(resource: ResourceMetadata) -> Dict[str, Any]:
    data = asdict(resource)
    data["type"] = resource.type.value
    data["extension"] = resource.extension.value
    data["tags"] = list(resource.tags)
    return data


def index_from_dict(payload: Any) -> ResourceIndex:
    """Rebuild an index from its JSON form; raises SnapshotError on bad input."""
    if not isinstance(payload, dict):
        raise SnapshotError("snapshot must contain a JSON object")
    version = payload.get("version")
    if version != SNAPSHOT_VERSION:
        raise SnapshotError(
            f"snapshot version {version!r} is not supported (expected {SNAPSHOT_VERSION}); "
            "regenerate it with `rescat index`"
        )

    raw_resources = payload.get("resources")
    if not isinstance(raw_resources, list):
        raise SnapshotError("snapshot is missing the resources array")
    resources = tuple(resource_from_dict(entry) for entry in raw_resources)

    raw_categories = payload.get("categories")
    if not isinstance(raw_categories, dict):
        raise SnapshotError("snapshot is missing the categories mapping")
    categories: Dict[ResourceType, List[str]] = {}
    for resource_type in ResourceType:
        values = raw_categories.get(resource_type.value, [])
        if not isinstance(values, list):
            raise SnapshotError(f"categories for {resource_type.value} must be a list")
        categories[resource_type] = [str(value) for value in values]

    total_count = payload.get("total_count")
    if total_count != len(resources):
        raise SnapshotError(
            f"snapshot total_count {total_count!r} does not match {len(resources)} resources"
        )
    generated_at = payload.get("generated_at")
    if not isinstance(generated_at, str):
        raise SnapshotError("snapshot is missing generated_at")

    return ResourceIndex(
        resources=resources,
        categories=categories,
        total_count=total_count,
        generated_at=generated_at,
    )


def resource_from_dict(entry: Any) -> ResourceMetadata:
    if not isinstance(entry, dict):
        raise SnapshotError("resource entries must be JSON objects")
    try:
        frontmatter = entry.get("frontmatter")
        return ResourceMetadata(
            slug=str(entry["slug"]),
            type=ResourceType(entry["type"]),
            category=str(entry["category"]),
            title=str(entry["title"]),
            description=str(entry["description"]),
            tags=tuple(str(tag) for tag in entry.get("tags") or []),
            file_path=str(entry["file_path"]),
            file_name=str(entry["file_name"]),
            extension=ResourceExtension(entry["extension"]),
            file_size=int(entry["file_size"]),
            created_at=str(entry["created_at"]),
            excerpt=str(entry["excerpt"]),
            search_content=str(entry["search_content"]),
            frontmatter=frontmatter if isinstance(frontmatter, dict) else None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"malformed resource entry: {exc}") from exc


def dump_index(index: ResourceIndex, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(index_to_dict(index), indent=2), encoding="utf-8")


def read_index(path: Path) -> ResourceIndex:
    """Load a snapshot from disk.

    Raises IndexNotGenerated when the file does not exist and SnapshotError
    when it cannot be read or decoded.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise IndexNotGenerated(path) from exc
    except OSError as exc:
        raise SnapshotError(f"unable to read snapshot {path}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"snapshot {path} is not valid JSON: {exc}") from exc
    return index_from_dict(payload)


__all__ = [
    "SNAPSHOT_VERSION",
    "dump_index",
    "index_from_dict",
    "index_to_dict",
    "read_index",
    "resource_from_dict",
    "resource_to_dict",
]
