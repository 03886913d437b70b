"""Error types raised by the catalog core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


class CatalogError(RuntimeError):
    """Base class for catalog failures."""


class ExtractionError(CatalogError):
    """Raised when metadata cannot be extracted from a resource file."""


class IndexNotGenerated(CatalogError):
    """Raised when no index snapshot exists at the configured location."""

    def __init__(self, path: object) -> None:
        super().__init__(
            f"Resource index not found at {path}. Run `rescat index` to generate it."
        )
        self.path = path


class SnapshotError(CatalogError):
    """Raised when an index snapshot exists but cannot be used."""


class ResourceNotFound(CatalogError):
    """Raised when a slug or its backing file cannot be found."""


class TraversalRejected(CatalogError):
    """Raised when a resource path resolves outside the resource root."""


class ResourceUnreadable(CatalogError):
    """Raised when a resource file exists but cannot be read or decoded."""


@dataclass(frozen=True)
class ExtractionFailure:
    """A file the scanner skipped, with the reason it was dropped."""

    file_path: str
    reason: str


@dataclass(frozen=True)
class SlugCollision:
    """A slug shared by more than one scanned file."""

    slug: str
    file_paths: Tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.file_paths)


__all__ = [
    "CatalogError",
    "ExtractionError",
    "ExtractionFailure",
    "IndexNotGenerated",
    "ResourceNotFound",
    "ResourceUnreadable",
    "SlugCollision",
    "SnapshotError",
    "TraversalRejected",
]
