"""Resolution of resource metadata to file content on disk."""

from __future__ import annotations

from pathlib import Path

from .errors import ResourceNotFound, ResourceUnreadable, TraversalRejected
from .models import ResourceMetadata


class ContentResolver:
    """Reads resource files, refusing any path that escapes the resource root.

    Content is read fresh on every call and never cached. Every failure is
    raised as a CatalogError subclass.
    """

    def __init__(self, resource_root: Path) -> None:
        self.resource_root = Path(resource_root).expanduser().resolve()

    def path_for(self, resource: ResourceMetadata) -> Path:
        """Return the canonical on-disk path, raising TraversalRejected if outside the root."""
        candidate = (self.resource_root / resource.file_path).resolve()
        if not candidate.is_relative_to(self.resource_root):
            raise TraversalRejected(
                f"Invalid file path: {resource.file_path!r} resolves outside the resource root"
            )
        return candidate

    def resolve(self, resource: ResourceMetadata) -> bytes:
        path = self.path_for(resource)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise ResourceNotFound(f"Resource file not found: {resource.file_path}") from exc
        except OSError as exc:
            raise ResourceUnreadable(
                f"Unable to read resource file {resource.file_path}: {exc.strerror or exc}"
            ) from exc

    def read_text(self, resource: ResourceMetadata) -> str:
        payload = self.resolve(resource)
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ResourceUnreadable(
                f"Resource file {resource.file_path} is not valid UTF-8"
            ) from exc


__all__ = ["ContentResolver"]
