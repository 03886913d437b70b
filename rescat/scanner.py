"""Resource tree scanning and index building."""

from __future__ import annotations

import os
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Sequence, Tuple

from .errors import ExtractionError, ExtractionFailure, SlugCollision
from .extractor import extract_metadata
from .frontmatter import FrontmatterParser
from .logging import get_logger, log_scan_summary
from .models import (
    CategorySummary,
    ResourceExtension,
    ResourceIndex,
    ResourceMetadata,
    ResourceType,
)
from .snapshot import dump_index

_ALLOWED_SUFFIXES = {member.value for member in ResourceExtension}

Clock = Callable[[], datetime]


def isoformat_utc(moment: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class ScanReport:
    """Outcome of one full scan: the index plus everything that went wrong."""

    index: ResourceIndex
    failures: Tuple[ExtractionFailure, ...] = ()
    collisions: Tuple[SlugCollision, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures and not self.collisions


def _iter_files(directory: Path, on_error: Callable[[Path, OSError], None]) -> Iterator[Path]:
    """Yield candidate files depth-first, in name order within each directory.

    A directory that cannot be listed is passed to ``on_error`` and skipped.
    """
    try:
        with os.scandir(directory) as entries:
            ordered = sorted(entries, key=lambda entry: entry.name)
    except OSError as exc:
        on_error(directory, exc)
        return
    for entry in ordered:
        if entry.is_dir(follow_symlinks=False):
            yield from _iter_files(Path(entry.path), on_error)
        elif entry.is_file():
            if os.path.splitext(entry.name)[1] in _ALLOWED_SUFFIXES:
                yield Path(entry.path)


def _created_timestamp(stat_result: os.stat_result) -> float:
    birth = getattr(stat_result, "st_birthtime", None)
    if isinstance(birth, (int, float)) and birth > 0:
        return float(birth)
    return stat_result.st_mtime


def build_categories(
    resources: Sequence[ResourceMetadata],
) -> Dict[ResourceType, List[str]]:
    """Group distinct categories per type, sorted, with every type present."""
    grouped: Dict[ResourceType, set[str]] = {resource_type: set() for resource_type in ResourceType}
    for resource in resources:
        grouped[resource.type].add(resource.category)
    return {resource_type: sorted(values) for resource_type, values in grouped.items()}


def find_slug_collisions(resources: Sequence[ResourceMetadata]) -> List[SlugCollision]:
    counts = Counter(resource.slug for resource in resources)
    collisions: List[SlugCollision] = []
    for slug, count in counts.items():
        if count < 2:
            continue
        paths = tuple(resource.file_path for resource in resources if resource.slug == slug)
        collisions.append(SlugCollision(slug=slug, file_paths=paths))
    return collisions


def summarize(index: ResourceIndex) -> List[CategorySummary]:
    """Per-type counts and categories, in enumeration order."""
    counts = Counter(resource.type for resource in index.resources)
    return [
        CategorySummary(
            type=resource_type,
            categories=list(index.categories.get(resource_type, [])),
            count=counts.get(resource_type, 0),
        )
        for resource_type in ResourceType
    ]


class ResourceScanner:
    """Walks a resource tree and produces an immutable ResourceIndex."""

    def __init__(
        self,
        *,
        parser: FrontmatterParser | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.parser = parser
        self.clock = clock or _utc_now
        self.logger = get_logger("scanner")

    def scan(self, root: str | Path) -> ScanReport:
        """Scan ``root`` and return the index with per-file failures and collisions."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Resource directory not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Resource path is not a directory: {root}")

        resources: List[ResourceMetadata] = []
        failures: List[ExtractionFailure] = []

        def unlisted(directory: Path, exc: OSError) -> None:
            rel_dir = directory.relative_to(root_path).as_posix()
            self.logger.warning("Skipping directory %s: %s", rel_dir, exc)
            failures.append(ExtractionFailure(file_path=rel_dir, reason=str(exc)))

        for path in _iter_files(root_path, unlisted):
            rel_path = path.relative_to(root_path).as_posix()
            try:
                resources.append(self._process_file(path, rel_path))
            except (OSError, UnicodeDecodeError, ExtractionError) as exc:
                self.logger.warning("Skipping %s: %s", rel_path, exc)
                failures.append(ExtractionFailure(file_path=rel_path, reason=str(exc)))

        self.logger.debug("Scanner extracted %d resources", len(resources))

        collisions = find_slug_collisions(resources)
        for collision in collisions:
            self.logger.warning(
                "Duplicate slug %s: %d occurrences (%s)",
                collision.slug,
                collision.count,
                ", ".join(collision.file_paths),
            )

        index = ResourceIndex(
            resources=tuple(resources),
            categories=build_categories(resources),
            total_count=len(resources),
            generated_at=isoformat_utc(self.clock()),
        )
        return ScanReport(index=index, failures=tuple(failures), collisions=tuple(collisions))

    def _process_file(self, path: Path, rel_path: str) -> ResourceMetadata:
        text = path.read_text(encoding="utf-8")
        stat_result = path.stat()
        created_at = isoformat_utc(datetime.fromtimestamp(_created_timestamp(stat_result), UTC))
        return extract_metadata(
            rel_path,
            text,
            file_size=stat_result.st_size,
            created_at=created_at,
            parser=self.parser,
        )


def build_index(
    resource_root: Path,
    output_path: Path,
    *,
    scanner: ResourceScanner | None = None,
) -> ScanReport:
    """Scan the resource tree and persist the snapshot to ``output_path``."""
    logger = get_logger("scanner")
    scanner = scanner or ResourceScanner()
    logger.info("Scanning %s", resource_root)
    report = scanner.scan(resource_root)
    log_scan_summary(logger, report)

    dump_index(report.index, output_path)
    logger.info("Resource index written to %s", output_path)
    return report


__all__ = [
    "ResourceScanner",
    "ScanReport",
    "build_categories",
    "build_index",
    "find_slug_collisions",
    "isoformat_utc",
    "summarize",
]
