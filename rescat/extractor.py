"""Metadata extraction for individual resource files."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .errors import ExtractionError
from .frontmatter import FrontmatterError, FrontmatterParser, YamlFrontmatterParser
from .logging import get_logger
from .models import ResourceExtension, ResourceMetadata, ResourceType

GENERAL_CATEGORY = "general"
EXCERPT_LENGTH = 300
DESCRIPTION_LENGTH = 200

MCP_DESCRIPTION = "MCP tool configuration"
SHELL_DESCRIPTION = "Shell script"
MISSING_DESCRIPTION = "No description available"

_TASK_NAME_PATTERN = re.compile(r'<task name="([^"]+)"')
_HEADING_PATTERN = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
_WORD_START_PATTERN = re.compile(r"\b\w")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_SLUG_INVALID_PATTERN = re.compile(r"[^a-z0-9-]")

_logger = get_logger("extractor")
_default_parser = YamlFrontmatterParser()


@dataclass(frozen=True)
class _Source:
    relative_path: str
    file_name: str
    stem: str
    text: str
    parser: FrontmatterParser


@dataclass(frozen=True)
class _Extracted:
    title: str
    description: str
    body: str
    tags: Tuple[str, ...] = ()
    frontmatter: Optional[Dict[str, Any]] = None


def determine_type(relative_path: str) -> ResourceType:
    """Return the resource type from the first marker directory in the path."""
    directories = PurePosixPath(relative_path).parts[:-1]
    for resource_type in ResourceType:
        if resource_type.directory in directories:
            return resource_type
    return ResourceType.COMMAND


def extract_category(relative_path: str, resource_type: ResourceType) -> str:
    """Return the directory directly below the type directory, or ``general``."""
    directories = PurePosixPath(relative_path).parts[:-1]
    marker = resource_type.directory
    if marker not in directories:
        return GENERAL_CATEGORY
    position = directories.index(marker)
    if position + 1 < len(directories):
        return directories[position + 1]
    return GENERAL_CATEGORY


def generate_slug(resource_type: ResourceType, category: str, file_name: str) -> str:
    stem = PurePosixPath(file_name).stem
    raw = f"{resource_type.value}-{category}-{stem}".lower()
    return _SLUG_INVALID_PATTERN.sub("-", raw)


def title_from_file_name(file_name: str) -> str:
    """Turn ``my-cool-rule.md`` into ``My Cool Rule``."""
    stem = PurePosixPath(file_name).stem.replace("-", " ")
    return _WORD_START_PATTERN.sub(lambda match: match.group(0).upper(), stem)


def build_excerpt(body: str) -> str:
    return _WHITESPACE_PATTERN.sub(" ", body[:EXCERPT_LENGTH]).strip()


def extract_metadata(
    relative_path: str,
    text: str,
    *,
    file_size: int,
    created_at: str,
    parser: FrontmatterParser | None = None,
) -> ResourceMetadata:
    """Build the metadata record for one resource file.

    ``relative_path`` is the POSIX path below the resource root. Raises
    ExtractionError when the extension is not indexable or the content cannot
    be interpreted for its format.
    """
    path = PurePosixPath(relative_path)
    extension = ResourceExtension.from_suffix(path.suffix)
    if extension is None:
        raise ExtractionError(f"unsupported extension {path.suffix!r} for {relative_path}")

    resource_type = determine_type(relative_path)
    category = extract_category(relative_path, resource_type)
    source = _Source(
        relative_path=relative_path,
        file_name=path.name,
        stem=path.stem,
        text=text,
        parser=parser or _default_parser,
    )
    extracted = _EXTRACTORS[extension](source)

    excerpt = build_excerpt(extracted.body)
    search_content = " ".join(
        [extracted.title, extracted.description, excerpt, *extracted.tags]
    )
    return ResourceMetadata(
        slug=generate_slug(resource_type, category, path.name),
        type=resource_type,
        category=category,
        title=extracted.title,
        description=extracted.description,
        tags=extracted.tags,
        file_path=relative_path,
        file_name=path.name,
        extension=extension,
        file_size=file_size,
        created_at=created_at,
        excerpt=excerpt,
        search_content=search_content,
        frontmatter=extracted.frontmatter,
    )


# ----------------------------------------------------------------------
# Per-extension extractors


def _extract_markdown(source: _Source) -> _Extracted:
    frontmatter: Optional[Dict[str, Any]]
    try:
        parsed = source.parser.parse(source.text)
    except FrontmatterError as exc:
        _logger.warning("Failed to parse front-matter for %s: %s", source.relative_path, exc)
        frontmatter = None
        body = source.text
    else:
        frontmatter = parsed.data
        body = parsed.body

    return _Extracted(
        title=_markdown_title(body, source.file_name),
        description=_markdown_description(body, frontmatter),
        body=body,
        tags=extract_tags(frontmatter),
        frontmatter=frontmatter,
    )


def _extract_json(source: _Source) -> _Extracted:
    try:
        payload = json.loads(source.text)
    except ValueError as exc:
        raise ExtractionError(f"invalid JSON in {source.relative_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ExtractionError(f"{source.relative_path} must contain a JSON object")

    name = payload.get("name")
    description = payload.get("description")
    return _Extracted(
        title=str(name) if name else source.file_name,
        description=str(description) if description else MCP_DESCRIPTION,
        body=source.text,
    )


def _extract_shell(source: _Source) -> _Extracted:
    return _Extracted(
        title=title_from_file_name(source.file_name),
        description=SHELL_DESCRIPTION,
        body=source.text,
    )


_EXTRACTORS: Dict[ResourceExtension, Callable[[_Source], _Extracted]] = {
    ResourceExtension.MARKDOWN: _extract_markdown,
    ResourceExtension.CURSOR_RULE: _extract_markdown,
    ResourceExtension.JSON: _extract_json,
    ResourceExtension.SHELL: _extract_shell,
}


def _markdown_title(body: str, file_name: str) -> str:
    task_match = _TASK_NAME_PATTERN.search(body)
    if task_match:
        return task_match.group(1)
    heading_match = _HEADING_PATTERN.search(body)
    if heading_match:
        heading = heading_match.group(1).strip()
        if heading:
            return heading
    return title_from_file_name(file_name)


def _markdown_description(body: str, frontmatter: Optional[Mapping[str, Any]]) -> str:
    if frontmatter:
        declared = frontmatter.get("description")
        if declared and str(declared).strip():
            return str(declared).strip()
    for line in body.split("\n"):
        if not line.strip() or line.startswith("#") or line.startswith("<"):
            continue
        return line.strip()[:DESCRIPTION_LENGTH]
    return MISSING_DESCRIPTION


def extract_tags(frontmatter: Optional[Mapping[str, Any]]) -> Tuple[str, ...]:
    """Read ``tags`` as either a list or a comma-separated string."""
    if not frontmatter:
        return ()
    tags = frontmatter.get("tags")
    if isinstance(tags, list):
        return tuple(str(tag) for tag in tags)
    if isinstance(tags, str):
        return tuple(tag.strip() for tag in tags.split(","))
    return ()


__all__ = [
    "GENERAL_CATEGORY",
    "build_excerpt",
    "determine_type",
    "extract_category",
    "extract_metadata",
    "extract_tags",
    "generate_slug",
    "title_from_file_name",
]
