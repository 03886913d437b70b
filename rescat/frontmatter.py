"""Front-matter parsing for Markdown-family resources."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol

import yaml

_DELIMITER = "---"


class FrontmatterError(ValueError):
    """Raised when a front-matter block exists but cannot be parsed."""


@dataclass(frozen=True)
class ParsedDocument:
    """Header mapping and the body that follows it."""

    data: Dict[str, Any] = field(default_factory=dict)
    body: str = ""


class FrontmatterParser(Protocol):
    """Splits a document into its structured header and remaining body."""

    def parse(self, text: str) -> ParsedDocument:
        """Return the parsed header and body for ``text``."""


class YamlFrontmatterParser:
    """Reads a ``---`` delimited YAML header at the very start of a document."""

    def parse(self, text: str) -> ParsedDocument:
        if text.startswith("\ufeff"):
            text = text[1:]
        lines = text.splitlines(keepends=True)
        if not lines or lines[0].rstrip("\r\n").rstrip() != _DELIMITER:
            return ParsedDocument(data={}, body=text)

        end_index = None
        for index in range(1, len(lines)):
            if lines[index].rstrip("\r\n").rstrip() == _DELIMITER:
                end_index = index
                break
        if end_index is None:
            return ParsedDocument(data={}, body=text)

        header = "".join(lines[1:end_index])
        body = "".join(lines[end_index + 1 :])
        try:
            loaded = yaml.safe_load(header) if header.strip() else {}
        except yaml.YAMLError as exc:
            raise FrontmatterError(f"invalid front-matter: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise FrontmatterError("front-matter must be a mapping")
        return ParsedDocument(data=_jsonable(loaded), body=body)


def _jsonable(value: Any) -> Any:
    """Coerce YAML scalars into values the JSON snapshot can hold unchanged."""
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(item) for item in value]
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


__all__ = ["FrontmatterError", "FrontmatterParser", "ParsedDocument", "YamlFrontmatterParser"]
