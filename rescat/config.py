"""Configuration loading for rescat (.rescat.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".rescat.yml"

DEFAULT_RESOURCE_DIR = "cursor-resources"
DEFAULT_INDEX_PATH = "public/data/resources-index.json"
DEFAULT_THRESHOLD = 0.4
DEFAULT_MIN_MATCH_LENGTH = 2
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SearchConfig:
    """Fuzzy matching tolerances."""

    threshold: float = DEFAULT_THRESHOLD
    min_match_length: int = DEFAULT_MIN_MATCH_LENGTH


@dataclass
class ServiceConfig:
    """Bind address for `rescat serve`."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass
class CatalogConfig:
    """Represents the settings defined in .rescat.yml."""

    root: Path
    resource_root: Path
    index_path: Path
    search: SearchConfig = field(default_factory=SearchConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)


def default_config(root: Path) -> CatalogConfig:
    root = root.resolve()
    return CatalogConfig(
        root=root,
        resource_root=root / DEFAULT_RESOURCE_DIR,
        index_path=root / DEFAULT_INDEX_PATH,
    )


def load_config(config_path: Path) -> CatalogConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    config = default_config(root)

    if not config_file.exists():
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    resources_data = _as_dict(data.get("resources"))
    resource_dir = _as_str(resources_data.get("root"))
    if resource_dir:
        config.resource_root = (root / resource_dir).resolve()

    index_data = _as_dict(data.get("index"))
    index_path = _as_str(index_data.get("path"))
    if index_path:
        config.index_path = (root / index_path).resolve()

    search_data = _as_dict(data.get("search"))
    if search_data:
        threshold = _as_float(search_data.get("threshold"))
        if threshold is not None:
            if not 0.0 <= threshold <= 1.0:
                raise ConfigError("search.threshold must be between 0 and 1")
            config.search.threshold = threshold
        min_length = _as_int(search_data.get("min_match_length"))
        if min_length is not None:
            if min_length < 1:
                raise ConfigError("search.min_match_length must be at least 1")
            config.search.min_match_length = min_length

    service_data = _as_dict(data.get("service"))
    if service_data:
        host = _as_str(service_data.get("host"))
        if host:
            config.service.host = host
        port = _as_int(service_data.get("port"))
        if port is not None:
            config.service.port = port

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
