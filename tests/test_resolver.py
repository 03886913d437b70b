"""Tests for rescat.resolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from rescat.errors import CatalogError, ResourceNotFound, ResourceUnreadable, TraversalRejected
from rescat.resolver import ContentResolver
from tests._fixtures.resource_tree import ResourceTreeBuilder
from tests._fixtures.resources import make_resource


def test_resolve_returns_file_bytes(sample_tree: ResourceTreeBuilder) -> None:
    resolver = ContentResolver(sample_tree.root)
    resource = make_resource("db", file_path="mcps/db/config.json")

    assert resolver.resolve(resource) == (sample_tree.root / "mcps/db/config.json").read_bytes()
    assert '"db-mcp"' in resolver.read_text(resource)


def test_resolve_reads_fresh_content(sample_tree: ResourceTreeBuilder) -> None:
    resolver = ContentResolver(sample_tree.root)
    resource = make_resource("review", file_path="commands/review.md")
    resolver.resolve(resource)

    (sample_tree.root / "commands/review.md").write_text("changed", encoding="utf-8")

    assert resolver.read_text(resource) == "changed"


@pytest.mark.parametrize(
    "file_path",
    ["../../etc/passwd", "/etc/passwd", "../cursor-resources-evil/x.md", "rules/../../outside.md"],
)
def test_paths_outside_root_are_rejected_before_reading(
    tree_builder: ResourceTreeBuilder, monkeypatch: pytest.MonkeyPatch, file_path: str
) -> None:
    reads: list[Path] = []
    original = Path.read_bytes

    def tracking_read(self: Path) -> bytes:
        reads.append(self)
        return original(self)

    monkeypatch.setattr(Path, "read_bytes", tracking_read)
    resolver = ContentResolver(tree_builder.root)

    with pytest.raises(TraversalRejected):
        resolver.resolve(make_resource("evil", file_path=file_path))
    assert reads == []


def test_dot_segments_inside_root_are_allowed(sample_tree: ResourceTreeBuilder) -> None:
    resolver = ContentResolver(sample_tree.root)
    resource = make_resource("db", file_path="rules/../mcps/db/config.json")

    assert resolver.path_for(resource) == sample_tree.root.resolve() / "mcps/db/config.json"


def test_missing_file_raises_not_found(tree_builder: ResourceTreeBuilder) -> None:
    resolver = ContentResolver(tree_builder.root)

    with pytest.raises(ResourceNotFound):
        resolver.resolve(make_resource("gone", file_path="commands/gone.md"))


def test_directory_path_raises_not_found(sample_tree: ResourceTreeBuilder) -> None:
    resolver = ContentResolver(sample_tree.root)

    with pytest.raises(ResourceNotFound):
        resolver.resolve(make_resource("dir", file_path="commands/git"))


def test_file_used_as_directory_raises_not_found(sample_tree: ResourceTreeBuilder) -> None:
    resolver = ContentResolver(sample_tree.root)

    with pytest.raises(ResourceNotFound):
        resolver.resolve(make_resource("x", file_path="rules/security/audit.md/extra"))


def test_unreadable_file_raises_catalog_error(
    sample_tree: ResourceTreeBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    def denied(self: Path) -> bytes:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", denied)
    resolver = ContentResolver(sample_tree.root)

    with pytest.raises(ResourceUnreadable) as excinfo:
        resolver.resolve(make_resource("db", file_path="mcps/db/config.json"))
    assert isinstance(excinfo.value, CatalogError)
    assert "Permission denied" in str(excinfo.value)


def test_undecodable_text_raises_unreadable(tree_builder: ResourceTreeBuilder) -> None:
    target = tree_builder.root / "commands" / "binary.md"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"\xff\xfe\x00bad")
    resolver = ContentResolver(tree_builder.root)
    resource = make_resource("binary", file_path="commands/binary.md")

    assert resolver.resolve(resource) == b"\xff\xfe\x00bad"
    with pytest.raises(ResourceUnreadable):
        resolver.read_text(resource)
