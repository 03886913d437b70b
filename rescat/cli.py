"""CLI entrypoints for rescat commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from .catalog import ResourceCatalog
from .config import CatalogConfig, ConfigError, load_config
from .errors import CatalogError, IndexNotGenerated
from .logging import configure_logging
from .models import ALL_TYPES, ResourceMetadata, ResourceType, SearchFilters, SortMode
from .scanner import build_index, summarize
from .snapshot import resource_to_dict


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rescat",
        description="Index, search and serve a tree of commands, rules, MCP configs and hooks.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .rescat.yml or the directory containing it (defaults to current directory).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser(
        "index",
        help="Scan the resource tree and write the index snapshot.",
    )
    _add_verbose_option(index_parser, suppress_default=True)
    index_parser.add_argument("--root", help="Resource directory to scan.")
    index_parser.add_argument("--output", help="Where to write the index snapshot.")

    search_parser = subparsers.add_parser(
        "search",
        help="Search the indexed resources.",
    )
    _add_verbose_option(search_parser, suppress_default=True)
    search_parser.add_argument("query", nargs="?", default="", help="Fuzzy query (empty lists everything).")
    search_parser.add_argument(
        "--type",
        dest="resource_type",
        choices=[ALL_TYPES, *(member.value for member in ResourceType)],
        help="Only return resources of this type.",
    )
    search_parser.add_argument("--category", help="Only return resources in this category.")
    search_parser.add_argument(
        "--sort",
        choices=[member.value for member in SortMode],
        help="Sort order applied after ranking.",
    )
    search_parser.add_argument("--limit", type=int, default=None, help="Maximum results to print.")
    search_parser.add_argument("--json", action="store_true", help="Emit results as JSON.")

    show_parser = subparsers.add_parser(
        "show",
        help="Show one resource by slug.",
    )
    _add_verbose_option(show_parser, suppress_default=True)
    show_parser.add_argument("slug")
    show_parser.add_argument("--content", action="store_true", help="Print the file content too.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the catalog over HTTP.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", help="Bind address.")
    serve_parser.add_argument("--port", type=int, help="Bind port.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for rescat commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "index":
        _run_index(parser, args, config)
    elif args.command == "search":
        _run_search(parser, args, config)
    elif args.command == "show":
        _run_show(parser, args, config)
    elif args.command == "serve":
        _run_serve(parser, args, config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_index(parser: argparse.ArgumentParser, args: argparse.Namespace, config: CatalogConfig) -> None:
    root = Path(args.root).resolve() if args.root else config.resource_root
    output = Path(args.output).resolve() if args.output else config.index_path
    try:
        report = build_index(root, output)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")

    print(f"Indexed {report.index.total_count} resources into {_relativize(output)}")
    for summary in summarize(report.index):
        print(f"  {summary.type.value}: {summary.count} ({len(summary.categories)} categories)")
    if report.collisions:
        print(f"Duplicate slugs: {len(report.collisions)}")
        for collision in report.collisions:
            print(f"  - {collision.slug}: {collision.count} occurrences")
    if report.failures:
        print(f"Skipped files: {len(report.failures)}")
        for failure in report.failures:
            print(f"  - {failure.file_path}: {failure.reason}")


def _run_search(parser: argparse.ArgumentParser, args: argparse.Namespace, config: CatalogConfig) -> None:
    catalog = ResourceCatalog.from_config(config)
    filters = SearchFilters.from_values(
        type=args.resource_type, category=args.category, sort_by=args.sort
    )
    try:
        results = catalog.search(args.query, filters)
    except CatalogError as exc:
        parser.exit(1, f"{exc}\n")

    if args.limit is not None:
        results = results[: max(args.limit, 0)]
    if args.json:
        print(json.dumps([resource_to_dict(item) for item in results], indent=2))
        return
    if not results:
        print("No resources found")
        return
    for resource in results:
        print(f"{resource.slug}  [{resource.type.value}/{resource.category}]  {resource.title}")


def _run_show(parser: argparse.ArgumentParser, args: argparse.Namespace, config: CatalogConfig) -> None:
    catalog = ResourceCatalog.from_config(config)
    try:
        resource = catalog.by_slug(args.slug)
        if resource is None:
            parser.exit(1, f"Resource not found: {args.slug}\n")
        _print_resource(resource)
        if args.content:
            print()
            print(catalog.resolver.read_text(resource))
    except CatalogError as exc:
        parser.exit(1, f"{exc}\n")


def _run_serve(parser: argparse.ArgumentParser, args: argparse.Namespace, config: CatalogConfig) -> None:
    from .service import run_service

    catalog = ResourceCatalog.from_config(config)
    try:
        catalog.index()
    except IndexNotGenerated as exc:
        parser.exit(1, f"{exc}\n")
    host = args.host or config.service.host
    port = args.port or config.service.port
    run_service(catalog, host=host, port=port)


def _print_resource(resource: ResourceMetadata) -> None:
    lines: Sequence[str] = (
        f"{resource.title}",
        f"  slug:        {resource.slug}",
        f"  type:        {resource.type.value}",
        f"  category:    {resource.category}",
        f"  file:        {resource.file_path} ({format_file_size(resource.file_size)})",
        f"  created:     {resource.created_at}",
        f"  tags:        {', '.join(resource.tags) if resource.tags else '-'}",
        f"  description: {resource.description}",
    )
    print("\n".join(lines))


def format_file_size(size: int) -> str:
    """Render a byte count as B, KB or MB with one decimal place."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
