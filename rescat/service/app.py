"""FastAPI application exposing the resource catalog."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from ..catalog import ResourceCatalog
from ..config import load_config
from ..errors import (
    IndexNotGenerated,
    ResourceNotFound,
    ResourceUnreadable,
    SnapshotError,
    TraversalRejected,
)
from ..logging import get_logger
from ..models import ResourceMetadata, SearchFilters
from ..snapshot import resource_to_dict

_SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

_T = TypeVar("_T")


class DownloadRecorder(Protocol):
    """Receives download events; persistence of counts lives outside rescat."""

    def record(self, resource: ResourceMetadata) -> None:
        """Note that ``resource`` was downloaded."""


class LoggingDownloadRecorder:
    """Default recorder that only logs download events."""

    def __init__(self) -> None:
        self.logger = get_logger("service.downloads")

    def record(self, resource: ResourceMetadata) -> None:
        self.logger.info("Download %s (%s)", resource.slug, resource.file_name)


class ResourceModel(BaseModel):
    slug: str
    type: str
    category: str
    title: str
    description: str
    tags: List[str]
    file_path: str
    file_name: str
    extension: str
    file_size: int
    created_at: str
    excerpt: str
    search_content: str
    frontmatter: Optional[Dict[str, Any]] = None


class SearchResponse(BaseModel):
    count: int
    results: List[ResourceModel]


class CategoriesResponse(BaseModel):
    categories: Dict[str, List[str]]
    total_count: int
    generated_at: str


class ContentResponse(BaseModel):
    resource: ResourceModel
    content: str


class HealthResponse(BaseModel):
    status: str


def _to_model(resource: ResourceMetadata) -> ResourceModel:
    return ResourceModel(**resource_to_dict(resource))


def _default_catalog() -> ResourceCatalog:
    return ResourceCatalog.from_config(load_config(Path.cwd()))


async def _run_blocking(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def _require_valid_slug(slug: str) -> None:
    if not _SLUG_PATTERN.match(slug):
        raise HTTPException(status_code=400, detail="Invalid slug format")


def create_app(
    catalog_factory: Callable[[], ResourceCatalog] = _default_catalog,
    download_recorder: DownloadRecorder | None = None,
) -> FastAPI:
    """Create the FastAPI application serving catalog queries."""
    app = FastAPI(title="Resource Catalog", version="1.0.0")
    recorder = download_recorder or LoggingDownloadRecorder()
    logger = get_logger("service")
    catalog_holder: Dict[str, ResourceCatalog] = {}

    async def get_catalog() -> ResourceCatalog:
        # One catalog per app keeps the search index warm across requests.
        if "catalog" not in catalog_holder:
            catalog_holder["catalog"] = catalog_factory()
        return catalog_holder["catalog"]

    def _lookup(catalog: ResourceCatalog, slug: str) -> ResourceMetadata:
        _require_valid_slug(slug)
        resource = catalog.by_slug(slug)
        if resource is None:
            raise HTTPException(status_code=404, detail="Resource not found")
        return resource

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/resources", response_model=SearchResponse)
    async def search(
        q: str = "",
        resource_type: Optional[str] = Query(None, alias="type"),
        category: Optional[str] = None,
        sort: Optional[str] = None,
        catalog: ResourceCatalog = Depends(get_catalog),
    ) -> SearchResponse:
        try:
            filters = SearchFilters.from_values(type=resource_type, category=category, sort_by=sort)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        results = await _run_blocking(lambda: catalog.search(q, filters))
        return SearchResponse(count=len(results), results=[_to_model(item) for item in results])

    @app.get("/resources/categories", response_model=CategoriesResponse)
    async def categories(catalog: ResourceCatalog = Depends(get_catalog)) -> CategoriesResponse:
        index = await _run_blocking(catalog.index)
        return CategoriesResponse(
            categories={key.value: list(values) for key, values in index.categories.items()},
            total_count=index.total_count,
            generated_at=index.generated_at,
        )

    @app.get("/resources/{slug}", response_model=ResourceModel)
    async def resource_detail(
        slug: str, catalog: ResourceCatalog = Depends(get_catalog)
    ) -> ResourceModel:
        resource = await _run_blocking(lambda: _lookup(catalog, slug))
        return _to_model(resource)

    @app.get("/resources/{slug}/content", response_model=ContentResponse)
    async def resource_content(
        slug: str, catalog: ResourceCatalog = Depends(get_catalog)
    ) -> ContentResponse:
        resource = await _run_blocking(lambda: _lookup(catalog, slug))
        content = await _run_blocking(lambda: catalog.resolver.read_text(resource))
        return ContentResponse(resource=_to_model(resource), content=content)

    @app.get("/resources/{slug}/download")
    async def resource_download(
        slug: str, catalog: ResourceCatalog = Depends(get_catalog)
    ) -> Response:
        resource = await _run_blocking(lambda: _lookup(catalog, slug))
        payload = await _run_blocking(lambda: catalog.resolve_content(resource))
        try:
            recorder.record(resource)
        except Exception:  # pragma: no cover
            logger.warning("Failed to record download for %s", slug, exc_info=True)
        return Response(
            content=payload,
            media_type="application/octet-stream",
            headers={"Content-Disposition": f'attachment; filename="{resource.file_name}"'},
        )

    @app.exception_handler(IndexNotGenerated)
    async def index_missing_handler(_: Any, exc: IndexNotGenerated) -> JSONResponse:
        logger.error("%s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(SnapshotError)
    async def snapshot_error_handler(_: Any, exc: SnapshotError) -> JSONResponse:
        logger.error("%s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(ResourceNotFound)
    async def not_found_handler(_: Any, exc: ResourceNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ResourceUnreadable)
    async def unreadable_handler(_: Any, exc: ResourceUnreadable) -> JSONResponse:
        logger.error("%s", exc)
        return JSONResponse(status_code=500, content={"detail": "Unable to read resource"})

    @app.exception_handler(TraversalRejected)
    async def traversal_handler(_: Any, exc: TraversalRejected) -> JSONResponse:
        logger.warning("%s", exc)
        return JSONResponse(status_code=403, content={"detail": "Invalid file path"})

    return app


def run_service(
    catalog: ResourceCatalog, host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(lambda: catalog)
    uvicorn.run(app, host=host, port=port)
