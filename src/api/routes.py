"""FastAPI API routes for lexsearch.

Service dependencies are resolved from ``app.state`` (populated at startup
in ``main.py``) via ``Depends`` helpers and ``Annotated`` aliases, so tests
can assemble a bare app with fakes on its state.

    Endpoint          Method  Description
    -------------------------------------------------------------------
    /api/bootstrap    POST    Schedule a bootstrap run of the default index
    /api/ingest       POST    Bootstrap a named index and wait for it
    /api/search       POST    MMR semantic search of the default index
    /api/health       GET     Health check + provider status

Errors are returned as ``{"error": ...}`` bodies.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from src.api.schemas import (
    ErrorResponse,
    HealthResponse,
    IngestRequest,
    MessageResponse,
    SearchRequest,
    SearchResponse,
)
from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.services.ingestion.bootstrap_service import BootstrapService
from src.services.search_service import SearchService
from src.utils.errors import ConnectionTimeoutError, LexSearchError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_APP_VERSION = "0.1.0"
_TIMEOUT_MESSAGE = "Connection timeout. Please try again later."
_QUERY_REQUIRED_MESSAGE = "Query is required"
_SEARCH_FAILED_MESSAGE = "Error performing similarity search"


def _error(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(error=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    """Return the application settings from application state."""
    return request.app.state.settings


def _get_bootstrap_service(request: Request) -> BootstrapService:
    """Return the bootstrap orchestrator from application state."""
    return request.app.state.bootstrap_service


def _get_search_service(request: Request) -> SearchService:
    """Return the search service from application state."""
    return request.app.state.search_service


def _get_embedding_provider(request: Request) -> IEmbeddingProvider | None:
    return getattr(request.app.state, "embedding_provider", None)


def _get_vector_store(request: Request) -> IVectorStoreProvider | None:
    return getattr(request.app.state, "vector_store", None)


SettingsDep = Annotated[Settings, Depends(_get_settings)]
BootstrapDep = Annotated[BootstrapService, Depends(_get_bootstrap_service)]
SearchDep = Annotated[SearchService, Depends(_get_search_service)]
EmbeddingDep = Annotated[Any, Depends(_get_embedding_provider)]
VectorStoreDep = Annotated[Any, Depends(_get_vector_store)]


async def _run_bootstrap(service: BootstrapService, index_name: str) -> None:
    """Run a bootstrap after the response has been sent.

    Nothing is waiting on the result, so failures can only be logged.
    """
    try:
        result = await service.run(index_name)
    except Exception as exc:
        _logger.exception("background_bootstrap_failed", index=index_name, error=str(exc))
        return
    _logger.info(
        "background_bootstrap_finished",
        index=index_name,
        status=result.status.value,
        vectors=result.vectors_upserted,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post(
    "/bootstrap",
    response_model=MessageResponse,
    summary="Bootstrap the configured index in the background",
)
async def bootstrap(
    background_tasks: BackgroundTasks,
    service: BootstrapDep,
    settings: SettingsDep,
) -> Any:
    """Schedule a bootstrap of ``PINECONE_INDEX`` and return immediately."""
    if not settings.pinecone_index:
        return _error(500, "PINECONE_INDEX is not configured")

    background_tasks.add_task(_run_bootstrap, service, settings.pinecone_index)
    _logger.info("bootstrap_scheduled", index=settings.pinecone_index)
    return MessageResponse(message="Bootstrapping initiated")


@router.post(
    "/ingest",
    response_model=MessageResponse,
    summary="Bootstrap a named index and wait for the result",
)
async def ingest(payload: IngestRequest, service: BootstrapDep) -> Any:
    """Run the bootstrap orchestrator against ``targetIndex``."""
    try:
        result = await service.run(payload.target_index)
    except ConnectionTimeoutError as exc:
        _logger.error("ingest_connection_timeout", index=payload.target_index, error=str(exc))
        return _error(500, _TIMEOUT_MESSAGE)

    return MessageResponse(message=result.message)


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Semantic search with maximal marginal relevance",
)
async def search(service: SearchDep, payload: SearchRequest | None = None) -> Any:
    """Return diverse, de-duplicated chunks relevant to ``query``."""
    query = payload.query if payload is not None else None
    if not query or not query.strip():
        return _error(400, _QUERY_REQUIRED_MESSAGE)

    try:
        hits = await service.search(query)
    except Exception as exc:
        _logger.exception("search_failed", error=str(exc))
        return _error(500, _SEARCH_FAILED_MESSAGE)

    return SearchResponse(results=hits)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(
    settings: SettingsDep,
    embedding_provider: EmbeddingDep,
    vector_store: VectorStoreDep,
) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {
        "embedding": bool(embedding_provider and embedding_provider.is_available()),
        "vector_store": bool(vector_store and vector_store.is_available()),
        "index": settings.pinecone_index or None,
        "index_records": None,
    }

    if providers["vector_store"] and settings.pinecone_index:
        try:
            providers["index_records"] = await vector_store.get_record_count(
                settings.pinecone_index
            )
        except LexSearchError as exc:
            _logger.warning("health_index_stats_failed", error=str(exc))
            providers["vector_store"] = False

    if providers["embedding"] and providers["vector_store"]:
        status = "healthy"
    elif providers["embedding"] or providers["vector_store"]:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=_APP_VERSION, providers=providers)
