"""lexsearch FastAPI application entry point.

Wires providers, services, and routes together via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging at import time.

``build_components`` is public so the CLI can assemble the same object
graph outside the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.providers.embedding.voyage_embedding_provider import VoyageEmbeddingProvider
from src.providers.vector_store.pinecone_provider import PineconeProvider
from src.services.ingestion.bootstrap_service import BootstrapService
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.source_processors.pdf_processor import PDFProcessor
from src.services.search_service import SearchService
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_components(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    Missing config sections fall back to the component defaults.
    """
    index_cfg = app_config.get("index", {})
    ingestion_cfg = app_config.get("ingestion", {})
    search_cfg = app_config.get("search", {})

    # -- Providers --
    embedding_provider = VoyageEmbeddingProvider(settings=app_settings)
    vector_store = PineconeProvider(
        settings=app_settings,
        metric=index_cfg.get("metric", "cosine"),
    )

    # -- Ingestion --
    pdf_processor = PDFProcessor()
    chunker = TextChunker(
        chunk_size=ingestion_cfg.get("chunk_size", 1000),
        overlap=ingestion_cfg.get("chunk_overlap", 200),
    )
    bootstrap_service = BootstrapService(
        pdf_processor=pdf_processor,
        chunker=chunker,
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        docs_dir=app_settings.docs_dir,
        metadata_path=app_settings.metadata_path,
        dimension=index_cfg.get("dimension", embedding_provider.get_dimension()),
        batch_size=ingestion_cfg.get("batch_size", 5),
        upsert_batch_size=ingestion_cfg.get("upsert_batch_size", 2),
        batch_pause_seconds=ingestion_cfg.get("batch_pause_seconds", 1.0),
        namespace=app_settings.pinecone_namespace,
        max_content_chars=ingestion_cfg.get("max_content_chars", 8192),
    )

    # -- Search --
    search_service = SearchService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        index_name=app_settings.pinecone_index,
        namespace=app_settings.pinecone_namespace,
        top_k=search_cfg.get("top_k", 20),
        fetch_k=search_cfg.get("fetch_k", 40),
        mmr_lambda=search_cfg.get("mmr_lambda", 0.5),
    )

    return {
        "settings": app_settings,
        "config": app_config,
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "pdf_processor": pdf_processor,
        "chunker": chunker,
        "bootstrap_service": bootstrap_service,
        "search_service": search_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup."""
    components = build_components(settings, config)
    for key, value in components.items():
        setattr(application.state, key, value)

    missing = settings.get_missing_credentials()
    if missing:
        _logger.warning("app_missing_credentials", missing=missing)

    _logger.info(
        "app_startup",
        version="0.1.0",
        environment=settings.app_env,
        index=settings.pinecone_index or None,
        embedding_model=components["embedding_provider"].get_provider_name(),
    )

    yield

    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="lexsearch API",
        version="0.1.0",
        description=(
            "Ingest a directory of legal PDFs into a Pinecone index with Voyage "
            "embeddings, then search it with maximal-marginal-relevance retrieval."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
