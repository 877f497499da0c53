"""Pydantic request/response schemas for the lexsearch API.

Request schemas end with ``Request`` and response schemas with
``Response``.  Field names follow the JSON wire format the existing
clients use (``targetIndex``, ``pageContent``); Python code uses the
snake_case attribute names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.document import SearchHit


class IngestRequest(BaseModel):
    """Body of ``POST /api/ingest``."""

    model_config = ConfigDict(populate_by_name=True)

    target_index: str = Field(
        ...,
        alias="targetIndex",
        min_length=1,
        description="Name of the index to bootstrap.",
    )


class SearchRequest(BaseModel):
    """Body of ``POST /api/search``.

    ``query`` is optional at the schema level so a missing query is
    answered with the API's own 400 error rather than a 422.
    """

    query: str | None = Field(default=None, description="Natural-language search query.")


class MessageResponse(BaseModel):
    """A plain status message."""

    message: str


class SearchResponse(BaseModel):
    """Search results, most relevant and diverse first."""

    results: list[SearchHit] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
