"""Document, vector and search data models for lexsearch.

Pydantic v2 models for the objects that flow through ingestion and search.
Everything is frozen; pipeline stages build new instances with
``model_copy(update=...)`` instead of mutating.

Lifecycle:
    1. LOADING: the PDF processor emits one :class:`Document` per page.
    2. ENRICHMENT: sidecar :class:`MetadataEntry` fields are merged in.
    3. SPLITTING: the chunker re-emits overlapping :class:`Document` chunks.
    4. STORAGE: each chunk becomes a :class:`VectorRecord` in the index.
    5. RETRIEVAL: the index returns :class:`ScoredRecord` objects, which the
       search service turns into :class:`SearchHit` results.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Keys written only by the ingestion pipeline.  Sidecar metadata may not
# set them.
RESERVED_METADATA_KEYS: frozenset[str] = frozenset({"id", "pageContent", "totalPages"})


# ---------------------------------------------------------------------------
# Document - a page or chunk of text with free-form metadata.
# ---------------------------------------------------------------------------
class Document(BaseModel):
    """A unit of text plus metadata.

    Produced by the PDF processor (one per page) and re-emitted by the
    chunker (one per chunk).  ``metadata`` keeps the loader's nested
    ``pdf``/``loc`` mappings until the flattener runs just before storage.
    """

    model_config = ConfigDict(frozen=True)

    page_content: str = Field(description="The text of this page or chunk.")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Loader, sidecar and pipeline metadata for this text.",
    )


class MetadataEntry(BaseModel):
    """One entry of the ``docs/db.json`` sidecar file.

    Only ``filename`` is required; every other field is carried through
    verbatim and merged into the metadata of matching documents.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    filename: str = Field(min_length=1, description="Basename of the PDF this entry describes.")

    def as_metadata(self) -> dict[str, Any]:
        """Return every field of the entry, including ``filename``."""
        return self.model_dump()


# ---------------------------------------------------------------------------
# VectorRecord - what gets written to the vector index.
# ---------------------------------------------------------------------------
class VectorRecord(BaseModel):
    """A chunk embedding ready to upsert.

    ``metadata`` must already be flat: the index only accepts strings,
    numbers, booleans and lists of strings as metadata values.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Random UUID4 assigned at ingestion time.")
    values: list[float] = Field(description="The chunk's embedding vector.")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Flattened chunk metadata, including id and pageContent.",
    )

    @field_validator("metadata")
    @classmethod
    def _check_flat(cls, value: dict[str, Any]) -> dict[str, Any]:
        for key, item in value.items():
            if isinstance(item, (str, int, float, bool)):
                continue
            if isinstance(item, list) and all(isinstance(v, str) for v in item):
                continue
            raise ValueError(
                f"metadata[{key!r}] has unsupported type {type(item).__name__}; "
                "flatten metadata before building a VectorRecord"
            )
        return value

    def to_upsert(self) -> dict[str, Any]:
        """Return the plain-dict shape the index client submits."""
        return {"id": self.id, "values": list(self.values), "metadata": dict(self.metadata)}


class ScoredRecord(BaseModel):
    """A record returned by an index query, with its similarity score."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float = 0.0
    values: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchHit(BaseModel):
    """One search result as returned by ``POST /api/search``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Chunk id (the UUID stored in metadata).")
    page_content: str = Field(
        default="",
        alias="pageContent",
        description="The chunk text.",
    )
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float = Field(default=0.0, description="Cosine similarity to the query.")


# ---------------------------------------------------------------------------
# Bootstrap outcome
# ---------------------------------------------------------------------------
class BootstrapStatus(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Terminal state of a bootstrap run."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    NO_DOCUMENTS = "no_documents"
    FAILED = "failed"


class BootstrapResult(BaseModel):
    """Summary of one bootstrap run, reported by the API and the CLI."""

    model_config = ConfigDict(frozen=True)

    index_name: str = Field(description="Index the run targeted.")
    status: BootstrapStatus
    message: str = Field(description="Human-readable outcome.")
    documents_loaded: int = Field(default=0, ge=0, description="PDF pages loaded from disk.")
    valid_documents: int = Field(
        default=0, ge=0, description="Pages that passed content validation."
    )
    chunks_created: int = Field(default=0, ge=0, description="Chunks produced by the splitter.")
    batches_total: int = Field(default=0, ge=0, description="Outer batches attempted.")
    batches_skipped: int = Field(
        default=0,
        ge=0,
        description="Batches skipped because they were empty, malformed or failed.",
    )
    vectors_upserted: int = Field(default=0, ge=0, description="Vectors sent to the index.")
    ingestion_time: float = Field(
        default=0.0, ge=0.0, description="Wall-clock seconds for the run."
    )
