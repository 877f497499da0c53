"""lexsearch domain models - re-exports all public model classes.

Import from ``src.models`` rather than the individual module, e.g.
``from src.models import Document``.
"""

from __future__ import annotations

from src.models.document import (
    RESERVED_METADATA_KEYS,
    BootstrapResult,
    BootstrapStatus,
    Document,
    MetadataEntry,
    ScoredRecord,
    SearchHit,
    VectorRecord,
)

__all__ = [
    "RESERVED_METADATA_KEYS",
    "BootstrapResult",
    "BootstrapStatus",
    "Document",
    "MetadataEntry",
    "ScoredRecord",
    "SearchHit",
    "VectorRecord",
]
