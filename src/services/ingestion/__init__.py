"""Document ingestion pipeline for lexsearch.

Stages: **load -> enrich -> validate -> split -> embed -> store**.

1. **Load** (source_processors/) -- PDFProcessor reads every PDF under the
   docs directory into page-level documents.
2. **Enrich** (metadata.py) -- sidecar ``db.json`` fields are merged into
   page metadata by file basename.
3. **Validate** (validation.py) -- empty or oversized text is dropped.
4. **Split** (chunker.py / TextChunker) -- recursive character splitting
   into 1000-character windows with 200 characters of overlap.
5. **Embed** and **Store** (via IEmbeddingProvider / IVectorStoreProvider)
   -- run in small batches by BootstrapService.
"""

from src.services.ingestion.bootstrap_service import BootstrapService
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.metadata import attach_metadata, flatten_metadata, read_metadata
from src.services.ingestion.validation import is_valid_content

__all__ = [
    "BootstrapService",
    "TextChunker",
    "attach_metadata",
    "flatten_metadata",
    "is_valid_content",
    "read_metadata",
]
