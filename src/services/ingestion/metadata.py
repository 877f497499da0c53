"""Sidecar metadata reading, joining and flattening.

The sidecar file (``docs/db.json`` by default) describes PDFs by basename::

    {"documents": [{"filename": "msa.pdf", "title": "Master Services Agreement"}]}

Three steps use it during a bootstrap run:

* :func:`read_metadata` loads the entries, tolerating a missing or broken file.
* :func:`attach_metadata` merges matching entries into page metadata.
* :func:`flatten_metadata` reduces nested loader metadata to the flat shape
  the vector index accepts, just before a chunk is stored.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path, PurePath
from typing import Any

from pydantic import ValidationError

from src.models.document import RESERVED_METADATA_KEYS, Document, MetadataEntry
from src.utils.logging import get_logger

logger = get_logger(__name__)


def read_metadata(path: str | Path) -> list[MetadataEntry]:
    """Return the ``documents`` entries of the sidecar file at *path*.

    A missing file, unreadable JSON, or a file without a ``documents`` list
    is logged and yields ``[]`` so ingestion continues without enrichment.
    Entries lacking a non-empty ``filename`` are skipped.
    """
    sidecar = Path(path)
    try:
        raw = json.loads(sidecar.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("metadata_file_missing", path=str(sidecar))
        return []
    except (OSError, ValueError) as exc:
        logger.error("metadata_read_failed", path=str(sidecar), error=str(exc))
        return []

    documents = raw.get("documents") if isinstance(raw, dict) else None
    if not isinstance(documents, list):
        logger.error("metadata_malformed", path=str(sidecar), reason="missing 'documents' list")
        return []

    entries: list[MetadataEntry] = []
    for position, item in enumerate(documents):
        try:
            entries.append(MetadataEntry.model_validate(item))
        except ValidationError:
            logger.warning("metadata_entry_skipped", path=str(sidecar), position=position)

    logger.info("metadata_loaded", path=str(sidecar), entries=len(entries))
    return entries


def _entry_fields(entry: MetadataEntry) -> dict[str, Any]:
    fields = entry.as_metadata()
    reserved = sorted(RESERVED_METADATA_KEYS.intersection(fields))
    if reserved:
        logger.warning("metadata_reserved_keys_dropped", filename=entry.filename, keys=reserved)
        for key in reserved:
            del fields[key]
    return fields


def attach_metadata(documents: list[Document], entries: list[MetadataEntry]) -> list[Document]:
    """Merge sidecar fields into each document whose source basename matches.

    Matching is exact and case-sensitive on the basename of
    ``metadata["source"]``.  Sidecar fields override loader fields on
    conflict; reserved keys are never taken from the sidecar.  Every
    returned document also carries its text in ``metadata["pageContent"]``.
    """
    by_filename: dict[str, dict[str, Any]] = {}
    for entry in entries:
        if entry.filename in by_filename:
            logger.warning("metadata_duplicate_filename", filename=entry.filename)
            continue
        by_filename[entry.filename] = _entry_fields(entry)

    enriched: list[Document] = []
    matched = 0
    for document in documents:
        source = document.metadata.get("source")
        fields = by_filename.get(PurePath(str(source)).name) if source else None
        metadata = dict(document.metadata)
        if fields is not None:
            metadata.update(fields)
            matched += 1
        metadata["pageContent"] = document.page_content
        enriched.append(document.model_copy(update={"metadata": metadata}))

    logger.info("metadata_attached", documents=len(documents), matched=matched)
    return enriched


def _flat_value(value: Any) -> Any:
    if isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return json.dumps(value, sort_keys=True, default=str)
    if isinstance(value, (list, tuple, set)):
        return [item if isinstance(item, str) else str(item) for item in value]
    return str(value)


def flatten_metadata(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Return a flat copy of *metadata* suitable for the vector index.

    * A nested ``pdf`` mapping is replaced by a flat ``totalPages`` taken
      from its ``totalPages`` (or ``pageCount``) field.
    * ``loc`` is removed.
    * ``None`` values are dropped.
    * Remaining nested mappings are JSON-encoded; list items become strings.

    The input is never mutated.
    """
    flat = dict(metadata)

    pdf = flat.get("pdf")
    if isinstance(pdf, Mapping):
        del flat["pdf"]
        total_pages = pdf.get("totalPages", pdf.get("pageCount"))
        if total_pages is not None:
            flat["totalPages"] = total_pages

    flat.pop("loc", None)

    return {key: _flat_value(value) for key, value in flat.items() if value is not None}
