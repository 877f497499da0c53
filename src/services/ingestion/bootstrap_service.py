"""Orchestrator for bootstrapping a vector index from the local PDF corpus.

Pipeline stages: **ensure index -> load -> enrich -> validate -> split ->
embed -> store**.

:class:`BootstrapService` coordinates its collaborators (PDF processor,
chunker, embedding provider, vector store) without any of them knowing
about each other.  A run is idempotent at index granularity: if the target
index already reports records, nothing is loaded or written.

Chunks are processed in small outer batches.  A batch that fails for any
reason (embedding API error, malformed response, rejected upsert) is logged
and skipped so one bad batch never aborts the corpus.  Only failures
outside the batch loop end the run, and of those only a connection
timeout is raised to the caller.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from src.models.document import BootstrapResult, BootstrapStatus, Document, VectorRecord
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.metadata import attach_metadata, flatten_metadata, read_metadata
from src.services.ingestion.source_processors.pdf_processor import PDFProcessor
from src.services.ingestion.validation import MAX_CONTENT_CHARS, is_valid_content
from src.utils.errors import ConnectionTimeoutError, IngestionError
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.vector_store_provider import IVectorStoreProvider

logger = get_logger(__name__)


class BootstrapService:
    """Loads, embeds and stores the PDF corpus into a vector index.

    Parameters
    ----------
    pdf_processor:
        Reads PDFs into page-level documents.
    chunker:
        Splits pages into overlapping chunks.
    embedding_provider:
        Embeds chunk text in document mode.
    vector_store:
        Target vector index.
    docs_dir:
        Directory searched recursively for ``*.pdf`` files.
    metadata_path:
        Sidecar JSON file with per-file metadata.
    dimension:
        Index dimension; embeddings of any other length skip their batch.
    batch_size:
        Chunks per embedding request.
    upsert_batch_size:
        Records per upsert request.
    batch_pause_seconds:
        Pause after each attempted batch, to stay under provider rate limits.
    namespace:
        Index namespace to write to (``""`` for the default namespace).
    max_content_chars:
        Upper bound for the content validator.
    """

    def __init__(
        self,
        pdf_processor: PDFProcessor,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        docs_dir: str | Path = "docs",
        metadata_path: str | Path = "docs/db.json",
        dimension: int = 1024,
        batch_size: int = 5,
        upsert_batch_size: int = 2,
        batch_pause_seconds: float = 1.0,
        namespace: str = "",
        max_content_chars: int = MAX_CONTENT_CHARS,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if upsert_batch_size < 1:
            raise ValueError(f"upsert_batch_size must be >= 1, got {upsert_batch_size}")

        self._pdf_processor = pdf_processor
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._docs_dir = Path(docs_dir)
        self._metadata_path = Path(metadata_path)
        self._dimension = dimension
        self._batch_size = batch_size
        self._upsert_batch_size = upsert_batch_size
        self._batch_pause_seconds = batch_pause_seconds
        self._namespace = namespace
        self._max_content_chars = max_content_chars
        # One lock per index name serialises overlapping runs in this process.
        # Entries live only while a run holds or waits on them.
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, target_index: str) -> BootstrapResult:
        """Bootstrap *target_index* from the configured docs directory.

        Returns
        -------
        BootstrapResult
            ``SKIPPED`` if the index already holds records, ``NO_DOCUMENTS``
            if no PDF was found, ``FAILED`` if a non-timeout error ended the
            run early, otherwise ``COMPLETED``.

        Raises
        ------
        ConnectionTimeoutError
            If an external service timed out outside the per-batch loop.
        """
        lock = self._locks.setdefault(target_index, asyncio.Lock())
        self._lock_users[target_index] = self._lock_users.get(target_index, 0) + 1
        try:
            async with lock:
                return await self._run_locked(target_index)
        finally:
            self._lock_users[target_index] -= 1
            if not self._lock_users[target_index]:
                del self._lock_users[target_index]
                del self._locks[target_index]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_locked(self, target_index: str) -> BootstrapResult:
        start = time.monotonic()
        counters = {
            "documents_loaded": 0,
            "valid_documents": 0,
            "chunks_created": 0,
            "batches_total": 0,
            "batches_skipped": 0,
            "vectors_upserted": 0,
        }

        def _result(status: BootstrapStatus, message: str) -> BootstrapResult:
            return BootstrapResult(
                index_name=target_index,
                status=status,
                message=message,
                ingestion_time=round(time.monotonic() - start, 3),
                **counters,
            )

        logger.info("bootstrap_started", index=target_index, docs_dir=str(self._docs_dir))
        try:
            await self._vector_store.create_index_if_absent(target_index, self._dimension)

            if await self._vector_store.has_vectors(target_index):
                logger.info("bootstrap_skipped", index=target_index, reason="index has vectors")
                return _result(
                    BootstrapStatus.SKIPPED,
                    f"Index '{target_index}' already contains vectors; bootstrap skipped",
                )

            if self._docs_dir.exists() and not self._docs_dir.is_dir():
                raise IngestionError(
                    message=f"Docs path '{self._docs_dir}' is not a directory"
                )

            documents = await asyncio.to_thread(self._pdf_processor.load_directory, self._docs_dir)
            counters["documents_loaded"] = len(documents)
            if not documents:
                logger.warning("bootstrap_no_documents", docs_dir=str(self._docs_dir))
                return _result(
                    BootstrapStatus.NO_DOCUMENTS,
                    f"No PDF documents found in '{self._docs_dir}'",
                )

            entries = read_metadata(self._metadata_path)
            enriched = attach_metadata(documents, entries)
            valid = [
                d for d in enriched if is_valid_content(d.page_content, self._max_content_chars)
            ]
            counters["valid_documents"] = len(valid)

            chunks = self._chunker.split_documents(valid)
            counters["chunks_created"] = len(chunks)
            logger.info(
                "bootstrap_prepared",
                index=target_index,
                documents=len(documents),
                valid_documents=len(valid),
                chunks=len(chunks),
            )

            for batch_number, offset in enumerate(range(0, len(chunks), self._batch_size), start=1):
                batch = chunks[offset : offset + self._batch_size]
                counters["batches_total"] += 1
                upserted = await self._process_batch(target_index, batch_number, batch)
                if upserted is None:
                    counters["batches_skipped"] += 1
                else:
                    counters["vectors_upserted"] += upserted

        except ConnectionTimeoutError as exc:
            logger.exception(
                "bootstrap_connection_timeout",
                index=target_index,
                error=str(exc),
                cause=repr(exc.__cause__),
            )
            raise
        except Exception as exc:
            logger.exception(
                "bootstrap_failed",
                index=target_index,
                error=str(exc),
                cause=repr(exc.__cause__),
            )
            return _result(BootstrapStatus.FAILED, f"Bootstrap of '{target_index}' failed: {exc}")

        result = _result(
            BootstrapStatus.COMPLETED,
            f"Bootstrap of '{target_index}' complete: {counters['vectors_upserted']} vectors "
            f"from {counters['chunks_created']} chunks",
        )
        logger.info(
            "bootstrap_complete",
            index=target_index,
            vectors=result.vectors_upserted,
            batches=result.batches_total,
            skipped_batches=result.batches_skipped,
            elapsed_s=result.ingestion_time,
        )
        return result

    async def _process_batch(
        self,
        target_index: str,
        batch_number: int,
        batch: list[Document],
    ) -> int | None:
        """Embed and store one outer batch.

        Returns the number of records upserted, or ``None`` if the batch was
        skipped.  Never raises.
        """
        valid = [c for c in batch if is_valid_content(c.page_content, self._max_content_chars)]
        if not valid:
            logger.warning("batch_skipped_empty", batch=batch_number)
            return None

        try:
            texts = [c.page_content.strip() for c in valid]
            ids = [str(uuid.uuid4()) for _ in valid]
            metadatas = [
                {**flatten_metadata(chunk.metadata), "id": chunk_id, "pageContent": text}
                for chunk, chunk_id, text in zip(valid, ids, texts)
            ]

            embeddings = await self._embedding_provider.embed_documents(texts)
            if len(embeddings) != len(texts):
                logger.error(
                    "batch_embedding_count_mismatch",
                    batch=batch_number,
                    expected=len(texts),
                    received=len(embeddings),
                )
                return None
            wrong_dims = sorted({len(v) for v in embeddings if len(v) != self._dimension})
            if wrong_dims:
                logger.error(
                    "batch_embedding_dimension_mismatch",
                    batch=batch_number,
                    expected=self._dimension,
                    received=wrong_dims,
                )
                return None

            records = [
                VectorRecord(id=chunk_id, values=vector, metadata=metadata)
                for chunk_id, vector, metadata in zip(ids, embeddings, metadatas)
            ]
            upserted = await self._vector_store.upsert_batched(
                target_index,
                records,
                batch_size=self._upsert_batch_size,
                namespace=self._namespace,
            )
            logger.info("batch_upserted", batch=batch_number, vectors=upserted)
            return upserted
        except Exception as exc:
            logger.exception("batch_failed", batch=batch_number, error=str(exc))
            return None
        finally:
            await asyncio.sleep(self._batch_pause_seconds)
