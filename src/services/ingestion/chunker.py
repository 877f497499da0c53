"""Recursive character text splitting with overlapping windows.

Splits page text into chunks of at most ``chunk_size`` characters
(default 1000) where consecutive chunks share up to ``overlap`` characters
(default 200) of context.

The splitter tries the coarsest boundary first and only falls back to finer
ones when a piece is still too long:

1. ``"\\n\\n"`` -- paragraph breaks
2. ``"\\n"``   -- line breaks
3. ``" "``    -- word boundaries
4. ``""``     -- individual characters (last resort)

Small pieces are then greedily packed back together, joined by the
separator they were split on, and the tail of each emitted chunk is carried
into the next one as overlap.  Separators themselves are not kept at chunk
edges and every chunk is whitespace-trimmed.
"""

from __future__ import annotations

import copy

from src.models.document import Document
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", " ", "")


class TextChunker:
    """Splits text into overlapping, size-bounded chunks.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk (default 1000).
    overlap:
        Maximum characters shared by consecutive chunks (default 200).
        Must be smaller than *chunk_size*.
    separators:
        Boundaries to try, coarsest first.  The last entry should be ``""``
        so any text can be split.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        overlap: int = 200,
        separators: tuple[str, ...] = DEFAULT_SEPARATORS,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError(
                f"overlap must be in [0, chunk_size), got overlap={overlap} chunk_size={chunk_size}"
            )
        self._chunk_size = chunk_size
        self._overlap = overlap
        self._separators = list(separators)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def split_text(self, text: str) -> list[str]:
        """Split *text* into chunks of at most ``chunk_size`` characters.

        Empty or whitespace-only input returns an empty list.
        """
        if not text or not text.strip():
            return []
        return self._split_recursive(text, self._separators)

    def split_documents(self, documents: list[Document]) -> list[Document]:
        """Split each document, copying its metadata onto every chunk."""
        chunks: list[Document] = []
        for document in documents:
            for piece in self.split_text(document.page_content):
                chunks.append(
                    Document(page_content=piece, metadata=copy.deepcopy(document.metadata))
                )

        logger.debug(
            "chunking_complete",
            documents=len(documents),
            num_chunks=len(chunks),
            chunk_size=self._chunk_size,
            overlap=self._overlap,
        )
        return chunks

    # ------------------------------------------------------------------
    # Recursive splitting
    # ------------------------------------------------------------------

    def _split_recursive(self, text: str, separators: list[str]) -> list[str]:
        """Split on the first separator present in *text*, recursing on long pieces."""
        separator = separators[-1]
        finer: list[str] = []
        for i, candidate in enumerate(separators):
            if candidate == "":
                separator = candidate
                break
            if candidate in text:
                separator = candidate
                finer = separators[i + 1 :]
                break

        pieces = text.split(separator) if separator else list(text)
        pieces = [p for p in pieces if p]

        chunks: list[str] = []
        pending: list[str] = []
        for piece in pieces:
            if len(piece) < self._chunk_size:
                pending.append(piece)
                continue

            # Too long to pack: flush what fits, then split this piece finer.
            if pending:
                chunks.extend(self._accumulate_chunks(pending, separator))
                pending = []
            if finer:
                chunks.extend(self._split_recursive(piece, finer))
            else:
                chunks.append(piece)

        if pending:
            chunks.extend(self._accumulate_chunks(pending, separator))
        return chunks

    # ------------------------------------------------------------------
    # Chunk accumulation
    # ------------------------------------------------------------------

    def _accumulate_chunks(self, pieces: list[str], separator: str) -> list[str]:
        """Greedily pack *pieces* into chunks, carrying a tail overlap forward.

        Each piece is shorter than ``chunk_size``.  When the next piece would
        overflow the current chunk, the chunk is emitted and pieces are
        dropped from its head until what remains fits the overlap budget
        and leaves room for the new piece.
        """
        sep_len = len(separator)
        chunks: list[str] = []
        current: list[str] = []
        total = 0

        for piece in pieces:
            piece_len = len(piece)
            if total + piece_len + (sep_len if current else 0) > self._chunk_size and current:
                joined = self._join(current, separator)
                if joined:
                    chunks.append(joined)
                current, total = self._build_overlap(current, total, piece_len, sep_len)

            current.append(piece)
            total += piece_len + (sep_len if len(current) > 1 else 0)

        joined = self._join(current, separator)
        if joined:
            chunks.append(joined)
        return chunks

    def _build_overlap(
        self,
        parts: list[str],
        total: int,
        next_len: int,
        sep_len: int,
    ) -> tuple[list[str], int]:
        """Drop head pieces until the tail is within the overlap and the next piece fits."""
        parts = list(parts)
        while parts and (
            total > self._overlap
            or total + next_len + (sep_len if parts else 0) > self._chunk_size
        ):
            total -= len(parts[0]) + (sep_len if len(parts) > 1 else 0)
            parts.pop(0)
        return parts, total

    @staticmethod
    def _join(parts: list[str], separator: str) -> str:
        return separator.join(parts).strip()
