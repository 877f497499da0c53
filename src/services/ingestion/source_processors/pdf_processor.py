"""Source processor for PDF documents.

Reads PDF files with PyMuPDF (fitz) and emits one
:class:`~src.models.document.Document` per page.  Pages are kept even when
they carry no text so that page numbering in ``metadata["loc"]`` stays
aligned with the file; empty pages are dropped later by the content
validator.

Per-page metadata::

    {
        "source": "docs/contracts/msa.pdf",
        "pdf": {"version": "PDF 1.7", "info": {...}, "totalPages": 12},
        "loc": {"pageNumber": 3},
    }
"""

from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention

from src.models.document import Document
from src.utils.logging import get_logger

logger = get_logger(__name__)


class PDFProcessor:
    """Loads PDF files into page-level :class:`Document` objects."""

    def load_directory(self, directory: str | Path) -> list[Document]:
        """Load every ``*.pdf`` under *directory*, recursively.

        Files are visited in sorted path order so repeated runs see the same
        document sequence.  A missing directory yields an empty list.
        """
        root = Path(directory)
        if not root.is_dir():
            logger.warning("pdf_directory_missing", directory=str(root))
            return []

        documents: list[Document] = []
        files = sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() == ".pdf")
        for path in files:
            documents.extend(self.load_file(path))

        logger.info("pdf_directory_loaded", directory=str(root), files=len(files), pages=len(documents))
        return documents

    def load_file(self, file_path: str | Path) -> list[Document]:
        """Read one PDF and return one document per page.

        Unreadable files are logged and yield an empty list rather than
        aborting the whole directory load.
        """
        source = str(file_path)
        try:
            pdf = fitz.open(source)
        except Exception as exc:
            logger.error("pdf_open_failed", file_path=source, error=str(exc))
            return []

        documents: list[Document] = []
        try:
            info = {k: v for k, v in (pdf.metadata or {}).items() if v}
            pdf_meta = {
                "version": (pdf.metadata or {}).get("format") or "",
                "info": info,
                "totalPages": pdf.page_count,
            }
            for page_index in range(pdf.page_count):
                text = pdf[page_index].get_text("text")
                documents.append(
                    Document(
                        page_content=text,
                        metadata={
                            "source": source,
                            "pdf": dict(pdf_meta),
                            "loc": {"pageNumber": page_index + 1},
                        },
                    )
                )
        finally:
            pdf.close()

        if not any(d.page_content.strip() for d in documents):
            logger.warning("pdf_no_text_extracted", file_path=source)

        return documents
