"""Source processors for the lexsearch ingestion pipeline.

Each processor converts a file format into page-level
:class:`~src.models.document.Document` objects for the chunker.

- **PDFProcessor** -- PDF files via PyMuPDF page extraction
"""

from src.services.ingestion.source_processors.pdf_processor import PDFProcessor

__all__ = ["PDFProcessor"]
