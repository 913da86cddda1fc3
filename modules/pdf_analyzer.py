"""Lightweight PDF checks used by the transform chain."""

from __future__ import annotations

from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from core.exceptions import TransformError


PDF_MAGIC = b"%PDF-"


class PDFAnalyzer:
    """Minimal metadata from PDFs produced along the chain."""

    @staticmethod
    def looks_like_pdf(data: bytes) -> bool:
        """Cheap header check for uploads."""
        return data[:1024].lstrip().startswith(PDF_MAGIC)

    def page_count(self, pdf_path: str | Path) -> int:
        """
        Number of pages in `pdf_path`.

        Raises:
            TransformError: If the file is missing or not a readable PDF
        """
        path = Path(pdf_path)
        try:
            return len(PdfReader(str(path)).pages)
        except (PyPdfError, OSError, ValueError) as exc:
            raise TransformError("analyze", f"Unreadable PDF {path.name}: {exc}") from exc
