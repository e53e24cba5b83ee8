"""
ingestion/pdf_extractor.py
PDF Text Extractor
Extracts raw text from maritime documents (charter parties, bills of lading,
voyage instructions) page-by-page using PyMuPDF, from a file on disk or
from uploaded bytes.
"""
import re
from dataclasses import dataclass, field
from pathlib import Path

import fitz  # PyMuPDF

from monitoring import get_logger

log = get_logger(__name__)


@dataclass
class PageContent:
    page_num: int
    raw_text: str


@dataclass
class ExtractedDocument:
    source_path: str
    total_pages: int
    pages: list[PageContent]
    full_text: str
    metadata: dict = field(default_factory=dict)


class PDFTextExtractor:
    """Extracts clean text from a PDF, page by page."""

    def extract(self, pdf_path: str | Path) -> ExtractedDocument:
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        log.info("Extracting PDF", path=str(pdf_path))
        doc = fitz.open(str(pdf_path))
        return self._read(doc, source=str(pdf_path), name=pdf_path.name, size=pdf_path.stat().st_size)

    def extract_bytes(self, data: bytes, name: str) -> ExtractedDocument:
        """Extract an uploaded PDF held in memory; unreadable data raises ValueError."""
        log.info("Extracting uploaded PDF", name=name, size=len(data))
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except RuntimeError as exc:
            raise ValueError(f"Could not read PDF: {name}") from exc
        return self._read(doc, source=name, name=name, size=len(data))

    # ── Private ───────────────────────────────────────────────────────────────

    def _read(self, doc, source: str, name: str, size: int) -> ExtractedDocument:
        pages: list[PageContent] = []
        try:
            for idx in range(len(doc)):
                cleaned = self._clean(doc[idx].get_text("text"))
                pages.append(PageContent(page_num=idx + 1, raw_text=cleaned))
        finally:
            doc.close()

        full_text = "\n\n".join(p.raw_text for p in pages)
        log.info("PDF extracted", pages=len(pages), chars=len(full_text))
        return ExtractedDocument(
            source_path=source,
            total_pages=len(pages),
            pages=pages,
            full_text=full_text,
            metadata={
                "filename":    name,
                "total_pages": len(pages),
                "size":        size,
            },
        )

    @staticmethod
    def _clean(text: str) -> str:
        # Dot and underscore leaders from forms and contents pages
        text = re.sub(r"\.{4,}", " ", text)
        text = re.sub(r"_{4,}", " ", text)
        text = re.sub(r"\n{3,}", "\n\n", text)
        text = re.sub(r"[ \t]{2,}", " ", text)
        return text.strip()
