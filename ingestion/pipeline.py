"""
ingestion/pipeline.py
Document Ingestion Pipeline
"""
import uuid
from pathlib import Path
from typing import Optional

from generation.summarizer import DocumentSummarizer
from ingestion.pdf_extractor import ExtractedDocument, PDFTextExtractor
from ingestion.sectioner import Section, classify_document, extract_keywords, split_sections
from knowledge_base.document_store import Document, DocumentStore
from knowledge_base.knowledge_store import (
    KnowledgeEntry,
    KnowledgeStore,
    categorize_section,
    relevance_score,
    section_tags,
)
from config.settings import settings
from monitoring import get_logger

log = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"


class DocumentPipeline:
    """
    PDF or plain text → sections → document type + summary → knowledge entries.
    Only sections longer than the configured minimum become entries.  Every
    ingested document is registered so it can be listed and deleted later.
    """

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        summarizer: Optional[DocumentSummarizer] = None,
        pdf_extractor: Optional[PDFTextExtractor] = None,
        document_store: Optional[DocumentStore] = None,
    ) -> None:
        self.knowledge_store = knowledge_store
        self.summarizer      = summarizer or DocumentSummarizer()
        self.pdf_extractor   = pdf_extractor or PDFTextExtractor()
        self.document_store  = document_store if document_store is not None else DocumentStore()
        self.min_chars       = settings.knowledge_min_content_chars

    def run(self, pdf_path: str | Path) -> dict:
        """
        Run the full ingestion pipeline on a PDF on the local filesystem.
        Returns a summary dict describing what was added.
        """
        pdf_path = Path(pdf_path)
        log.info("Starting document ingestion", pdf=str(pdf_path))

        # ── Step 1: Extract text ──────────────────────────────────────────────
        doc = self.pdf_extractor.extract(pdf_path)
        return self._ingest_pdf(pdf_path.name, doc)

    def run_upload(self, filename: str, data: bytes, content_type: Optional[str] = None) -> dict:
        """Ingest an uploaded file: PDFs through PyMuPDF, anything else as UTF-8 text."""
        if not data:
            raise ValueError("Uploaded file is empty")

        if content_type == PDF_MIME_TYPE or filename.lower().endswith(".pdf"):
            doc = self.pdf_extractor.extract_bytes(data, filename)
            return self._ingest_pdf(filename, doc)

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("Only PDF and UTF-8 text files are supported") from exc
        return self.run_text(filename, text, mime_type=content_type or "text/plain")

    def run_text(self, name: str, text: str, mime_type: str = "text/plain") -> dict:
        """Ingest an already-extracted text document."""
        if not text or not text.strip():
            raise ValueError("Document content is required")
        log.info("Starting text ingestion", name=name, chars=len(text))
        sections = split_sections([(1, text)])
        return self._ingest(name, text, sections, pages=1, mime_type=mime_type, size=len(text.encode()))

    def delete(self, document_id: str) -> Optional[int]:
        """
        Remove a document and its knowledge entries.
        Returns the number of entries removed, or None if the id is unknown.
        """
        if not self.document_store.delete(document_id):
            return None
        removed = self.knowledge_store.delete_document(document_id)
        log.info("Document deleted", document_id=document_id, entries_removed=removed)
        return removed

    # ── Private ───────────────────────────────────────────────────────────────

    def _ingest_pdf(self, name: str, doc: ExtractedDocument) -> dict:
        # ── Step 2: Split into sections ───────────────────────────────────────
        sections = split_sections((p.page_num, p.raw_text) for p in doc.pages)
        return self._ingest(
            name, doc.full_text, sections,
            pages=doc.total_pages,
            mime_type=PDF_MIME_TYPE,
            size=doc.metadata.get("size", 0),
        )

    def _ingest(
        self,
        name: str,
        content: str,
        sections: list[Section],
        pages: int,
        mime_type: str,
        size: int,
    ) -> dict:
        document_id = f"doc_{uuid.uuid4().hex[:12]}"

        # ── Step 3: Classify and summarise ────────────────────────────────────
        document_type = classify_document(content, name)
        summary       = self.summarizer.summarize(content, document_type)
        keywords      = extract_keywords(content)

        # ── Step 4: Build and store knowledge entries ─────────────────────────
        entries = self._entries_for(document_id, sections)
        added   = self.knowledge_store.add_entries(entries)

        self.document_store.add(Document(
            id=document_id,
            name=name,
            mime_type=mime_type,
            size=size,
            document_type=document_type,
            summary=summary,
            pages=pages,
            sections_found=len(sections),
            entries_added=added,
            keywords=tuple(keywords),
            content=content,
        ))

        result = {
            "status":           "success",
            "documentId":       document_id,
            "name":             name,
            "documentType":     document_type,
            "pages":            pages,
            "sectionsFound":    len(sections),
            "entriesAdded":     added,
            "keywords":         keywords,
            "summary":          summary,
        }
        log.info(
            "Document ingestion complete",
            document_id=document_id,
            document_type=document_type,
            sections=len(sections),
            entries=added,
        )
        return result

    def _entries_for(self, document_id: str, sections: list[Section]) -> list[KnowledgeEntry]:
        entries: list[KnowledgeEntry] = []
        for index, section in enumerate(sections):
            if len(section.content) <= self.min_chars:
                continue
            category = categorize_section(section.content)
            entries.append(KnowledgeEntry(
                id=f"kb_{document_id}_{index}",
                document_id=document_id,
                title=section.title or f"Section {index + 1}",
                content=section.content,
                category=category,
                relevance_score=relevance_score(section.content, category),
                tags=section_tags(section.content),
            ))
        return entries
