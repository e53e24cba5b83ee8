"""
knowledge_base/document_store.py
Registry of ingested documents.

One record per upload or text ingest, keyed by the document id that also
tags the document's knowledge entries, so deleting a document can remove
its entries too.
"""
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from monitoring import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Document:
    id: str
    name: str
    mime_type: str
    size: int
    document_type: str
    summary: str
    pages: int
    sections_found: int
    entries_added: int
    keywords: tuple[str, ...] = ()
    content: str = field(default="", repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":            self.id,
            "name":          self.name,
            "mimeType":      self.mime_type,
            "size":          self.size,
            "documentType":  self.document_type,
            "summary":       self.summary,
            "pages":         self.pages,
            "sectionsFound": self.sections_found,
            "entriesAdded":  self.entries_added,
            "keywords":      list(self.keywords),
            "createdAt":     self.created_at.isoformat(),
        }


class DocumentStore:

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, Document] = {}

    def add(self, document: Document) -> Document:
        with self._lock:
            self._documents[document.id] = document
        log.info("Document registered", document_id=document.id, name=document.name)
        return document

    def list_documents(self) -> list[Document]:
        with self._lock:
            documents = list(self._documents.values())
        return sorted(documents, key=lambda d: d.created_at, reverse=True)

    def get(self, document_id: str) -> Optional[Document]:
        with self._lock:
            return self._documents.get(document_id)

    def delete(self, document_id: str) -> bool:
        with self._lock:
            return self._documents.pop(document_id, None) is not None

    def search(self, text: str) -> list[Document]:
        """Case-insensitive substring match on name, content and summary."""
        needle = (text or "").strip().lower()
        if not needle:
            return []
        return [
            d for d in self.list_documents()
            if needle in d.name.lower() or needle in d.content.lower() or needle in d.summary.lower()
        ]
