"""
knowledge_base/knowledge_store.py
Maritime knowledge base backed by an in-memory ChromaDB collection.

Seeded with a handful of reference entries and extended by the ingestion
pipeline.  Search is semantic: sentence-transformers embeddings, cosine
distance, optional category filter.
"""
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from config.settings import settings
from monitoring import get_logger

log = get_logger(__name__)

# Section categorisation for ingested documents; first match wins
_SECTION_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("laytime", "demurrage"), "laytime"),
    (("weather", "wind"),      "weather"),
    (("distance", "route"),    "distance"),
    (("charter", "clause"),    "cp_clause"),
    (("voyage", "port"),       "voyage_guidance"),
)

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "laytime":         ("laytime", "demurrage", "despatch", "loading", "discharge"),
    "weather":         ("weather", "wind", "storm", "forecast", "routing"),
    "distance":        ("distance", "nautical", "route", "passage", "voyage"),
    "cp_clause":       ("clause", "charter", "party", "terms", "conditions"),
    "voyage_guidance": ("port", "berth", "pilot", "tug", "mooring"),
    "general":         (),
}

COMMON_TAGS = (
    "maritime", "shipping", "vessel", "cargo", "port", "navigation",
    "contract", "legal", "operations", "logistics", "commercial",
)
MAX_TAGS = 5


@dataclass(frozen=True)
class KnowledgeEntry:
    id: str
    title: str
    content: str
    category: str
    document_id: Optional[str] = None
    relevance_score: float = 1.0
    tags: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":             self.id,
            "documentId":     self.document_id,
            "title":          self.title,
            "content":        self.content,
            "category":       self.category,
            "relevanceScore": self.relevance_score,
            "tags":           list(self.tags),
        }


SEED_ENTRIES: tuple[dict[str, Any], ...] = (
    {
        "category": "laytime",
        "title": "Laytime Calculation Basics",
        "content": (
            "Laytime is the time allowed for loading and discharging cargo. It begins when "
            "the vessel tenders Notice of Readiness (NOR) and ends when cargo operations "
            "are completed."
        ),
        "tags": ("laytime", "loading", "discharging", "NOR", "notice of readiness"),
    },
    {
        "category": "cp_clause",
        "title": "Weather Working Days",
        "content": (
            "Weather Working Days (WWD) exclude time when weather conditions prevent cargo "
            "operations. This clause protects charterers from delays due to adverse weather."
        ),
        "tags": ("weather working days", "WWD", "weather", "cargo operations"),
    },
    {
        "category": "cp_clause",
        "title": "Demurrage and Dispatch",
        "content": (
            "Demurrage is compensation paid when laytime is exceeded. Dispatch is a reward "
            "for completing operations ahead of schedule."
        ),
        "tags": ("demurrage", "dispatch", "laytime", "compensation"),
    },
    {
        "category": "distance",
        "title": "Great Circle Distance",
        "content": (
            "Great circle distance is the shortest distance between two points on a sphere, "
            "commonly used for voyage planning and fuel calculations."
        ),
        "tags": ("great circle", "distance", "voyage planning", "fuel"),
    },
)


# ── Section analysis (used by the ingestion pipeline) ─────────────────────────

def categorize_section(content: str) -> str:
    lowered = content.lower()
    for keywords, category in _SECTION_RULES:
        if any(kw in lowered for kw in keywords):
            return category
    return "general"


def relevance_score(content: str, category: str) -> float:
    """0.6 × length factor (saturating at 1000 chars) + 0.4 × category keyword coverage."""
    base = min(len(content) / 1000, 1.0)
    keywords = CATEGORY_KEYWORDS.get(category, ())
    lowered = content.lower()
    if keywords:
        keyword_score = sum(1 for kw in keywords if kw in lowered) / len(keywords)
    else:
        keyword_score = 0.5
    return round(base * 0.6 + keyword_score * 0.4, 2)


def section_tags(content: str) -> tuple[str, ...]:
    lowered = content.lower()
    return tuple(tag for tag in COMMON_TAGS if tag in lowered)[:MAX_TAGS]


class SentenceEmbedder:
    """sentence-transformers model, loaded on first use."""

    def __init__(self, model_name: Optional[str] = None) -> None:
        self.model_name = model_name or settings.embedding_model
        self._model = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            log.info("Loading embedding model", model=self.model_name)
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed(self, texts: list[str]) -> list[list[float]]:
        return self.model.encode(texts, convert_to_numpy=True, normalize_embeddings=True).tolist()


def _entry_text(entry: KnowledgeEntry) -> str:
    return f"{entry.title}\n{entry.content}"


class KnowledgeStore:
    """
    Maritime knowledge base held in an in-memory ChromaDB collection.

    Each entry is one Chroma record: the content is the document, title,
    category, tags and owning document id live in the metadata, and the
    embedding covers title + content.  Seed entries are embedded on first
    use so constructing a store never loads the embedding model.
    """

    def __init__(
        self,
        seed: bool = True,
        embedder: Optional[Any] = None,
        min_similarity: Optional[float] = None,
    ) -> None:
        import chromadb
        from chromadb.config import Settings as ChromaSettings

        self._lock     = threading.RLock()
        self._embedder = embedder or SentenceEmbedder()
        self.min_similarity = settings.knowledge_min_similarity if min_similarity is None else min_similarity

        self.client = chromadb.EphemeralClient(settings=ChromaSettings(anonymized_telemetry=False))
        # Ephemeral clients share one in-process backend; a unique name keeps stores apart
        self.collection = self.client.get_or_create_collection(
            name=f"knowledge_{uuid.uuid4().hex}",
            metadata={"hnsw:space": "cosine"},
        )
        self._seq = 0
        self._pending_seed = seed

    # ── Public API ────────────────────────────────────────────────────────────

    def add_entries(self, entries: Iterable[KnowledgeEntry]) -> int:
        with self._lock:
            self._ensure_seeded()
            return self._upsert(list(entries))

    def list_entries(self, category: Optional[str] = None) -> list[KnowledgeEntry]:
        with self._lock:
            self._ensure_seeded()
            where = {"category": category} if category else None
            results = self.collection.get(where=where, include=["documents", "metadatas"])
        entries = [
            (meta.get("seq", 0), self._to_entry(entry_id, doc, meta))
            for entry_id, doc, meta in zip(results["ids"], results["documents"], results["metadatas"])
        ]
        return [entry for _, entry in sorted(entries, key=lambda item: item[0])]

    def search(self, text: str, category: Optional[str] = None, limit: int = 5) -> list[KnowledgeEntry]:
        """
        Entries closest to the query by embedding similarity, best first.
        Hits below min_similarity are dropped, so an unrelated query
        returns an empty list.
        """
        if not text or not text.strip():
            return []

        with self._lock:
            self._ensure_seeded()
            where = {"category": category} if category else None
            if where:
                available = len(self.collection.get(where=where, include=["metadatas"])["ids"])
            else:
                available = self.collection.count()
            if available == 0:
                return []

            kwargs: dict = {
                "query_embeddings": self._embedder.embed([text]),
                "n_results":        min(limit, available),
                "include":          ["documents", "metadatas", "distances"],
            }
            if where:
                kwargs["where"] = where
            results = self.collection.query(**kwargs)

        hits: list[KnowledgeEntry] = []
        for entry_id, doc, meta, dist in zip(
            results["ids"][0],
            results["documents"][0],
            results["metadatas"][0],
            results["distances"][0],
        ):
            if 1.0 - dist >= self.min_similarity:
                hits.append(self._to_entry(entry_id, doc, meta))
        return hits

    def delete_document(self, document_id: str) -> int:
        """Remove every entry created from one ingested document."""
        with self._lock:
            ids = self.collection.get(where={"document_id": document_id}, include=["metadatas"])["ids"]
            if ids:
                self.collection.delete(ids=ids)
        log.info("Knowledge entries removed", document_id=document_id, count=len(ids))
        return len(ids)

    def __len__(self) -> int:
        with self._lock:
            self._ensure_seeded()
            return self.collection.count()

    # ── Private ───────────────────────────────────────────────────────────────

    def _ensure_seeded(self) -> None:
        if self._pending_seed:
            self._pending_seed = False
            self._upsert([KnowledgeEntry(id=str(uuid.uuid4()), **item) for item in SEED_ENTRIES])

    def _upsert(self, entries: list[KnowledgeEntry]) -> int:
        if not entries:
            return 0
        metadatas = []
        for entry in entries:
            self._seq += 1
            metadatas.append({
                "title":           entry.title,
                "category":        entry.category,
                "document_id":     entry.document_id or "",
                "relevance_score": float(entry.relevance_score),
                "tags":            "|".join(entry.tags),
                "seq":             self._seq,
            })
        self.collection.upsert(
            ids=[e.id for e in entries],
            documents=[e.content for e in entries],
            metadatas=metadatas,
            embeddings=self._embedder.embed([_entry_text(e) for e in entries]),
        )
        log.info("Knowledge entries added", count=len(entries))
        return len(entries)

    @staticmethod
    def _to_entry(entry_id: str, content: str, meta: dict) -> KnowledgeEntry:
        return KnowledgeEntry(
            id=entry_id,
            title=meta.get("title", ""),
            content=content or "",
            category=meta.get("category", "general"),
            document_id=meta.get("document_id") or None,
            relevance_score=float(meta.get("relevance_score", 1.0)),
            tags=tuple(t for t in str(meta.get("tags", "")).split("|") if t),
        )
