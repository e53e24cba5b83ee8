"""
query_processor/models.py
Shared query types used by the classifier, extraction functions, dispatcher
and generative fallback.  Kept in a separate module to avoid circular imports.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class Category(str, Enum):
    """Routing key assigned to every incoming query."""
    LAYTIME           = "laytime"
    WEATHER           = "weather"
    DISTANCE          = "distance"
    CP_CLAUSE         = "cp_clause"
    DOCUMENT_ANALYSIS = "document_analysis"
    VOYAGE_GUIDANCE   = "voyage_guidance"
    GENERAL           = "general"

    @classmethod
    def parse(cls, raw: Any) -> Optional["Category"]:
        """Return the matching member, or None for an unknown label."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Turn:
    role: str      # "user" | "assistant"
    content: str


@dataclass(frozen=True)
class Query:
    """A single user message plus the turns that preceded it."""
    raw_text: str
    conversation_context: tuple[Turn, ...] = ()


@dataclass(frozen=True)
class ClassificationResult:
    category: Category
    confidence: float
    suggested_actions: tuple[str, ...] = ()
    requires_documents: bool = False
    source: str = "keywords"   # "llm" | "keywords"

    def to_dict(self) -> dict[str, Any]:
        return {
            "category":          self.category.value,
            "confidence":        self.confidence,
            "suggestedActions":  list(self.suggested_actions),
            "requiresDocuments": self.requires_documents,
            "source":            self.source,
        }


@dataclass(frozen=True)
class ExtractionResult(Generic[T]):
    """
    Outcome of pulling structured parameters out of free text.
    Extraction never raises; a miss is ok=False with a short reason.
    """
    ok: bool
    value: Optional[T] = None
    reason: str = ""

    @classmethod
    def found(cls, value: T) -> "ExtractionResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def missing(cls, reason: str) -> "ExtractionResult[T]":
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class ClockTime:
    hour: int
    minute: int


@dataclass(frozen=True)
class TimePair:
    arrival: ClockTime
    completion: ClockTime
    next_day: bool = False


@dataclass(frozen=True)
class PortPair:
    from_port: str
    to_port: str


@dataclass
class FallbackContext:
    """Context handed to the generative fallback for one request."""
    knowledge_base: list = field(default_factory=list)
    conversation_history: list[Turn] = field(default_factory=list)
    extras: dict[str, Any] = field(default_factory=dict)
