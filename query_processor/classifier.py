"""
query_processor/classifier.py
Query Classifier using LangChain.

LangChain pipeline:
  PromptTemplate → chat model → JsonOutputParser → ClassificationResult

The LLM label is validated against Category; anything it cannot vouch for
(no provider, provider error, unparsable output, unknown label) falls back
to a deterministic keyword scan.  classify() never raises.
"""
import json
import math
import re
from typing import Any, Optional

from generation.prompts import CLASSIFIER_TEMPLATE
from generation.providers import ProviderHandle, ProviderRegistry, classify_provider_error
from monitoring import CLASSIFICATIONS, PROVIDER_FAILURES, get_logger, timed
from query_processor.models import Category, ClassificationResult

log = get_logger(__name__)

# Ordered keyword rules: first match wins.  Keywords match at a word start,
# so "rain" does not fire inside "training"; "unloading" and "offloading"
# are listed explicitly.
_KEYWORD_RULES: tuple[tuple[re.Pattern, Category], ...] = (
    (re.compile(r"\b(?:laytime|(?:un|off)?loading|discharge)", re.I), Category.LAYTIME),
    (re.compile(r"\b(?:weather|wind|rain)", re.I),                     Category.WEATHER),
    (re.compile(r"\b(?:distance|route|voyage)", re.I),                 Category.DISTANCE),
    (re.compile(r"\b(?:charter|clause|cp\b)", re.I),                   Category.CP_CLAUSE),
)
KEYWORD_CONFIDENCE = 0.7
GENERAL_CONFIDENCE = 0.5

SUGGESTED_ACTIONS: dict[Category, tuple[str, ...]] = {
    Category.LAYTIME:           ("Provide arrival time", "Provide completion time"),
    Category.WEATHER:           ("Specify a port or location", "Check operational limits"),
    Category.DISTANCE:          ("Specify departure port", "Specify destination port"),
    Category.CP_CLAUSE:         ("Quote the clause text", "Review laytime and demurrage terms"),
    Category.DOCUMENT_ANALYSIS: ("Upload the document", "Search the knowledge base"),
    Category.VOYAGE_GUIDANCE:   ("Provide the planned route", "Check weather along the route"),
    Category.GENERAL:           ("Ask a more specific maritime question",),
}


def keyword_classify(text: str) -> ClassificationResult:
    """Deterministic classification used whenever the LLM path is unavailable."""
    for pattern, category in _KEYWORD_RULES:
        if pattern.search(text or ""):
            return ClassificationResult(
                category=category,
                confidence=KEYWORD_CONFIDENCE,
                suggested_actions=SUGGESTED_ACTIONS[category],
            )
    return ClassificationResult(
        category=Category.GENERAL,
        confidence=GENERAL_CONFIDENCE,
        suggested_actions=SUGGESTED_ACTIONS[Category.GENERAL],
    )


class QueryClassifier:
    """
    Assigns a Category to a free-text maritime question.

    The LCEL chain is built from the provider snapshot taken for each call,
    so a reconfigured registry is picked up on the next call.
    """

    def __init__(self, registry: Optional[ProviderRegistry] = None) -> None:
        self._registry = registry or ProviderRegistry()

    @staticmethod
    def _build_chain(handle: ProviderHandle):
        from langchain_core.output_parsers import JsonOutputParser
        from langchain_core.prompts import PromptTemplate

        prompt = PromptTemplate(template=CLASSIFIER_TEMPLATE, input_variables=["query"])
        return prompt | handle.model | JsonOutputParser()

    @timed("classify")
    def classify(self, text: str) -> ClassificationResult:
        text = text or ""
        handle = self._registry.current()
        result = None
        if handle is not None and text.strip():
            result = self._classify_llm(handle, text)
        if result is None:
            result = keyword_classify(text)

        CLASSIFICATIONS.labels(source=result.source, category=result.category.value).inc()
        log.info(
            "Query classified",
            category=result.category.value,
            confidence=result.confidence,
            source=result.source,
        )
        return result

    def _classify_llm(self, handle: ProviderHandle, text: str) -> Optional[ClassificationResult]:
        try:
            payload = self._build_chain(handle).invoke({"query": text})
        except Exception as exc:
            kind = classify_provider_error(exc)
            PROVIDER_FAILURES.labels(operation="classify", kind=kind).inc()
            log.warning("LLM classification failed, using keywords", kind=kind, error_type=type(exc).__name__)
            return None
        return self._from_payload(payload)

    @staticmethod
    def _from_payload(payload: Any) -> Optional[ClassificationResult]:
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except ValueError:
                return None
        if not isinstance(payload, dict):
            return None

        category = Category.parse(payload.get("category"))
        if category is None:
            log.warning("LLM returned unknown category", label=str(payload.get("category"))[:40])
            return None

        try:
            confidence = float(payload.get("confidence", KEYWORD_CONFIDENCE))
        except (TypeError, ValueError):
            confidence = KEYWORD_CONFIDENCE
        if not math.isfinite(confidence):
            confidence = KEYWORD_CONFIDENCE
        confidence = min(max(confidence, 0.0), 1.0)

        actions = payload.get("suggestedActions") or SUGGESTED_ACTIONS[category]
        if not isinstance(actions, (list, tuple)):
            actions = SUGGESTED_ACTIONS[category]

        return ClassificationResult(
            category=category,
            confidence=confidence,
            suggested_actions=tuple(str(a) for a in actions),
            requires_documents=bool(payload.get("requiresDocuments", False)),
            source="llm",
        )
