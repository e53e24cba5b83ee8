"""
generation/fallback.py
Generative Fallback: free-text answers for queries no deterministic tool handles.

Message layout sent to the provider:
  1. System instruction describing the assistant's scope
  2. Up to the last N conversation turns
  3. One human message carrying knowledge-base context and the query

Every failure path resolves to a user-facing string; nothing is raised.
"""
from typing import Any, Iterable, Optional

from config.settings import settings
from generation.prompts import (
    EMPTY_RESPONSE_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    RATE_LIMITED_MESSAGE,
    SYSTEM_PROMPT,
    not_configured_message,
)
from generation.providers import (
    RATE_LIMITED,
    UNCONFIGURED,
    ProviderRegistry,
    classify_provider_error,
)
from monitoring import PROVIDER_FAILURES, get_logger, timed
from query_processor.models import FallbackContext, Turn

log = get_logger(__name__)


def _field(item: Any, name: str, default: Any = "") -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _port_name(port: Any) -> str:
    if isinstance(port, dict):
        return str(port.get("name") or port)
    return str(port)


def response_text(response: Any) -> str:
    """Plain text from an AIMessage, a list of content parts, or a string."""
    content = getattr(response, "content", response)
    if isinstance(content, list):
        parts = [p.get("text", "") if isinstance(p, dict) else str(p) for p in content]
        return "".join(parts)
    return content if isinstance(content, str) else str(content or "")


class GenerativeFallback:

    def __init__(self, registry: ProviderRegistry, history_turns: Optional[int] = None) -> None:
        self._registry     = registry
        self.history_turns = history_turns or settings.history_turns

    # ── Public ────────────────────────────────────────────────────────────────

    @timed("generate")
    def generate(
        self,
        query: str,
        context: Optional[FallbackContext] = None,
        category: Optional[str] = None,
    ) -> str:
        context = context or FallbackContext()
        handle = self._registry.current()
        if handle is None:
            PROVIDER_FAILURES.labels(operation="generate", kind=UNCONFIGURED).inc()
            log.info("Generative fallback unavailable: provider not configured", category=category)
            return not_configured_message(category)

        try:
            text = response_text(handle.model.invoke(self.build_messages(query, context)))
        except Exception as exc:
            kind = classify_provider_error(exc)
            PROVIDER_FAILURES.labels(operation="generate", kind=kind).inc()
            log.warning(
                "LLM provider call failed",
                provider=handle.config.provider,
                kind=kind,
                error_type=type(exc).__name__,
            )
            return self._degraded(kind, category)

        if not text.strip():
            return EMPTY_RESPONSE_MESSAGE
        log.info("Generative response produced", provider=handle.config.provider, chars=len(text))
        return text

    def build_messages(self, query: str, context: FallbackContext) -> list:
        from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

        messages: list = [SystemMessage(content=SYSTEM_PROMPT)]
        for turn in self._recent(context.conversation_history):
            cls = AIMessage if turn.role == "assistant" else HumanMessage
            messages.append(cls(content=turn.content))

        context_text = self.context_text(context)
        user_text = f"Additional context:\n{context_text}\n\nQuestion: {query}" if context_text else query
        messages.append(HumanMessage(content=user_text))
        return messages

    @staticmethod
    def context_text(context: FallbackContext) -> str:
        lines: list[str] = []
        knowledge = _as_list(context.knowledge_base)
        if knowledge:
            lines.append("Relevant knowledge base entries:")
            for entry in knowledge:
                lines.append(f"- {_field(entry, 'title')}: {_field(entry, 'content')}")

        extras = context.extras if isinstance(context.extras, dict) else {}
        documents = _as_list(extras.get("documents"))
        if documents:
            lines.append("Referenced documents:")
            for doc in documents:
                name = _field(doc, "originalName") or _field(doc, "name")
                summary = _field(doc, "summary") or str(_field(doc, "content"))[:200]
                lines.append(f"- {name}: {summary}")
        ports = [_port_name(p) for p in _as_list(extras.get("selectedPorts"))]
        if ports:
            lines.append(f"Selected ports: {', '.join(ports)}")
        route = extras.get("currentRoute")
        if isinstance(route, dict):
            lines.append(
                f"Current route: {route.get('name', 'unnamed')} - "
                f"{route.get('distance', '?')} NM, {route.get('estimatedDays', '?')} days"
            )
        vessel = extras.get("vesselSpecs")
        if isinstance(vessel, dict):
            lines.append(
                f"Vessel: {vessel.get('name', 'unknown')} ({vessel.get('type', 'n/a')}, "
                f"{vessel.get('speed', '?')} knots, {vessel.get('fuelConsumption', '?')} MT/day)"
            )
        return "\n".join(lines)

    # ── Private ───────────────────────────────────────────────────────────────

    def _recent(self, history: Iterable[Turn]) -> list[Turn]:
        turns = [t for t in _as_list(history) if getattr(t, "content", "")]
        return turns[-self.history_turns:] if self.history_turns else []

    @staticmethod
    def _degraded(kind: str, category: Optional[str]) -> str:
        if kind == RATE_LIMITED:
            return RATE_LIMITED_MESSAGE
        if kind == UNCONFIGURED:
            return not_configured_message(category)
        return GENERIC_ERROR_MESSAGE
