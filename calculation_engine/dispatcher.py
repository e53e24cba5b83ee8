"""
calculation_engine/dispatcher.py
Dispatch Orchestrator

Routes a classified chat message to the deterministic tool for its category:

  laytime   → extract arrival/completion clock times → calculate_laytime
  distance  → extract "from X to Y"                 → DistanceEngine.distance
  weather   → extract a location                    → WeatherService.lookup
  cp_clause → extract quoted clause text            → interpret_clause
  other     → GenerativeFallback with knowledge and recent turns

A parameter that cannot be extracted produces a clarifying prompt; the
orchestrator never retries and keeps no state between calls.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Optional

from calculation_engine import formatting
from calculation_engine.clauses import interpret_clause
from calculation_engine.distance import DistanceEngine
from calculation_engine.laytime import calculate_laytime
from calculation_engine.weather import WeatherService
from config.settings import settings
from generation.fallback import GenerativeFallback
from knowledge_base.knowledge_store import KnowledgeStore
from monitoring import CHAT_REQUESTS, get_logger
from query_processor.extraction import (
    extract_location,
    extract_port_pair,
    extract_quoted_clause,
    extract_time_pair,
    has_calculation_intent,
)
from query_processor.models import (
    Category,
    ClassificationResult,
    ClockTime,
    FallbackContext,
    Query,
)

log = get_logger(__name__)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _at(day: date, clock: ClockTime) -> datetime:
    return datetime.combine(day, time(clock.hour, clock.minute), tzinfo=timezone.utc)


class DispatchOrchestrator:

    def __init__(
        self,
        fallback: GenerativeFallback,
        knowledge_store: Optional[KnowledgeStore] = None,
        distance_engine: Optional[DistanceEngine] = None,
        weather_service: Optional[WeatherService] = None,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self.fallback        = fallback
        self.knowledge_store = knowledge_store if knowledge_store is not None else KnowledgeStore()
        self.distance_engine = distance_engine or DistanceEngine()
        self.weather_service = weather_service or WeatherService()
        self._today          = today
        self.history_turns   = settings.history_turns

        self._handlers: dict[Category, Callable[[Query, ClassificationResult, dict], str]] = {
            Category.LAYTIME:           self._laytime,
            Category.DISTANCE:          self._distance,
            Category.WEATHER:           self._weather,
            Category.CP_CLAUSE:         self._clause,
            Category.DOCUMENT_ANALYSIS: self._generative,
            Category.VOYAGE_GUIDANCE:   self._generative,
            Category.GENERAL:           self._generative,
        }

    @property
    def handlers(self) -> dict[Category, Callable]:
        return dict(self._handlers)

    # ── Public ────────────────────────────────────────────────────────────────

    def respond(
        self,
        query: Query,
        classification: ClassificationResult,
        extras: Optional[dict[str, Any]] = None,
    ) -> str:
        handler = self._handlers[classification.category]
        reply = handler(query, classification, extras or {})
        CHAT_REQUESTS.labels(
            category=classification.category.value,
            handler=handler.__name__.lstrip("_"),
        ).inc()
        return reply

    # ── Handlers ──────────────────────────────────────────────────────────────

    def _laytime(self, query: Query, classification: ClassificationResult, extras: dict) -> str:
        text = query.raw_text
        if not has_calculation_intent(text):
            return self._generative(query, classification, extras)

        extracted = extract_time_pair(text)
        if not extracted.ok:
            log.info("Laytime parameters missing", reason=extracted.reason)
            return formatting.LAYTIME_PROMPT

        pair = extracted.value
        day = self._today()
        arrival    = _at(day, pair.arrival)
        completion = _at(day, pair.completion)
        if completion <= arrival or pair.next_day:
            completion += timedelta(days=1)

        return formatting.format_laytime(calculate_laytime(arrival, completion))

    def _distance(self, query: Query, classification: ClassificationResult, extras: dict) -> str:
        extracted = extract_port_pair(query.raw_text)
        if not extracted.ok:
            log.info("Distance parameters missing", reason=extracted.reason)
            return formatting.DISTANCE_PROMPT

        ports = extracted.value
        try:
            result = self.distance_engine.distance(ports.from_port, ports.to_port)
        except ValueError as exc:
            log.info("Distance lookup rejected", error=str(exc))
            return formatting.DISTANCE_PROMPT
        if result.is_estimate:
            return formatting.covered_ports_message(ports.from_port, ports.to_port)
        return formatting.format_distance(result, self.distance_engine.speed_knots)

    def _weather(self, query: Query, classification: ClassificationResult, extras: dict) -> str:
        extracted = extract_location(query.raw_text)
        if not extracted.ok:
            log.info("Weather location missing", reason=extracted.reason)
            return formatting.WEATHER_PROMPT

        service = self.weather_service
        result = service.lookup(extracted.value)
        return formatting.format_weather(
            result,
            container_ops_suspended=service.container_ops_suspended(result),
            pilot_boarding_delayed=service.pilot_boarding_delayed(result),
            wind_limit_kt=service.wind_limit_kt,
            visibility_min_nm=service.visibility_min_nm,
        )

    def _clause(self, query: Query, classification: ClassificationResult, extras: dict) -> str:
        extracted = extract_quoted_clause(query.raw_text)
        if not extracted.ok:
            log.info("Clause text missing", reason=extracted.reason)
            return formatting.CLAUSE_PROMPT
        return formatting.format_clause(interpret_clause(extracted.value))

    def _generative(self, query: Query, classification: ClassificationResult, extras: dict) -> str:
        # Entries for the category first; the whole store when none match
        knowledge = (
            self.knowledge_store.search(query.raw_text, classification.category.value)
            or self.knowledge_store.search(query.raw_text)
        )
        context = FallbackContext(
            knowledge_base=knowledge,
            conversation_history=list(query.conversation_context[-self.history_turns:]),
            extras=extras,
        )
        return self.fallback.generate(query.raw_text, context, category=classification.category.value)
