"""
calculation_engine/clauses.py
Charter-party clause interpreter.

Case-insensitive substring rules, first match wins:
  1. "weather working day" / "wwd"  → Weather Working Days
  2. "demurrage" / "dispatch"       → Demurrage/Dispatch
  3. anything else                  → General Charter Party Clause

This is pattern classification with fixed text per archetype, not legal
reasoning; callers should present it as guidance only.
"""
from dataclasses import dataclass, field

from monitoring import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ClauseInterpretation:
    clause_type: str
    interpretation: str
    implications: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


WEATHER_WORKING_DAYS = ClauseInterpretation(
    clause_type="Weather Working Days",
    interpretation=(
        "This clause excludes time when weather conditions prevent cargo "
        "operations from counting against laytime."
    ),
    implications=[
        "Charterer protected from weather delays",
        'Definition of "weather" conditions must be clear',
        "Local port customs may apply",
    ],
    recommendations=[
        "Clarify weather thresholds",
        "Review local port weather definitions",
        "Consider weather monitoring systems",
    ],
)

DEMURRAGE_DISPATCH = ClauseInterpretation(
    clause_type="Demurrage/Dispatch",
    interpretation=(
        "This clause defines compensation for exceeding laytime (demurrage) "
        "or completing early (dispatch)."
    ),
    implications=[
        "Financial liability for delays",
        "Incentive for efficient operations",
        "Clear calculation methods required",
    ],
    recommendations=[
        "Verify calculation methods",
        "Understand dispatch rates",
        "Plan operations efficiently",
    ],
)

GENERAL_CLAUSE = ClauseInterpretation(
    clause_type="General Charter Party Clause",
    interpretation=(
        "This appears to be a standard charter party provision requiring "
        "detailed analysis."
    ),
    implications=[
        "Legal obligations for both parties",
        "Potential financial implications",
        "Operational requirements",
    ],
    recommendations=[
        "Seek legal review if unclear",
        "Document compliance actions",
        "Maintain clear records",
    ],
)

# Ordered: the first rule whose keyword appears in the text wins
_RULES: tuple[tuple[tuple[str, ...], ClauseInterpretation], ...] = (
    (("weather working day", "wwd"), WEATHER_WORKING_DAYS),
    (("demurrage", "dispatch"),      DEMURRAGE_DISPATCH),
)


def interpret_clause(text: str) -> ClauseInterpretation:
    if not text or not text.strip():
        raise ValueError("Clause text is required")

    lowered = text.lower()
    for keywords, archetype in _RULES:
        if any(kw in lowered for kw in keywords):
            log.info("Clause interpreted", clause_type=archetype.clause_type)
            return archetype

    log.info("Clause interpreted", clause_type=GENERAL_CLAUSE.clause_type)
    return GENERAL_CLAUSE
