"""
query_processor/extraction.py
Regex extraction of calculator parameters from free text.

Each extractor returns an ExtractionResult instead of raising, so the
dispatcher can turn a miss into a clarifying prompt.  The patterns are
narrow: a miss becomes a clarifying prompt, never a guess.
"""
import re

from query_processor.models import (
    ClockTime,
    ExtractionResult,
    PortPair,
    TimePair,
)

_TIME = r"(\d{1,2}):(\d{2})"
_ARRIVAL_WORDS    = r"(?:arrived|arrival|arriving|berthed|tendered|commenced|started)"
_COMPLETION_WORDS = r"(?:completed|completion|finished|finishing)"

# keyword first ("arrived at 14:30"), then time first ("14:30 arrival").
# The gap may not cross a digit or a comma, so in "06:00 arrival, 18:45
# completion" each time binds to its own keyword.
_GAP = r"[^\d,;]{0,60}?"
_ARRIVAL_AFTER     = re.compile(rf"\b{_ARRIVAL_WORDS}\b{_GAP}\b{_TIME}", re.IGNORECASE)
_ARRIVAL_BEFORE    = re.compile(rf"\b{_TIME}{_GAP}\b{_ARRIVAL_WORDS}\b", re.IGNORECASE)
_COMPLETION_AFTER  = re.compile(rf"\b{_COMPLETION_WORDS}\b{_GAP}\b{_TIME}", re.IGNORECASE)
_COMPLETION_BEFORE = re.compile(rf"\b{_TIME}{_GAP}\b{_COMPLETION_WORDS}\b", re.IGNORECASE)

_ANY_TIME = re.compile(rf"\b{_TIME}\b")
_NEXT_DAY = re.compile(r"\b(?:next|following)\s+day\b|\btomorrow\b", re.IGNORECASE)

_CALC_INTENT = re.compile(
    r"\b(?:calculat\w*|comput\w*|work\s+out|how\s+(?:long|much|many)|total\s+laytime|time\s+used)\b",
    re.IGNORECASE,
)

_NAME = r"[a-z][a-z\s.'-]*?"
_NAME_END = r"(?=\s*(?:$|[?.!,;:()]|\d|\b(?:by|at|for|via|with|in|on|please|using|and\s+back)\b))"

_FROM_TO = re.compile(
    rf"\bfrom\s+(?:the\s+)?(?:port\s+of\s+)?(?P<src>{_NAME})\s+(?:to|and)\s+"
    rf"(?:the\s+)?(?:port\s+of\s+)?(?P<dst>{_NAME}){_NAME_END}",
    re.IGNORECASE,
)
_BETWEEN_AND = re.compile(
    rf"\bbetween\s+(?:the\s+)?(?:port\s+of\s+)?(?P<src>{_NAME})\s+and\s+"
    rf"(?:the\s+)?(?:port\s+of\s+)?(?P<dst>{_NAME}){_NAME_END}",
    re.IGNORECASE,
)

_LOCATION_PREP = re.compile(
    rf"\b(?:in|at|for|near|off)\s+(?:the\s+)?(?:port\s+of\s+)?(?P<loc>{_NAME})"
    r"(?=\s*(?:$|[?.!,;:()]|\d|\b(?:today|tomorrow|tonight|now|this|next|please|port|harbou?r|"
    r"anchorage|roads|during|and|with|for)\b))",
    re.IGNORECASE,
)
_LOCATION_BEFORE_WEATHER = re.compile(r"\b(?P<loc>[A-Z][a-zA-Z]+(?:\s[A-Z][a-zA-Z]+)?)\s+weather\b")

_NOT_LOCATIONS = {
    "the", "general", "port", "sea", "the morning", "the afternoon", "the evening",
    "morning", "afternoon", "evening", "night", "what", "weather", "conditions",
}

_QUOTED_DOUBLE = re.compile(r"[\"“](?P<clause>[^\"”]{3,})[\"”]")
_QUOTED_SINGLE = re.compile(r"(?:^|[\s:(])['‘](?P<clause>[^'’]{3,})['’](?=$|[\s.,;:!?)])")
_AFTER_LABEL   = re.compile(r"\bclause\s*:\s*(?P<clause>.+)", re.IGNORECASE | re.DOTALL)


def has_calculation_intent(text: str) -> bool:
    """True when the text asks for a computation or already supplies two clock times."""
    if _CALC_INTENT.search(text):
        return True
    return len(_ANY_TIME.findall(text)) >= 2


def _clock(match: re.Match) -> ClockTime | None:
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return ClockTime(hour=hour, minute=minute)


def _first_clock(text: str, *patterns: re.Pattern) -> ClockTime | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return _clock(match)
    return None


def extract_time_pair(text: str) -> ExtractionResult[TimePair]:
    """
    Find the arrival and completion clock times in sentences such as
    "Vessel arrived at 14:30 and completed loading at 08:15 the next day".
    """
    arrival = _first_clock(text, _ARRIVAL_AFTER, _ARRIVAL_BEFORE)
    if arrival is None:
        return ExtractionResult.missing("no arrival time (HH:MM) found")

    completion = _first_clock(text, _COMPLETION_AFTER, _COMPLETION_BEFORE)
    if completion is None:
        return ExtractionResult.missing("no completion time (HH:MM) found")

    return ExtractionResult.found(TimePair(
        arrival=arrival,
        completion=completion,
        next_day=bool(_NEXT_DAY.search(text)),
    ))


def _clean_name(raw: str) -> str:
    name = re.sub(r"\s+", " ", raw).strip(" .'-")
    return name


def extract_port_pair(text: str) -> ExtractionResult[PortPair]:
    """Find "from X to Y" or "between X and Y" port names."""
    for pattern in (_FROM_TO, _BETWEEN_AND):
        match = pattern.search(text)
        if not match:
            continue
        src, dst = _clean_name(match.group("src")), _clean_name(match.group("dst"))
        if src and dst and src.lower() != dst.lower():
            return ExtractionResult.found(PortPair(from_port=src, to_port=dst))
    return ExtractionResult.missing("no 'from X to Y' port pair found")


def extract_location(text: str) -> ExtractionResult[str]:
    """Find the place a weather question refers to."""
    for match in _LOCATION_PREP.finditer(text):
        loc = _clean_name(match.group("loc"))
        if loc and loc.lower() not in _NOT_LOCATIONS:
            return ExtractionResult.found(loc)

    match = _LOCATION_BEFORE_WEATHER.search(text)
    if match:
        loc = _clean_name(match.group("loc"))
        if loc.lower() not in _NOT_LOCATIONS:
            return ExtractionResult.found(loc)

    return ExtractionResult.missing("no location found")


def extract_quoted_clause(text: str) -> ExtractionResult[str]:
    """Return quoted clause text, or whatever follows a "clause:" label."""
    for pattern in (_QUOTED_DOUBLE, _QUOTED_SINGLE, _AFTER_LABEL):
        match = pattern.search(text)
        if match:
            clause = match.group("clause").strip()
            if len(clause) >= 3:
                return ExtractionResult.found(clause)
    return ExtractionResult.missing("no quoted clause text found")
