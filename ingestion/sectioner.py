"""
ingestion/sectioner.py
Line-based sectioner for maritime documents.

A new section starts at every header line (short, upper-case or numbered)
or clause line ("12.", "(a)", "CLAUSE 7").  Lines before the first header
become stand-alone "General Content" paragraphs.  Also holds the
document-level helpers: type classification and keyword extraction.
"""
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from monitoring import get_logger

log = get_logger(__name__)

_NUMBERED = re.compile(r"^\d+\.?\s")
_CAPS_RUN = re.compile(r"^[A-Z][A-Z\s]{5,}$")
_CLAUSE   = re.compile(r"^(?:\d+\.|\([a-z]\)|\(\d+\))\s")
_CLAUSE_WORD = re.compile(r"^(?:CLAUSE|ARTICLE|SECTION)\s+\d+", re.IGNORECASE)
_WORDS = re.compile(r"\W+")

MARITIME_TERMS = (
    "laytime", "demurrage", "despatch", "charter party", "bill of lading",
    "vessel", "cargo", "port", "loading", "discharge", "weather",
    "routing", "voyage", "freight", "bunkers", "ballast", "draught",
    "tonnage", "berth", "anchorage", "pilot", "tug", "mooring",
)
MAX_KEYWORDS = 20

# Ordered: content phrase or filename hint, first match wins
_DOCUMENT_TYPES: tuple[tuple[tuple[str, ...], tuple[str, ...], str], ...] = (
    (("charter party",),           ("charter",), "charter_party"),
    (("bill of lading",),          ("bl",),      "bill_of_lading"),
    (("weather",),                 ("weather",), "weather_report"),
    (("voyage",),                  ("voyage",),  "voyage_instructions"),
    (("laytime", "demurrage"),     (),           "laytime_calculation"),
)


@dataclass
class Section:
    title: str
    content: str
    page: int
    kind: str   # "header" | "clause" | "paragraph"


def is_header_line(line: str) -> bool:
    if not 3 < len(line) < 80:
        return False
    return line == line.upper() or bool(_NUMBERED.match(line)) or bool(_CAPS_RUN.match(line))


def is_clause_line(line: str) -> bool:
    return bool(_CLAUSE.match(line) or _CLAUSE_WORD.match(line))


def split_sections(pages: Iterable[tuple[int, str]]) -> list[Section]:
    """Split (page_num, text) pairs into titled sections."""
    sections: list[Section] = []
    current: Section | None = None

    for page_num, text in pages:
        for raw in text.splitlines():
            line = raw.strip()
            if not line:
                continue

            clause = is_clause_line(line)
            if clause or is_header_line(line):
                if current is not None:
                    sections.append(current)
                current = Section(title=line, content="", page=page_num, kind="clause" if clause else "header")
            elif current is not None:
                current.content = f"{current.content}\n{line}" if current.content else line
            else:
                sections.append(Section(title="General Content", content=line, page=page_num, kind="paragraph"))

    if current is not None:
        sections.append(current)

    log.info("Sections split", count=len(sections))
    return sections


def classify_document(content: str, filename: str = "") -> str:
    content_lower, name_lower = content.lower(), filename.lower()
    for phrases, name_hints, document_type in _DOCUMENT_TYPES:
        if any(p in content_lower for p in phrases) or any(h in name_lower for h in name_hints):
            return document_type
    return "general_maritime"


def extract_keywords(content: str) -> list[str]:
    """Maritime terms present in the text, then its ten most frequent long words."""
    lowered = content.lower()
    keywords = [term for term in MARITIME_TERMS if term in lowered]

    counts = Counter(w for w in _WORDS.split(lowered) if len(w) > 3)
    for word, _ in counts.most_common(10):
        if word not in keywords:
            keywords.append(word)
    return keywords[:MAX_KEYWORDS]
