"""
generation/prompts.py
Prompt templates and the static texts returned when the LLM is unavailable.
"""
from typing import Optional

SYSTEM_PROMPT = """You are MaritimeAI, an expert maritime assistant specializing in:
- Laytime calculations and charterparty terms
- Weather analysis and routing
- Port distances and voyage planning
- Maritime regulations and procedures (SOLAS, MARPOL, MLC)
- Document analysis and interpretation

Provide accurate, professional responses based on maritime industry standards.
If you need additional information, ask specific questions.
Always cite relevant regulations or industry practices when applicable."""

# LangChain PromptTemplate with {query} as its only variable
CLASSIFIER_TEMPLATE = """You are a maritime domain expert. Analyze the user's query and categorize it.

Return ONLY a valid JSON object in this exact format:
{{
  "category": "laytime|weather|distance|cp_clause|document_analysis|voyage_guidance|general",
  "confidence": 0.0-1.0,
  "suggestedActions": ["action1", "action2"],
  "requiresDocuments": true|false
}}

Categories:
- laytime: Time calculations, loading/discharging operations
- weather: Weather conditions, forecasts, weather routing
- distance: Port distances, voyage planning, fuel calculations
- cp_clause: Charter party clauses, contract terms
- document_analysis: Requests to analyze uploaded documents
- voyage_guidance: Voyage planning, port procedures, regulations
- general: Other maritime-related questions

Return ONLY the JSON object. No explanation, no markdown, no code fences.

User query:
{query}
"""

SUMMARY_TEMPLATE = """You are a maritime document expert. Summarize this {document_type} focusing on key maritime terms, dates, parties, and important clauses. Keep the summary concise but comprehensive.

Document:
{content}
"""

_TOOLS = (
    "• Laytime calculations (arrival and completion times)\n"
    "• Port distances, transit time and fuel estimates\n"
    "• Weather conditions and operational recommendations\n"
    "• Charter party clause analysis\n"
    "• The maritime knowledge base"
)

NOT_CONFIGURED_MESSAGE = (
    "The AI assistant is not configured, so free-text answers are unavailable. "
    "These built-in maritime tools still work:\n\n"
    f"{_TOOLS}\n\n"
    "Ask a specific calculation question, or configure an LLM API key for enhanced responses."
)

RATE_LIMITED_MESSAGE = (
    "I'm currently unable to access the AI service due to rate or quota limits. "
    "However, I can still help you with:\n\n"
    f"{_TOOLS}\n\n"
    "Please ask a specific calculation question and I'll answer it with the built-in tools."
)

GENERIC_ERROR_MESSAGE = (
    "I'm experiencing temporary connectivity issues with the AI service, but all maritime "
    "calculation tools are working. Please ask about laytime, distance, weather or "
    "charter party clauses directly."
)

EMPTY_RESPONSE_MESSAGE = (
    "I apologize, but I couldn't generate a response. Please try rephrasing your question."
)

TOPIC_HINTS: dict[str, str] = {
    "weather": (
        "For weather, ask e.g. \"What's the weather in Hamburg?\" to get wind, visibility "
        "and an operational recommendation."
    ),
    "distance": (
        "For distances, ask e.g. \"What's the distance from Singapore to Dubai?\" to get "
        "nautical miles, transit days and fuel."
    ),
    "laytime": (
        "For laytime, ask e.g. \"Calculate laytime: vessel arrived at 14:30 and completed "
        "loading at 08:15 the next day\"."
    ),
    "cp_clause": (
        "For clauses, ask e.g. \"Interpret this clause: 'Weather Working Days means days "
        "when weather permits normal cargo operations'\"."
    ),
    "voyage_guidance": (
        "For voyage planning, start with a distance question and check the weather at "
        "each port of call."
    ),
    "document_analysis": (
        "Ingested documents are added to the knowledge base and can be browsed there."
    ),
}


def not_configured_message(category: Optional[str] = None) -> str:
    hint = TOPIC_HINTS.get(category or "")
    return f"{NOT_CONFIGURED_MESSAGE}\n\n{hint}" if hint else NOT_CONFIGURED_MESSAGE
