"""
calculation_engine/formatting.py
Markdown reply text for each deterministic tool, plus the clarifying prompts
returned when parameters could not be extracted from a chat message.
"""
from calculation_engine.clauses import ClauseInterpretation
from calculation_engine.distance import COVERED_REGIONS, DistanceResult
from calculation_engine.laytime import LaytimeResult
from calculation_engine.weather import WeatherResult

LAYTIME_PROMPT = (
    "I can help calculate laytime, but I need specific times. Please provide:\n\n"
    "• **Arrival time** (when vessel tendered Notice of Readiness)\n"
    "• **Completion time** (when cargo operations finished)\n\n"
    "Example: \"Vessel arrived at 14:30 and completed loading at 08:15 the next day\"\n\n"
    "Once you provide the times, I'll calculate the exact laytime in hours and days, "
    "plus provide guidance on demurrage and charter party implications."
)

DISTANCE_PROMPT = (
    "I can calculate distances between ports. Please specify both ports clearly:\n\n"
    "Example: \"What's the distance from Singapore to Dubai?\"\n\n"
    "I'll provide:\n"
    "• Nautical mile distance\n"
    "• Estimated voyage time\n"
    "• Fuel consumption estimates\n"
    "• Route recommendations"
)

WEATHER_PROMPT = (
    "I can provide weather conditions for maritime operations. Please specify a location:\n\n"
    "Example: \"What's the weather in Hamburg?\" or \"Weather conditions at Rotterdam\"\n\n"
    "I'll provide current conditions, operational impacts, and safety recommendations "
    "for cargo operations."
)

CLAUSE_PROMPT = (
    "I can interpret charter party clauses and provide legal implications. "
    "Please provide the specific clause text:\n\n"
    "Example: \"Interpret this clause: 'Weather Working Days means days when weather "
    "permits normal cargo operations'\"\n\n"
    "I'll analyze:\n"
    "• Clause type and meaning\n"
    "• Legal implications for both parties\n"
    "• Practical recommendations\n"
    "• Industry best practices"
)


def covered_ports_message(from_port: str, to_port: str) -> str:
    regions = "\n".join(f"• **{region}:** {', '.join(ports)}" for region, ports in COVERED_REGIONS.items())
    return (
        f"I can calculate distances between major ports. The ports \"{from_port}\" and "
        f"\"{to_port}\" might not be in my database.\n\n"
        f"I have distances for major ports including:\n{regions}\n\n"
        "Please specify major ports, or use the distance tool for manual calculations."
    )


def format_laytime(result: LaytimeResult) -> str:
    day_offset = (result.completion.date() - result.arrival.date()).days
    suffix = f" (+{day_offset} day{'s' if day_offset > 1 else ''})" if day_offset else ""
    return (
        "**Laytime Calculation Results:**\n\n"
        f"• **Arrival Time:** {result.arrival:%H:%M}\n"
        f"• **Completion Time:** {result.completion:%H:%M}{suffix}\n"
        f"• **Total Laytime:** {result.total_hours:g} hours ({result.total_days:g} days)\n"
        f"• **Working Days:** {result.working_days:g} days (excluding any weather delays)\n\n"
        "**Maritime Industry Notes:**\n"
        "• This calculation assumes continuous operations without weather interruptions\n"
        "• For Weather Working Days (WWD), deduct time when cargo operations were suspended due to weather\n"
        "• Demurrage applies if this exceeds your charter party's allowed laytime\n"
        "• Document all delays with proper notices for accurate settlement"
    )


def format_distance(result: DistanceResult, speed_knots: float) -> str:
    basis = "Port-to-port sea route distance" if result.source == "table" else "Great circle distance calculation"
    return (
        f"**Distance Calculation: {result.from_port} ↔ {result.to_port}**\n\n"
        f"• **Distance:** {result.distance_nm:g} nautical miles\n"
        f"• **Estimated Transit Time:** {result.estimated_days:g} days (at {speed_knots:g} knots average)\n"
        f"• **Estimated Fuel Consumption:** {result.fuel_consumption_mt:g} MT\n\n"
        "**Voyage Planning Notes:**\n"
        f"• {basis}\n"
        "• Add 10-15% for weather routing and port approach\n"
        "• Consider seasonal weather patterns for route optimization\n"
        "• Budget additional time for port congestion and pilotage"
    )


def format_weather(
    result: WeatherResult,
    container_ops_suspended: bool,
    pilot_boarding_delayed: bool,
    wind_limit_kt: float,
    visibility_min_nm: float,
) -> str:
    bulk = "Weather hold advised" if "rain" in result.condition.lower() else "Proceeding normally"
    return (
        f"**Weather Conditions - {result.location}**\n\n"
        f"• **Current Condition:** {result.condition}\n"
        f"• **Temperature:** {result.temperature_c:g}°C\n"
        f"• **Wind Speed:** {result.wind_speed_kt:g} knots\n"
        f"• **Visibility:** {result.visibility_nm:g} nautical miles\n\n"
        f"**Operational Recommendation:**\n{result.recommendation}\n\n"
        "**Maritime Operations Impact:**\n"
        f"• Container operations: {'Suspended' if container_ops_suspended else 'Normal'} "
        f"(limit: {wind_limit_kt:g} knots)\n"
        f"• Bulk cargo loading: {bulk}\n"
        f"• Pilot boarding: {'Delayed' if pilot_boarding_delayed else 'Normal'} "
        f"(minimum: {visibility_min_nm:g} NM visibility)"
    )


def format_clause(result: ClauseInterpretation) -> str:
    implications    = "\n".join(f"• {item}" for item in result.implications)
    recommendations = "\n".join(f"• {item}" for item in result.recommendations)
    return (
        "**Charter Party Clause Analysis**\n\n"
        f"**Clause Type:** {result.clause_type}\n\n"
        f"**Interpretation:**\n{result.interpretation}\n\n"
        f"**Key Implications:**\n{implications}\n\n"
        f"**Recommendations:**\n{recommendations}\n\n"
        "**Legal Notes:**\n"
        "• Ensure compliance with local port customs and regulations\n"
        "• Document all relevant circumstances for potential disputes\n"
        "• Consider seeking legal advice for complex interpretations"
    )
