"""
api/models.py
Pydantic request/response models.

JSON bodies are camelCase on the wire; fields are snake_case in Python and
either form is accepted on input.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Requests ──────────────────────────────────────────────────────────────────

class WeatherRequest(_CamelModel):
    location: str = Field(..., min_length=1, description="Port or sea area, e.g. 'Hamburg'")


class LaytimeRequest(_CamelModel):
    arrival_time:     datetime = Field(..., alias="arrivalTime")
    completion_time:  datetime = Field(..., alias="completionTime")
    exclude_weekends: bool     = Field(default=False, alias="excludeWeekends")


class DistanceRequest(_CamelModel):
    from_port: str = Field(..., alias="fromPort", min_length=1)
    to_port:   str = Field(..., alias="toPort", min_length=1)


class ClauseRequest(_CamelModel):
    clause_text: str = Field(..., alias="clauseText", min_length=1)


class Coordinate(_CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RouteRequest(_CamelModel):
    source_port:      Coordinate = Field(..., alias="sourcePort")
    destination_port: Coordinate = Field(..., alias="destinationPort")


class ChatTurn(_CamelModel):
    role:    str = "user"
    content: str = ""


class ChatContext(_CamelModel):
    conversation_history: list[ChatTurn]      = Field(default_factory=list, alias="conversationHistory")
    knowledge_base:       list[dict[str, Any]] = Field(default_factory=list, alias="knowledgeBase")
    documents:            list[dict[str, Any]] = Field(default_factory=list)
    selected_ports:       list[Any]            = Field(default_factory=list, alias="selectedPorts")
    current_route:        Optional[dict[str, Any]] = Field(default=None, alias="currentRoute")
    vessel_specs:         Optional[dict[str, Any]] = Field(default=None, alias="vesselSpecs")


class ChatRequest(_CamelModel):
    message: str         = Field(..., min_length=1)
    context: Optional[ChatContext] = None


class ConfigureAIRequest(_CamelModel):
    api_key:  str           = Field(..., alias="apiKey", min_length=1)
    provider: Optional[str] = Field(default=None, description="openai | gemini | groq")
    model:    Optional[str] = None


class ClassifyRequest(_CamelModel):
    message: str = Field(..., min_length=1)


class ConversationCreate(_CamelModel):
    title: str = Field(..., min_length=1)


class MessageCreate(_CamelModel):
    role:    Literal["user", "assistant"] = "user"
    content: str                          = Field(..., min_length=1)


class IngestRequest(_CamelModel):
    name:    str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


# ── Responses ─────────────────────────────────────────────────────────────────

class WeatherResponse(_CamelModel):
    location:       str
    condition:      str
    temperature_c:  float = Field(..., alias="temperatureC")
    wind_speed_kt:  float = Field(..., alias="windSpeedKt")
    visibility_nm:  float = Field(..., alias="visibilityNM")
    recommendation: str


class LaytimeResponse(_CamelModel):
    arrival_time:      datetime = Field(..., alias="arrivalTime")
    completion_time:   datetime = Field(..., alias="completionTime")
    total_hours:       float    = Field(..., alias="totalHours")
    total_days:        float    = Field(..., alias="totalDays")
    working_days:      float    = Field(..., alias="workingDays")
    weekends_excluded: bool     = Field(..., alias="weekendsExcluded")


class DistanceResponse(_CamelModel):
    from_port:           str   = Field(..., alias="fromPort")
    to_port:             str   = Field(..., alias="toPort")
    distance_nm:         float = Field(..., alias="distanceNM")
    estimated_days:      float = Field(..., alias="estimatedDays")
    fuel_consumption_mt: float = Field(..., alias="fuelConsumptionMT")
    source:              str
    is_estimate:         bool  = Field(..., alias="isEstimate")


class ClauseResponse(_CamelModel):
    clause_type:     str       = Field(..., alias="clauseType")
    interpretation:  str
    implications:    list[str]
    recommendations: list[str]


class BunkerStop(_CamelModel):
    name: str
    lat:  float
    lng:  float


class RouteResponse(_CamelModel):
    distance:         int
    estimated_days:   float            = Field(..., alias="estimatedDays")
    fuel_consumption: float            = Field(..., alias="fuelConsumption")
    bunker_stops:     list[BunkerStop] = Field(default_factory=list, alias="bunkerStops")
    waypoints:        list[dict[str, Any]] = Field(default_factory=list)


class ChatResponse(_CamelModel):
    response: str


class ConfigureAIResponse(_CamelModel):
    message:  str
    provider: str
    model:    str


class ClassificationResponse(_CamelModel):
    category:           str
    confidence:         float
    suggested_actions:  list[str] = Field(default_factory=list, alias="suggestedActions")
    requires_documents: bool      = Field(default=False, alias="requiresDocuments")
    source:             str


class ErrorResponse(BaseModel):
    success: bool          = False
    error:   str
    detail:  Optional[Any] = None
