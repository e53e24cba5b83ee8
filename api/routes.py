"""
api/routes.py
Maritime tool endpoints under /api/maritime.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from api.models import (
    BunkerStop,
    ChatContext,
    ChatRequest,
    ChatResponse,
    ClassificationResponse,
    ClassifyRequest,
    ClauseRequest,
    ClauseResponse,
    ConfigureAIRequest,
    ConfigureAIResponse,
    DistanceRequest,
    DistanceResponse,
    LaytimeRequest,
    LaytimeResponse,
    RouteRequest,
    RouteResponse,
    WeatherRequest,
    WeatherResponse,
)
from api.services import Services, get_services
from calculation_engine.clauses import interpret_clause
from calculation_engine.distance import LatLng
from calculation_engine.laytime import calculate_laytime
from generation.providers import ProviderConfig
from monitoring import get_logger
from query_processor.models import FallbackContext, Turn

router = APIRouter()
log = get_logger(__name__)


def fallback_context(context: ChatContext) -> FallbackContext:
    """FallbackContext from the validated chat context sent by the client."""
    history = [Turn(role=t.role, content=t.content) for t in context.conversation_history]
    extras = {
        "documents":     context.documents,
        "selectedPorts": context.selected_ports,
        "currentRoute":  context.current_route,
        "vesselSpecs":   context.vessel_specs,
    }
    return FallbackContext(
        knowledge_base=list(context.knowledge_base),
        conversation_history=history,
        extras={key: value for key, value in extras.items() if value},
    )


# POST /weather

@router.post("/weather", response_model=WeatherResponse, summary="Weather conditions for a location")
async def weather(request: WeatherRequest, services: Services = Depends(get_services)) -> WeatherResponse:
    try:
        result = services.weather.lookup(request.location)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return WeatherResponse(
        location      =result.location,
        condition     =result.condition,
        temperature_c =result.temperature_c,
        wind_speed_kt =result.wind_speed_kt,
        visibility_nm =result.visibility_nm,
        recommendation=result.recommendation,
    )


# POST /laytime

@router.post("/laytime", response_model=LaytimeResponse, summary="Laytime between arrival and completion")
async def laytime(request: LaytimeRequest) -> LaytimeResponse:
    # InvalidIntervalError is mapped to 400 by the app-level handler
    result = calculate_laytime(request.arrival_time, request.completion_time, request.exclude_weekends)
    return LaytimeResponse(
        arrival_time     =result.arrival,
        completion_time  =result.completion,
        total_hours      =result.total_hours,
        total_days       =result.total_days,
        working_days     =result.working_days,
        weekends_excluded=result.weekends_excluded,
    )


# POST /distance

@router.post("/distance", response_model=DistanceResponse, summary="Distance between two named ports")
async def distance(request: DistanceRequest, services: Services = Depends(get_services)) -> DistanceResponse:
    try:
        result = services.distance.distance(request.from_port, request.to_port)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return DistanceResponse(
        from_port          =result.from_port,
        to_port            =result.to_port,
        distance_nm        =result.distance_nm,
        estimated_days     =result.estimated_days,
        fuel_consumption_mt=result.fuel_consumption_mt,
        source             =result.source,
        is_estimate        =result.is_estimate,
    )


# POST /analyze-clause, /cp-clause

@router.post("/analyze-clause", response_model=ClauseResponse, summary="Interpret a charter party clause")
@router.post("/cp-clause", response_model=ClauseResponse, include_in_schema=False)
async def analyze_clause(request: ClauseRequest) -> ClauseResponse:
    try:
        result = interpret_clause(request.clause_text)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ClauseResponse(
        clause_type    =result.clause_type,
        interpretation =result.interpretation,
        implications   =list(result.implications),
        recommendations=list(result.recommendations),
    )


# POST /route

@router.post("/route", response_model=RouteResponse, summary="Coordinate route with bunker stops")
async def route(request: RouteRequest, services: Services = Depends(get_services)) -> RouteResponse:
    src = LatLng(request.source_port.lat, request.source_port.lng)
    dst = LatLng(request.destination_port.lat, request.destination_port.lng)
    result = services.distance.route(src, dst)
    return RouteResponse(
        distance        =result.distance,
        estimated_days  =result.estimated_days,
        fuel_consumption=result.fuel_consumption,
        bunker_stops    =[BunkerStop(name=s.name, lat=s.lat, lng=s.lng) for s in result.bunker_stops],
        waypoints       =result.waypoints,
    )


# POST /ai-chat

@router.post("/ai-chat", response_model=ChatResponse, summary="Free-text maritime question")
async def ai_chat(request: ChatRequest, services: Services = Depends(get_services)) -> ChatResponse:
    context = fallback_context(request.context or ChatContext())
    # Provider call blocks, so run it in the thread pool
    response = await run_in_threadpool(services.fallback.generate, request.message, context)
    return ChatResponse(response=response)


# POST /classify

@router.post("/classify", response_model=ClassificationResponse, summary="Classify a maritime query")
async def classify(request: ClassifyRequest, services: Services = Depends(get_services)) -> ClassificationResponse:
    result = await run_in_threadpool(services.classifier.classify, request.message)
    return ClassificationResponse(**result.to_dict())


# POST /configure-ai

@router.post("/configure-ai", response_model=ConfigureAIResponse, summary="Configure the LLM provider")
async def configure_ai(request: ConfigureAIRequest, services: Services = Depends(get_services)) -> ConfigureAIResponse:
    try:
        config = ProviderConfig.create(request.provider, request.api_key, request.model)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        services.registry.replace(config)
    except Exception as exc:
        log.error("AI configuration failed", provider=config.provider, error_type=type(exc).__name__)
        raise HTTPException(status_code=500, detail="Failed to configure AI service")

    return ConfigureAIResponse(
        message ="AI service configured successfully",
        provider=config.provider,
        model   =config.model,
    )
