"""calculation_engine package"""
from .clauses import ClauseInterpretation, interpret_clause
from .distance import DistanceEngine, DistanceResult, LatLng, RouteResult, haversine_nm
from .laytime import InvalidIntervalError, LaytimeResult, calculate_laytime
from .weather import WeatherResult, WeatherService
__all__ = [
    "ClauseInterpretation","interpret_clause",
    "DistanceEngine","DistanceResult","LatLng","RouteResult","haversine_nm",
    "InvalidIntervalError","LaytimeResult","calculate_laytime",
    "WeatherResult","WeatherService",
]
