"""
calculation_engine/weather.py
Weather Lookup

Returns one of a small set of canned condition profiles per call.  The
selector is an injectable random.Random so tests (and a future real
weather provider) can sit behind the same WeatherResult shape.  The
operational recommendation is always derived from wind and visibility,
never taken from the profile.
"""
import random
from dataclasses import dataclass
from typing import Optional

from config.settings import settings
from monitoring import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class WeatherProfile:
    condition: str
    temperature_c: float
    wind_speed_kt: float
    visibility_nm: float


@dataclass(frozen=True)
class WeatherResult:
    location: str
    condition: str
    temperature_c: float
    wind_speed_kt: float
    visibility_nm: float
    recommendation: str


PROFILES: tuple[WeatherProfile, ...] = (
    WeatherProfile("Clear",         18, 12, 10),
    WeatherProfile("Partly Cloudy", 16, 15, 8),
    WeatherProfile("Overcast",      14, 20, 6),
    WeatherProfile("Light Rain",    12, 18, 4),
    WeatherProfile("Gale",          11, 34, 5),
    WeatherProfile("Fog",           9,  6,  1),
)


def recommend(
    wind_speed_kt: float,
    visibility_nm: float,
    wind_limit_kt: float = 25.0,
    visibility_min_nm: float = 2.0,
) -> str:
    notes: list[str] = []
    if wind_speed_kt > wind_limit_kt:
        notes.append(
            f"Wind {wind_speed_kt:g} kt exceeds the {wind_limit_kt:g} kt limit: "
            "suspend container operations."
        )
    if visibility_nm < visibility_min_nm:
        notes.append(
            f"Visibility {visibility_nm:g} NM is below {visibility_min_nm:g} NM: "
            "delay pilot boarding."
        )
    if not notes:
        return "Conditions are within operating limits: cargo operations and pilotage can proceed normally."
    return " ".join(notes)


class WeatherService:

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.wind_limit_kt     = settings.container_wind_limit_kt
        self.visibility_min_nm = settings.pilot_visibility_min_nm

    def lookup(self, location: str) -> WeatherResult:
        location = location.strip()
        if not location:
            raise ValueError("Location is required")

        profile = self._rng.choice(PROFILES)
        result = WeatherResult(
            location=location,
            condition=profile.condition,
            temperature_c=profile.temperature_c,
            wind_speed_kt=profile.wind_speed_kt,
            visibility_nm=profile.visibility_nm,
            recommendation=recommend(
                profile.wind_speed_kt,
                profile.visibility_nm,
                self.wind_limit_kt,
                self.visibility_min_nm,
            ),
        )
        log.info("Weather looked up", location=location, condition=result.condition)
        return result

    def container_ops_suspended(self, result: WeatherResult) -> bool:
        return result.wind_speed_kt > self.wind_limit_kt

    def pilot_boarding_delayed(self, result: WeatherResult) -> bool:
        return result.visibility_nm < self.visibility_min_nm
