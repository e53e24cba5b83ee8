"""
calculation_engine/distance.py
Geospatial Distance Engine

Lookup priority for a named port pair:
  1. Port-pair sea-route table (bidirectional)
  2. Great-circle distance between known port coordinates
  3. Fixed default distance, flagged is_estimate=True / source="default"

Derived values are simple: transit days at a fixed service
speed and fuel at a fixed rate per nautical mile.  Spherical earth only,
not for navigation.
"""
import math
from dataclasses import dataclass, field
from typing import Optional

from config.settings import settings
from monitoring import get_logger, timed

log = get_logger(__name__)


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude {self.lat} out of range [-90, 90]")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude {self.lng} out of range [-180, 180]")


@dataclass(frozen=True)
class NamedPoint:
    name: str
    lat: float
    lng: float


# ── Port reference data ───────────────────────────────────────────────────────

PORT_COORDINATES: dict[str, LatLng] = {
    "hamburg":    LatLng(53.5511, 9.9937),
    "rotterdam":  LatLng(51.9244, 4.4777),
    "antwerp":    LatLng(51.2194, 4.4025),
    "felixstowe": LatLng(51.9617, 1.3513),
    "new_york":   LatLng(40.7128, -74.0060),
    "santos":     LatLng(-23.9608, -46.3336),
    "singapore":  LatLng(1.3521, 103.8198),
    "shanghai":   LatLng(31.2304, 121.4737),
    "tokyo":      LatLng(35.6762, 139.6503),
    "mumbai":     LatLng(18.9480, 72.9508),
    "dubai":      LatLng(25.2048, 55.2708),
}

PORT_DISPLAY_NAMES: dict[str, str] = {
    "new_york": "New York",
}

PORT_ALIASES: dict[str, str] = {
    "hamburg": "hamburg", "hh": "hamburg",
    "rotterdam": "rotterdam", "rtm": "rotterdam",
    "antwerp": "antwerp", "antwerpen": "antwerp", "anvers": "antwerp",
    "felixstowe": "felixstowe",
    "new york": "new_york", "newyork": "new_york", "new_york": "new_york", "nyc": "new_york", "ny": "new_york",
    "santos": "santos",
    "singapore": "singapore", "sin": "singapore", "sg": "singapore",
    "shanghai": "shanghai", "sha": "shanghai",
    "tokyo": "tokyo",
    "mumbai": "mumbai", "bombay": "mumbai", "nhava sheva": "mumbai",
    "dubai": "dubai", "jebel ali": "dubai",
}

# Sea-route distances in NM; keys are unordered pairs
PORT_DISTANCES: dict[frozenset, float] = {
    frozenset(("hamburg", "rotterdam")):     237,
    frozenset(("hamburg", "antwerp")):       288,
    frozenset(("hamburg", "felixstowe")):    391,
    frozenset(("hamburg", "santos")):        5967,
    frozenset(("hamburg", "singapore")):     8345,
    frozenset(("rotterdam", "antwerp")):     68,
    frozenset(("rotterdam", "felixstowe")):  187,
    frozenset(("rotterdam", "new_york")):    3654,
    frozenset(("rotterdam", "singapore")):   8277,
    frozenset(("singapore", "shanghai")):    1436,
    frozenset(("singapore", "tokyo")):       2885,
    frozenset(("singapore", "mumbai")):      2889,
    frozenset(("singapore", "dubai")):       3277,
}

COVERED_REGIONS: dict[str, list[str]] = {
    "Europe":      ["Hamburg", "Rotterdam", "Antwerp", "Felixstowe"],
    "Asia":        ["Singapore", "Shanghai", "Tokyo", "Mumbai"],
    "Americas":    ["New York", "Santos"],
    "Middle East": ["Dubai"],
}

GIBRALTAR  = NamedPoint("Gibraltar", 36.1408, -5.3536)
SUEZ_CANAL = NamedPoint("Suez Canal", 30.0444, 32.2357)


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class VoyageEstimate:
    distance_nm: float
    estimated_days: float
    fuel_consumption_mt: float


@dataclass(frozen=True)
class DistanceResult:
    from_port: str
    to_port: str
    distance_nm: float
    estimated_days: float
    fuel_consumption_mt: float
    source: str = "table"        # "table" | "great_circle" | "default"
    is_estimate: bool = False


@dataclass(frozen=True)
class RouteResult:
    distance: int
    estimated_days: float
    fuel_consumption: float
    bunker_stops: list[NamedPoint] = field(default_factory=list)
    waypoints: list[dict] = field(default_factory=list)


def haversine_nm(a: LatLng, b: LatLng, radius_nm: float = 3440.065) -> float:
    """Great-circle distance on a sphere of the given radius."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    return radius_nm * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


class DistanceEngine:
    """
    Port-to-port and point-to-point distance with transit and fuel estimates.
    Stateless; constants come from settings unless overridden.
    """

    def __init__(
        self,
        speed_knots: Optional[float] = None,
        fuel_rate_mt_per_nm: Optional[float] = None,
        default_distance_nm: Optional[float] = None,
    ) -> None:
        self.speed_knots         = speed_knots or settings.service_speed_knots
        self.fuel_rate_mt_per_nm = fuel_rate_mt_per_nm if fuel_rate_mt_per_nm is not None else settings.fuel_rate_mt_per_nm
        self.default_distance_nm = default_distance_nm or settings.default_distance_nm
        self.radius_nm           = settings.earth_radius_nm
        self.bunker_threshold_nm = settings.bunker_threshold_nm

    # ── Public ────────────────────────────────────────────────────────────────

    @staticmethod
    def normalise_port(raw: str) -> Optional[str]:
        """Map a free-text port name to its table key, or None if unknown."""
        if not raw:
            return None
        key = " ".join(raw.lower().replace("_", " ").split())
        if key.startswith("port of "):
            key = key[len("port of "):]
        if key in PORT_ALIASES:
            return PORT_ALIASES[key]
        for alias, canonical in PORT_ALIASES.items():
            if len(alias) > 3 and alias in key or len(key) > 3 and key in alias:
                return canonical
        return None

    @staticmethod
    def display_name(key: Optional[str], raw: str) -> str:
        if key is None:
            return raw.strip().title()
        return PORT_DISPLAY_NAMES.get(key, key.replace("_", " ").title())

    @timed("distance")
    def distance(self, from_port: str, to_port: str) -> DistanceResult:
        """
        Distance between two named ports.

        Unknown ports do not raise: the configured default distance is returned
        with is_estimate=True so callers can treat it as low confidence.
        """
        src, dst = self.normalise_port(from_port), self.normalise_port(to_port)
        if src is not None and src == dst:
            raise ValueError(f"Origin and destination are the same port: {from_port}")

        source = "table"
        nm = PORT_DISTANCES.get(frozenset((src, dst))) if src and dst else None
        if nm is None and src in PORT_COORDINATES and dst in PORT_COORDINATES:
            nm = round(haversine_nm(PORT_COORDINATES[src], PORT_COORDINATES[dst], self.radius_nm), 1)
            source = "great_circle"
        if nm is None:
            nm = self.default_distance_nm
            source = "default"
            log.warning("Unknown port pair, using default distance", from_port=from_port, to_port=to_port, nm=nm)

        estimate = self._estimate(nm)
        return DistanceResult(
            from_port=self.display_name(src, from_port),
            to_port=self.display_name(dst, to_port),
            distance_nm=estimate.distance_nm,
            estimated_days=estimate.estimated_days,
            fuel_consumption_mt=estimate.fuel_consumption_mt,
            source=source,
            is_estimate=source == "default",
        )

    def between(self, a: LatLng, b: LatLng) -> VoyageEstimate:
        """Great-circle estimate between two coordinates."""
        return self._estimate(haversine_nm(a, b, self.radius_nm))

    @timed("route")
    def route(self, source: LatLng, destination: LatLng) -> RouteResult:
        """
        Coordinate route with illustrative bunker stops for long passages:
        Atlantic side to east of 50°E goes via Gibraltar then Suez, and the
        reverse direction via Suez then Gibraltar.
        """
        nm = haversine_nm(source, destination, self.radius_nm)
        estimate = self._estimate(nm)

        stops: list[NamedPoint] = []
        if nm > self.bunker_threshold_nm:
            if source.lng < 0 and destination.lng > 50:
                stops = [GIBRALTAR, SUEZ_CANAL]
            elif source.lng > 50 and destination.lng < 0:
                stops = [SUEZ_CANAL, GIBRALTAR]

        waypoints = [
            {"lat": source.lat, "lng": source.lng},
            *({"name": s.name, "lat": s.lat, "lng": s.lng} for s in stops),
            {"lat": destination.lat, "lng": destination.lng},
        ]
        return RouteResult(
            distance=round(nm),
            estimated_days=estimate.estimated_days,
            fuel_consumption=estimate.fuel_consumption_mt,
            bunker_stops=stops,
            waypoints=waypoints,
        )

    # ── Private ───────────────────────────────────────────────────────────────

    def _estimate(self, nm: float) -> VoyageEstimate:
        return VoyageEstimate(
            distance_nm=nm,
            estimated_days=round(nm / (self.speed_knots * 24), 2),
            fuel_consumption_mt=round(nm * self.fuel_rate_mt_per_nm, 2),
        )
