"""
tests/test_calculators.py
Unit tests for the deterministic maritime tools: laytime, distance,
weather and charter party clause interpretation.
Run with: pytest tests/ -v
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from calculation_engine.clauses import (
    DEMURRAGE_DISPATCH,
    GENERAL_CLAUSE,
    WEATHER_WORKING_DAYS,
    interpret_clause,
)
from calculation_engine.distance import (
    GIBRALTAR,
    SUEZ_CANAL,
    DistanceEngine,
    LatLng,
    haversine_nm,
)
from calculation_engine.laytime import InvalidIntervalError, calculate_laytime
from calculation_engine.weather import PROFILES, WeatherService, recommend

UTC = timezone.utc

NEW_YORK  = LatLng(40.7128, -74.0060)
SINGAPORE = LatLng(1.3521, 103.8198)
ROTTERDAM = LatLng(51.9244, 4.4777)
HAMBURG   = LatLng(53.5511, 9.9937)


#Fixtures

@pytest.fixture
def engine() -> DistanceEngine:
    return DistanceEngine()


def _service_returning(condition: str) -> WeatherService:
    """WeatherService whose random source always picks the named profile."""
    rng = MagicMock()
    rng.choice.side_effect = lambda profiles: next(p for p in profiles if p.condition == condition)
    return WeatherService(rng=rng)


#Laytime

class TestLaytime:

    def test_overnight_loading(self):
        """14:30 → 08:15 next day = 17.75 h = 0.74 days"""
        arrival = datetime(2024, 11, 14, 14, 30, tzinfo=UTC)
        result = calculate_laytime(arrival, arrival + timedelta(hours=17, minutes=45))
        assert result.total_hours == 17.75
        assert result.total_days == 0.74
        assert result.working_days == 0.74
        assert not result.weekends_excluded

    def test_zero_interval(self):
        ts = datetime(2024, 11, 14, 9, 0, tzinfo=UTC)
        result = calculate_laytime(ts, ts)
        assert result.total_hours == 0
        assert result.total_days == 0

    def test_completion_before_arrival_raises(self):
        arrival = datetime(2024, 11, 14, 9, 0, tzinfo=UTC)
        with pytest.raises(InvalidIntervalError):
            calculate_laytime(arrival, arrival - timedelta(minutes=1))

    def test_invalid_interval_is_value_error(self):
        assert issubclass(InvalidIntervalError, ValueError)

    def test_naive_timestamps_treated_as_utc(self):
        result = calculate_laytime(datetime(2024, 11, 14, 0, 0), datetime(2024, 11, 15, 12, 0))
        assert result.arrival.tzinfo is not None
        assert result.total_hours == 36

    def test_exclude_weekends_friday_to_monday(self):
        """Fri 18:00 → Mon 06:00 is 60 h, of which 48 h fall on Sat/Sun."""
        arrival    = datetime(2024, 11, 15, 18, 0, tzinfo=UTC)   # Friday
        completion = datetime(2024, 11, 18, 6, 0, tzinfo=UTC)    # Monday
        result = calculate_laytime(arrival, completion, exclude_weekends=True)
        assert result.total_hours == 60
        assert result.working_days == 0.5
        assert result.weekends_excluded

    def test_exclude_weekends_on_weekdays_only(self):
        arrival = datetime(2024, 11, 11, 8, 0, tzinfo=UTC)       # Monday
        result = calculate_laytime(arrival, arrival + timedelta(days=2), exclude_weekends=True)
        assert result.working_days == result.total_days == 2

    def test_exclude_weekends_full_week(self):
        arrival = datetime(2024, 11, 11, 0, 0, tzinfo=UTC)       # Monday
        result = calculate_laytime(arrival, arrival + timedelta(days=7), exclude_weekends=True)
        assert result.total_days == 7
        assert result.working_days == 5


#Distance

class TestDistance:

    def test_table_distance(self, engine):
        result = engine.distance("Rotterdam", "Singapore")
        assert result.distance_nm == 8277
        assert result.source == "table"
        assert not result.is_estimate

    def test_table_is_bidirectional(self, engine):
        assert engine.distance("Singapore", "Rotterdam").distance_nm == 8277

    def test_derived_values(self, engine):
        result = engine.distance("Rotterdam", "Singapore")
        assert result.estimated_days == round(8277 / (14 * 24), 2)
        assert result.fuel_consumption_mt == round(8277 * 0.05, 2)

    def test_aliases_normalise(self, engine):
        assert engine.distance("Port of Rotterdam", "Antwerpen").distance_nm == 68
        assert engine.distance("RTM", "Felixstowe").distance_nm == 187
        assert engine.distance("jebel ali", "Singapore").distance_nm == 3277

    def test_display_names(self, engine):
        result = engine.distance("new york", "rotterdam")
        assert result.from_port == "New York"
        assert result.to_port == "Rotterdam"

    def test_great_circle_for_known_ports_without_table_entry(self, engine):
        result = engine.distance("New York", "Singapore")
        assert result.source == "great_circle"
        assert not result.is_estimate
        assert result.distance_nm == round(haversine_nm(NEW_YORK, SINGAPORE), 1)

    def test_unknown_port_returns_flagged_default(self, engine):
        result = engine.distance("Atlantis", "Rotterdam")
        assert result.distance_nm == 5000
        assert result.source == "default"
        assert result.is_estimate
        assert result.estimated_days == 14.88
        assert result.fuel_consumption_mt == 250.0

    def test_same_port_raises(self, engine):
        with pytest.raises(ValueError):
            engine.distance("Hamburg", "hamburg")

    def test_coordinate_estimate_is_symmetric(self, engine):
        there = engine.between(ROTTERDAM, HAMBURG)
        back  = engine.between(HAMBURG, ROTTERDAM)
        assert abs(there.distance_nm - back.distance_nm) < 1e-9
        assert there.fuel_consumption_mt == back.fuel_consumption_mt

    def test_short_names_do_not_match_inside_words(self):
        assert DistanceEngine.normalise_port("any port") is None


class TestHaversine:

    def test_identical_points(self):
        assert haversine_nm(ROTTERDAM, ROTTERDAM) == 0

    def test_quarter_meridian(self):
        d = haversine_nm(LatLng(0, 0), LatLng(90, 0))
        assert abs(d - 3440.065 * 3.141592653589793 / 2) < 0.01

    def test_symmetric(self):
        assert abs(haversine_nm(NEW_YORK, SINGAPORE) - haversine_nm(SINGAPORE, NEW_YORK)) < 1e-9

    def test_rotterdam_singapore_great_circle(self):
        """Great circle is far shorter than the 8,277 NM sea route via Suez."""
        d = haversine_nm(ROTTERDAM, SINGAPORE)
        assert 5600 < d < 5750

    def test_invalid_latitude_rejected(self):
        with pytest.raises(ValueError):
            LatLng(91, 0)


class TestRoute:

    def test_westbound_origin_to_far_east_gets_gibraltar_then_suez(self, engine):
        result = engine.route(NEW_YORK, SINGAPORE)
        assert result.distance > 6000
        assert result.bunker_stops == [GIBRALTAR, SUEZ_CANAL]
        assert [w.get("name") for w in result.waypoints[1:-1]] == ["Gibraltar", "Suez Canal"]

    def test_reverse_direction_gets_suez_then_gibraltar(self, engine):
        result = engine.route(SINGAPORE, NEW_YORK)
        assert result.bunker_stops == [SUEZ_CANAL, GIBRALTAR]

    def test_short_route_has_no_stops(self, engine):
        result = engine.route(ROTTERDAM, HAMBURG)
        assert result.bunker_stops == []
        assert len(result.waypoints) == 2
        assert isinstance(result.distance, int)

    def test_route_estimates(self, engine):
        result = engine.route(ROTTERDAM, HAMBURG)
        nm = haversine_nm(ROTTERDAM, HAMBURG)
        assert result.distance == round(nm)
        assert result.estimated_days == round(nm / 336, 2)
        assert result.fuel_consumption == round(nm * 0.05, 2)


#Weather

class TestWeather:

    def test_normal_conditions(self):
        text = recommend(12, 10)
        assert "within operating limits" in text

    def test_high_wind_suspends_container_ops(self):
        assert "suspend container operations" in recommend(30, 10)

    def test_low_visibility_delays_pilot(self):
        assert "delay pilot boarding" in recommend(10, 1)

    def test_both_limits(self):
        text = recommend(30, 1)
        assert "suspend container operations" in text
        assert "delay pilot boarding" in text

    def test_limits_are_strict(self):
        assert "within operating limits" in recommend(25, 2)

    def test_lookup_gale(self):
        service = _service_returning("Gale")
        result = service.lookup("Hamburg")
        assert result.location == "Hamburg"
        assert result.wind_speed_kt > 25
        assert service.container_ops_suspended(result)
        assert not service.pilot_boarding_delayed(result)
        assert "suspend container operations" in result.recommendation

    def test_lookup_fog(self):
        service = _service_returning("Fog")
        result = service.lookup("Rotterdam")
        assert service.pilot_boarding_delayed(result)
        assert "delay pilot boarding" in result.recommendation

    def test_every_profile_is_physical(self):
        for profile in PROFILES:
            assert profile.wind_speed_kt >= 0
            assert profile.visibility_nm >= 0

    def test_empty_location_raises(self):
        with pytest.raises(ValueError):
            WeatherService().lookup("   ")


#Charter party clauses

class TestClauses:

    def test_weather_working_days(self):
        result = interpret_clause("Weather Working Days means days when weather permits normal cargo operations")
        assert result == WEATHER_WORKING_DAYS
        assert result.clause_type == "Weather Working Days"

    def test_wwd_abbreviation(self):
        assert interpret_clause("Laytime: 5 WWD SHEX").clause_type == "Weather Working Days"

    def test_demurrage(self):
        assert interpret_clause("Demurrage at USD 12,000 per day pro rata") == DEMURRAGE_DISPATCH

    def test_dispatch(self):
        assert interpret_clause("Dispatch at half demurrage rate").clause_type == "Demurrage/Dispatch"

    def test_first_rule_wins(self):
        result = interpret_clause("Demurrage accrues only on weather working days")
        assert result == WEATHER_WORKING_DAYS

    def test_general_clause(self):
        assert interpret_clause("Freight payable within 5 banking days") == GENERAL_CLAUSE

    def test_empty_clause_raises(self):
        with pytest.raises(ValueError):
            interpret_clause("  ")
