"""
tests/test_extraction.py
Parameter extraction from free-text chat messages.
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from query_processor.extraction import (
    extract_location,
    extract_port_pair,
    extract_quoted_clause,
    extract_time_pair,
    has_calculation_intent,
)
from query_processor.models import ClockTime


class TestCalculationIntent:

    @pytest.mark.parametrize("text", [
        "Calculate laytime for my vessel",
        "Can you compute the time used?",
        "How long did loading take?",
        "Vessel arrived at 14:30 and completed loading at 08:15 the next day",
    ])
    def test_intent_detected(self, text):
        assert has_calculation_intent(text)

    def test_explanation_request_has_no_intent(self):
        assert not has_calculation_intent("What is laytime?")


class TestTimePair:

    def test_keyword_then_time(self):
        result = extract_time_pair("Vessel arrived at 14:30 and completed loading at 08:15 the next day")
        assert result.ok
        assert result.value.arrival == ClockTime(14, 30)
        assert result.value.completion == ClockTime(8, 15)
        assert result.value.next_day

    def test_time_then_keyword(self):
        result = extract_time_pair("Calculate laytime: 06:00 arrival, 18:45 completion")
        assert result.ok
        assert result.value.arrival == ClockTime(6, 0)
        assert result.value.completion == ClockTime(18, 45)
        assert not result.value.next_day

    def test_finished_and_tendered(self):
        result = extract_time_pair("NOR tendered 09:10, discharge finished at 21:40 tomorrow")
        assert result.ok
        assert result.value.arrival == ClockTime(9, 10)
        assert result.value.completion == ClockTime(21, 40)
        assert result.value.next_day

    def test_missing_completion(self):
        result = extract_time_pair("Calculate laytime, vessel arrived at 14:30")
        assert not result.ok
        assert "completion" in result.reason

    def test_missing_arrival(self):
        result = extract_time_pair("Calculate laytime for my vessel")
        assert not result.ok
        assert result.value is None

    def test_out_of_range_time_rejected(self):
        assert not extract_time_pair("arrived at 25:30 and completed at 08:15").ok


class TestPortPair:

    def test_from_to(self):
        result = extract_port_pair("What's the distance from Rotterdam to Singapore?")
        assert result.ok
        assert (result.value.from_port, result.value.to_port) == ("Rotterdam", "Singapore")

    def test_between_and(self):
        result = extract_port_pair("distance between Hamburg and Santos")
        assert (result.value.from_port, result.value.to_port) == ("Hamburg", "Santos")

    def test_multi_word_names(self):
        result = extract_port_pair("How far is it from New York to Jebel Ali by sea?")
        assert (result.value.from_port, result.value.to_port) == ("New York", "Jebel Ali")

    def test_single_port_is_a_miss(self):
        result = extract_port_pair("How far is Singapore?")
        assert not result.ok


class TestLocation:

    @pytest.mark.parametrize("text,expected", [
        ("What's the weather in Hamburg?", "Hamburg"),
        ("Weather conditions at Rotterdam", "Rotterdam"),
        ("Is it windy off Cape Town today?", "Cape Town"),
        ("Singapore weather please", "Singapore"),
    ])
    def test_location_found(self, text, expected):
        result = extract_location(text)
        assert result.ok
        assert result.value == expected

    def test_no_location(self):
        assert not extract_location("What's the weather like?").ok


class TestQuotedClause:

    def test_single_quotes(self):
        text = ("Interpret this clause: 'Weather Working Days means days when weather "
                "permits normal cargo operations'")
        result = extract_quoted_clause(text)
        assert result.ok
        assert result.value.startswith("Weather Working Days")

    def test_double_quotes(self):
        result = extract_quoted_clause('What does "Demurrage at USD 12,000 per day" mean?')
        assert result.value == "Demurrage at USD 12,000 per day"

    def test_after_label(self):
        result = extract_quoted_clause("Explain this clause: Dispatch at half demurrage rate")
        assert result.value == "Dispatch at half demurrage rate"

    def test_apostrophe_is_not_a_quote(self):
        assert not extract_quoted_clause("What's a charter party clause?").ok
