"""
tests/test_classifier.py
Query classifier: LLM path with a fake chat model, and the keyword fallback.
"""
import json
import sys
from pathlib import Path

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

sys.path.insert(0, str(Path(__file__).parent.parent))

from generation.providers import ProviderConfig, ProviderRegistry
from query_processor.classifier import QueryClassifier, keyword_classify
from query_processor.models import Category


class _RateLimitError(Exception):
    status_code = 429


def _failing_model(exc: Exception) -> FakeListChatModel:
    class _Failing(FakeListChatModel):
        def _call(self, *args, **kwargs):
            raise exc
    return _Failing(responses=["unused"])


def _llm_reply(**payload) -> str:
    return json.dumps(payload)


#Keyword fallback

class TestKeywordClassify:

    @pytest.mark.parametrize("text,category", [
        ("Calculate laytime for my vessel", Category.LAYTIME),
        ("Loading took two days", Category.LAYTIME),
        ("What's the weather in Hamburg?", Category.WEATHER),
        ("Any rain expected at Rotterdam?", Category.WEATHER),
        ("What's the distance from Rotterdam to Singapore?", Category.DISTANCE),
        ("Plan a voyage to Santos", Category.DISTANCE),
        ("Explain this charter party term", Category.CP_CLAUSE),
        ("Is this CP standard?", Category.CP_CLAUSE),
    ])
    def test_categories(self, text, category):
        result = keyword_classify(text)
        assert result.category == category
        assert result.confidence == 0.7
        assert result.source == "keywords"
        assert result.suggested_actions

    def test_general(self):
        result = keyword_classify("What does SOLAS require for lifeboat drills?")
        assert result.category == Category.GENERAL
        assert result.confidence == 0.5

    def test_first_rule_wins(self):
        assert keyword_classify("Weather delays during loading").category == Category.LAYTIME

    def test_match_is_at_word_start(self):
        # "rain" inside "training" is not weather
        assert keyword_classify("Crew training in the yard").category == Category.GENERAL

    @pytest.mark.parametrize("text", ["Offloading took two days", "Unloading delayed by rain", "Loading starts at noon"])
    def test_loading_variants_are_laytime(self, text):
        assert keyword_classify(text).category == Category.LAYTIME

    def test_cp_needs_word_boundary(self):
        assert keyword_classify("Review the cpu usage").category == Category.GENERAL


#Classifier without a provider

class TestClassifierUnconfigured:

    def test_uses_keywords(self):
        result = QueryClassifier(ProviderRegistry()).classify("Calculate laytime for my vessel")
        assert result.category == Category.LAYTIME
        assert result.source == "keywords"

    @pytest.mark.parametrize("text", ["", "   ", "?!", "x" * 5000])
    def test_never_raises(self, text):
        result = QueryClassifier().classify(text)
        assert result.category in Category
        assert 0.0 <= result.confidence <= 1.0


#Classifier with an LLM

class TestClassifierLLM:

    def test_llm_category_used(self):
        model = FakeListChatModel(responses=[_llm_reply(
            category="voyage_guidance",
            confidence=0.92,
            suggestedActions=["Check port regulations"],
            requiresDocuments=False,
        )])
        result = QueryClassifier(ProviderRegistry.with_model(model)).classify("What do I need before entering Santos?")
        assert result.category == Category.VOYAGE_GUIDANCE
        assert result.confidence == 0.92
        assert result.source == "llm"
        assert result.suggested_actions == ("Check port regulations",)

    def test_fenced_json_is_accepted(self):
        reply = "```json\n" + _llm_reply(category="weather", confidence=0.8) + "\n```"
        model = FakeListChatModel(responses=[reply])
        result = QueryClassifier(ProviderRegistry.with_model(model)).classify("Storm warning near Durban?")
        assert result.category == Category.WEATHER
        assert result.source == "llm"

    def test_confidence_is_clamped(self):
        model = FakeListChatModel(responses=[_llm_reply(category="laytime", confidence=7)])
        result = QueryClassifier(ProviderRegistry.with_model(model)).classify("laytime question")
        assert result.confidence == 1.0

    @pytest.mark.parametrize("confidence", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_confidence_uses_default(self, confidence):
        model = FakeListChatModel(responses=[_llm_reply(category="laytime", confidence=confidence)])
        result = QueryClassifier(ProviderRegistry.with_model(model)).classify("laytime question")
        assert result.category == Category.LAYTIME
        assert result.confidence == 0.7

    def test_unknown_label_falls_back_to_keywords(self):
        model = FakeListChatModel(responses=[_llm_reply(category="bunkering", confidence=0.9)])
        result = QueryClassifier(ProviderRegistry.with_model(model)).classify("What's the weather in Hamburg?")
        assert result.category == Category.WEATHER
        assert result.source == "keywords"

    def test_unparsable_output_falls_back_to_keywords(self):
        model = FakeListChatModel(responses=["I think this is about distances."])
        result = QueryClassifier(ProviderRegistry.with_model(model)).classify("Distance from Hamburg to Santos?")
        assert result.category == Category.DISTANCE
        assert result.source == "keywords"

    def test_provider_error_falls_back_to_keywords(self):
        model = _failing_model(_RateLimitError("Too many requests"))
        result = QueryClassifier(ProviderRegistry.with_model(model)).classify("Calculate laytime please")
        assert result.category == Category.LAYTIME
        assert result.source == "keywords"

    def test_reconfigured_registry_is_picked_up(self):
        replies = {
            "first":  _llm_reply(category="weather", confidence=0.9),
            "second": _llm_reply(category="cp_clause", confidence=0.9),
        }
        registry = ProviderRegistry(factory=lambda config: FakeListChatModel(responses=[replies[config.model]]))
        registry.replace(ProviderConfig(provider="openai", api_key="key", model="first"))
        classifier = QueryClassifier(registry)
        assert classifier.classify("anything").category == Category.WEATHER

        registry.replace(ProviderConfig(provider="openai", api_key="key", model="second"))
        assert classifier.classify("anything").category == Category.CP_CLAUSE
