"""
tests/test_generation.py
Provider registry, provider error classification, generative fallback and
document summarizer.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

sys.path.insert(0, str(Path(__file__).parent.parent))

from generation.fallback import GenerativeFallback
from generation.prompts import (
    EMPTY_RESPONSE_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    RATE_LIMITED_MESSAGE,
    SYSTEM_PROMPT,
)
from generation.providers import (
    PROVIDER_ERROR,
    RATE_LIMITED,
    UNCONFIGURED,
    ProviderConfig,
    ProviderRegistry,
    classify_provider_error,
)
from generation.summarizer import DocumentSummarizer, extractive_summary
from query_processor.models import FallbackContext, Turn


class _HTTPError(Exception):
    def __init__(self, status_code: int, message: str = "error"):
        super().__init__(message)
        self.status_code = status_code


def _model_returning(content) -> MagicMock:
    model = MagicMock()
    model.invoke.return_value = AIMessage(content=content)
    return model


def _model_raising(exc: Exception) -> MagicMock:
    model = MagicMock()
    model.invoke.side_effect = exc
    return model


#Provider config and registry

class TestProviderConfig:

    def test_unsupported_provider_rejected(self):
        with pytest.raises(ValueError):
            ProviderConfig(provider="anthropic", api_key="k", model="m")

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            ProviderConfig(provider="openai", api_key="", model="m")

    def test_create_fills_defaults(self):
        config = ProviderConfig.create("GEMINI", "  key  ")
        assert config.provider == "gemini"
        assert config.api_key == "key"
        assert config.model
        assert config.timeout_s > 0
        assert config.max_retries == 1

    def test_key_not_in_repr(self):
        assert "secret-key" not in repr(ProviderConfig(provider="groq", api_key="secret-key", model="m"))


class TestProviderRegistry:

    def test_starts_unconfigured(self):
        registry = ProviderRegistry()
        assert registry.current() is None
        assert not registry.configured

    def test_replace_yields_new_handle(self):
        factory = MagicMock(side_effect=lambda config: object())
        registry = ProviderRegistry(factory=factory)
        first = registry.replace(ProviderConfig(provider="openai", api_key="a", model="m1"))
        second = registry.replace(ProviderConfig(provider="groq", api_key="b", model="m2"))
        assert first is not second
        assert registry.current() is second
        assert first.config.model == "m1"
        assert factory.call_count == 2

    def test_snapshot_survives_replace(self):
        registry = ProviderRegistry.with_model(_model_returning("old"))
        snapshot = registry.current()
        registry.replace(ProviderConfig(provider="openai", api_key="k", model="new"))
        assert snapshot.config.model == "injected"
        assert registry.current() is not snapshot

    def test_failed_build_keeps_previous_handle(self):
        registry = ProviderRegistry.with_model(_model_returning("ok"))
        before = registry.current()
        registry._factory = MagicMock(side_effect=RuntimeError("bad config"))
        with pytest.raises(RuntimeError):
            registry.replace(ProviderConfig(provider="openai", api_key="k", model="m"))
        assert registry.current() is before

    def test_clear(self):
        registry = ProviderRegistry.with_model(_model_returning("ok"))
        registry.clear()
        assert registry.current() is None


class TestClassifyProviderError:

    def test_http_429(self):
        assert classify_provider_error(_HTTPError(429)) == RATE_LIMITED

    def test_quota_message(self):
        exc = Exception("429 Resource has been exhausted (e.g. check quota).")
        assert classify_provider_error(exc) == RATE_LIMITED

    def test_insufficient_quota_code(self):
        exc = Exception("billing")
        exc.code = "insufficient_quota"
        assert classify_provider_error(exc) == RATE_LIMITED

    def test_status_on_response(self):
        exc = Exception("request failed")
        exc.response = MagicMock(status_code=429)
        assert classify_provider_error(exc) == RATE_LIMITED

    def test_auth_failure(self):
        assert classify_provider_error(_HTTPError(401, "Incorrect API key provided")) == UNCONFIGURED

    def test_anything_else(self):
        assert classify_provider_error(ConnectionError("connection reset")) == PROVIDER_ERROR
        assert classify_provider_error(_HTTPError(500)) == PROVIDER_ERROR


#Generative fallback

class TestGenerativeFallback:

    def test_unconfigured_returns_static_text(self):
        reply = GenerativeFallback(ProviderRegistry()).generate("What is SOLAS?")
        assert reply == NOT_CONFIGURED_MESSAGE

    def test_unconfigured_adds_category_hint(self):
        reply = GenerativeFallback(ProviderRegistry()).generate("laytime?", category="laytime")
        assert reply.startswith(NOT_CONFIGURED_MESSAGE)
        assert "arrived at 14:30" in reply

    def test_rate_limit_returns_rate_limit_text(self):
        fallback = GenerativeFallback(ProviderRegistry.with_model(_model_raising(_HTTPError(429))))
        assert fallback.generate("What is SOLAS?") == RATE_LIMITED_MESSAGE

    def test_auth_error_returns_not_configured_text(self):
        fallback = GenerativeFallback(ProviderRegistry.with_model(_model_raising(_HTTPError(401, "invalid api key"))))
        assert fallback.generate("What is SOLAS?") == NOT_CONFIGURED_MESSAGE

    def test_other_error_returns_generic_text(self):
        fallback = GenerativeFallback(ProviderRegistry.with_model(_model_raising(TimeoutError("timed out"))))
        assert fallback.generate("What is SOLAS?") == GENERIC_ERROR_MESSAGE

    def test_success(self):
        fallback = GenerativeFallback(ProviderRegistry.with_model(_model_returning("SOLAS is a treaty.")))
        assert fallback.generate("What is SOLAS?") == "SOLAS is a treaty."

    def test_list_content_is_joined(self):
        model = _model_returning([{"type": "text", "text": "Part one. "}, {"type": "text", "text": "Part two."}])
        fallback = GenerativeFallback(ProviderRegistry.with_model(model))
        assert fallback.generate("question") == "Part one. Part two."

    def test_empty_reply(self):
        fallback = GenerativeFallback(ProviderRegistry.with_model(_model_returning("   ")))
        assert fallback.generate("question") == EMPTY_RESPONSE_MESSAGE

    def test_works_with_langchain_fake_model(self):
        model = FakeListChatModel(responses=["Ballast water must be exchanged offshore."])
        fallback = GenerativeFallback(ProviderRegistry.with_model(model))
        assert "Ballast" in fallback.generate("ballast rules?")

    @pytest.mark.parametrize("context", [
        FallbackContext(extras={"selectedPorts": 5}),
        FallbackContext(extras={"documents": "recap.pdf", "currentRoute": ["not", "a", "dict"]}),
        FallbackContext(knowledge_base=5, conversation_history=None),
    ])
    def test_malformed_context_is_ignored(self, context):
        model = FakeListChatModel(responses=["Answer without context."])
        fallback = GenerativeFallback(ProviderRegistry.with_model(model))
        assert fallback.generate("hi", context) == "Answer without context."

    def test_ports_given_as_objects(self):
        context = FallbackContext(extras={"selectedPorts": [{"name": "Hamburg"}, "Santos"]})
        assert "Selected ports: Hamburg, Santos" in GenerativeFallback.context_text(context)

    def test_messages_layout(self):
        history = [Turn("user" if i % 2 == 0 else "assistant", f"turn {i}") for i in range(10)]
        context = FallbackContext(
            knowledge_base=[{"title": "Laytime Calculation Basics", "content": "Laytime is the time allowed."}],
            conversation_history=history,
            extras={"selectedPorts": ["Hamburg", "Santos"]},
        )
        messages = GenerativeFallback(ProviderRegistry()).build_messages("What next?", context)

        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == SYSTEM_PROMPT
        # system + last 6 turns + final question
        assert len(messages) == 8
        assert [m.content for m in messages[1:7]] == [f"turn {i}" for i in range(4, 10)]
        assert isinstance(messages[1], HumanMessage)
        assert isinstance(messages[2], AIMessage)

        final = messages[-1]
        assert isinstance(final, HumanMessage)
        assert "Laytime Calculation Basics" in final.content
        assert "Hamburg, Santos" in final.content
        assert final.content.endswith("Question: What next?")

    def test_plain_query_without_context(self):
        messages = GenerativeFallback(ProviderRegistry()).build_messages("What next?", FallbackContext())
        assert len(messages) == 2
        assert messages[-1].content == "What next?"


#Summarizer

class TestSummarizer:

    DOCUMENT = (
        "This charter party is made between Owners and Charterers. "
        "The vessel shall load a full cargo of grain at Santos. "
        "Laytime for loading shall be 5 weather working days. "
        "Demurrage is payable at USD 12,000 per day."
    )

    def test_extractive_summary_takes_three_sentences(self):
        summary = extractive_summary(self.DOCUMENT)
        assert summary.startswith("This charter party is made")
        assert "Laytime for loading" in summary
        assert "Demurrage" not in summary

    def test_extractive_summary_of_nothing(self):
        assert extractive_summary("Short.") == "Document processed successfully."

    def test_without_provider_uses_extractive_summary(self):
        assert DocumentSummarizer(ProviderRegistry()).summarize(self.DOCUMENT) == extractive_summary(self.DOCUMENT)

    def test_llm_summary(self):
        model = FakeListChatModel(responses=["Voyage charter for grain from Santos."])
        summary = DocumentSummarizer(ProviderRegistry.with_model(model)).summarize(self.DOCUMENT, "charter_party")
        assert summary == "Voyage charter for grain from Santos."

    def test_follows_registry_replacement(self):
        registry = ProviderRegistry(factory=lambda config: FakeListChatModel(responses=[f"Summary by {config.model}."]))
        registry.replace(ProviderConfig(provider="openai", api_key="key", model="first"))
        summarizer = DocumentSummarizer(registry)
        assert summarizer.summarize(self.DOCUMENT) == "Summary by first."

        registry.replace(ProviderConfig(provider="groq", api_key="key", model="second"))
        assert summarizer.summarize(self.DOCUMENT) == "Summary by second."
