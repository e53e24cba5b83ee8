"""
generation/providers.py
LLM provider configuration and the process-wide provider registry.

The registry never mutates a live chat model: reconfiguration builds a new
ProviderHandle and swaps the reference, so a request that already took a
snapshot keeps using the model it started with.
"""
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from config.settings import settings
from monitoring import get_logger

log = get_logger(__name__)

SUPPORTED_PROVIDERS = ("openai", "gemini", "groq")

# Failure kinds used to pick the user-facing degraded message
UNCONFIGURED = "unconfigured"
RATE_LIMITED = "rate_limited"
PROVIDER_ERROR = "error"

_RATE_LIMIT_CODES = {"insufficient_quota", "rate_limit_exceeded", "resource_exhausted"}
_RATE_LIMIT_PHRASES = ("rate limit", "rate_limit", "quota", "resource exhausted", "resource_exhausted", "too many requests")
_AUTH_PHRASES = ("api key not valid", "invalid api key", "incorrect api key", "invalid_api_key", "unauthorized")


@dataclass(frozen=True)
class ProviderConfig:
    provider: str
    api_key: str = field(repr=False)
    model: str = ""
    timeout_s: float = 20.0
    max_retries: int = 1
    temperature: float = 0.2
    max_tokens: int = 1000

    def __post_init__(self):
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unsupported LLM provider '{self.provider}'. "
                f"Choose one of: {', '.join(SUPPORTED_PROVIDERS)}"
            )
        if not self.api_key:
            raise ValueError("API key is required")

    @classmethod
    def create(cls, provider: str, api_key: str, model: Optional[str] = None) -> "ProviderConfig":
        provider = (provider or settings.llm_provider).lower()
        return cls(
            provider=provider,
            api_key=api_key.strip(),
            model=model or settings.model_for(provider),
            timeout_s=settings.llm_timeout_s,
            max_retries=settings.llm_max_retries,
            max_tokens=settings.llm_max_tokens,
        )

    @classmethod
    def from_settings(cls) -> Optional["ProviderConfig"]:
        """Config for the preferred provider, else the first one with a key."""
        order = [settings.llm_provider] + [p for p in SUPPORTED_PROVIDERS if p != settings.llm_provider]
        for provider in order:
            key = settings.api_key_for(provider)
            if key:
                return cls.create(provider, key)
        return None


def build_chat_model(config: ProviderConfig):
    """
    LangChain chat model for the configured provider.
    Every model carries an explicit timeout and bounded retries.
    """
    if config.provider == "openai":
        from langchain_openai import ChatOpenAI
        return ChatOpenAI(
            api_key=config.api_key,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout_s,
            max_retries=config.max_retries,
        )
    if config.provider == "gemini":
        from langchain_google_genai import ChatGoogleGenerativeAI
        return ChatGoogleGenerativeAI(
            google_api_key=config.api_key,
            model=config.model,
            temperature=config.temperature,
            max_output_tokens=config.max_tokens,
            timeout=config.timeout_s,
            max_retries=config.max_retries,
        )
    from langchain_groq import ChatGroq
    return ChatGroq(
        api_key=config.api_key,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout_s,
        max_retries=config.max_retries,
    )


@dataclass(frozen=True)
class ProviderHandle:
    config: ProviderConfig
    model: Any


class ProviderRegistry:
    """Holds the current ProviderHandle; replace-only, never mutated in place."""

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        factory: Callable[[ProviderConfig], Any] = build_chat_model,
    ) -> None:
        self._factory = factory
        self._lock    = threading.Lock()
        self._handle: Optional[ProviderHandle] = None
        if config is not None:
            self.replace(config)

    @classmethod
    def from_settings(cls) -> "ProviderRegistry":
        config = ProviderConfig.from_settings()
        if config is None:
            log.info("No LLM provider configured, generative features will degrade to static text")
            return cls()
        try:
            return cls(config)
        except Exception as exc:
            log.warning("LLM provider could not be initialised", provider=config.provider, error=str(exc))
            return cls()

    @classmethod
    def with_model(cls, model: Any, provider: str = "openai") -> "ProviderRegistry":
        """Registry around an already-built chat model (tests, custom wiring)."""
        registry = cls(factory=lambda _config: model)
        registry.replace(ProviderConfig(provider=provider, api_key="injected", model="injected"))
        return registry

    def current(self) -> Optional[ProviderHandle]:
        return self._handle

    @property
    def configured(self) -> bool:
        return self._handle is not None

    def replace(self, config: ProviderConfig) -> ProviderHandle:
        # Build outside the lock; only the reference swap is serialised
        handle = ProviderHandle(config=config, model=self._factory(config))
        with self._lock:
            self._handle = handle
        log.info("LLM provider configured", provider=config.provider, model=config.model)
        return handle

    def clear(self) -> None:
        with self._lock:
            self._handle = None


def classify_provider_error(exc: BaseException) -> str:
    """Map a provider exception to UNCONFIGURED, RATE_LIMITED or PROVIDER_ERROR."""
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    code = getattr(exc, "code", None)
    if status is None and isinstance(code, int):
        status = code
    code_text = str(code).lower() if isinstance(code, str) else ""
    message = str(exc).lower()

    if status == 429 or code_text in _RATE_LIMIT_CODES or any(p in message for p in _RATE_LIMIT_PHRASES):
        return RATE_LIMITED
    if status in (401, 403) or any(p in message for p in _AUTH_PHRASES):
        return UNCONFIGURED
    return PROVIDER_ERROR
