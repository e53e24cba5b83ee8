"""
monitoring/logger.py
Structured logging for the assistant plus the Prometheus metrics that the
dispatcher, classifier and LLM fallbacks record.
"""
import functools
import logging
import time
from typing import Any, Callable

from config.settings import settings


def get_logger(name: str):
    """Return a structlog logger bound to the module name."""
    import structlog
    return structlog.get_logger(name)


def _configure_logging() -> None:
    import structlog
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")


_configure_logging()


# ── Prometheus metrics (registered on first use) ──────────────────────────────

class _LabelledMetric:
    """Creates the underlying Prometheus metric the first time a label set is asked for."""

    def __init__(self, factory, name: str, documentation: str, labelnames: tuple[str, ...], **kwargs):
        self._factory = factory
        self._name = name
        self._documentation = documentation
        self._labelnames = list(labelnames)
        self._kwargs = kwargs
        self._metric = None

    def labels(self, **labels: str):
        if self._metric is None:
            self._metric = self._factory(self._name, self._documentation, self._labelnames, **self._kwargs)
        return self._metric.labels(**labels)


def _counter(name: str, documentation: str, *labelnames: str) -> _LabelledMetric:
    from prometheus_client import Counter
    return _LabelledMetric(Counter, name, documentation, labelnames)


def _histogram(name: str, documentation: str, *labelnames: str, buckets: tuple[float, ...]) -> _LabelledMetric:
    from prometheus_client import Histogram
    return _LabelledMetric(Histogram, name, documentation, labelnames, buckets=buckets)


CHAT_REQUESTS     = _counter("maritime_chat_requests_total", "Chat messages handled", "category", "handler")
CLASSIFICATIONS   = _counter("maritime_classifications_total", "Query classifications", "source", "category")
PROVIDER_FAILURES = _counter("maritime_provider_failures_total", "LLM provider failures", "operation", "kind")
TOOL_LATENCY      = _histogram(
    "maritime_tool_duration_seconds", "Time spent in a maritime tool or LLM call", "tool",
    buckets=(0.01, 0.1, 0.5, 1.0, 2.5, 5.0, 20.0),
)


def start_metrics_server(port: int = 9090) -> None:
    log = get_logger("monitoring")
    try:
        from prometheus_client import start_http_server
        start_http_server(port)
        log.info("Prometheus metrics server started", port=port)
    except OSError as exc:
        log.warning("Could not start metrics server", port=port, error=str(exc))


def timed(label: str) -> Callable:
    """Record the wrapped call's duration under TOOL_LATENCY{tool=label}."""
    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                TOOL_LATENCY.labels(tool=label).observe(time.perf_counter() - started)
        return wrapper
    return decorator
