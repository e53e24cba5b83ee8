"""monitoring package"""
from .logger import (
    timed,
    start_metrics_server,
    get_logger,
    CHAT_REQUESTS,
    CLASSIFICATIONS,
    PROVIDER_FAILURES,
    TOOL_LATENCY,
)

__all__ = [
    "timed", "start_metrics_server", "get_logger",
    "CHAT_REQUESTS", "CLASSIFICATIONS", "PROVIDER_FAILURES", "TOOL_LATENCY",
]
