"""
Shared infrastructure components for Haven.

Provides:
- Generation gateway boundary and the Gemini implementation
- Key-value storage for state kept outside the graph
- Logging and metrics collection
"""

from .ai.gateway import (
    GenerationGateway, GenerationRequest, GeminiGateway, ResponseFormat, get_generation_gateway
)
from .storage.key_value import (
    KeyValueStore, InMemoryKeyValueStore, JsonFileKeyValueStore, get_preference_store
)
from .monitoring.logger import get_logger, setup_logging
from .monitoring.metrics import MetricsCollector, get_metrics, timed_operation

__all__ = [
    # AI Services
    "GenerationGateway",
    "GenerationRequest",
    "GeminiGateway",
    "ResponseFormat",
    "get_generation_gateway",

    # Storage
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "get_preference_store",

    # Monitoring
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
    "timed_operation",
]
