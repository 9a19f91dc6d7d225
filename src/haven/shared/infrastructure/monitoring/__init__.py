"""
Monitoring infrastructure for Haven.
"""

from .logger import get_logger, setup_logging
from .metrics import MetricsCollector, get_metrics

__all__ = [
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
]
