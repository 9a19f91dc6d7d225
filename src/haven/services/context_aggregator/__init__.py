"""
Context Aggregator service for Haven.

Turns the bounded neighborhood of a focal node into deterministic text for
generation requests.
"""

from .aggregator import ContextAggregator
from .models import ContextBundle, ContextEntry, ContextCategory, CATEGORY_ORDER
from .projections import DEFAULT_PROJECTORS, Projector, project_node

__all__ = [
    "ContextAggregator",
    "ContextBundle",
    "ContextEntry",
    "ContextCategory",
    "CATEGORY_ORDER",
    "DEFAULT_PROJECTORS",
    "Projector",
    "project_node",
]
