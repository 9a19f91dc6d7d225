"""
Haven - knowledge-graph orchestration engine for a content canvas.
"""

__version__ = "0.1.0"
__author__ = "Haven Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.models.graph import Node, Edge, NodeType, EdgeStyle
from .shared.exceptions import HavenError, ConfigurationError

__all__ = [
    "get_settings",
    "Node",
    "Edge",
    "NodeType",
    "EdgeStyle",
    "HavenError",
    "ConfigurationError",
]
