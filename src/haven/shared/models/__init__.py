"""
Shared data models for Haven.
"""

from .base import BaseModel, TimestampMixin, MetadataMixin, utcnow, ensure_utc
from .graph import Node, NodeData, NodeType, Edge, EdgeStyle, Position, new_edge_id, new_node_id
from .staging import StagingItem, ArchivedItem, StagingItemType, LifecycleState

__all__ = [
    # Graph models
    "Node",
    "NodeData",
    "NodeType",
    "Edge",
    "EdgeStyle",
    "Position",
    "new_edge_id",
    "new_node_id",
    # Staging models
    "StagingItem",
    "ArchivedItem",
    "StagingItemType",
    "LifecycleState",
    # Base models
    "BaseModel",
    "TimestampMixin",
    "MetadataMixin",
    "utcnow",
    "ensure_utc",
]
