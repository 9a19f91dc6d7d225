"""
Graph Store service for Haven.

Owns the canonical nodes and edges of a canvas. Edge endpoints are validated on
insert and node removal cascades to incident edges.
"""

from .store import GraphStore, GraphMutation, MutationKind, Neighbor, DEFAULT_SNAPSHOT_KEY

__all__ = [
    "GraphStore",
    "GraphMutation",
    "MutationKind",
    "Neighbor",
    "DEFAULT_SNAPSHOT_KEY",
]
