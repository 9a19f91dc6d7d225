"""
Common exceptions for Haven.

Errors local to one node, edge or batch step are recoverable and are caught
by the operation that owns them. Only GraphIntegrityError signals a
programming error.
"""

from typing import Optional


class HavenError(Exception):
    """Base exception for all Haven errors."""
    pass


class ConfigurationError(HavenError):
    """Raised when there are configuration issues."""
    pass


class AIError(HavenError):
    """Raised when generation gateway calls fail."""
    pass


class StorageError(HavenError):
    """Raised when storage operations fail."""
    pass


# === Graph errors ===

class GraphError(HavenError):
    """Base class for graph store errors."""
    pass


class InvalidReferenceError(GraphError):
    """Raised when an edge references a node that does not exist."""

    def __init__(self, message: str, source: Optional[str] = None,
                 target: Optional[str] = None, missing: Optional[list] = None):
        super().__init__(message)
        self.source = source
        self.target = target
        self.missing = missing or []


class NodeNotFoundError(GraphError):
    """Raised when a node id is not present in the graph."""

    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class EdgeNotFoundError(GraphError):
    """Raised when an edge id is not present in the graph."""

    def __init__(self, edge_id: str):
        super().__init__(f"Edge not found: {edge_id}")
        self.edge_id = edge_id


class GraphIntegrityError(GraphError):
    """Raised on structural violations such as duplicate ids."""
    pass


# === Generation output errors ===

class MalformedResponseError(HavenError):
    """Raised when generation output cannot be parsed as expected."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.raw_response = raw_response


class TransformationError(HavenError):
    """Raised when a single node fails within a batch run."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id


# === Lifecycle errors ===

class LifecycleError(HavenError):
    """Base class for staging lifecycle errors."""
    pass


class StagingItemNotFoundError(LifecycleError):
    """Raised when a staging or archived item id is unknown."""
    pass


class LifecycleTransitionError(LifecycleError):
    """Raised when a transition is not allowed from the current state."""
    pass


class OrphanedArchiveError(LifecycleError):
    """Raised when an archived item's original staging item no longer exists."""

    def __init__(self, archived_id: str, original_staging_id: str):
        super().__init__(
            f"Archived item {archived_id} references missing staging item "
            f"{original_staging_id}"
        )
        self.archived_id = archived_id
        self.original_staging_id = original_staging_id
