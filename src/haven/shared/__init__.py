"""
Shared components for Haven.

Contains the models, configuration, exception hierarchy and infrastructure
used by every service:

- Graph and staging data models with validation
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (generation gateway, key-value storage, monitoring)
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "TimestampMixin", "MetadataMixin", "utcnow", "ensure_utc",
    "Node", "NodeData", "NodeType", "Edge", "EdgeStyle", "Position",
    "new_edge_id", "new_node_id",
    "StagingItem", "ArchivedItem", "StagingItemType", "LifecycleState",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "HavenError", "ConfigurationError", "AIError", "StorageError",
    "GraphError", "InvalidReferenceError", "NodeNotFoundError",
    "EdgeNotFoundError", "GraphIntegrityError",
    "MalformedResponseError", "TransformationError",
    "LifecycleError", "StagingItemNotFoundError", "LifecycleTransitionError",
    "OrphanedArchiveError",

    # From infrastructure
    "GenerationGateway", "GenerationRequest", "GeminiGateway", "ResponseFormat",
    "get_generation_gateway",
    "KeyValueStore", "InMemoryKeyValueStore", "JsonFileKeyValueStore",
    "get_preference_store",
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics",
    "timed_operation",
]
