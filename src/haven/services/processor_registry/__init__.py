"""
Processor Registry service for Haven.

Decouples what a node is from what can process it: behaviors are registered
against predicates, and new node types or behaviors are added as configuration.
"""

from .registry import ProcessorRegistry, ProcessorSpec, NodePredicate, handles_types, DEFAULT_BEHAVIOR_ID
from .defaults import DEFAULT_PROCESSORS, build_default_registry

__all__ = [
    "ProcessorRegistry",
    "ProcessorSpec",
    "NodePredicate",
    "handles_types",
    "DEFAULT_BEHAVIOR_ID",
    "DEFAULT_PROCESSORS",
    "build_default_registry",
]
