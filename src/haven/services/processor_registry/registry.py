"""
Capability-based dispatch of processing behaviors.

Each entry pairs a pure predicate over static node fields with a behavior id.
Several entries may match one node; registration order decides which one is
active by default.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from ...shared import get_logger, ConfigurationError, Node, NodeType


NodePredicate = Callable[[Node], bool]

DEFAULT_BEHAVIOR_ID = "default"


@dataclass(frozen=True)
class ProcessorSpec:
    """A registered processing behavior."""

    behavior_id: str
    display_name: str
    predicate: NodePredicate

    def matches(self, node: Node) -> bool:
        return bool(self.predicate(node))


def handles_types(*type_tags: NodeType) -> NodePredicate:
    """Predicate matching nodes whose type tag is one of ``type_tags``."""
    accepted = frozenset(NodeType(tag).value for tag in type_tags)

    def predicate(node: Node) -> bool:
        return node.type_tag in accepted

    return predicate


class ProcessorRegistry:
    """
    Ordered table of processing behaviors.

    ``resolve`` returns every match in registration order; ``resolve_default``
    returns the first, or the fallback behavior when nothing is selected.
    """

    def __init__(self, fallback_behavior_id: str = DEFAULT_BEHAVIOR_ID,
                 fallback_display_name: str = "Default"):
        self.logger = get_logger(__name__)
        self._specs: List[ProcessorSpec] = []
        self.fallback = ProcessorSpec(
            behavior_id=fallback_behavior_id,
            display_name=fallback_display_name,
            predicate=lambda node: True,
        )

    def register(self, behavior_id: str, display_name: str, predicate: NodePredicate) -> ProcessorSpec:
        """
        Append a behavior to the table.

        Raises:
            ConfigurationError: if the id is already registered
        """
        if any(spec.behavior_id == behavior_id for spec in self._specs):
            raise ConfigurationError(f"Processor already registered: {behavior_id}")
        if behavior_id == self.fallback.behavior_id:
            raise ConfigurationError(f"Processor id reserved for the fallback: {behavior_id}")

        spec = ProcessorSpec(behavior_id=behavior_id, display_name=display_name, predicate=predicate)
        self._specs.append(spec)
        self.logger.debug(f"Registered processor {behavior_id}")
        return spec

    def register_for_types(self, behavior_id: str, display_name: str, *type_tags: NodeType) -> ProcessorSpec:
        """Register a behavior that applies to the given node types."""
        if not type_tags:
            raise ConfigurationError(f"Processor {behavior_id} needs at least one node type")
        return self.register(behavior_id, display_name, handles_types(*type_tags))

    def resolve_specs(self, node: Node) -> List[ProcessorSpec]:
        """All behaviors that apply to a node, in registration order."""
        return [spec for spec in self._specs if spec.matches(node)]

    def resolve(self, node: Node) -> List[str]:
        """Ids of all behaviors that apply to a node, in registration order."""
        return [spec.behavior_id for spec in self.resolve_specs(node)]

    def resolve_default(self, node: Optional[Node]) -> Optional[str]:
        """
        Behavior to activate when a node is selected.

        Returns the fallback when nothing is selected, the first match otherwise,
        and None when a selected node matches nothing.
        """
        if node is None:
            return self.fallback.behavior_id
        for spec in self._specs:
            if spec.matches(node):
                return spec.behavior_id
        return None

    def get(self, behavior_id: str) -> Optional[ProcessorSpec]:
        if behavior_id == self.fallback.behavior_id:
            return self.fallback
        return next((spec for spec in self._specs if spec.behavior_id == behavior_id), None)

    def __iter__(self) -> Iterator[ProcessorSpec]:
        return iter(list(self._specs))

    def __len__(self) -> int:
        return len(self._specs)
