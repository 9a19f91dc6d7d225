"""
Writes generated output back into the graph as derived nodes.
"""

from ...shared import get_logger, Node, NodeData, EdgeStyle, new_node_id
from ..graph_store import GraphStore
from .models import TransformAction


# Derived nodes sit to the right of, and slightly below, their source.
DERIVED_OFFSET_X = 350.0
DERIVED_OFFSET_Y = 80.0


class DerivedNodeWriter:
    """Creates a node for a transformation output and links it to its source."""

    def __init__(self, graph: GraphStore):
        self.logger = get_logger(__name__)
        self.graph = graph

    def write(self, source: Node, output: str, action: TransformAction) -> Node:
        """
        Add the derived node and a ``derived`` edge from the source.

        The node is removed again if the edge cannot be added, so a failed
        write leaves no unconnected output behind.
        """
        metadata = {
            'sourceNodeId': source.id,
            'transformationType': action.name,
        }
        if action.platform:
            metadata['platform'] = action.platform

        label = f"{action.derived_edge_label}: {source.data.label}" if source.data.label else action.derived_edge_label
        derived = Node(
            id=new_node_id(action.derived_node_type),
            type_tag=action.derived_node_type,
            position=source.position.offset(DERIVED_OFFSET_X, DERIVED_OFFSET_Y),
            data=NodeData(label=label, content=output, metadata=metadata, history=[]),
        )

        self.graph.add_node(derived)
        try:
            self.graph.connect(source.id, derived.id, label=action.derived_edge_label, style=EdgeStyle.DERIVED)
        except Exception:
            self.graph.remove_node(derived.id)
            raise

        self.logger.debug(f"Derived node {derived.id} from {source.id} via {action.name}")
        return derived
