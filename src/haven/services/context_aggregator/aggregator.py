"""
Bounded-traversal context aggregation.

Builds the text a generation request sees from the neighborhood of a focal
node. Traversal is breadth-first over undirected adjacency with a visited set,
so cycles are harmless and every node is projected at most once.
"""

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from ...shared import get_logger, get_settings, timed_operation, NodeNotFoundError
from ..graph_store import GraphStore
from .models import ContextBundle, ContextCategory, ContextEntry
from .projections import DEFAULT_PROJECTORS, Projector, project_node, selection_text


class ContextAggregator:
    """
    Assembles context bundles from a GraphStore.

    Projectors can be overridden per node type; unknown types use the
    generated-artifact projection.
    """

    def __init__(self,
                 graph: GraphStore,
                 projectors: Optional[Dict[str, Projector]] = None,
                 default_max_depth: Optional[int] = None):
        self.logger = get_logger(__name__)
        self.graph = graph
        self.projectors: Dict[str, Projector] = dict(DEFAULT_PROJECTORS)
        if projectors:
            self.projectors.update(projectors)
        self.default_max_depth = (
            get_settings().context_max_depth if default_max_depth is None else default_max_depth
        )

    @timed_operation('context_build_duration')
    def build_context(self,
                      focal_node_id: str,
                      max_depth: Optional[int] = None,
                      include_focal: bool = False) -> ContextBundle:
        """
        Build a context bundle around a focal node.

        Args:
            focal_node_id: Node the traversal starts from
            max_depth: Hop limit (defaults to settings, normally 2)
            include_focal: Prepend the focal node's own projection

        Returns:
            ContextBundle; empty when the focal node has no neighbors

        Raises:
            NodeNotFoundError: if the focal node does not exist
        """
        depth_limit = self.default_max_depth if max_depth is None else max_depth
        if depth_limit < 0:
            raise ValueError("max_depth must be >= 0")

        focal = self.graph.get_node(focal_node_id)
        if focal is None:
            raise NodeNotFoundError(focal_node_id)

        entries: List[ContextEntry] = []
        if include_focal:
            projection = project_node(focal, self.projectors)
            if projection is not None:
                entries.append(ContextEntry(
                    node_id=focal.id,
                    category=ContextCategory.FOCAL,
                    text=f"### Selected Node Content\n{projection[1]}",
                    depth=0,
                ))

        visited: Set[str] = {focal_node_id}
        order: List[str] = [focal_node_id]
        queue: Deque[Tuple[str, int]] = deque([(focal_node_id, 0)])

        while queue:
            current_id, depth = queue.popleft()
            if depth >= depth_limit:
                continue

            for neighbor in self.graph.neighbors(current_id):
                next_node = neighbor.node
                if next_node.id in visited:
                    continue
                visited.add(next_node.id)
                order.append(next_node.id)

                projection = project_node(next_node, self.projectors)
                if projection is not None:
                    category, text = projection
                    entries.append(ContextEntry(
                        node_id=next_node.id,
                        category=category,
                        text=text,
                        depth=depth + 1,
                    ))

                queue.append((next_node.id, depth + 1))

        bundle = ContextBundle(
            focal_node_id=focal_node_id,
            max_depth=depth_limit,
            entries=entries,
            visited_node_ids=order,
        )
        self.logger.debug(
            f"Built context for {focal_node_id}: visited {len(order)} nodes, "
            f"{len(entries)} entries"
        )
        return bundle

    def build_selection_bundle(self, node_ids: Iterable[str]) -> str:
        """
        Serialize an explicit selection, tagging each block with its node id.

        Used for auto-linking so the generator can name the nodes it connects.
        Unknown ids are skipped.
        """
        blocks = []
        for node_id in node_ids:
            node = self.graph.get_node(node_id)
            if node is None:
                self.logger.warning(f"Skipping unknown node in selection: {node_id}")
                continue
            blocks.append(f"[ID: {node.id}] [Type: {node.type_tag}] {selection_text(node)}")
        return "\n---\n".join(blocks)
