"""
In-memory graph store for canvas nodes and edges.

Every other service reads and mutates the graph through this class. Mutations
are synchronous and applied under a lock, so a reader never sees an edge whose
endpoint has been removed.
"""

import threading
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Union

import networkx as nx
from pydantic import ValidationError

from ...shared import (
    get_logger,
    Node, NodeData, Edge, EdgeStyle, Position, KeyValueStore,
    InvalidReferenceError, NodeNotFoundError, EdgeNotFoundError, GraphIntegrityError,
)


DEFAULT_SNAPSHOT_KEY = "haven-graph"

_ANY_LABEL = object()


class MutationKind(str, Enum):
    """Kinds of committed graph mutations."""
    NODE_ADDED = "node_added"
    NODE_UPDATED = "node_updated"
    NODE_REMOVED = "node_removed"
    EDGE_ADDED = "edge_added"
    EDGE_REMOVED = "edge_removed"


class GraphMutation(NamedTuple):
    """A committed mutation, delivered to subscribers."""
    kind: MutationKind
    node_id: Optional[str] = None
    edge_id: Optional[str] = None


class Neighbor(NamedTuple):
    """An incident edge and the node at its other end."""
    edge: Edge
    node: Node


MutationListener = Callable[[GraphMutation], None]


class GraphStore:
    """
    Canonical set of nodes and edges for one canvas.

    Adjacency is kept per node as a list of incident edge ids in insertion
    order, which makes neighbor iteration (and everything built on it)
    deterministic.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()

        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        self._incident: Dict[str, List[str]] = {}  # node_id -> edge ids
        self._listeners: List[MutationListener] = []

    # Node operations
    def add_node(self, node: Node) -> Node:
        """
        Add a node.

        Raises:
            GraphIntegrityError: if the id is already present
        """
        with self._lock:
            if node.id in self._nodes:
                raise GraphIntegrityError(f"Duplicate node id: {node.id}")
            self._nodes[node.id] = node
            self._incident[node.id] = []

        self.logger.debug(f"Added node {node.id} ({node.type_tag})")
        self._emit(GraphMutation(MutationKind.NODE_ADDED, node_id=node.id))
        return node

    def update_node(self,
                    node_id: str,
                    data: Union[NodeData, Dict[str, Any], None] = None,
                    position: Union[Position, Dict[str, Any], None] = None) -> Node:
        """
        Replace a node's data and/or position.

        ``data`` replaces the stored data wholesale; callers merge fields
        themselves before writing. Plain dicts are validated into
        NodeData/Position.

        Raises:
            NodeNotFoundError: if the id is unknown
            GraphIntegrityError: if the data or position does not validate
        """
        with self._lock:
            current = self._nodes.get(node_id)
            if current is None:
                raise NodeNotFoundError(node_id)

            changes: Dict[str, Any] = {}
            try:
                if data is not None:
                    changes['data'] = NodeData.model_validate(data)
                if position is not None:
                    changes['position'] = Position.model_validate(position)
            except ValidationError as e:
                raise GraphIntegrityError(f"Invalid update for node {node_id}: {e}") from e
            if not changes:
                return current

            updated = current.model_copy(update=changes)
            self._nodes[node_id] = updated

        self._emit(GraphMutation(MutationKind.NODE_UPDATED, node_id=node_id))
        return updated

    def remove_node(self, node_id: str) -> List[Edge]:
        """
        Remove a node and every edge incident to it.

        Returns:
            The edges removed by the cascade
        """
        with self._lock:
            if node_id not in self._nodes:
                raise NodeNotFoundError(node_id)

            removed_edges = [self._edges[edge_id] for edge_id in self._incident[node_id]]
            for edge in removed_edges:
                self._detach_edge(edge)
            del self._incident[node_id]
            del self._nodes[node_id]

        self.logger.debug(f"Removed node {node_id} and {len(removed_edges)} incident edges")
        for edge in removed_edges:
            self._emit(GraphMutation(MutationKind.EDGE_REMOVED, edge_id=edge.id))
        self._emit(GraphMutation(MutationKind.NODE_REMOVED, node_id=node_id))
        return removed_edges

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by its ID."""
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def nodes(self) -> List[Node]:
        """All nodes in insertion order."""
        with self._lock:
            return list(self._nodes.values())

    # Edge operations
    def add_edge(self, edge: Edge) -> Edge:
        """
        Add an edge between two existing nodes.

        Raises:
            InvalidReferenceError: if either endpoint is absent
            GraphIntegrityError: if the id is already present
        """
        with self._lock:
            missing = [n for n in (edge.source, edge.target) if n not in self._nodes]
            if missing:
                raise InvalidReferenceError(
                    f"Edge {edge.id} references unknown node(s): {', '.join(missing)}",
                    source=edge.source,
                    target=edge.target,
                    missing=missing,
                )
            if edge.id in self._edges:
                raise GraphIntegrityError(f"Duplicate edge id: {edge.id}")

            self._edges[edge.id] = edge
            self._incident[edge.source].append(edge.id)
            if edge.target != edge.source:
                self._incident[edge.target].append(edge.id)

        self.logger.debug(f"Added edge {edge.id}: {edge.source} -> {edge.target}")
        self._emit(GraphMutation(MutationKind.EDGE_ADDED, edge_id=edge.id))
        return edge

    def connect(self,
                source: str,
                target: str,
                label: Optional[str] = None,
                style: EdgeStyle = EdgeStyle.USER) -> Edge:
        """Create and add an edge with a generated id."""
        return self.add_edge(Edge(source=source, target=target, label=label, style=style))

    def remove_edge(self, edge_id: str) -> Edge:
        """Remove a single edge."""
        with self._lock:
            edge = self._edges.get(edge_id)
            if edge is None:
                raise EdgeNotFoundError(edge_id)
            self._detach_edge(edge)

        self._emit(GraphMutation(MutationKind.EDGE_REMOVED, edge_id=edge_id))
        return edge

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by its ID."""
        return self._edges.get(edge_id)

    def edges(self) -> List[Edge]:
        """All edges in insertion order."""
        with self._lock:
            return list(self._edges.values())

    def find_edges(self, source: str, target: str, label: Any = _ANY_LABEL) -> List[Edge]:
        """
        Edges from source to target.

        When ``label`` is given, only edges with exactly that label match;
        ``None`` matches unlabelled edges only.
        """
        with self._lock:
            return [
                self._edges[edge_id]
                for edge_id in self._incident.get(source, [])
                if self._edges[edge_id].source == source
                and self._edges[edge_id].target == target
                and (label is _ANY_LABEL or self._edges[edge_id].label == label)
            ]

    def neighbors(self, node_id: str) -> Iterator[Neighbor]:
        """
        Iterate incident edges and the nodes at their other end.

        Direction is ignored. Order follows edge insertion. A self-loop yields
        the node itself once.
        """
        with self._lock:
            if node_id not in self._nodes:
                raise NodeNotFoundError(node_id)
            pairs = [
                Neighbor(self._edges[edge_id], self._nodes[self._edges[edge_id].other_end(node_id)])
                for edge_id in self._incident[node_id]
            ]
        return iter(pairs)

    def degree(self, node_id: str) -> int:
        with self._lock:
            if node_id not in self._nodes:
                raise NodeNotFoundError(node_id)
            return len(self._incident[node_id])

    def _detach_edge(self, edge: Edge) -> None:
        """Remove an edge from all indexes. Caller holds the lock."""
        del self._edges[edge.id]
        for endpoint in {edge.source, edge.target}:
            incident = self._incident.get(endpoint)
            if incident is not None and edge.id in incident:
                incident.remove(edge.id)

    # Subscriptions
    def subscribe(self, listener: MutationListener) -> Callable[[], None]:
        """
        Register a listener called after each committed mutation.

        Returns:
            A callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, mutation: GraphMutation) -> None:
        for listener in list(self._listeners):
            try:
                listener(mutation)
            except Exception as e:
                self.logger.error(f"Graph listener failed on {mutation.kind}: {e}")

    # Snapshots
    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain-data copy of the graph, suitable for JSON."""
        with self._lock:
            return {
                'nodes': [node.model_dump(mode='json') for node in self._nodes.values()],
                'edges': [edge.model_dump(mode='json') for edge in self._edges.values()],
            }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "GraphStore":
        """
        Rebuild a store from ``snapshot()`` output.

        Edges whose endpoints are missing are dropped with a warning rather than
        stored dangling.
        """
        store = cls()
        for raw_node in data.get('nodes', []):
            store.add_node(Node.model_validate(raw_node))

        dropped = 0
        for raw_edge in data.get('edges', []):
            edge = Edge.model_validate(raw_edge)
            try:
                store.add_edge(edge)
            except InvalidReferenceError as e:
                dropped += 1
                store.logger.warning(f"Skipping dangling edge from snapshot: {e}")

        store.logger.info(
            f"Loaded graph snapshot: {len(store)} nodes, {len(store.edges())} edges"
            + (f", {dropped} dangling edges dropped" if dropped else "")
        )
        return store

    def save(self, kv_store: KeyValueStore, key: str = DEFAULT_SNAPSHOT_KEY) -> None:
        """Write a snapshot to a key-value store."""
        kv_store.set(key, self.snapshot())

    @classmethod
    def load(cls, kv_store: KeyValueStore, key: str = DEFAULT_SNAPSHOT_KEY) -> "GraphStore":
        """Load a snapshot from a key-value store, or an empty graph if absent."""
        data = kv_store.get(key)
        if not data:
            return cls()
        return cls.from_snapshot(data)

    def to_networkx(self) -> nx.MultiDiGraph:
        """Export as a networkx multigraph for analysis or visualization."""
        graph = nx.MultiDiGraph()
        with self._lock:
            for node in self._nodes.values():
                graph.add_node(node.id, type=node.type_tag, label=node.data.label)
            for edge in self._edges.values():
                graph.add_edge(edge.source, edge.target, key=edge.id,
                               label=edge.label, style=edge.style)
        return graph

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes
