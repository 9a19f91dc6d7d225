"""
Shared fixtures for the Haven test suite.
"""

from typing import Dict, List, Optional

import pytest

from haven.shared import (
    get_metrics, get_settings, AIError,
    GenerationGateway, GenerationRequest, Node, NodeData, NodeType, Position,
)
from haven.services.graph_store import GraphStore


class FakeGateway(GenerationGateway):
    """
    Scripted gateway: replies are looked up by the request's source node id,
    falling back to ``default``. A reply that is an exception is raised.
    """

    def __init__(self, replies: Optional[Dict[str, object]] = None, default: object = "generated"):
        self.replies = replies or {}
        self.default = default
        self.requests: List[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        reply = self.replies.get(request.metadata.get('sourceNodeId'), self.default)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def called_node_ids(self) -> List[str]:
        return [r.metadata.get('sourceNodeId') for r in self.requests]


def make_node(node_id: str, type_tag: NodeType = NodeType.NOTE, label: str = "",
              content: Optional[str] = None, url: Optional[str] = None, **extra) -> Node:
    return Node(
        id=node_id,
        type_tag=type_tag,
        position=Position(x=10, y=20),
        data=NodeData(label=label, content=content, url=url, **extra),
    )


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    """Isolate settings and metrics between tests."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    get_settings.cache_clear()
    get_metrics().reset()
    yield
    get_settings.cache_clear()
    get_metrics().reset()


@pytest.fixture
def graph() -> GraphStore:
    return GraphStore()


@pytest.fixture
def note_graph() -> GraphStore:
    """Three notes n1 - n2 - n3 in a chain."""
    store = GraphStore()
    for index in (1, 2, 3):
        store.add_node(make_node(f"n{index}", label=f"Note {index}", content=f"content {index}"))
    store.connect("n1", "n2", label="relates")
    store.connect("n2", "n3", label="relates")
    return store


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def failing_gateway() -> FakeGateway:
    return FakeGateway(default=AIError("upstream unavailable"))
