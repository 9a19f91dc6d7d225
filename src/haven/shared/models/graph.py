"""
Graph data models for Haven.

These models represent the canvas content used across:
- graph_store: owns the canonical set of nodes and edges
- context_aggregator: projects neighborhoods into generation context
- processor_registry: dispatches behaviors by node type
- auto_link / batch_pipeline: write generated edges and nodes back
"""

import uuid
from enum import Enum
from typing import Dict, Any, Optional

from pydantic import Field, field_validator

from .base import BaseModel


class NodeType(str, Enum):
    """Node type tags as used by the canvas."""
    NOTE = "noteNode"
    DOC = "docNode"
    LINK = "linkNode"
    IMAGE = "imageNode"
    AUDIO = "audioNode"
    VIDEO = "videoNode"
    AI = "aiNode"
    COURSE = "courseNode"
    QUIZ = "quizNode"
    SCRIPT = "scriptNode"
    STORYBOARD = "storyboardNode"
    ANGLE = "angleNode"
    CAMPAIGN = "campaignNode"
    PRODUCTION = "productionNode"
    WORKFLOW = "workflowNode"


class EdgeStyle(str, Enum):
    """How an edge came to exist."""
    USER = "user"  # drawn by the user
    INFERRED = "inferred"  # created by auto-linking
    DERIVED = "derived"  # connects a generated node to its source


def new_node_id(type_tag: str) -> str:
    return f"{type_tag}-{uuid.uuid4().hex[:12]}"


def new_edge_id() -> str:
    return f"edge-{uuid.uuid4().hex[:12]}"


class Position(BaseModel):
    """Canvas coordinates of a node."""

    x: float = Field(default=0.0, description="Horizontal position")
    y: float = Field(default=0.0, description="Vertical position")

    def offset(self, dx: float, dy: float) -> "Position":
        """Return a new position shifted by (dx, dy)."""
        return Position(x=self.x + dx, y=self.y + dy)


class NodeData(BaseModel):
    """
    Content carried by a node.

    Type-specific fields (``result`` for analysis nodes, ``history`` for
    generated nodes, ...) are kept as extra attributes.
    """

    label: str = Field(default="", description="Human-readable label")
    content: Optional[str] = Field(default=None, description="Text content")
    url: Optional[str] = Field(default=None, description="Referenced URL or asset location")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")

    model_config = {
        "populate_by_name": True,
        "validate_assignment": True,
        "extra": "allow",
    }

    def extra_field(self, key: str, default: Any = None) -> Any:
        """Get a type-specific field that is not part of the common schema."""
        return (self.model_extra or {}).get(key, default)


class Node(BaseModel):
    """
    Represents a content unit placed on the canvas.

    ``type_tag`` decides which projections and processors apply.
    """

    id: str = Field(..., description="Unique identifier for the node")
    type_tag: NodeType = Field(..., description="Node type tag")
    position: Position = Field(default_factory=Position, description="Canvas position")
    data: NodeData = Field(default_factory=NodeData, description="Node content")

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        if not v or not v.strip():
            raise ValueError("Node id cannot be empty")
        return v

    @property
    def label(self) -> str:
        return self.data.label

    @classmethod
    def create(cls, type_tag: NodeType, label: str = "", content: Optional[str] = None,
               url: Optional[str] = None, position: Optional[Position] = None,
               metadata: Optional[Dict[str, Any]] = None, **extra: Any) -> "Node":
        """Build a node with a generated id."""
        tag = NodeType(type_tag).value
        return cls(
            id=new_node_id(tag),
            type_tag=tag,
            position=position or Position(),
            data=NodeData(label=label, content=content, url=url,
                          metadata=metadata or {}, **extra),
        )


class Edge(BaseModel):
    """
    A labeled, directed connection between two nodes.

    Direction is kept for display; traversal treats edges as undirected.
    """

    id: str = Field(default_factory=new_edge_id, description="Unique identifier for the edge")
    source: str = Field(..., description="ID of the source node")
    target: str = Field(..., description="ID of the target node")
    label: Optional[str] = Field(default=None, description="Relationship label")
    style: EdgeStyle = Field(default=EdgeStyle.USER, description="Origin of the edge")

    @field_validator('label')
    @classmethod
    def validate_label(cls, v):
        """Normalize blank labels to None."""
        if v is None:
            return v
        v = v.strip()
        return v or None

    def touches(self, node_id: str) -> bool:
        """Whether this edge is incident to the node."""
        return self.source == node_id or self.target == node_id

    def other_end(self, node_id: str) -> str:
        """The endpoint opposite to ``node_id``."""
        return self.target if self.source == node_id else self.source
