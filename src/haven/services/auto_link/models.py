"""
Data models for auto-linking.

Wire format consumed from the generator:

    { "edges": [ { "source": "<nodeId>", "target": "<nodeId>", "label": "<1-3 words>" } ] }
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from ...shared.models.base import BaseModel
from ...shared.models.graph import Edge


class EdgeCandidate(BaseModel):
    """One proposed edge from the generator."""

    model_config = {
        "extra": "ignore",
    }

    source: str = Field(..., min_length=1, description="Source node id")
    target: str = Field(..., min_length=1, description="Target node id")
    label: Optional[str] = Field(default=None, description="Short relationship label")

    @field_validator('source', 'target', 'label', mode='before')
    @classmethod
    def coerce_strings(cls, v):
        """Generators sometimes emit numeric ids."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v.strip() if isinstance(v, str) else v


class RejectionReason(str, Enum):
    """Why a candidate edge was not applied."""
    MALFORMED = "malformed"
    UNKNOWN_NODE = "unknown_node"
    SELF_LOOP = "self_loop"
    DUPLICATE = "duplicate"


class RejectedEdge(BaseModel):
    """A candidate that failed validation."""

    reason: RejectionReason = Field(..., description="Rejection category")
    detail: str = Field(default="", description="Human-readable explanation")
    source: Optional[str] = Field(default=None, description="Proposed source id")
    target: Optional[str] = Field(default=None, description="Proposed target id")
    label: Optional[str] = Field(default=None, description="Proposed label")
    raw: Optional[Any] = Field(default=None, description="Original payload entry")


class AutoLinkResult(BaseModel):
    """Outcome of applying a generator's edge proposals."""

    created: List[Edge] = Field(default_factory=list, description="Edges added to the graph")
    rejected: List[RejectedEdge] = Field(default_factory=list, description="Candidates not applied")
    malformed: bool = Field(default=False, description="Whether the response itself could not be parsed")

    @property
    def message(self) -> str:
        """User-facing summary."""
        if not self.created:
            return "No connections found."
        return f"Created {len(self.created)} connections between nodes."

    def rejection_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for rejected in self.rejected:
            counts[rejected.reason] = counts.get(rejected.reason, 0) + 1
        return counts
