"""
Data models for the batch pipeline.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from ...shared.models.base import BaseModel
from ...shared.models.graph import NodeType
from ...shared.infrastructure.ai.gateway import ResponseFormat


class StepStatus(str, Enum):
    """Outcome of one batch step."""
    SUCCESS = "success"
    FAILURE = "failure"


class TransformAction(BaseModel):
    """
    A transformation applied to each node of a batch.

    Mirrors the canvas repurpose actions: the node's content is sent with the
    instruction, optionally with its neighborhood, and the output may be
    written back as a derived node.
    """

    name: str = Field(..., min_length=1, description="Action identifier, e.g. SUMMARIZE or FORMAT_PLATFORM")
    instruction: str = Field(..., min_length=1, description="Instruction sent to the generator")
    platform: Optional[str] = Field(default=None, description="Target platform for formatting actions")
    response_format: ResponseFormat = Field(default=ResponseFormat.TEXT, description="Expected output format")
    include_context: bool = Field(default=False, description="Send the node's neighborhood bundle too")
    context_depth: Optional[int] = Field(default=None, ge=0, description="Hop limit when include_context is set")
    require_content: bool = Field(default=True, description="Fail nodes without text content")
    create_derived_node: bool = Field(default=False, description="Write each output back as a new node")
    derived_node_type: NodeType = Field(default=NodeType.NOTE, description="Type of derived nodes")
    edge_label: Optional[str] = Field(default=None, description="Label of the edge to derived nodes")

    @property
    def derived_edge_label(self) -> str:
        if self.edge_label:
            return self.edge_label
        if self.platform:
            return self.platform.title()
        return self.name.replace('_', ' ').title()


class StepResult(BaseModel):
    """Result of transforming one node."""

    node_id: str = Field(..., description="Node the step ran against")
    status: StepStatus = Field(..., description="success or failure")
    output: Optional[str] = Field(default=None, description="Generated text on success")
    error: Optional[str] = Field(default=None, description="Error message on failure")
    derived_node_id: Optional[str] = Field(default=None, description="Node created from the output")
    progress: str = Field(default="0/0", description="Completed/total after this step")

    @property
    def succeeded(self) -> bool:
        return self.status == StepStatus.SUCCESS


class BatchProgress(BaseModel):
    """Completed vs. total steps of a run."""

    completed: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return f"{self.completed}/{self.total}"


class BatchReport(BaseModel):
    """Summary of a finished (or aborted) run."""

    action: str = Field(..., description="Action name")
    total: int = Field(..., ge=0, description="Nodes requested")
    results: List[StepResult] = Field(default_factory=list, description="Step results in order")
    aborted: bool = Field(default=False, description="Whether the run was cancelled")
    skipped_node_ids: List[str] = Field(default_factory=list, description="Nodes not attempted due to abort")

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)

    @property
    def summary(self) -> str:
        text = f"{self.succeeded} of {self.total} succeeded"
        if self.aborted:
            text += f" (aborted, {len(self.skipped_node_ids)} skipped)"
        return text
