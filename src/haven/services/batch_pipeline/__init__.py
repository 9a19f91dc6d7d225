"""
Batch Pipeline service for Haven.

Runs one transformation across many nodes sequentially, isolating per-node
failures and reporting progress after every step.
"""

from .runner import BatchPipelineRunner
from .derived import DerivedNodeWriter, DERIVED_OFFSET_X, DERIVED_OFFSET_Y
from .models import TransformAction, StepResult, StepStatus, BatchProgress, BatchReport

__all__ = [
    "BatchPipelineRunner",
    "DerivedNodeWriter",
    "DERIVED_OFFSET_X",
    "DERIVED_OFFSET_Y",
    "TransformAction",
    "StepResult",
    "StepStatus",
    "BatchProgress",
    "BatchReport",
]
