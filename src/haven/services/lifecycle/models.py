"""
Result models for lifecycle operations.
"""

from typing import List

from pydantic import Field

from ...shared.models.base import BaseModel


class LifecycleSweepResult(BaseModel):
    """Outcome of one lifecycle sweep."""

    archived_item_ids: List[str] = Field(default_factory=list, description="Staging items archived by age")
    archive_ids: List[str] = Field(default_factory=list, description="Snapshots created for them")
    aging_count: int = Field(default=0, ge=0, description="Items currently aging")

    @property
    def archived_count(self) -> int:
        return len(self.archived_item_ids)

    @property
    def message(self) -> str:
        return f"Lifecycle sync complete: {self.archived_count} archived, {self.aging_count} aging"
