"""
Staging data models for Haven.

Staging items are uncategorized content waiting to be promoted into the vault.
They age out of the default view and can be archived and restored.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseModel, TimestampMixin, MetadataMixin, ensure_utc, utcnow


class StagingItemType(str, Enum):
    """Kinds of ingested content."""
    TEXT = "text"
    LINK = "link"
    FILE = "file"


class LifecycleState(str, Enum):
    """Lifecycle states of a staging item."""
    FRESH = "fresh"
    AGING = "aging"
    ARCHIVED = "archived"


def new_staging_id() -> str:
    return f"staging_{uuid.uuid4().hex[:12]}"


def new_archive_id() -> str:
    return f"archived_{uuid.uuid4().hex[:12]}"


class StagingItem(BaseModel, TimestampMixin, MetadataMixin):
    """
    An ingested content entity awaiting promotion.

    ``lifecycle_state`` is the stored value. Only ``archived`` is authoritative;
    fresh/aging are recomputed from age whenever the item is read.
    """

    id: str = Field(default_factory=new_staging_id, description="Unique staging item identifier")
    type: StagingItemType = Field(..., description="Content kind")
    content: Optional[str] = Field(default=None, description="Text content or URL")
    asset_id: Optional[str] = Field(default=None, description="Uploaded asset reference")
    lifecycle_state: LifecycleState = Field(default=LifecycleState.FRESH, description="Stored lifecycle state")
    archived_at: Optional[datetime] = Field(default=None, description="When the item was archived")
    last_interaction_at: Optional[datetime] = Field(default=None, description="Last explicit user interaction")

    @field_validator('created_at', 'updated_at', 'archived_at', 'last_interaction_at', mode='before')
    @classmethod
    def validate_timestamps(cls, v):
        return ensure_utc(v)

    @property
    def age_anchor(self) -> datetime:
        """Timestamp age is measured from."""
        return self.last_interaction_at or self.created_at

    @property
    def is_archived(self) -> bool:
        return self.lifecycle_state == LifecycleState.ARCHIVED


class ArchivedItem(BaseModel, MetadataMixin):
    """
    Snapshot of a staging item taken at archive time.

    ``original_staging_id`` is a lookup key back to the staging record, used by
    restore. It does not own that record.
    """

    id: str = Field(default_factory=new_archive_id, description="Unique archived item identifier")
    original_staging_id: str = Field(..., description="ID of the staging item this snapshot came from")
    type: StagingItemType = Field(..., description="Content kind")
    content: Optional[str] = Field(default=None, description="Text content or URL")
    asset_id: Optional[str] = Field(default=None, description="Uploaded asset reference")
    created_at: datetime = Field(..., description="Creation time of the original item")
    archived_at: datetime = Field(default_factory=utcnow, description="Archive time")

    @field_validator('created_at', 'archived_at', mode='before')
    @classmethod
    def validate_timestamps(cls, v):
        return ensure_utc(v)

    @classmethod
    def snapshot_of(cls, item: StagingItem, archived_at: datetime) -> "ArchivedItem":
        """Copy a staging item into a new archive snapshot."""
        return cls(
            original_staging_id=item.id,
            type=item.type,
            content=item.content,
            asset_id=item.asset_id,
            metadata=dict(item.metadata),
            created_at=item.created_at,
            archived_at=archived_at,
        )
