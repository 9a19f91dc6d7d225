"""
Base models and mixins for Haven.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dateutil import parser as date_parser
from pydantic import BaseModel as PydanticBaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Any) -> Any:
    """
    Normalize a timestamp coming from storage.

    ISO-8601 strings are parsed; naive datetimes are taken to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class BaseModel(PydanticBaseModel):
    """
    Base model for all Haven data structures.

    Provides common configuration and utilities.
    """

    model_config = {
        # Allow field population by name or alias
        "populate_by_name": True,
        # Validate assignments after object creation
        "validate_assignment": True,
        # Use enum values instead of enum names
        "use_enum_values": True,
        "extra": "forbid",
    }


class TimestampMixin(PydanticBaseModel):
    """
    Mixin to add timestamp fields to models.
    """
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    def touch(self, at: Optional[datetime] = None) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = at or utcnow()


class MetadataMixin(PydanticBaseModel):
    """
    Mixin to add metadata field to models.
    """
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get a metadata value."""
        return self.metadata.get(key, default)
