"""
Storage interfaces for staging and archived items.

The storage collaborator owns persistence; the lifecycle manager only needs
these record-level operations.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ...shared import get_logger, StagingItem, ArchivedItem


class StagingRepository(ABC):
    """Abstract interface for staging item storage."""

    @abstractmethod
    def get_item(self, item_id: str) -> Optional[StagingItem]:
        """Retrieve a staging item by ID."""
        pass

    @abstractmethod
    def save_item(self, item: StagingItem) -> None:
        """Insert or replace a staging item."""
        pass

    @abstractmethod
    def delete_item(self, item_id: str) -> bool:
        """Delete a staging item. Returns False if it did not exist."""
        pass

    @abstractmethod
    def list_items(self) -> List[StagingItem]:
        """All staging items, oldest first."""
        pass

    @abstractmethod
    def get_archived(self, archived_id: str) -> Optional[ArchivedItem]:
        """Retrieve an archive snapshot by ID."""
        pass

    @abstractmethod
    def save_archived(self, archived: ArchivedItem) -> None:
        """Insert or replace an archive snapshot."""
        pass

    @abstractmethod
    def delete_archived(self, archived_id: str) -> bool:
        """Delete an archive snapshot. Returns False if it did not exist."""
        pass

    @abstractmethod
    def list_archived(self) -> List[ArchivedItem]:
        """All archive snapshots, most recently archived first."""
        pass


class InMemoryStagingRepository(StagingRepository):
    """
    Dictionary-backed repository.

    Records are copied on the way in and out, so callers never hold a
    reference to stored state.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._items: Dict[str, StagingItem] = {}
        self._archived: Dict[str, ArchivedItem] = {}

    def get_item(self, item_id: str) -> Optional[StagingItem]:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item else None

    def save_item(self, item: StagingItem) -> None:
        self._items[item.id] = item.model_copy(deep=True)

    def delete_item(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None

    def list_items(self) -> List[StagingItem]:
        items = sorted(self._items.values(), key=lambda i: i.created_at)
        return [i.model_copy(deep=True) for i in items]

    def get_archived(self, archived_id: str) -> Optional[ArchivedItem]:
        archived = self._archived.get(archived_id)
        return archived.model_copy(deep=True) if archived else None

    def save_archived(self, archived: ArchivedItem) -> None:
        self._archived[archived.id] = archived.model_copy(deep=True)

    def delete_archived(self, archived_id: str) -> bool:
        return self._archived.pop(archived_id, None) is not None

    def list_archived(self) -> List[ArchivedItem]:
        archived = sorted(self._archived.values(), key=lambda a: a.archived_at, reverse=True)
        return [a.model_copy(deep=True) for a in archived]
