"""
Lifecycle manager for staged content.

Items move fresh -> aging -> archived as they age, can be archived by hand at
any time and come back only through an explicit restore. Archiving copies the
item into an ArchivedItem snapshot and marks the staging record; the record
itself stays so that restore can find it again.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ...shared import (
    get_logger, get_metrics, utcnow,
    ArchivedItem, LifecycleState, Node, NodeType, Position,
    StagingItem, StagingItemType,
    LifecycleTransitionError, OrphanedArchiveError, StagingItemNotFoundError,
)
from ..graph_store import GraphStore
from .models import LifecycleSweepResult
from .repository import InMemoryStagingRepository, StagingRepository
from .state import compute_lifecycle_state


Clock = Callable[[], datetime]

_MIME_NODE_TYPES = (
    ('image/', NodeType.IMAGE),
    ('audio/', NodeType.AUDIO),
    ('video/', NodeType.VIDEO),
)


class LifecycleManager:
    """
    Computes and changes the lifecycle state of staging items.

    Reads never write: listing an item reports its effective state without
    persisting it. ``sweep`` is the one operation that materializes age-based
    archives.
    """

    def __init__(self,
                 repository: Optional[StagingRepository] = None,
                 clock: Optional[Clock] = None):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.repository = repository or InMemoryStagingRepository()
        self._clock = clock or utcnow

    def now(self) -> datetime:
        return self._clock()

    # Ingestion and reads

    def ingest(self,
               item_type: StagingItemType,
               content: Optional[str] = None,
               asset_id: Optional[str] = None,
               metadata: Optional[Dict[str, Any]] = None) -> StagingItem:
        """Stage a new content item."""
        item = StagingItem(
            type=item_type,
            content=content,
            asset_id=asset_id,
            metadata=metadata or {},
            created_at=self.now(),
        )
        self.repository.save_item(item)
        self.logger.debug(f"Staged {item.type} item {item.id}")
        return item

    def evaluate(self, item: StagingItem) -> LifecycleState:
        """Effective state of ``item`` right now."""
        return compute_lifecycle_state(item, self.now())

    def get_item(self, item_id: str) -> StagingItem:
        """
        Retrieve a staging item carrying its effective state.

        Raises:
            StagingItemNotFoundError: if the id is unknown
        """
        return self._view(self._require_item(item_id))

    def get_state(self, item_id: str) -> LifecycleState:
        return self.evaluate(self._require_item(item_id))

    def list_items(self, include_archived: bool = False) -> List[StagingItem]:
        """
        Staging items with their effective state, oldest first.

        Items whose effective state is archived are hidden unless
        ``include_archived`` is set, whether or not a sweep has run yet. An
        item that aged out without a sweep has no snapshot in
        ``list_archived()`` either.
        """
        views = [self._view(item) for item in self.repository.list_items()]
        if include_archived:
            return views
        return [v for v in views if v.lifecycle_state != LifecycleState.ARCHIVED]

    def list_archived(self) -> List[ArchivedItem]:
        """
        Archive snapshots, most recently archived first.

        Items that aged past the archive threshold only get a snapshot when
        ``sweep`` runs; until then they are missing here and hidden from
        ``list_items()``. Use ``list_items(include_archived=True)`` to see them.
        """
        return self.repository.list_archived()

    # Transitions

    def archive(self, item_id: str) -> ArchivedItem:
        """
        Archive a staging item explicitly.

        Raises:
            StagingItemNotFoundError: if the id is unknown
            LifecycleTransitionError: if the item is already archived
        """
        item = self._require_item(item_id)
        if item.is_archived:
            raise LifecycleTransitionError(f"Staging item {item_id} is already archived")

        archived = self._archive(item, self.now())
        self.logger.info(f"Archived staging item {item_id} as {archived.id}")
        return archived

    def restore(self, archived_id: str) -> StagingItem:
        """
        Bring an archived item back as fresh.

        The snapshot is removed, the staging record is marked fresh with its
        interaction time reset, so it does not age out again immediately.

        Raises:
            StagingItemNotFoundError: if the snapshot id is unknown
            OrphanedArchiveError: if the original staging item no longer
                exists; nothing is changed in that case
        """
        archived = self.repository.get_archived(archived_id)
        if archived is None:
            raise StagingItemNotFoundError(f"Archived item not found: {archived_id}")

        item = self.repository.get_item(archived.original_staging_id)
        if item is None:
            self.logger.warning(
                f"Cannot restore {archived_id}: staging item "
                f"{archived.original_staging_id} is missing"
            )
            self.metrics.record_lifecycle('orphaned_restores')
            raise OrphanedArchiveError(archived_id, archived.original_staging_id)

        now = self.now()
        item.lifecycle_state = LifecycleState.FRESH
        item.archived_at = None
        item.last_interaction_at = now
        item.touch(now)
        self.repository.save_item(item)
        self.repository.delete_archived(archived_id)

        self.metrics.record_lifecycle('restores')
        self.logger.info(f"Restored staging item {item.id} from {archived_id}")
        return item

    def delete_archived(self, archived_id: str) -> None:
        """
        Permanently delete an archived item.

        The archived staging record it was taken from goes with it.

        Raises:
            StagingItemNotFoundError: if the snapshot id is unknown
        """
        archived = self.repository.get_archived(archived_id)
        if archived is None:
            raise StagingItemNotFoundError(f"Archived item not found: {archived_id}")

        self.repository.delete_archived(archived_id)
        item = self.repository.get_item(archived.original_staging_id)
        if item is not None and item.is_archived:
            self.repository.delete_item(item.id)
        self.logger.info(f"Permanently deleted archived item {archived_id}")

    def delete(self, item_id: str) -> None:
        """
        Delete a staging item along with any snapshots that point to it.

        Raises:
            StagingItemNotFoundError: if the id is unknown
        """
        self._require_item(item_id)
        for archived in self.repository.list_archived():
            if archived.original_staging_id == item_id:
                self.repository.delete_archived(archived.id)
        self.repository.delete_item(item_id)
        self.logger.info(f"Deleted staging item {item_id}")

    def sweep(self) -> LifecycleSweepResult:
        """
        Archive every item past the archive threshold and count aging ones.

        Aging items have their stored state updated too, so records read
        directly from storage are close to the effective state.
        """
        now = self.now()
        result = LifecycleSweepResult()

        for item in self.repository.list_items():
            if item.is_archived:
                continue

            state = compute_lifecycle_state(item, now)
            if state == LifecycleState.ARCHIVED:
                archived = self._archive(item, now)
                result.archived_item_ids.append(item.id)
                result.archive_ids.append(archived.id)
            elif state == LifecycleState.AGING:
                result.aging_count += 1
                if item.lifecycle_state != LifecycleState.AGING:
                    item.lifecycle_state = LifecycleState.AGING
                    self.repository.save_item(item)

        self.metrics.record_lifecycle('swept', result.archived_count)
        self.logger.info(result.message)
        return result

    def promote(self,
                item_id: str,
                graph: Optional[GraphStore] = None,
                position: Optional[Position] = None) -> Optional[Node]:
        """
        Move an item out of staging and into the vault.

        With a graph, the matching node is created first; the item is only
        removed from staging once that succeeded.

        Raises:
            StagingItemNotFoundError: if the id is unknown
            LifecycleTransitionError: if the item is archived (restore it first)
        """
        item = self._require_item(item_id)
        if self.evaluate(item) == LifecycleState.ARCHIVED:
            raise LifecycleTransitionError(f"Staging item {item_id} is archived; restore it before promoting")

        node = None
        if graph is not None:
            node = graph.add_node(self._node_for(item, position))

        self.repository.delete_item(item_id)
        self.metrics.record_lifecycle('promotions')
        self.logger.info(f"Promoted staging item {item_id}" + (f" to node {node.id}" if node else ""))
        return node

    # Helpers

    def _require_item(self, item_id: str) -> StagingItem:
        item = self.repository.get_item(item_id)
        if item is None:
            raise StagingItemNotFoundError(f"Staging item not found: {item_id}")
        return item

    def _view(self, item: StagingItem) -> StagingItem:
        state = self.evaluate(item)
        if state == item.lifecycle_state:
            return item
        return item.model_copy(update={'lifecycle_state': LifecycleState(state).value})

    def _archive(self, item: StagingItem, now: datetime) -> ArchivedItem:
        archived = ArchivedItem.snapshot_of(item, archived_at=now)
        self.repository.save_archived(archived)

        item.lifecycle_state = LifecycleState.ARCHIVED
        item.archived_at = now
        item.touch(now)
        try:
            self.repository.save_item(item)
        except Exception:
            self.repository.delete_archived(archived.id)
            raise

        self.metrics.record_lifecycle('archives')
        return archived

    def _node_for(self, item: StagingItem, position: Optional[Position]) -> Node:
        metadata = dict(item.metadata)
        metadata['stagingItemId'] = item.id
        if item.asset_id:
            metadata['assetId'] = item.asset_id

        title = item.get_metadata('title')

        if item.type == StagingItemType.TEXT:
            return Node.create(NodeType.NOTE, label=title or "Note", content=item.content,
                               position=position, metadata=metadata)

        if item.type == StagingItemType.LINK:
            return Node.create(NodeType.LINK, label=title or item.content or "Link",
                               url=item.content, position=position, metadata=metadata)

        mime_type = str(item.get_metadata('mime_type') or '')
        node_type = NodeType.DOC
        for prefix, candidate in _MIME_NODE_TYPES:
            if mime_type.startswith(prefix):
                node_type = candidate
                break

        name = title or item.get_metadata('filename') or "Untitled"
        url = item.get_metadata('url') or item.content
        content = item.content if node_type == NodeType.DOC else None
        return Node.create(node_type, label=name, content=content, url=url,
                           position=position, metadata=metadata)
