"""
Tests for the staging lifecycle.
"""

from datetime import datetime, timedelta, timezone

import pytest

from haven.shared import (
    LifecycleState, NodeType, StagingItem, StagingItemType,
    LifecycleTransitionError, OrphanedArchiveError, StagingItemNotFoundError,
)
from haven.services.graph_store import GraphStore
from haven.services.lifecycle import (
    LifecycleManager, InMemoryStagingRepository, compute_lifecycle_state,
)


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def manager(clock):
    return LifecycleManager(InMemoryStagingRepository(), clock=clock)


def staged(manager, clock, days_old, content="idea", **kwargs):
    """Ingest an item that was created ``days_old`` days ago."""
    current = clock.now
    clock.now = current - timedelta(days=days_old)
    item = manager.ingest(StagingItemType.TEXT, content=content, **kwargs)
    clock.now = current
    return item


class TestComputeState:

    @pytest.mark.parametrize("days, expected", [
        (0, LifecycleState.FRESH),
        (7, LifecycleState.FRESH),
        (8, LifecycleState.AGING),
        (30, LifecycleState.AGING),
        (31, LifecycleState.ARCHIVED),
    ])
    def test_age_thresholds(self, days, expected):
        item = StagingItem(type=StagingItemType.TEXT, created_at=NOW - timedelta(days=days))

        assert compute_lifecycle_state(item, NOW) == expected

    def test_explicit_archive_wins(self):
        item = StagingItem(type=StagingItemType.TEXT, created_at=NOW,
                           lifecycle_state=LifecycleState.ARCHIVED)

        assert compute_lifecycle_state(item, NOW) == LifecycleState.ARCHIVED

    def test_stored_fresh_does_not_hold_back_age(self):
        item = StagingItem(type=StagingItemType.TEXT, created_at=NOW - timedelta(days=40),
                           lifecycle_state=LifecycleState.FRESH)

        assert compute_lifecycle_state(item, NOW) == LifecycleState.ARCHIVED

    def test_interaction_resets_age(self):
        item = StagingItem(type=StagingItemType.TEXT, created_at=NOW - timedelta(days=40),
                           last_interaction_at=NOW - timedelta(days=2))

        assert compute_lifecycle_state(item, NOW) == LifecycleState.FRESH

    def test_iso_timestamps_from_storage(self):
        item = StagingItem.model_validate({
            'type': "link",
            'content': "https://example.com",
            'created_at': "2024-05-24T12:00:00",
        })

        assert item.created_at.tzinfo is not None
        assert compute_lifecycle_state(item, NOW) == LifecycleState.AGING


class TestReads:

    def test_state_is_computed_on_read(self, manager, clock):
        item = manager.ingest(StagingItemType.TEXT, content="note")
        assert manager.get_state(item.id) == LifecycleState.FRESH

        clock.advance(days=8)
        assert manager.get_state(item.id) == LifecycleState.AGING
        assert manager.get_item(item.id).lifecycle_state == LifecycleState.AGING

        clock.advance(days=23)
        assert manager.get_state(item.id) == LifecycleState.ARCHIVED

    def test_reads_do_not_persist_state(self, manager, clock):
        item = staged(manager, clock, days_old=10)

        manager.list_items()

        assert manager.repository.get_item(item.id).lifecycle_state == LifecycleState.FRESH

    def test_list_hides_archived_by_default(self, manager, clock):
        fresh = staged(manager, clock, days_old=1, content="fresh")
        aging = staged(manager, clock, days_old=10, content="aging")
        old = staged(manager, clock, days_old=45, content="old")

        visible = manager.list_items()
        everything = manager.list_items(include_archived=True)

        assert [i.id for i in visible] == [aging.id, fresh.id]
        assert [i.lifecycle_state for i in visible] == ["aging", "fresh"]
        assert [i.id for i in everything] == [old.id, aging.id, fresh.id]

    def test_unknown_item(self, manager):
        with pytest.raises(StagingItemNotFoundError):
            manager.get_state("staging_missing")


class TestArchiveRestore:

    def test_archive_is_copy_then_mark(self, manager, clock):
        item = manager.ingest(StagingItemType.LINK, content="https://example.com",
                              metadata={'title': "Example"})

        archived = manager.archive(item.id)

        stored = manager.repository.get_item(item.id)
        assert stored.is_archived
        assert stored.archived_at == NOW
        assert stored.updated_at == NOW
        assert archived.original_staging_id == item.id
        assert archived.content == "https://example.com"
        assert archived.metadata == {'title': "Example"}
        assert [a.id for a in manager.list_archived()] == [archived.id]
        assert manager.list_items() == []

    def test_archive_twice_fails(self, manager):
        item = manager.ingest(StagingItemType.TEXT, content="x")
        manager.archive(item.id)

        with pytest.raises(LifecycleTransitionError):
            manager.archive(item.id)

    def test_restore_returns_fresh_item(self, manager, clock):
        item = staged(manager, clock, days_old=20)
        archived = manager.archive(item.id)
        clock.advance(days=1)

        restored = manager.restore(archived.id)

        assert restored.lifecycle_state == LifecycleState.FRESH
        assert restored.archived_at is None
        assert restored.last_interaction_at == clock.now
        assert restored.updated_at == clock.now
        assert manager.list_archived() == []
        assert manager.get_state(item.id) == LifecycleState.FRESH

    def test_restored_old_item_is_not_archived_again(self, manager, clock):
        item = staged(manager, clock, days_old=60)
        archived = manager.sweep().archive_ids[0]

        manager.restore(archived)

        assert manager.get_state(item.id) == LifecycleState.FRESH
        assert manager.sweep().archived_count == 0

    def test_orphaned_restore(self, manager):
        keep = manager.ingest(StagingItemType.TEXT, content="keep")
        keep_archive = manager.archive(keep.id)
        gone = manager.ingest(StagingItemType.TEXT, content="gone")
        gone_archive = manager.archive(gone.id)
        manager.repository.delete_item(gone.id)

        with pytest.raises(OrphanedArchiveError) as exc_info:
            manager.restore(gone_archive.id)

        assert exc_info.value.original_staging_id == gone.id
        assert {a.id for a in manager.list_archived()} == {keep_archive.id, gone_archive.id}
        assert manager.repository.get_item(keep.id).is_archived
        assert manager.restore(keep_archive.id).lifecycle_state == LifecycleState.FRESH

    def test_restore_unknown_archive(self, manager):
        with pytest.raises(StagingItemNotFoundError):
            manager.restore("archived_missing")

    def test_delete_archived_removes_both_records(self, manager):
        item = manager.ingest(StagingItemType.TEXT, content="bye")
        archived = manager.archive(item.id)

        manager.delete_archived(archived.id)

        assert manager.list_archived() == []
        assert manager.repository.get_item(item.id) is None

    def test_delete_removes_snapshots_pointing_at_item(self, manager):
        item = manager.ingest(StagingItemType.TEXT, content="bye")
        manager.archive(item.id)

        manager.delete(item.id)

        assert manager.list_archived() == []
        with pytest.raises(StagingItemNotFoundError):
            manager.delete(item.id)


class TestSweep:

    def test_sweep_archives_old_items_and_counts_aging(self, manager, clock):
        fresh = staged(manager, clock, days_old=2)
        aging = staged(manager, clock, days_old=12)
        old = staged(manager, clock, days_old=31)

        result = manager.sweep()

        assert result.archived_item_ids == [old.id]
        assert result.aging_count == 1
        assert manager.repository.get_item(old.id).is_archived
        assert manager.repository.get_item(aging.id).lifecycle_state == LifecycleState.AGING
        assert manager.repository.get_item(fresh.id).lifecycle_state == LifecycleState.FRESH
        assert [a.original_staging_id for a in manager.list_archived()] == [old.id]

    def test_sweep_is_idempotent(self, manager, clock):
        staged(manager, clock, days_old=31)
        manager.sweep()

        assert manager.sweep().archived_count == 0
        assert len(manager.list_archived()) == 1

    def test_aged_out_item_before_any_sweep(self, manager, clock):
        old = staged(manager, clock, days_old=45)

        assert manager.list_items() == []
        assert manager.list_archived() == []
        assert [(i.id, i.lifecycle_state) for i in manager.list_items(include_archived=True)] == [
            (old.id, "archived")
        ]

        manager.sweep()

        assert [a.original_staging_id for a in manager.list_archived()] == [old.id]


class TestPromote:

    def test_promote_text_to_note(self, manager):
        graph = GraphStore()
        item = manager.ingest(StagingItemType.TEXT, content="an idea", metadata={'title': "Idea"})

        node = manager.promote(item.id, graph=graph)

        assert node.type_tag == NodeType.NOTE
        assert node.data.label == "Idea"
        assert node.data.content == "an idea"
        assert node.data.metadata['stagingItemId'] == item.id
        assert graph.get_node(node.id) is node
        assert manager.repository.get_item(item.id) is None

    def test_promote_link(self, manager):
        graph = GraphStore()
        item = manager.ingest(StagingItemType.LINK, content="https://example.com")

        node = manager.promote(item.id, graph=graph)

        assert node.type_tag == NodeType.LINK
        assert node.data.url == "https://example.com"

    @pytest.mark.parametrize("mime_type, expected", [
        ("image/png", NodeType.IMAGE),
        ("audio/mpeg", NodeType.AUDIO),
        ("video/mp4", NodeType.VIDEO),
        ("application/pdf", NodeType.DOC),
    ])
    def test_promote_file_by_mime_type(self, manager, mime_type, expected):
        item = manager.ingest(StagingItemType.FILE, asset_id="asset-1",
                              metadata={'mime_type': mime_type, 'filename': "upload",
                                        'url': "https://cdn/upload"})

        node = manager.promote(item.id, graph=GraphStore())

        assert node.type_tag == expected
        assert node.data.label == "upload"
        assert node.data.url == "https://cdn/upload"
        assert node.data.metadata['assetId'] == "asset-1"

    def test_promote_without_graph(self, manager):
        item = manager.ingest(StagingItemType.TEXT, content="x")

        assert manager.promote(item.id) is None
        assert manager.list_items() == []

    def test_archived_items_cannot_be_promoted(self, manager, clock):
        item = staged(manager, clock, days_old=40)

        with pytest.raises(LifecycleTransitionError):
            manager.promote(item.id, graph=GraphStore())

        assert manager.repository.get_item(item.id) is not None
