"""
Lifecycle state computation for staging items.

State is derived on read; nothing runs in the background. Thresholds are
fixed and not exposed through settings.
"""

from datetime import datetime, timedelta

from ...shared import StagingItem, LifecycleState


AGING_THRESHOLD = timedelta(days=7)
ARCHIVE_THRESHOLD = timedelta(days=30)


def compute_lifecycle_state(item: StagingItem, now: datetime) -> LifecycleState:
    """
    Effective lifecycle state of ``item`` at ``now``.

    A stored ``archived`` state always wins. Otherwise the state follows the
    age of the item, measured from its last interaction or, failing that, its
    creation time. A stored ``fresh`` or ``aging`` does not hold back aging.
    """
    if item.is_archived:
        return LifecycleState.ARCHIVED

    age = now - item.age_anchor
    if age > ARCHIVE_THRESHOLD:
        return LifecycleState.ARCHIVED
    if age > AGING_THRESHOLD:
        return LifecycleState.AGING
    return LifecycleState.FRESH
