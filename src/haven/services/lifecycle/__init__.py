"""
Lifecycle service for Haven.

Tracks how staged content ages out of the default view (fresh, aging,
archived) and handles explicit archive, restore and promotion.
"""

from .manager import LifecycleManager
from .models import LifecycleSweepResult
from .repository import StagingRepository, InMemoryStagingRepository
from .state import AGING_THRESHOLD, ARCHIVE_THRESHOLD, compute_lifecycle_state

__all__ = [
    "LifecycleManager",
    "LifecycleSweepResult",
    "StagingRepository",
    "InMemoryStagingRepository",
    "AGING_THRESHOLD",
    "ARCHIVE_THRESHOLD",
    "compute_lifecycle_state",
]
