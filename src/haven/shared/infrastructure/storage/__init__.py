"""
Storage infrastructure for Haven.
"""

from .key_value import (
    KeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    get_preference_store,
)

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "get_preference_store",
]
