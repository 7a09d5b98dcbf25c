"""
Persisted key-value store backends.
"""

from appvault.kernel.store.key_value_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqlKeyValueStore,
)

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SqlKeyValueStore",
]
