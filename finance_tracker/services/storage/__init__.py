"""
Storage Services Package

Provides the abstract key-value interface and concrete substrates.
The expense core only ever talks to KeyValueStore.
"""

from finance_tracker.services.storage.interface import (
    KeyValueStore,
    QuotaExceededError,
    StorageError,
)
from finance_tracker.services.storage.memory import InMemoryKeyValueStore
from finance_tracker.services.storage.json_files import JsonFileKeyValueStore

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "QuotaExceededError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
