"""
Abstract Storage Interface

DESIGN DECISION: The expense core sees storage as a plain key-value store
of whole serialized values, the same contract browser local storage offers.
This allows us to:
1. Use in-memory storage for testing
2. Keep data in local JSON files for the desktop build
3. Keep all record handling out of the substrate

There are no partial updates: a value is read whole and written whole.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for whole-value storage.

    Any substrate (memory, files, a browser bridge) must implement
    these three methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The serialized value, or None if nothing is stored

        Raises:
            StorageError: If the substrate cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing whatever was there.

        Raises:
            StorageError: If the write fails
            QuotaExceededError: If the substrate is full
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class QuotaExceededError(StorageError):
    """The substrate has no room for the value."""
    pass
