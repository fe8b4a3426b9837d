"""
In-Memory Storage

Dict-backed substrate used by tests and by the `memory` storage backend.
An optional byte quota reproduces the browser's storage limit.
"""

from typing import Optional

from finance_tracker.services.storage.interface import (
    KeyValueStore,
    QuotaExceededError,
)


class InMemoryKeyValueStore(KeyValueStore):
    """Key-value store held in a dict for the lifetime of the process."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(
                len(k) + len(v.encode("utf-8"))
                for k, v in self._data.items()
                if k != key
            )
            needed = len(key) + len(value.encode("utf-8"))
            if used + needed > self._quota_bytes:
                raise QuotaExceededError(
                    f"Storing {key!r} needs {needed} bytes, "
                    f"{self._quota_bytes - used} available"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """List stored keys (for inspection in tests)."""
        return list(self._data)
