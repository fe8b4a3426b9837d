"""
Expense Collection Repository

Maps a user identity to a storage key and reads or writes that user's
whole expense collection as one JSON array.

There are no partial updates. Every save rewrites the complete collection.
"""

import json
from decimal import Decimal
from typing import Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from finance_tracker.models.expense import Expense
from finance_tracker.services.storage import KeyValueStore, StorageError


_EXPENSE_LIST = TypeAdapter(list[Expense])


class ExpenseRepository:
    """Whole-collection persistence for per-user expenses."""

    def __init__(self, storage: KeyValueStore, key_prefix: str = "financeTracker"):
        self._storage = storage
        self._key_prefix = key_prefix

    def resolve_key(self, user_id: Optional[str]) -> Optional[str]:
        """
        Storage key for a user's expenses.

        Returns None when there is no user identity; callers treat that
        as "no data accessible", not as an error.
        """
        if not user_id:
            return None
        return f"{self._key_prefix}_expenses_{user_id}"

    def load(self, key: str) -> list[Expense]:
        """
        Load the stored collection, or an empty list if nothing is stored.

        Raises:
            StorageError: If the stored value is not a valid collection
        """
        raw = self._storage.get(key)
        if raw is None or not raw.strip():
            return []
        try:
            data = json.loads(raw, parse_float=Decimal)
            return _EXPENSE_LIST.validate_python(data)
        except (ValueError, PydanticValidationError) as e:
            raise StorageError(f"Stored expenses under {key!r} are corrupt: {e}")

    def save(self, key: str, expenses: list[Expense]) -> None:
        """Overwrite the stored collection."""
        self._storage.set(key, serialize_expenses(expenses, indent=None))

    def clear(self, key: str) -> None:
        self._storage.remove(key)


def serialize_expenses(expenses: list[Expense], indent: Optional[int] = 2) -> str:
    """Serialize expenses as a JSON array with camelCase keys."""
    return json.dumps(
        [expense.to_storage_dict() for expense in expenses],
        indent=indent,
        ensure_ascii=False,
    )
