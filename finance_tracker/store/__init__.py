"""
Expense Store Package

The expense core: validated CRUD, bulk import/export and aggregation
over per-user collections.
"""

from finance_tracker.store.expense_store import ExpenseStore
from finance_tracker.store.repository import ExpenseRepository, serialize_expenses

__all__ = ["ExpenseRepository", "ExpenseStore", "serialize_expenses"]
