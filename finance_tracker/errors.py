"""
Expense Core Exceptions

Raised inside the store and converted into failed OperationResults
at the public boundary. Each exception carries the ErrorKind the
caller sees.
"""

from typing import Optional

from finance_tracker.models.expense import ErrorKind


class ExpenseStoreError(Exception):
    """Base exception for expense core operations."""

    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ExpenseStoreError):
    """A field failed a validation rule."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(ExpenseStoreError):
    """No expense with the requested id exists in the collection."""

    kind = ErrorKind.NOT_FOUND


class NoSessionError(ExpenseStoreError):
    """No current user identity is available."""

    kind = ErrorKind.NO_SESSION


class MalformedImportError(ExpenseStoreError):
    """Import payload is not a serialized sequence of records."""

    kind = ErrorKind.MALFORMED_IMPORT
