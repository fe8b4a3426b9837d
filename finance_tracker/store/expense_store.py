"""
Expense Store

The expense core. Every operation is one read-modify-write cycle over a
user's whole collection:

    resolve key -> load -> apply -> validate (mutations) -> save (mutations)

DESIGN DECISION: The current user is an explicit `user_id` argument on
every operation, never ambient state. A `user_id` of None means there
is no session: queries see an empty collection and mutations fail with
ErrorKind.NO_SESSION.

Mutations and bulk operations never raise to the caller. Failures come
back as an OperationResult with an ErrorKind. Read operations let a
StorageError through rather than hide a broken substrate.
"""

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Optional, Union
from uuid import uuid4

from finance_tracker.audit import AuditLogger
from finance_tracker.errors import (
    ExpenseStoreError,
    MalformedImportError,
    NoSessionError,
    NotFoundError,
    ValidationError,
)
from finance_tracker.models.audit import AuditEvent, AuditEventBuilder
from finance_tracker.models.expense import (
    Category,
    ErrorKind,
    Expense,
    ExpenseStatistics,
    GroupSummary,
    MonthlySummary,
    OperationResult,
    PaymentMethod,
)
from finance_tracker.queries import aggregation
from finance_tracker.queries.filters import ExpenseFilter, apply_filter
from finance_tracker.queries.reports import recent_categories
from finance_tracker.services.storage import KeyValueStore, StorageError
from finance_tracker.store.repository import ExpenseRepository, serialize_expenses
from finance_tracker.validation import (
    coerce_expense_fields,
    ensure_valid,
    normalize_expense_data,
    parse_amount,
    parse_timestamp,
    validate_expense,
)


# Fields the caller can never set through update()
IMMUTABLE_FIELDS = ("id", "created_at", "updated_at")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExpenseStore:
    """
    Validated CRUD, bulk import/export and aggregation over per-user
    expense collections held in a KeyValueStore.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        key_prefix: str = "financeTracker",
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the store.

        Args:
            storage: Whole-value key-value substrate
            key_prefix: Namespace for storage keys
            audit_logger: Where to log audit events. If None, nothing is logged.
            clock: Source of created/updated timestamps (UTC now by default)
        """
        self._repository = ExpenseRepository(storage, key_prefix)
        self._audit_logger = audit_logger
        self._clock = clock or _utc_now

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _require_key(self, user_id: Optional[str]) -> str:
        key = self._repository.resolve_key(user_id)
        if key is None:
            raise NoSessionError("No user session found")
        return key

    @staticmethod
    def _index_of(expenses: list[Expense], expense_id: str) -> int:
        for index, expense in enumerate(expenses):
            if expense.id == expense_id:
                return index
        raise NotFoundError("Expense not found")

    @staticmethod
    def _new_id(taken: set[str]) -> str:
        """A fresh id that is not in `taken`."""
        while True:
            candidate = uuid4().hex
            if candidate not in taken:
                return candidate

    def _fail(
        self,
        user_id: Optional[str],
        operation: str,
        error: Union[ExpenseStoreError, StorageError],
        expense_id: Optional[str] = None,
    ) -> OperationResult:
        """Turn an internal exception into a failed result and audit it."""
        if isinstance(error, StorageError):
            self._audit(AuditEventBuilder.storage_error(user_id, operation, str(error)))
            return OperationResult.failure(
                ErrorKind.STORAGE, f"Storage error: {error}"
            )

        if isinstance(error, ValidationError):
            self._audit(AuditEventBuilder.validation_failed(
                user_id, operation, error.field, error.message, expense_id
            ))
        else:
            self._audit(AuditEventBuilder.operation_rejected(
                user_id, operation, error.message, expense_id
            ))
        return OperationResult.failure(error.kind, error.message)

    def _collection(
        self,
        user_id: Optional[str],
        expenses: Optional[Sequence[Expense]],
    ) -> list[Expense]:
        """A given pre-filtered sequence, or the user's full collection."""
        if expenses is not None:
            return list(expenses)
        return self.list_expenses(user_id)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add(self, user_id: Optional[str], data: Mapping[str, Any]) -> OperationResult:
        """
        Validate and append a new expense.

        `data` uses camelCase or snake_case keys. referenceNo and notes
        default to "". Nothing is written when validation fails.
        """
        try:
            key = self._require_key(user_id)
            ensure_valid(data)
            expenses = self._repository.load(key)
            expense = Expense(
                id=self._new_id({e.id for e in expenses}),
                created_at=self._clock(),
                **coerce_expense_fields(data),
            )
            expenses.append(expense)
            self._repository.save(key, expenses)
        except (ExpenseStoreError, StorageError) as e:
            return self._fail(user_id, "add", e)

        self._audit(AuditEventBuilder.expense_added(
            user_id, expense.id, expense.category.value, str(expense.amount)
        ))
        return OperationResult(
            success=True,
            message="Expense added successfully!",
            expense=expense,
        )

    def update(
        self,
        user_id: Optional[str],
        expense_id: str,
        data: Mapping[str, Any],
    ) -> OperationResult:
        """
        Merge `data` over an existing expense and re-validate the result.

        Fields missing from `data` keep their prior values; id, createdAt
        and updatedAt in `data` are ignored. A supplied amount is parsed
        first, so a non-numeric amount fails the full validation of the
        merged record. The record keeps its position in the collection.
        """
        try:
            key = self._require_key(user_id)
            expenses = self._repository.load(key)
            index = self._index_of(expenses, expense_id)
            existing = expenses[index]

            changes = normalize_expense_data(data)
            for name in IMMUTABLE_FIELDS:
                changes.pop(name, None)

            candidate = {**existing.model_dump(), **changes}
            if "amount" in changes:
                candidate["amount"] = parse_amount(changes["amount"])
            ensure_valid(candidate)

            updated = Expense(
                id=existing.id,
                created_at=existing.created_at,
                updated_at=self._clock(),
                **coerce_expense_fields(candidate),
            )
            expenses[index] = updated
            self._repository.save(key, expenses)
        except (ExpenseStoreError, StorageError) as e:
            return self._fail(user_id, "update", e, expense_id)

        self._audit(AuditEventBuilder.expense_updated(
            user_id, expense_id, sorted(changes)
        ))
        return OperationResult(
            success=True,
            message="Expense updated successfully!",
            expense=updated,
        )

    def delete(self, user_id: Optional[str], expense_id: str) -> OperationResult:
        """Remove one expense by id. An unknown id is a NOT_FOUND failure."""
        try:
            key = self._require_key(user_id)
            expenses = self._repository.load(key)
            del expenses[self._index_of(expenses, expense_id)]
            self._repository.save(key, expenses)
        except (ExpenseStoreError, StorageError) as e:
            return self._fail(user_id, "delete", e, expense_id)

        self._audit(AuditEventBuilder.expense_deleted(user_id, expense_id))
        return OperationResult(success=True, message="Expense deleted successfully!")

    def clear_all(self, user_id: Optional[str]) -> OperationResult:
        """Remove the user's entire collection."""
        try:
            key = self._require_key(user_id)
            self._repository.clear(key)
        except (ExpenseStoreError, StorageError) as e:
            return self._fail(user_id, "clear", e)

        self._audit(AuditEventBuilder.expenses_cleared(user_id))
        return OperationResult(
            success=True,
            message="All expenses cleared successfully!",
        )

    # =========================================================================
    # BULK IMPORT / EXPORT
    # =========================================================================

    def export_as_serialized_text(self, user_id: Optional[str]) -> str:
        """The full collection as a pretty-printed JSON array."""
        expenses = self.list_expenses(user_id)
        if user_id:
            self._audit(AuditEventBuilder.expenses_exported(user_id, len(expenses)))
        return serialize_expenses(expenses, indent=2)

    @staticmethod
    def _parse_import(text: str) -> list:
        try:
            records = json.loads(text, parse_float=Decimal)
        except (TypeError, ValueError) as e:
            raise MalformedImportError(f"Error parsing JSON: {e}")
        if not isinstance(records, list):
            raise MalformedImportError("Invalid data format")
        return records

    def _build_imported(self, record: Any, taken: set[str]) -> Optional[Expense]:
        """An Expense for one import record, or None if the record is invalid."""
        if not isinstance(record, Mapping) or not validate_expense(record).valid:
            return None

        fields = normalize_expense_data(record)
        return Expense(
            id=self._new_id(taken),
            created_at=parse_timestamp(fields.get("created_at")) or self._clock(),
            updated_at=parse_timestamp(fields.get("updated_at")),
            **coerce_expense_fields(record),
        )

    def import_from_serialized_text(
        self,
        user_id: Optional[str],
        text: str,
    ) -> OperationResult:
        """
        Append the valid records of a JSON array to the collection.

        Each record is validated on its own and gets a fresh id; invalid
        records are skipped and counted. The existing collection is kept.
        """
        try:
            key = self._require_key(user_id)
            records = self._parse_import(text)
            expenses = self._repository.load(key)

            taken = {e.id for e in expenses}
            skipped = 0
            for record in records:
                expense = self._build_imported(record, taken)
                if expense is None:
                    skipped += 1
                    continue
                taken.add(expense.id)
                expenses.append(expense)

            imported = len(records) - skipped
            self._repository.save(key, expenses)
        except (ExpenseStoreError, StorageError) as e:
            return self._fail(user_id, "import", e)

        self._audit(AuditEventBuilder.expenses_imported(user_id, imported, skipped))
        return OperationResult(
            success=True,
            message=f"{imported} expenses imported successfully!",
            imported_count=imported,
            skipped_count=skipped,
        )

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_expenses(self, user_id: Optional[str]) -> list[Expense]:
        """The user's full collection in stored order; empty without a session."""
        key = self._repository.resolve_key(user_id)
        if key is None:
            return []
        try:
            return self._repository.load(key)
        except StorageError as e:
            self._audit(AuditEventBuilder.storage_error(user_id, "load", str(e)))
            raise

    def get_by_id(self, user_id: Optional[str], expense_id: str) -> Optional[Expense]:
        for expense in self.list_expenses(user_id):
            if expense.id == expense_id:
                return expense
        return None

    def filter_by_date_range(
        self,
        user_id: Optional[str],
        start: Union[date, datetime],
        end: Union[date, datetime],
    ) -> list[Expense]:
        return aggregation.filter_by_date_range(self.list_expenses(user_id), start, end)

    def filter_by_month(
        self,
        user_id: Optional[str],
        month_index: int,
        year: int,
    ) -> list[Expense]:
        return aggregation.filter_by_month(self.list_expenses(user_id), month_index, year)

    def filter_by_year(self, user_id: Optional[str], year: int) -> list[Expense]:
        return aggregation.filter_by_year(self.list_expenses(user_id), year)

    def filter_by_category(
        self,
        user_id: Optional[str],
        category: Union[Category, str],
    ) -> list[Expense]:
        return aggregation.filter_by_category(self.list_expenses(user_id), category)

    def filter_by_payment_method(
        self,
        user_id: Optional[str],
        payment_method: Union[PaymentMethod, str],
    ) -> list[Expense]:
        return aggregation.filter_by_payment_method(
            self.list_expenses(user_id), payment_method
        )

    def query(self, user_id: Optional[str], flt: ExpenseFilter) -> list[Expense]:
        """Dashboard filter bar: filtered and sorted newest first."""
        return apply_filter(self.list_expenses(user_id), flt)

    def recent_categories(self, user_id: Optional[str], limit: int = 10) -> list[Category]:
        return recent_categories(self.list_expenses(user_id), limit)

    # =========================================================================
    # AGGREGATES
    # =========================================================================
    # Each takes an optional pre-filtered sequence. None means the full
    # collection; an empty list stays empty.

    def total(
        self,
        user_id: Optional[str],
        expenses: Optional[Sequence[Expense]] = None,
    ) -> Decimal:
        return aggregation.total(self._collection(user_id, expenses))

    def group_by_category(
        self,
        user_id: Optional[str],
        expenses: Optional[Sequence[Expense]] = None,
    ) -> dict[Category, GroupSummary]:
        return aggregation.group_by_category(self._collection(user_id, expenses))

    def group_by_payment_method(
        self,
        user_id: Optional[str],
        expenses: Optional[Sequence[Expense]] = None,
    ) -> dict[PaymentMethod, GroupSummary]:
        return aggregation.group_by_payment_method(self._collection(user_id, expenses))

    def yearly_summary(self, user_id: Optional[str], year: int) -> list[MonthlySummary]:
        return aggregation.yearly_summary(self.list_expenses(user_id), year)

    def statistics(
        self,
        user_id: Optional[str],
        expenses: Optional[Sequence[Expense]] = None,
    ) -> ExpenseStatistics:
        return aggregation.statistics(self._collection(user_id, expenses))
