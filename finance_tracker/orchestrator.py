"""
Main Orchestrator for Finance Tracker

This module ties the components together and defines the page-level
flows the UI calls:
1. Expense entry (add / edit / delete)
2. Dashboard (filter bar, statistics, this month's total)
3. Analytics (yearly summary, breakdown tables, summary cards)
4. Settings (export, import, clear all)

DESIGN DECISION: The orchestrator is the only place that reads the
session. It resolves the current user once per call and hands the id
to ExpenseStore explicitly.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, Field

from finance_tracker.accounts import AccountService
from finance_tracker.audit import AuditLogger, configure_logging
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.expense import (
    BreakdownRow,
    Category,
    ErrorKind,
    Expense,
    ExpenseStatistics,
    MonthlySummary,
    OperationResult,
    SummaryCards,
)
from finance_tracker.queries import (
    ExpenseFilter,
    category_breakdown,
    current_month_total,
    filter_by_year,
    format_currency,
    payment_method_breakdown,
    summary_cards,
)
from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageError,
)
from finance_tracker.store import ExpenseStore


class DashboardView(BaseModel):
    """Everything the dashboard page shows."""

    expenses: list[Expense] = Field(default_factory=list)
    statistics: ExpenseStatistics
    current_month_total: Decimal = Decimal("0")


class AnalyticsView(BaseModel):
    """Everything the analytics page shows for one year."""

    year: int
    cards: SummaryCards
    monthly: list[MonthlySummary]
    categories: list[BreakdownRow]
    payment_methods: list[BreakdownRow]


class FinanceTracker:
    """
    Page-level flows over ExpenseStore for whoever is logged in.

    Without a session every query is empty and every mutation fails
    with ErrorKind.NO_SESSION.
    """

    def __init__(
        self,
        store: ExpenseStore,
        accounts: AccountService,
        recent_categories_limit: int = 10,
        currency_symbol: str = "₹",
    ):
        self._store = store
        self._accounts = accounts
        self._recent_limit = recent_categories_limit
        self._currency_symbol = currency_symbol

    @property
    def store(self) -> ExpenseStore:
        return self._store

    @property
    def accounts(self) -> AccountService:
        return self._accounts

    def _user_id(self) -> Optional[str]:
        return self._accounts.current_user_identity()

    def _mutate(
        self,
        operation: Callable[[Optional[str]], OperationResult],
    ) -> OperationResult:
        """
        Run a store mutation for the current user.

        A session that cannot be read fails the mutation with
        ErrorKind.STORAGE instead of raising.
        """
        try:
            user_id = self._user_id()
        except StorageError as e:
            return OperationResult.failure(ErrorKind.STORAGE, f"Storage error: {e}")
        return operation(user_id)

    # Expense entry

    def add_expense(self, data: Mapping[str, Any]) -> OperationResult:
        return self._mutate(lambda user_id: self._store.add(user_id, data))

    def update_expense(self, expense_id: str, data: Mapping[str, Any]) -> OperationResult:
        return self._mutate(
            lambda user_id: self._store.update(user_id, expense_id, data)
        )

    def delete_expense(self, expense_id: str) -> OperationResult:
        return self._mutate(lambda user_id: self._store.delete(user_id, expense_id))

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        return self._store.get_by_id(self._user_id(), expense_id)

    def recent_categories(self) -> list[Category]:
        return self._store.recent_categories(self._user_id(), self._recent_limit)

    def format_amount(self, amount: Decimal) -> str:
        return format_currency(amount, self._currency_symbol)

    # Dashboard

    def dashboard(
        self,
        flt: Optional[ExpenseFilter] = None,
        today: Optional[date] = None,
    ) -> DashboardView:
        """
        Filtered expenses (newest first) with their statistics.

        This month's total always covers the whole collection.
        """
        user_id = self._user_id()
        all_expenses = self._store.list_expenses(user_id)
        shown = self._store.query(user_id, flt or ExpenseFilter())
        return DashboardView(
            expenses=shown,
            statistics=self._store.statistics(user_id, shown),
            current_month_total=current_month_total(all_expenses, today),
        )

    # Analytics

    def analytics(self, year: int, today: Optional[date] = None) -> AnalyticsView:
        user_id = self._user_id()
        year_expenses = filter_by_year(self._store.list_expenses(user_id), year)
        return AnalyticsView(
            year=year,
            cards=summary_cards(year_expenses, year=year, today=today),
            monthly=self._store.yearly_summary(user_id, year),
            categories=category_breakdown(year_expenses),
            payment_methods=payment_method_breakdown(year_expenses),
        )

    # Settings

    def export_data(self) -> str:
        return self._store.export_as_serialized_text(self._user_id())

    def import_data(self, text: str) -> OperationResult:
        return self._mutate(
            lambda user_id: self._store.import_from_serialized_text(user_id, text)
        )

    def clear_all_data(self) -> OperationResult:
        return self._mutate(self._store.clear_all)


def create_storage(settings: Settings) -> KeyValueStore:
    """Build the configured storage substrate."""
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(storage_settings.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStore] = None,
) -> tuple[FinanceTracker, AccountService, KeyValueStore]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (the cached settings by default)
        storage: Substrate to use instead of the configured one

    Returns:
        (finance_tracker, account_service, storage)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    configure_logging(app_settings.log_level)
    audit_logger = AuditLogger()

    storage = storage or create_storage(settings)

    store = ExpenseStore(
        storage,
        key_prefix=storage_settings.key_prefix,
        audit_logger=audit_logger,
    )
    accounts = AccountService(
        storage,
        users_key=storage_settings.users_key,
        session_key=storage_settings.session_key,
        max_users=app_settings.max_users,
        audit_logger=audit_logger,
    )
    tracker = FinanceTracker(
        store,
        accounts,
        recent_categories_limit=app_settings.recent_categories_limit,
        currency_symbol=app_settings.currency_symbol,
    )
    return tracker, accounts, storage
