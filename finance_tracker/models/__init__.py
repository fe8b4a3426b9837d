"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the expense core must conform to these schemas.
"""

from finance_tracker.models.expense import (
    BreakdownRow,
    Category,
    ErrorKind,
    Expense,
    ExpenseStatistics,
    ExpenseValidationResult,
    GroupSummary,
    MonthlySummary,
    OperationResult,
    PaymentMethod,
    SummaryCards,
)
from finance_tracker.models.account import AccountResult, Session, User
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "BreakdownRow",
    "Category",
    "ErrorKind",
    "Expense",
    "ExpenseStatistics",
    "ExpenseValidationResult",
    "GroupSummary",
    "MonthlySummary",
    "OperationResult",
    "PaymentMethod",
    "SummaryCards",
    # Account models
    "AccountResult",
    "Session",
    "User",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
