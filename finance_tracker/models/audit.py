"""
Audit Models for Finance Tracker

Every change to a user's expenses or account is described by an AuditEvent.
This provides:
1. Traceability of every mutation
2. Debugging information when an operation is rejected
3. A record of storage failures that were reported to the caller

DESIGN DECISION: Audit events are written to the structured log only.
They are never stored next to the expense data.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    VALIDATION_FAILED = "validation_failed"
    OPERATION_REJECTED = "operation_rejected"

    # Bulk operations
    EXPENSES_IMPORTED = "expenses_imported"
    EXPENSES_EXPORTED = "expenses_exported"
    EXPENSES_CLEARED = "expenses_cleared"

    # Accounts
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"
    LOGIN_FAILED = "login_failed"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - who and what is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="Owner of the affected data, if any"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'user')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(user_id, expense_id, "Grocery", "125.00")
        event = AuditEventBuilder.storage_error(user_id, "save", str(exc))
    """

    @staticmethod
    def expense_added(
        user_id: str,
        expense_id: str,
        category: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            user_id=user_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
        )

    @staticmethod
    def expense_updated(
        user_id: str,
        expense_id: str,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            user_id=user_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated ({len(changed_fields)} fields supplied)",
            details={"fields": changed_fields},
        )

    @staticmethod
    def expense_deleted(user_id: str, expense_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            user_id=user_id,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def validation_failed(
        user_id: Optional[str],
        operation: str,
        field: Optional[str],
        message: str,
        expense_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"{operation.capitalize()} rejected: {message}",
            details={
                "operation": operation,
                "field": field,
            },
        )

    @staticmethod
    def operation_rejected(
        user_id: Optional[str],
        operation: str,
        reason: str,
        expense_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"{operation.capitalize()} rejected: {reason}",
            details={"operation": operation},
        )

    @staticmethod
    def expenses_imported(
        user_id: str,
        imported: int,
        skipped: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_IMPORTED,
            user_id=user_id,
            description=f"Imported {imported} expenses, skipped {skipped}",
            details={
                "imported_count": imported,
                "skipped_count": skipped,
            },
        )

    @staticmethod
    def expenses_exported(user_id: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_EXPORTED,
            user_id=user_id,
            description=f"Exported {count} expenses",
            details={"count": count},
        )

    @staticmethod
    def expenses_cleared(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_CLEARED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description="All expenses cleared",
        )

    @staticmethod
    def user_registered(user_id: str, username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"User registered: {username}",
        )

    @staticmethod
    def user_logged_in(user_id: str, username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"User logged in: {username}",
        )

    @staticmethod
    def user_logged_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User logged out",
        )

    @staticmethod
    def login_failed(username: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description=f"Login failed: {reason}",
            details={"username": username},
        )

    @staticmethod
    def storage_error(
        user_id: Optional[str],
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )
