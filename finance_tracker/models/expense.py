"""
Core Data Models for Finance Tracker

These models define the schemas for all data flowing through the expense core.
They are designed to:
1. Enforce the record invariants at runtime
2. Serialize to the same camelCase JSON layout the web client stores
3. Carry operation outcomes back to callers as values

DESIGN DECISION: Amounts are Decimal, never float.
Totals and averages are computed exactly and only rounded for display.
"""

import datetime as dt
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Closed sets of valid values
# =============================================================================

class Category(str, Enum):
    """
    Expense categories.

    DESIGN DECISION: The set is closed and defined once for the whole system.
    Users cannot add categories of their own.
    """
    GROCERY = "Grocery"
    TRAVEL = "Travel"
    ORDERED_FOOD = "Ordered Food"
    FAMILY_TRANSFER = "Family Transfer"
    SAVINGS = "Savings"
    SUBSCRIPTIONS = "Subscriptions"
    RENT = "Rent"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    TRANSPORTATION = "Transportation"
    PERSONAL_CARE = "Personal Care"
    INSURANCE = "Insurance"
    DINING_OUT = "Dining Out"
    GIFTS = "Gifts"
    INVESTMENTS = "Investments"
    BILLS = "Bills"
    FITNESS = "Fitness"
    HOBBIES = "Hobbies"
    DONATIONS = "Donations"
    HOME_MAINTENANCE = "Home Maintenance"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    """How an expense was paid."""
    CREDIT_CARD_HDFC = "Credit Card - HDFC"
    CREDIT_CARD_ICICI = "Credit Card - ICICI"
    CREDIT_CARD_SBI = "Credit Card - SBI"
    CREDIT_CARD_AXIS = "Credit Card - Axis"
    DEBIT_CARD_HDFC = "Debit Card - HDFC"
    DEBIT_CARD_ICICI = "Debit Card - ICICI"
    DEBIT_CARD_SBI = "Debit Card - SBI"
    DEBIT_CARD_AXIS = "Debit Card - Axis"
    UPI_GOOGLE_PAY = "UPI - Google Pay"
    UPI_PHONEPE = "UPI - PhonePe"
    UPI_PAYTM = "UPI - Paytm"
    UPI_BHIM = "UPI - BHIM"
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    NET_BANKING = "Net Banking"
    WALLET_PAYTM = "Wallet - Paytm"
    WALLET_AMAZON_PAY = "Wallet - Amazon Pay"
    OTHER = "Other"


class ErrorKind(str, Enum):
    """Why an operation failed."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    NO_SESSION = "no_session"
    MALFORMED_IMPORT = "malformed_import"
    STORAGE = "storage"


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A single expense owned by one user.

    CRITICAL: Expenses are only created by ExpenseStore.add (or import),
    which validates the input first. `id` and `created_at` never change
    after creation.

    Python attributes are snake_case; the serialized form uses the
    camelCase keys of the browser client (paymentMethod, referenceNo, ...).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Unique expense ID, generated by the store"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )
    category: Category
    description: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount spent"
    )
    payment_method: PaymentMethod
    reference_no: str = Field(
        default="",
        description="Transaction or receipt reference"
    )
    notes: str = ""

    created_at: datetime = Field(
        ...,
        description="When the expense was first recorded"
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last successful update, absent if never updated"
    )

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, amount: Decimal) -> float:
        """Exported files carry amounts as plain JSON numbers."""
        return float(amount)

    def to_storage_dict(self) -> dict:
        """Convert to the camelCase dict used in stored and exported JSON."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class ExpenseValidationResult(BaseModel):
    """
    Verdict of the expense validation rules.

    Only the first failing rule is reported.
    """

    valid: bool
    message: str = ""
    field: Optional[str] = Field(
        default=None,
        description="Field that failed, None when valid"
    )

    @classmethod
    def ok(cls) -> "ExpenseValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, field: str, message: str) -> "ExpenseValidationResult":
        return cls(valid=False, field=field, message=message)


class OperationResult(BaseModel):
    """
    Outcome of a mutating or bulk operation.

    Public store operations always return one of these instead of
    raising, so callers branch on `success` and `error_kind`.
    """

    success: bool
    message: str
    error_kind: Optional[ErrorKind] = None

    # The created or updated record, when there is one
    expense: Optional[Expense] = None

    # Bulk import counters
    imported_count: int = Field(default=0, ge=0)
    skipped_count: int = Field(default=0, ge=0)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "OperationResult":
        return cls(success=False, error_kind=kind, message=message)


# =============================================================================
# AGGREGATION MODELS
# =============================================================================

class GroupSummary(BaseModel):
    """Total, count and members of one category or payment-method group."""

    total: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    expenses: list[Expense] = Field(default_factory=list)


class MonthlySummary(BaseModel):
    """One calendar month of a yearly summary."""

    month_index: int = Field(
        ...,
        ge=0,
        le=11,
        description="0 for January through 11 for December"
    )
    month_name: str
    total: Decimal
    count: int = Field(ge=0)
    by_category: dict[Category, GroupSummary]


class ExpenseStatistics(BaseModel):
    """
    Descriptive statistics over a set of expenses.

    Every numeric field is zero for an empty set.
    """

    total: Decimal = Decimal("0")
    count: int = 0
    average: Decimal = Decimal("0")
    highest: Decimal = Decimal("0")
    lowest: Decimal = Decimal("0")
    distinct_categories: int = 0
    distinct_payment_methods: int = 0


class BreakdownRow(BaseModel):
    """One row of a category or payment-method table."""

    name: str
    total: Decimal
    count: int
    percentage: float = Field(
        ...,
        description="Share of the overall total, rounded to one decimal"
    )


class SummaryCards(BaseModel):
    """Headline figures for the analytics page."""

    total: Decimal
    monthly_average: Decimal
    top_category: Optional[Category] = None
    top_payment_method: Optional[PaymentMethod] = None
