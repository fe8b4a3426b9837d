"""
Expense Validation

DESIGN DECISION: One pure function gates every create, update and import.
Rules run in a fixed order and the first failure wins:

1. date           - present and parseable as a calendar date
2. category       - present and one of the Category values
3. description    - non-empty after trimming
4. amount         - numeric, finite, greater than zero and exactly
                    representable as a stored JSON number
5. payment method - present and one of the PaymentMethod values

The validator never touches storage and never fixes anything.
It reports the first problem and the caller decides what to do.
"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic.alias_generators import to_camel

from finance_tracker.errors import ValidationError
from finance_tracker.models.expense import (
    Category,
    Expense,
    ExpenseValidationResult,
    PaymentMethod,
)


# Both the snake_case attribute and the camelCase wire key map to the attribute
_FIELD_NAMES: dict[str, str] = {}
for _name in Expense.model_fields:
    _FIELD_NAMES[_name] = _name
    _FIELD_NAMES[to_camel(_name)] = _name

EDITABLE_FIELDS = (
    "date",
    "category",
    "description",
    "amount",
    "payment_method",
    "reference_no",
    "notes",
)
OPTIONAL_TEXT_FIELDS = ("reference_no", "notes")


def normalize_expense_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Map incoming keys onto Expense attribute names.

    Accepts camelCase (paymentMethod) or snake_case (payment_method)
    keys. Unknown keys are dropped.
    """
    normalized = {}
    for key, value in data.items():
        name = _FIELD_NAMES.get(key)
        if name is not None:
            normalized[name] = value
    return normalized


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a calendar date.

    Accepts date and datetime objects and ISO-8601 text. Datetimes are
    reduced to their date. Returns None when the value is not a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse an amount into a Decimal.

    Numeric text must be a complete number ("12abc" is rejected).
    May return NaN or infinity; the amount rule rejects those.
    Returns None when the value is not numeric at all.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return Decimal(text)
        except InvalidOperation:
            return None
    return None


def fits_stored_number(amount: Decimal) -> bool:
    """
    True if the amount survives storage as a JSON number unchanged.

    Stored amounts are plain JSON numbers, so anything a double cannot
    hold exactly (overflow, underflow, more than ~17 significant
    digits) would come back different or not at all.
    """
    return Decimal(repr(float(amount))) == amount


def _enum_member(enum_cls: type[Enum], value: Any) -> Optional[Enum]:
    """Return the enum member for a value, or None if it is not one."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_expense(data: Mapping[str, Any]) -> ExpenseValidationResult:
    """
    Validate candidate expense data.

    `data` may use camelCase or snake_case keys. Returns the verdict for
    the first failing rule, or a passing result.
    """
    fields = normalize_expense_data(data)

    # 1. Date
    raw_date = fields.get("date")
    if _is_blank(raw_date):
        return ExpenseValidationResult.fail("date", "Date is required")
    if parse_date(raw_date) is None:
        return ExpenseValidationResult.fail("date", "Date is not a valid date")

    # 2. Category
    raw_category = fields.get("category")
    if _is_blank(raw_category):
        return ExpenseValidationResult.fail("category", "Category is required")
    if _enum_member(Category, raw_category) is None:
        return ExpenseValidationResult.fail("category", "Invalid category")

    # 3. Description
    description = fields.get("description")
    if not isinstance(description, str) or not description.strip():
        return ExpenseValidationResult.fail("description", "Description is required")

    # 4. Amount (is_finite first: ordering a NaN Decimal raises)
    amount = parse_amount(fields.get("amount"))
    if amount is None or not amount.is_finite() or amount <= 0:
        return ExpenseValidationResult.fail(
            "amount", "Amount must be a positive number"
        )
    if not fits_stored_number(amount):
        return ExpenseValidationResult.fail(
            "amount", "Amount is too large or has too many digits"
        )

    # 5. Payment method
    raw_method = fields.get("payment_method")
    if _is_blank(raw_method):
        return ExpenseValidationResult.fail(
            "payment_method", "Payment method is required"
        )
    if _enum_member(PaymentMethod, raw_method) is None:
        return ExpenseValidationResult.fail("payment_method", "Invalid payment method")

    return ExpenseValidationResult.ok()


def ensure_valid(data: Mapping[str, Any]) -> None:
    """
    Raising form of validate_expense.

    Raises:
        ValidationError: carrying the first failing field and its message
    """
    result = validate_expense(data)
    if not result.valid:
        raise ValidationError(result.message, field=result.field)


def coerce_expense_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert validated data into typed Expense attributes.

    Only call this after validate_expense passed. Returns just the
    user-editable fields; optional text fields that are missing or None
    become "".
    """
    normalized = normalize_expense_data(data)
    fields = {name: normalized.get(name) for name in EDITABLE_FIELDS}
    fields["date"] = parse_date(fields["date"])
    fields["category"] = _enum_member(Category, fields["category"])
    fields["description"] = fields["description"].strip()
    fields["amount"] = parse_amount(fields["amount"])
    fields["payment_method"] = _enum_member(PaymentMethod, fields["payment_method"])
    for name in OPTIONAL_TEXT_FIELDS:
        value = fields.get(name)
        fields[name] = "" if value is None else str(value)
    return fields


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (a trailing Z is accepted); None if invalid."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
