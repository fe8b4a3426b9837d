"""Expense validation package."""

from finance_tracker.validation.validator import (
    coerce_expense_fields,
    ensure_valid,
    fits_stored_number,
    normalize_expense_data,
    parse_amount,
    parse_date,
    parse_timestamp,
    validate_expense,
)

__all__ = [
    "coerce_expense_fields",
    "ensure_valid",
    "fits_stored_number",
    "normalize_expense_data",
    "parse_amount",
    "parse_date",
    "parse_timestamp",
    "validate_expense",
]
