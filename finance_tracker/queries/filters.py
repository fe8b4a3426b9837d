"""
Dashboard Filtering

Combines the single-purpose filters into the dashboard's filter bar:
month and year, category, payment method, newest first.
"""

from collections.abc import Iterable
from typing import Optional

from pydantic import BaseModel, Field

from finance_tracker.models.expense import Category, Expense, PaymentMethod
from finance_tracker.queries.aggregation import (
    filter_by_category,
    filter_by_month,
    filter_by_payment_method,
    filter_by_year,
)


class ExpenseFilter(BaseModel):
    """
    Filter bar selection. Every field is optional.

    A month is only applied together with a year; a month on its own
    is ignored.
    """

    month_index: Optional[int] = Field(
        default=None,
        ge=0,
        le=11,
        description="0 for January through 11 for December"
    )
    year: Optional[int] = None
    category: Optional[Category] = None
    payment_method: Optional[PaymentMethod] = None


def sort_newest_first(expenses: Iterable[Expense]) -> list[Expense]:
    """Sort by date descending. Expenses on the same date keep their order."""
    return sorted(expenses, key=lambda e: e.date, reverse=True)


def apply_filter(
    expenses: Iterable[Expense],
    flt: ExpenseFilter,
) -> list[Expense]:
    """Apply a filter bar selection and sort the result newest first."""
    filtered = list(expenses)

    if flt.year is not None:
        if flt.month_index is not None:
            filtered = filter_by_month(filtered, flt.month_index, flt.year)
        else:
            filtered = filter_by_year(filtered, flt.year)

    if flt.category is not None:
        filtered = filter_by_category(filtered, flt.category)

    if flt.payment_method is not None:
        filtered = filter_by_payment_method(filtered, flt.payment_method)

    return sort_newest_first(filtered)
