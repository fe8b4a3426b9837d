"""
Expense Aggregation

DESIGN DECISION: Every aggregate is computed fresh from the sequence it is
given. Nothing is cached or maintained incrementally.

All functions here are pure: they take a sequence of expenses and return
a new value. ExpenseStore supplies the user's full collection when the
caller does not pass a pre-filtered one.
"""

import calendar
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Union

from finance_tracker.models.expense import (
    Category,
    Expense,
    ExpenseStatistics,
    GroupSummary,
    MonthlySummary,
    PaymentMethod,
)


DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    """Drop any time-of-day so comparisons are on calendar dates."""
    return value.date() if isinstance(value, datetime) else value


# =============================================================================
# FILTERS
# =============================================================================

def filter_by_date_range(
    expenses: Iterable[Expense],
    start: DateLike,
    end: DateLike,
) -> list[Expense]:
    """Expenses dated from start to end, both inclusive."""
    start_date, end_date = _as_date(start), _as_date(end)
    return [e for e in expenses if start_date <= e.date <= end_date]


def filter_by_month(
    expenses: Iterable[Expense],
    month_index: int,
    year: int,
) -> list[Expense]:
    """Expenses in one calendar month. month_index is 0 for January."""
    return [
        e for e in expenses
        if e.date.month - 1 == month_index and e.date.year == year
    ]


def filter_by_year(expenses: Iterable[Expense], year: int) -> list[Expense]:
    return [e for e in expenses if e.date.year == year]


def filter_by_category(
    expenses: Iterable[Expense],
    category: Union[Category, str],
) -> list[Expense]:
    return [e for e in expenses if e.category == category]


def filter_by_payment_method(
    expenses: Iterable[Expense],
    payment_method: Union[PaymentMethod, str],
) -> list[Expense]:
    return [e for e in expenses if e.payment_method == payment_method]


# =============================================================================
# AGGREGATES
# =============================================================================

def total(expenses: Iterable[Expense]) -> Decimal:
    """Sum of amounts; Decimal 0 for an empty sequence."""
    return sum((e.amount for e in expenses), Decimal("0"))


def _group(expenses: Iterable[Expense], keys, key_of) -> dict:
    """Group expenses under every key, including keys with no members."""
    grouped = {key: GroupSummary() for key in keys}
    for expense in expenses:
        group = grouped.get(key_of(expense))
        if group is None:
            continue
        group.total += expense.amount
        group.count += 1
        group.expenses.append(expense)
    return grouped


def group_by_category(
    expenses: Iterable[Expense],
) -> dict[Category, GroupSummary]:
    """
    Total, count and members per category.

    Every Category is present, in declaration order, even with no
    matching expenses.
    """
    return _group(expenses, Category, lambda e: e.category)


def group_by_payment_method(
    expenses: Iterable[Expense],
) -> dict[PaymentMethod, GroupSummary]:
    """Same contract as group_by_category, over PaymentMethod."""
    return _group(expenses, PaymentMethod, lambda e: e.payment_method)


def yearly_summary(
    expenses: Sequence[Expense],
    year: int,
) -> list[MonthlySummary]:
    """
    Twelve monthly summaries for a year, January first.

    Months without expenses are still present with zero totals.
    """
    summary = []
    for month_index in range(12):
        month_expenses = filter_by_month(expenses, month_index, year)
        summary.append(MonthlySummary(
            month_index=month_index,
            month_name=calendar.month_name[month_index + 1],
            total=total(month_expenses),
            count=len(month_expenses),
            by_category=group_by_category(month_expenses),
        ))
    return summary


def statistics(expenses: Sequence[Expense]) -> ExpenseStatistics:
    """
    Descriptive statistics.

    For an empty sequence every field is zero (average included).
    Distinct counts cover the values actually present, not the full enums.
    """
    if not expenses:
        return ExpenseStatistics()

    amounts = [e.amount for e in expenses]
    overall = total(expenses)

    return ExpenseStatistics(
        total=overall,
        count=len(expenses),
        average=overall / len(expenses),
        highest=max(amounts),
        lowest=min(amounts),
        distinct_categories=len({e.category for e in expenses}),
        distinct_payment_methods=len({e.payment_method for e in expenses}),
    )
