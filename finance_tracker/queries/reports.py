"""
Reporting Helpers

Derived figures for the dashboard, analytics and settings pages:
breakdown tables, top category and payment method, monthly average,
recently used categories and currency formatting.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from finance_tracker.models.expense import (
    BreakdownRow,
    Category,
    Expense,
    GroupSummary,
    PaymentMethod,
    SummaryCards,
)
from finance_tracker.queries.aggregation import (
    filter_by_month,
    group_by_category,
    group_by_payment_method,
    total,
)


def _breakdown(grouped: dict, overall: Decimal) -> list[BreakdownRow]:
    rows = []
    for key, group in grouped.items():
        if group.total <= 0:
            continue
        share = (group.total / overall * 100).quantize(
            Decimal("0.1"), rounding=ROUND_HALF_UP
        )
        rows.append(BreakdownRow(
            name=key.value,
            total=group.total,
            count=group.count,
            percentage=float(share),
        ))
    # sorted() is stable: equal totals stay in enum order
    return sorted(rows, key=lambda row: row.total, reverse=True)


def category_breakdown(expenses: Sequence[Expense]) -> list[BreakdownRow]:
    """Categories with spending, largest total first."""
    return _breakdown(group_by_category(expenses), total(expenses))


def payment_method_breakdown(expenses: Sequence[Expense]) -> list[BreakdownRow]:
    """Payment methods with spending, largest total first."""
    return _breakdown(group_by_payment_method(expenses), total(expenses))


def _top(grouped: dict[object, GroupSummary]):
    top_key, top_total = None, Decimal("0")
    for key, group in grouped.items():
        if group.total > top_total:
            top_key, top_total = key, group.total
    return top_key


def top_category(expenses: Iterable[Expense]) -> Optional[Category]:
    """Category with the highest total; the earlier one wins a tie."""
    return _top(group_by_category(expenses))


def top_payment_method(expenses: Iterable[Expense]) -> Optional[PaymentMethod]:
    """Payment method with the highest total; the earlier one wins a tie."""
    return _top(group_by_payment_method(expenses))


def short_payment_name(method: PaymentMethod) -> str:
    """'Credit Card - HDFC' -> 'Credit Card'; names without a bank stay as they are."""
    return method.value.split(" - ")[0]


def monthly_average(
    expenses: Iterable[Expense],
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> Decimal:
    """
    Average spend per month.

    With a year selected the total is spread over 12 months, otherwise
    over the months elapsed so far this year.
    """
    if year is not None:
        months = 12
    else:
        months = (today or date.today()).month
    return total(expenses) / months


def current_month_total(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> Decimal:
    today = today or date.today()
    return total(filter_by_month(expenses, today.month - 1, today.year))


def recent_categories(
    expenses: Sequence[Expense],
    limit: int = 10,
) -> list[Category]:
    """Distinct categories among the last `limit` expenses, in first-seen order."""
    recent = expenses[-limit:] if limit > 0 else []
    return list(dict.fromkeys(e.category for e in recent))


def summary_cards(
    expenses: Sequence[Expense],
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> SummaryCards:
    return SummaryCards(
        total=total(expenses),
        monthly_average=monthly_average(expenses, year=year, today=today),
        top_category=top_category(expenses),
        top_payment_method=top_payment_method(expenses),
    )


def format_currency(amount: Decimal, symbol: str = "₹") -> str:
    """Format an amount for display, e.g. ₹1,234.50."""
    rounded = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{rounded:,.2f}"
