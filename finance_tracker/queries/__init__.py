"""Expense query and reporting package."""

from finance_tracker.queries.aggregation import (
    filter_by_category,
    filter_by_date_range,
    filter_by_month,
    filter_by_payment_method,
    filter_by_year,
    group_by_category,
    group_by_payment_method,
    statistics,
    total,
    yearly_summary,
)
from finance_tracker.queries.filters import (
    ExpenseFilter,
    apply_filter,
    sort_newest_first,
)
from finance_tracker.queries.reports import (
    category_breakdown,
    current_month_total,
    format_currency,
    monthly_average,
    payment_method_breakdown,
    recent_categories,
    short_payment_name,
    summary_cards,
    top_category,
    top_payment_method,
)

__all__ = [
    "ExpenseFilter",
    "apply_filter",
    "category_breakdown",
    "current_month_total",
    "filter_by_category",
    "filter_by_date_range",
    "filter_by_month",
    "filter_by_payment_method",
    "filter_by_year",
    "format_currency",
    "group_by_category",
    "group_by_payment_method",
    "monthly_average",
    "payment_method_breakdown",
    "recent_categories",
    "short_payment_name",
    "sort_newest_first",
    "statistics",
    "summary_cards",
    "top_category",
    "top_payment_method",
    "total",
]
