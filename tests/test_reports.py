"""
Tests for the pure query and reporting helpers

These build Expense records directly; no store is involved.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from finance_tracker.models.expense import Category, Expense, PaymentMethod
from finance_tracker.queries import (
    ExpenseFilter,
    apply_filter,
    category_breakdown,
    current_month_total,
    format_currency,
    monthly_average,
    payment_method_breakdown,
    recent_categories,
    short_payment_name,
    sort_newest_first,
    statistics,
    summary_cards,
    top_category,
    top_payment_method,
    yearly_summary,
)


def expense(
    day: date,
    amount: str,
    category: Category = Category.GROCERY,
    method: PaymentMethod = PaymentMethod.CASH,
    expense_id: str = "e",
) -> Expense:
    return Expense(
        id=expense_id,
        date=day,
        category=category,
        description="item",
        amount=Decimal(amount),
        payment_method=method,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample():
    return [
        expense(date(2024, 3, 2), "300", Category.RENT, PaymentMethod.BANK_TRANSFER, "a"),
        expense(date(2024, 3, 5), "50", Category.GROCERY, PaymentMethod.UPI_PAYTM, "b"),
        expense(date(2024, 4, 1), "150", Category.GROCERY, PaymentMethod.CASH, "c"),
    ]


class TestBreakdowns:
    """Tests for category and payment method tables."""

    def test_category_breakdown(self, sample):
        """Test rows, order and percentages."""
        rows = category_breakdown(sample)
        assert [r.name for r in rows] == ["Rent", "Grocery"]
        assert rows[0].percentage == 60.0
        assert rows[1].total == Decimal("200")
        assert rows[1].count == 2

    def test_percentage_rounding(self):
        """Test that shares are rounded to one decimal."""
        rows = payment_method_breakdown([
            expense(date(2024, 1, 1), "1", method=PaymentMethod.CASH),
            expense(date(2024, 1, 1), "2", method=PaymentMethod.NET_BANKING),
        ])
        assert [r.percentage for r in rows] == [66.7, 33.3]

    def test_empty_breakdown(self):
        """Test that nothing spent means no rows."""
        assert category_breakdown([]) == []


class TestTopAndAverages:
    """Tests for headline figures."""

    def test_top_category_and_method(self, sample):
        """Test highest-total selection."""
        assert top_category(sample) == Category.RENT
        assert top_payment_method(sample) == PaymentMethod.BANK_TRANSFER

    def test_top_tie_goes_to_earlier_member(self):
        """Test that ties resolve in declaration order."""
        tied = [
            expense(date(2024, 1, 1), "10", Category.TRAVEL),
            expense(date(2024, 1, 1), "10", Category.GROCERY),
        ]
        assert top_category(tied) == Category.GROCERY

    def test_top_of_nothing(self):
        """Test that no spending has no top category."""
        assert top_category([]) is None

    def test_monthly_average(self, sample):
        """Test the divisor for a selected year and for the current year."""
        assert monthly_average(sample, year=2024) == Decimal("500") / 12
        assert monthly_average(sample, today=date(2024, 4, 15)) == Decimal("125")

    def test_current_month_total(self, sample):
        """Test this month's total."""
        assert current_month_total(sample, today=date(2024, 3, 31)) == Decimal("350")
        assert current_month_total(sample, today=date(2025, 3, 31)) == 0

    def test_summary_cards(self, sample):
        """Test the analytics summary cards."""
        cards = summary_cards(sample, year=2024)
        assert cards.total == Decimal("500")
        assert cards.top_category == Category.RENT


class TestYearlyAndStatistics:
    """Tests for yearly summary and statistics on plain lists."""

    def test_yearly_summary_sparse(self):
        """Test that an empty year still has twelve zero months."""
        summary = yearly_summary([], 2024)
        assert [m.month_index for m in summary] == list(range(12))
        assert all(m.total == 0 for m in summary)
        assert summary[11].month_name == "December"

    def test_statistics(self, sample):
        """Test statistics over a plain list."""
        stats = statistics(sample)
        assert stats.count == 3
        assert stats.highest == Decimal("300")
        assert stats.lowest == Decimal("50")


class TestFiltersAndHelpers:
    """Tests for filter bar and small helpers."""

    def test_month_without_year_is_ignored(self, sample):
        """Test that a month alone does not filter."""
        assert len(apply_filter(sample, ExpenseFilter(month_index=2))) == 3

    def test_year_only(self, sample):
        """Test a year filter with no month."""
        assert apply_filter(sample, ExpenseFilter(year=2023)) == []

    def test_payment_method_filter(self, sample):
        """Test filtering by payment method."""
        found = apply_filter(sample, ExpenseFilter(payment_method="Cash"))
        assert [e.id for e in found] == ["c"]

    def test_month_index_bounds(self):
        """Test that month_index must be 0-11."""
        with pytest.raises(ValueError):
            ExpenseFilter(month_index=12)

    def test_sort_is_stable(self):
        """Test that same-day expenses keep their order."""
        same_day = [
            expense(date(2024, 1, 1), "1", expense_id="x"),
            expense(date(2024, 1, 1), "1", expense_id="y"),
            expense(date(2024, 2, 1), "1", expense_id="z"),
        ]
        assert [e.id for e in sort_newest_first(same_day)] == ["z", "x", "y"]

    def test_recent_categories(self):
        """Test distinct categories from the latest records."""
        records = [
            expense(date(2024, 1, 1), "1", Category.RENT),
            expense(date(2024, 1, 2), "1", Category.TRAVEL),
            expense(date(2024, 1, 3), "1", Category.GROCERY),
            expense(date(2024, 1, 4), "1", Category.TRAVEL),
        ]
        assert recent_categories(records, limit=3) == [Category.TRAVEL, Category.GROCERY]
        assert recent_categories(records, limit=0) == []

    def test_short_payment_name(self):
        """Test bank names are dropped for display."""
        assert short_payment_name(PaymentMethod.CREDIT_CARD_HDFC) == "Credit Card"
        assert short_payment_name(PaymentMethod.CASH) == "Cash"

    def test_format_currency(self):
        """Test display formatting."""
        assert format_currency(Decimal("1234.5")) == "₹1,234.50"
        assert format_currency(Decimal("0.005"), symbol="$") == "$0.01"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
