"""
Tests for expense validation

The validator is pure, so these tests need no storage.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from finance_tracker.errors import ValidationError
from finance_tracker.models.expense import Category, PaymentMethod
from finance_tracker.validation import (
    coerce_expense_fields,
    ensure_valid,
    fits_stored_number,
    normalize_expense_data,
    parse_amount,
    parse_date,
    parse_timestamp,
    validate_expense,
)


def valid_data(**overrides) -> dict:
    data = {
        "date": "2024-03-05",
        "category": "Grocery",
        "description": "Vegetables",
        "amount": "12.50",
        "paymentMethod": "Cash",
    }
    data.update(overrides)
    return data


class TestValidateExpense:
    """Tests for the ordered validation rules."""

    def test_valid_data_passes(self):
        """Test that complete data passes."""
        result = validate_expense(valid_data())
        assert result.valid is True

    def test_missing_date(self):
        """Test that a missing date fails first."""
        result = validate_expense(valid_data(date=""))
        assert result.valid is False
        assert result.field == "date"
        assert result.message == "Date is required"

    def test_unparseable_date(self):
        """Test that garbage in the date field fails."""
        result = validate_expense(valid_data(date="not-a-date"))
        assert result.field == "date"
        assert result.message == "Date is not a valid date"

    def test_invalid_category(self):
        """Test that unknown categories are rejected."""
        result = validate_expense(valid_data(category="Lottery"))
        assert result.field == "category"
        assert result.message == "Invalid category"

    def test_missing_category(self):
        """Test that a missing category is reported."""
        data = valid_data()
        del data["category"]
        assert validate_expense(data).message == "Category is required"

    def test_blank_description(self):
        """Test that whitespace-only descriptions fail."""
        result = validate_expense(valid_data(description="   "))
        assert result.field == "description"
        assert result.message == "Description is required"

    @pytest.mark.parametrize("amount", [-5, 0, "abc", "12abc", None, "NaN", "Infinity"])
    def test_bad_amounts(self, amount):
        """Test that non-positive, non-numeric and non-finite amounts fail."""
        result = validate_expense(valid_data(amount=amount))
        assert result.field == "amount"
        assert result.message == "Amount must be a positive number"

    @pytest.mark.parametrize("amount", ["1e400", "1e-400", "12345678901234567.89"])
    def test_amounts_that_do_not_fit_storage(self, amount):
        """Test that amounts a stored JSON number cannot hold exactly fail."""
        result = validate_expense(valid_data(amount=amount))
        assert result.field == "amount"
        assert result.message == "Amount is too large or has too many digits"

    def test_ordinary_amounts_fit_storage(self):
        """Test that everyday amounts pass the storage rule."""
        assert fits_stored_number(Decimal("12.50"))
        assert fits_stored_number(Decimal("0.1"))
        assert fits_stored_number(Decimal("15000"))

    def test_invalid_payment_method(self):
        """Test that unknown payment methods are rejected."""
        result = validate_expense(valid_data(paymentMethod="Barter"))
        assert result.field == "payment_method"
        assert result.message == "Invalid payment method"

    def test_first_failure_wins(self):
        """Test that only the first failing rule is reported."""
        result = validate_expense(valid_data(date="", amount=-1, category="Lottery"))
        assert result.field == "date"

    def test_snake_case_keys(self):
        """Test that snake_case keys are accepted too."""
        data = valid_data()
        data["payment_method"] = data.pop("paymentMethod")
        assert validate_expense(data).valid is True

    def test_typed_values(self):
        """Test that already-typed values pass."""
        result = validate_expense({
            "date": date(2024, 3, 5),
            "category": Category.RENT,
            "description": "March rent",
            "amount": Decimal("15000"),
            "payment_method": PaymentMethod.BANK_TRANSFER,
        })
        assert result.valid is True

    def test_ensure_valid_raises(self):
        """Test the raising form carries field and message."""
        with pytest.raises(ValidationError) as exc_info:
            ensure_valid(valid_data(amount=-5))
        assert exc_info.value.field == "amount"
        assert exc_info.value.message == "Amount must be a positive number"


class TestParsers:
    """Tests for the value parsers."""

    def test_parse_date_variants(self):
        """Test date parsing from text and objects."""
        assert parse_date("2024-03-05") == date(2024, 3, 5)
        assert parse_date("2024-03-05T10:00:00Z") == date(2024, 3, 5)
        assert parse_date(datetime(2024, 3, 5, 23, 59)) == date(2024, 3, 5)
        assert parse_date("05/03/2024") is None
        assert parse_date(20240305) is None

    def test_parse_amount_variants(self):
        """Test amount parsing."""
        assert parse_amount("12.50") == Decimal("12.50")
        assert parse_amount(" 7 ") == Decimal("7")
        assert parse_amount(0.1) == Decimal("0.1")
        assert parse_amount(3) == Decimal("3")
        assert parse_amount(True) is None
        assert parse_amount("12abc") is None
        assert parse_amount("") is None

    def test_parse_timestamp(self):
        """Test timestamp parsing accepts a trailing Z."""
        parsed = parse_timestamp("2024-03-05T10:00:00Z")
        assert parsed is not None
        assert parsed.utcoffset().total_seconds() == 0
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(None) is None


class TestCoercion:
    """Tests for turning validated data into typed fields."""

    def test_normalize_drops_unknown_keys(self):
        """Test that unknown keys are dropped and camelCase is mapped."""
        normalized = normalize_expense_data({"referenceNo": "R1", "color": "red"})
        assert normalized == {"reference_no": "R1"}

    def test_coerce_types_and_defaults(self):
        """Test typed output with optional text defaults."""
        fields = coerce_expense_fields(valid_data(notes=None, id="ignored"))
        assert fields["date"] == date(2024, 3, 5)
        assert fields["category"] is Category.GROCERY
        assert fields["amount"] == Decimal("12.50")
        assert fields["payment_method"] is PaymentMethod.CASH
        assert fields["notes"] == ""
        assert fields["reference_no"] == ""
        assert "id" not in fields


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
