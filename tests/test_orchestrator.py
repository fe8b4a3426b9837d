"""
Integration tests for the page-level flows

Components are wired with create_app_components against an in-memory
or temporary-directory substrate.
"""

import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.config import Settings
from finance_tracker.models.expense import Category, ErrorKind
from finance_tracker.orchestrator import create_app_components, create_storage
from finance_tracker.queries import ExpenseFilter
from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)


@pytest.fixture
def components():
    return create_app_components(settings=Settings(), storage=InMemoryKeyValueStore())


@pytest.fixture
def tracker(components):
    tracker, accounts, _ = components
    accounts.register("alice", "secret1")
    accounts.login("alice", "secret1")
    return tracker


def entry(**overrides) -> dict:
    data = {
        "date": "2024-03-05",
        "category": "Grocery",
        "description": "Vegetables",
        "amount": 100,
        "paymentMethod": "Cash",
    }
    data.update(overrides)
    return data


class TestWiring:
    """Tests for create_app_components."""

    def test_memory_backend(self, monkeypatch):
        """Test the memory backend is selected from the environment."""
        monkeypatch.setenv("FINANCE_TRACKER_STORAGE_BACKEND", "memory")
        assert isinstance(create_storage(Settings()), InMemoryKeyValueStore)

    def test_file_backend(self, monkeypatch, tmp_path):
        """Test the file backend uses the configured directory."""
        monkeypatch.setenv("FINANCE_TRACKER_STORAGE_BACKEND", "file")
        monkeypatch.setenv("FINANCE_TRACKER_STORAGE_DATA_DIR", str(tmp_path))
        storage = create_storage(Settings())
        assert isinstance(storage, JsonFileKeyValueStore)
        assert storage.data_dir == tmp_path

    def test_key_prefix_from_settings(self, monkeypatch):
        """Test storage keys follow the configured prefix."""
        monkeypatch.setenv("FINANCE_TRACKER_STORAGE_KEY_PREFIX", "ft")
        storage = InMemoryKeyValueStore()
        tracker, accounts, _ = create_app_components(settings=Settings(), storage=storage)
        accounts.register("alice", "secret1")
        accounts.login("alice", "secret1")
        tracker.add_expense(entry())

        user_id = accounts.current_user_identity()
        assert sorted(storage.keys()) == sorted([
            "ft_users", "ft_session", f"ft_expenses_{user_id}",
        ])


class TestFlows:
    """Tests for the FinanceTracker facade."""

    def test_no_session(self, components):
        """Test that nothing is accessible before login."""
        tracker, _, _ = components
        result = tracker.add_expense(entry())
        assert result.error_kind == ErrorKind.NO_SESSION
        assert tracker.dashboard().expenses == []

    def test_entry_flow(self, tracker):
        """Test add, edit and delete through the facade."""
        added = tracker.add_expense(entry()).expense
        assert tracker.update_expense(added.id, {"amount": "120"}).success
        assert tracker.get_expense(added.id).amount == 120
        assert tracker.recent_categories() == [Category.GROCERY]
        assert tracker.delete_expense(added.id).success
        assert tracker.get_expense(added.id) is None

    def test_dashboard(self, tracker):
        """Test filtered statistics and the unfiltered month total."""
        tracker.add_expense(entry(date="2024-03-02", amount=100))
        tracker.add_expense(entry(date="2024-04-10", amount=50, category="Travel"))

        view = tracker.dashboard(
            ExpenseFilter(category="Travel"), today=date(2024, 3, 20)
        )
        assert [e.category for e in view.expenses] == [Category.TRAVEL]
        assert view.statistics.total == 50
        assert view.current_month_total == 100

    def test_analytics(self, tracker):
        """Test the analytics view for one year."""
        tracker.add_expense(entry(date="2024-03-02", amount=100))
        tracker.add_expense(entry(date="2023-03-02", amount=999))

        view = tracker.analytics(2024)
        assert view.cards.total == 100
        assert len(view.monthly) == 12
        assert view.categories[0].name == "Grocery"
        assert view.categories[0].percentage == 100.0

    def test_settings_flow(self, tracker):
        """Test export, clear and re-import."""
        tracker.add_expense(entry())
        tracker.add_expense(entry(amount=5))
        exported = tracker.export_data()

        assert tracker.clear_all_data().success
        assert tracker.dashboard().expenses == []

        result = tracker.import_data(exported)
        assert result.imported_count == 2
        assert len(tracker.dashboard().expenses) == 2

    def test_corrupt_session_fails_mutations(self, components):
        """Test that an unreadable session turns mutations into STORAGE failures."""
        tracker, _, storage = components
        storage.set("financeTracker_session", "{not json")

        results = [
            tracker.add_expense(entry()),
            tracker.update_expense("e1", {"amount": 5}),
            tracker.delete_expense("e1"),
            tracker.import_data("[]"),
            tracker.clear_all_data(),
        ]
        for result in results:
            assert result.success is False
            assert result.error_kind == ErrorKind.STORAGE
            assert result.message.startswith("Storage error")

    def test_format_amount_uses_configured_symbol(self, monkeypatch):
        """Test the currency symbol comes from settings."""
        monkeypatch.setenv("FINANCE_TRACKER_CURRENCY_SYMBOL", "$")
        tracker, _, _ = create_app_components(
            settings=Settings(), storage=InMemoryKeyValueStore()
        )
        assert tracker.format_amount(Decimal("1234.5")) == "$1,234.50"

    def test_users_are_isolated(self, components):
        """Test one user's expenses are invisible to another."""
        tracker, accounts, _ = components
        accounts.register("alice", "secret1")
        accounts.register("bob_1", "secret2")

        accounts.login("alice", "secret1")
        tracker.add_expense(entry())
        accounts.logout()

        accounts.login("bob_1", "secret2")
        assert tracker.dashboard().expenses == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
