"""Tests for the key-value store, repositories and audit storage."""

from decimal import Decimal
from uuid import uuid4

import pytest

from fintrack.models import AuditEventBuilder, Currency, Expense, Payment
from fintrack.services.storage import (
    CorruptRecordError,
    DuplicateError,
    ExpenseRepository,
    IncomeRepository,
    InMemoryKeyValueStore,
    KeyValueAuditStorage,
    NotFoundError,
    PaymentRepository,
    PreferenceStore,
    StorageError,
)
from fintrack.services.storage.repositories import (
    EXPENSES_KEY,
    PREFERRED_CURRENCY_KEY,
)


class TestInMemoryKeyValueStore:
    """Tests for InMemoryKeyValueStore."""

    def test_get_set_delete(self, store):
        """Test the basic key-value round trip."""
        assert store.get("missing") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        assert store.delete("k") is True
        assert store.delete("k") is False

    def test_values_must_be_strings(self, store):
        """Test non-string values are refused."""
        with pytest.raises(TypeError):
            store.set("k", 1)

    def test_keys_and_dump(self):
        """Test keys() and dump() reflect the contents."""
        store = InMemoryKeyValueStore({"a": "1"})
        store.set("b", "2")
        assert sorted(store.keys()) == ["a", "b"]
        assert store.dump() == {"a": "1", "b": "2"}


class TestRecordRepository:
    """Tests for the record repositories."""

    def test_add_and_list(self, store, dinner):
        """Test records survive a JSON round trip through the store."""
        repo = ExpenseRepository(store)
        repo.add(dinner)
        assert repo.list_all() == [dinner]
        assert store.get(EXPENSES_KEY).startswith("[")

    def test_empty_store(self, store):
        """Test an absent key reads as an empty list."""
        assert IncomeRepository(store).list_all() == []

    def test_duplicate_id(self, store, dinner):
        """Test adding the same id twice is refused."""
        repo = ExpenseRepository(store)
        repo.add(dinner)
        with pytest.raises(DuplicateError):
            repo.add(dinner)

    def test_get_and_require(self, store, dinner):
        """Test lookups by id."""
        repo = ExpenseRepository(store)
        repo.add(dinner)
        assert repo.get(dinner.id) == dinner
        assert repo.get(uuid4()) is None
        with pytest.raises(NotFoundError):
            repo.require(uuid4())

    def test_update_returns_previous_version(self, store, dinner):
        """Test update hands back what was stored before."""
        repo = ExpenseRepository(store)
        repo.add(dinner)
        edited = dinner.model_copy(update={"amount": Decimal("120")})
        previous = repo.update(edited)
        assert previous.amount == Decimal("90")
        assert repo.require(dinner.id).amount == Decimal("120")

    def test_update_missing(self, store, dinner):
        """Test updating an unknown record fails."""
        with pytest.raises(NotFoundError):
            ExpenseRepository(store).update(dinner)

    def test_delete_returns_record(self, store, dinner):
        """Test delete hands back the removed record."""
        repo = ExpenseRepository(store)
        repo.add(dinner)
        assert repo.delete(dinner.id) == dinner
        assert repo.list_all() == []
        with pytest.raises(NotFoundError):
            repo.delete(dinner.id)

    def test_corrupt_payload(self, store):
        """Test an undecodable stored value raises CorruptRecordError."""
        store.set(EXPENSES_KEY, "not json")
        with pytest.raises(CorruptRecordError):
            ExpenseRepository(store).list_all()

    def test_storage_errors_share_a_base(self):
        """Test every storage error is a StorageError."""
        for error in (NotFoundError, DuplicateError, CorruptRecordError):
            assert issubclass(error, StorageError)

    def test_repositories_use_separate_keys(self, store, dinner):
        """Test each record type lives under its own key."""
        ExpenseRepository(store).add(dinner)
        PaymentRepository(store).add(
            Payment(from_participant="B", to_participant="A", amount=Decimal("30"))
        )
        assert len(ExpenseRepository(store).list_all()) == 1
        assert len(PaymentRepository(store).list_all()) == 1
        assert isinstance(ExpenseRepository(store).list_all()[0], Expense)


class TestPreferenceStore:
    """Tests for PreferenceStore."""

    def test_default_is_none(self, store):
        """Test no preference reads as None."""
        assert PreferenceStore(store).get_reporting_currency() is None

    def test_round_trip(self, store):
        """Test the preference is stored as its plain code."""
        prefs = PreferenceStore(store)
        prefs.set_reporting_currency(Currency.GBP)
        assert store.get(PREFERRED_CURRENCY_KEY) == "GBP"
        assert prefs.get_reporting_currency() is Currency.GBP

    def test_unsupported_value_is_ignored(self, store):
        """Test an unknown saved code falls back to None."""
        store.set(PREFERRED_CURRENCY_KEY, "XYZ")
        assert PreferenceStore(store).get_reporting_currency() is None


class TestKeyValueAuditStorage:
    """Tests for the append-only audit storage."""

    def test_append_and_query(self, audit_storage):
        """Test events can be found by correlation id and entity."""
        correlation_id = uuid4()
        expense_id = uuid4()
        added = AuditEventBuilder.expense_added(
            expense_id, "A", "90", "EUR", {"A": Decimal("60")}, correlation_id=correlation_id
        )
        deleted = AuditEventBuilder.expense_deleted(expense_id, {"A": Decimal("-60")})

        assert audit_storage.append_event(added) is True
        audit_storage.append_event(deleted)

        assert [e.event_id for e in audit_storage.get_events_by_correlation_id(correlation_id)] == [
            added.event_id
        ]
        by_entity = audit_storage.get_events_by_entity("expense", expense_id)
        assert [e.event_id for e in by_entity] == [added.event_id, deleted.event_id]

    def test_recent_events_newest_first(self, audit_storage):
        """Test recent events come back newest first and respect the limit."""
        events = [
            AuditEventBuilder.income_deleted(uuid4())
            for _ in range(3)
        ]
        for event in events:
            audit_storage.append_event(event)

        recent = audit_storage.get_recent_events(limit=2)
        assert [e.event_id for e in recent] == [events[2].event_id, events[1].event_id]
