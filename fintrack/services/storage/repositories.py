"""
Record repositories over a KeyValueStore.

Each record type is stored as one JSON array under its own key, which is
how the application kept them in browser storage. Reads decode the whole
array; writes replace it. That is fine for a personal ledger and keeps
the store interface trivial.
"""

from typing import Generic, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, TypeAdapter, ValidationError

from fintrack.models.audit import AuditEvent
from fintrack.models.money import Currency
from fintrack.models.records import Expense, IncomeRecord, Payment
from fintrack.services.storage.interface import (
    AuditStorageInterface,
    CorruptRecordError,
    DuplicateError,
    KeyValueStore,
    NotFoundError,
)

T = TypeVar("T", bound=BaseModel)

EXPENSES_KEY = "expenses"
INCOMES_KEY = "incomes"
PAYMENTS_KEY = "payments"
AUDIT_KEY = "auditLog"
PREFERRED_CURRENCY_KEY = "preferredCurrency"


class RecordRepository(Generic[T]):
    """
    CRUD over a list of pydantic records stored under one key.

    Records are identified by their `id` field.
    """

    def __init__(self, store: KeyValueStore, key: str, model: type[T]):
        self._store = store
        self._key = key
        self._model = model
        self._adapter = TypeAdapter(list[model])

    @property
    def key(self) -> str:
        return self._key

    def list_all(self) -> list[T]:
        raw = self._store.get(self._key)
        if raw is None:
            return []
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            raise CorruptRecordError(
                f"Stored {self._key!r} could not be decoded: {e.error_count()} errors"
            ) from e

    def get(self, record_id: UUID) -> Optional[T]:
        for record in self.list_all():
            if record.id == record_id:
                return record
        return None

    def require(self, record_id: UUID) -> T:
        record = self.get(record_id)
        if record is None:
            raise NotFoundError(f"No {self._model.__name__} with id {record_id}")
        return record

    def add(self, record: T) -> T:
        records = self.list_all()
        if any(existing.id == record.id for existing in records):
            raise DuplicateError(f"{self._model.__name__} {record.id} already exists")
        records.append(record)
        self.save_all(records)
        return record

    def update(self, record: T) -> T:
        """
        Replace the stored record with the same id.

        Returns:
            The previous version of the record

        Raises:
            NotFoundError: If no record has that id
        """
        records = self.list_all()
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                self.save_all(records)
                return existing
        raise NotFoundError(f"No {self._model.__name__} with id {record.id}")

    def delete(self, record_id: UUID) -> T:
        """
        Remove a record.

        Returns:
            The deleted record

        Raises:
            NotFoundError: If no record has that id
        """
        records = self.list_all()
        for index, existing in enumerate(records):
            if existing.id == record_id:
                del records[index]
                self.save_all(records)
                return existing
        raise NotFoundError(f"No {self._model.__name__} with id {record_id}")

    def save_all(self, records: list[T]) -> None:
        self._store.set(self._key, self._adapter.dump_json(records).decode("utf-8"))


class ExpenseRepository(RecordRepository[Expense]):
    def __init__(self, store: KeyValueStore):
        super().__init__(store, EXPENSES_KEY, Expense)


class IncomeRepository(RecordRepository[IncomeRecord]):
    def __init__(self, store: KeyValueStore):
        super().__init__(store, INCOMES_KEY, IncomeRecord)


class PaymentRepository(RecordRepository[Payment]):
    def __init__(self, store: KeyValueStore):
        super().__init__(store, PAYMENTS_KEY, Payment)


class PreferenceStore:
    """User preferences that outlive a session."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def get_reporting_currency(self) -> Optional[Currency]:
        raw = self._store.get(PREFERRED_CURRENCY_KEY)
        if raw is None:
            return None
        try:
            return Currency(raw)
        except ValueError:
            # An unsupported saved preference is ignored, as the UI did
            return None

    def set_reporting_currency(self, currency: Currency) -> None:
        self._store.set(PREFERRED_CURRENCY_KEY, Currency(currency).value)


class KeyValueAuditStorage(AuditStorageInterface):
    """Append-only audit log kept as a JSON array in a KeyValueStore."""

    def __init__(self, store: KeyValueStore):
        self._events = RecordRepository(store, AUDIT_KEY, AuditEvent)

    def _all(self) -> list[AuditEvent]:
        return self._events.list_all()

    def append_event(self, event: AuditEvent) -> bool:
        events = self._all()
        events.append(event)
        self._events.save_all(events)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        events = [e for e in self._all() if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        events = [
            e for e in self._all()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        # Append-only, so storage order is chronological
        return list(reversed(self._all()))[:limit]
