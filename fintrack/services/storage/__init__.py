"""
Storage Services Package

Provides the abstract key-value interface, an in-memory implementation,
and the record repositories built on top of it.
"""

from fintrack.services.storage.interface import (
    AuditStorageInterface,
    CorruptRecordError,
    DuplicateError,
    KeyValueStore,
    NotFoundError,
    StorageError,
)
from fintrack.services.storage.memory import InMemoryKeyValueStore
from fintrack.services.storage.repositories import (
    ExpenseRepository,
    IncomeRepository,
    KeyValueAuditStorage,
    PaymentRepository,
    PreferenceStore,
    RecordRepository,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStore",
    # Exceptions
    "CorruptRecordError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "ExpenseRepository",
    "InMemoryKeyValueStore",
    "IncomeRepository",
    "KeyValueAuditStorage",
    "PaymentRepository",
    "PreferenceStore",
    "RecordRepository",
]
