"""Services package."""

from fintrack.services.currency import (
    CurrencyConverter,
    convert,
    format_currency,
    get_symbol,
)
from fintrack.services.errors import (
    DataIntegrityError,
    UnknownCurrencyError,
    UnsupportedJurisdictionError,
    UnsupportedProductTypeError,
    VATTableIncompleteError,
)
from fintrack.services.ledger import BalanceLedger
from fintrack.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryKeyValueStore,
    KeyValueStore,
    NotFoundError,
    StorageError,
)
from fintrack.services.vat import (
    VATEngine,
    calculate_vat,
    is_over_threshold,
    resolve_rate,
)

__all__ = [
    # Currency
    "CurrencyConverter",
    "convert",
    "format_currency",
    "get_symbol",
    # Errors
    "DataIntegrityError",
    "UnknownCurrencyError",
    "UnsupportedJurisdictionError",
    "UnsupportedProductTypeError",
    "VATTableIncompleteError",
    # Ledger
    "BalanceLedger",
    # Storage
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "NotFoundError",
    "StorageError",
    # VAT
    "VATEngine",
    "calculate_vat",
    "is_over_threshold",
    "resolve_rate",
]
