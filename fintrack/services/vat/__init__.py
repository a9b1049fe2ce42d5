"""VAT engine package."""

from fintrack.services.vat.engine import (
    VATEngine,
    calculate_vat,
    exclusive_price,
    is_over_threshold,
    resolve_rate,
    threshold_for,
)
from fintrack.services.vat.tables import (
    COUNTRY_NOTES,
    VAT_RATES,
    VAT_THRESHOLDS,
    validate_rate_table,
    validate_threshold_table,
)

__all__ = [
    "COUNTRY_NOTES",
    "VAT_RATES",
    "VAT_THRESHOLDS",
    "VATEngine",
    "calculate_vat",
    "exclusive_price",
    "is_over_threshold",
    "resolve_rate",
    "threshold_for",
    "validate_rate_table",
    "validate_threshold_table",
]
