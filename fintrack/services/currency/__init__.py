"""Currency conversion service package."""

from fintrack.services.currency.converter import (
    CurrencyConverter,
    convert,
    currency_code,
    format_currency,
    get_symbol,
    to_decimal,
)
from fintrack.services.currency.rates import (
    BASE_CURRENCY,
    CURRENCY_SYMBOLS,
    DEFAULT_RATES,
)

__all__ = [
    "BASE_CURRENCY",
    "CURRENCY_SYMBOLS",
    "CurrencyConverter",
    "DEFAULT_RATES",
    "convert",
    "currency_code",
    "format_currency",
    "get_symbol",
    "to_decimal",
]
