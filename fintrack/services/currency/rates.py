"""
Static exchange rate reference data.

Rates are relative to EUR (the base currency, rate 1). There is no live
refresh: swapping the table is a deployment concern, not a runtime one.
"""

from decimal import Decimal
from types import MappingProxyType

from fintrack.models.money import Currency

BASE_CURRENCY = Currency.EUR

DEFAULT_RATES = MappingProxyType({
    Currency.EUR: Decimal("1"),
    Currency.USD: Decimal("1.18"),
    Currency.GBP: Decimal("0.86"),
    Currency.JPY: Decimal("130.55"),
    Currency.CAD: Decimal("1.48"),
    Currency.AUD: Decimal("1.61"),
    Currency.CHF: Decimal("1.08"),
    Currency.CNY: Decimal("7.63"),
    Currency.SEK: Decimal("10.18"),
    Currency.NZD: Decimal("1.69"),
})

# en-US presentation symbols
CURRENCY_SYMBOLS = MappingProxyType({
    Currency.EUR: "€",
    Currency.USD: "$",
    Currency.GBP: "£",
    Currency.JPY: "¥",
    Currency.CAD: "CA$",
    Currency.AUD: "A$",
    Currency.CHF: "CHF",
    Currency.CNY: "CN¥",
    Currency.SEK: "SEK",
    Currency.NZD: "NZ$",
})

if DEFAULT_RATES[BASE_CURRENCY] != 1:
    raise RuntimeError("Base currency must have a rate of exactly 1")

if set(DEFAULT_RATES) != set(Currency) or set(CURRENCY_SYMBOLS) != set(Currency):
    raise RuntimeError("Currency reference tables must cover every Currency member")
