"""
Currency Conversion Service

All conversions go through the base currency:

    amount / rate[from] * rate[to]

Functions here are pure: same inputs, same output, no hidden state, so
they are safe to call from any number of callers at once.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional, Union

from fintrack.models.money import Currency, Money
from fintrack.services.currency.rates import CURRENCY_SYMBOLS, DEFAULT_RATES
from fintrack.services.errors import UnknownCurrencyError

Amount = Union[Decimal, int, float, str]
CurrencyCode = Union[Currency, str]
RateTable = Mapping[CurrencyCode, Decimal]


def to_decimal(value: Amount) -> Decimal:
    """
    Coerce a numeric input to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not the
    binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def currency_code(currency: CurrencyCode) -> str:
    """Normalize a Currency member or code string to its upper-case code."""
    if isinstance(currency, Currency):
        return currency.value
    return str(currency).strip().upper()


def _rate(rate_table: RateTable, currency: CurrencyCode) -> Decimal:
    code = currency_code(currency)
    # Currency members hash like their code, so str and enum keys both match
    if code not in rate_table:
        raise UnknownCurrencyError(code)
    return to_decimal(rate_table[code])


def _currency(currency: CurrencyCode) -> Currency:
    try:
        return Currency(currency_code(currency))
    except ValueError:
        raise UnknownCurrencyError(currency_code(currency)) from None


def convert(
    amount: Amount,
    from_currency: CurrencyCode,
    to_currency: CurrencyCode,
    rate_table: RateTable = DEFAULT_RATES,
) -> Amount:
    """
    Convert `amount` from one currency to another.

    Both currencies must be present in `rate_table`. When they are the
    same, `amount` is returned untouched so no drift is introduced.

    Raises:
        UnknownCurrencyError: If either code is missing from the table
    """
    from_rate = _rate(rate_table, from_currency)
    to_rate = _rate(rate_table, to_currency)

    if currency_code(from_currency) == currency_code(to_currency):
        return amount

    return (to_decimal(amount) / from_rate) * to_rate


def get_symbol(currency: CurrencyCode) -> str:
    """Return the presentation symbol for a currency (e.g. '€', 'CA$')."""
    return CURRENCY_SYMBOLS[_currency(currency)]


def format_currency(amount: Amount, currency: CurrencyCode) -> str:
    """
    Render an amount the way en-US presents it.

    Examples:
        format_currency(Decimal("1234.5"), "EUR")  -> '€1,234.50'
        format_currency(-1500, "JPY")              -> '-¥1,500'
        format_currency(12, "CHF")                 -> 'CHF 12.00'
    """
    code = _currency(currency)
    places = code.minor_units
    quantum = Decimal(1).scaleb(-places)
    value = to_decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.{places}f}"
    symbol = CURRENCY_SYMBOLS[code]
    separator = " " if symbol[-1].isalpha() else ""
    return f"{sign}{symbol}{separator}{body}"


class CurrencyConverter:
    """
    A rate table bound to a target currency.

    Takes the place of an ambient "current currency": whoever needs
    conversions into the reporting currency receives one of these
    explicitly.
    """

    def __init__(
        self,
        target: CurrencyCode,
        rate_table: RateTable = DEFAULT_RATES,
    ):
        # Fail at construction rather than on first use
        _rate(rate_table, target)
        self._target = _currency(target)
        self._rates = rate_table

    @property
    def target(self) -> Currency:
        return self._target

    @property
    def rate_table(self) -> RateTable:
        return self._rates

    def convert(
        self,
        amount: Amount,
        from_currency: CurrencyCode,
        to_currency: CurrencyCode,
    ) -> Decimal:
        return to_decimal(convert(amount, from_currency, to_currency, self._rates))

    def to_target(self, amount: Amount, from_currency: CurrencyCode) -> Decimal:
        """Convert into the bound target currency, always returning Decimal."""
        return self.convert(amount, from_currency, self._target)

    def convert_money(
        self,
        money: Money,
        to_currency: Optional[CurrencyCode] = None,
    ) -> Money:
        target = _currency(to_currency) if to_currency else self._target
        return Money(
            amount=self.convert(money.amount, money.currency, target),
            currency=target,
        )

    def format(self, amount: Amount) -> str:
        return format_currency(amount, self._target)
