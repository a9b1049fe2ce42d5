"""
Money Models

An amount is meaningless without its currency. These models keep the two
together so nothing downstream can add a JPY figure to a EUR one by
accident.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Currency(str, Enum):
    """
    Supported currencies.

    DESIGN DECISION: A closed set. Anything outside it has no exchange
    rate, so accepting it would only move the failure further downstream.
    """
    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"
    JPY = "JPY"
    CAD = "CAD"
    AUD = "AUD"
    CHF = "CHF"
    CNY = "CNY"
    SEK = "SEK"
    NZD = "NZD"

    @property
    def minor_units(self) -> int:
        """Number of decimals in the currency's standard presentation."""
        return 0 if self in ZERO_DECIMAL_CURRENCIES else 2


ZERO_DECIMAL_CURRENCIES = frozenset({Currency.JPY})


class Money(BaseModel):
    """A Decimal amount paired with its currency."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(
        ...,
        description="Signed amount in `currency`"
    )
    currency: Currency = Field(
        ...,
        description="Currency the amount is denominated in"
    )

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"
