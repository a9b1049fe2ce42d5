"""
Data-integrity errors shared by the calculation services.

A missing table entry is never a user error: it means the reference data
and the records disagree. Defaulting to 0 or 1 would quietly produce a
wrong financial total, so every lookup miss raises one of these.
"""


class DataIntegrityError(Exception):
    """Base exception for missing or inconsistent reference data."""
    pass


class UnknownCurrencyError(DataIntegrityError, KeyError):
    """A currency code is absent from the exchange rate table."""

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Unknown currency: {currency!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class UnsupportedJurisdictionError(DataIntegrityError, KeyError):
    """A country is absent from a VAT table."""

    def __init__(self, country: str):
        self.country = country
        super().__init__(f"Unsupported jurisdiction: {country!r}")

    def __str__(self) -> str:
        return self.args[0]


class UnsupportedProductTypeError(DataIntegrityError, KeyError):
    """A product type is absent for an otherwise known country."""

    def __init__(self, country: str, product_type: str):
        self.country = country
        self.product_type = product_type
        super().__init__(
            f"No VAT rate for product type {product_type!r} in {country!r}"
        )

    def __str__(self) -> str:
        return self.args[0]


class VATTableIncompleteError(DataIntegrityError):
    """A VAT table does not cover every country and product type."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"VAT table is missing {len(missing)} entries: {', '.join(missing)}"
        )
