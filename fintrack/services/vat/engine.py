"""
VAT Engine

Sale prices are VAT-inclusive. For a price P and rate r:

    exclusive price = P / (1 + r)
    VAT amount      = P - P / (1 + r)

so the two always add back up to P. Reports use the same split; keep
them going through these functions rather than re-deriving the formula.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from fintrack.models.records import Country, IncomeRecord, ProductType, VATType
from fintrack.services.currency.converter import Amount, to_decimal
from fintrack.services.errors import (
    UnsupportedJurisdictionError,
    UnsupportedProductTypeError,
)
from fintrack.services.vat.tables import (
    COUNTRY_NOTES,
    VAT_RATES,
    VAT_THRESHOLDS,
    RateTable,
    ThresholdTable,
    validate_rate_table,
    validate_threshold_table,
)

CountryKey = Union[Country, str]
ProductTypeKey = Union[ProductType, str]


def _country(country: CountryKey) -> Country:
    try:
        return Country(country)
    except ValueError:
        raise UnsupportedJurisdictionError(str(country)) from None


def _lookup(table: Mapping, country: Country) -> Optional[Any]:
    # Tables may be keyed by member, display name or short code
    for key in (country, country.value, country.name):
        if key in table:
            return table[key]
    return None


def resolve_rate(
    country: CountryKey,
    product_type: ProductTypeKey,
    rate_table: RateTable = VAT_RATES,
) -> Decimal:
    """
    Look up the VAT rate for a product type sold into a country.

    Raises:
        UnsupportedJurisdictionError: Country not in the table
        UnsupportedProductTypeError: Product type not in the country's rates
    """
    resolved = _country(country)
    rates = _lookup(rate_table, resolved)
    if rates is None:
        raise UnsupportedJurisdictionError(resolved.value)

    try:
        pt = ProductType(product_type)
    except ValueError:
        raise UnsupportedProductTypeError(resolved.value, str(product_type)) from None

    for key in (pt, pt.value):
        if key in rates:
            return to_decimal(rates[key])
    raise UnsupportedProductTypeError(resolved.value, pt.value)


def calculate_vat(sale_price: Amount, vat_rate: Amount) -> Decimal:
    """VAT contained in a VAT-inclusive sale price."""
    price = to_decimal(sale_price)
    return price - price / (1 + to_decimal(vat_rate))


def exclusive_price(sale_price: Amount, vat_rate: Amount) -> Decimal:
    """Sale price with VAT taken out."""
    return to_decimal(sale_price) / (1 + to_decimal(vat_rate))


def threshold_for(
    country: CountryKey,
    threshold_table: ThresholdTable = VAT_THRESHOLDS,
) -> Decimal:
    resolved = _country(country)
    threshold = _lookup(threshold_table, resolved)
    if threshold is None:
        raise UnsupportedJurisdictionError(resolved.value)
    return to_decimal(threshold)


def is_over_threshold(
    country: CountryKey,
    total_sales: Amount,
    threshold_table: ThresholdTable = VAT_THRESHOLDS,
) -> bool:
    """True when `total_sales` is strictly above the country's threshold."""
    return to_decimal(total_sales) > threshold_for(country, threshold_table)


class VATEngine:
    """
    VAT tables bound together with the operations that read them.

    Custom tables are checked for completeness on construction, the same
    way the built-in tables are checked on import.
    """

    def __init__(
        self,
        rate_table: RateTable = VAT_RATES,
        threshold_table: ThresholdTable = VAT_THRESHOLDS,
        country_notes: Mapping[Country, str] = COUNTRY_NOTES,
    ):
        if rate_table is not VAT_RATES:
            validate_rate_table(rate_table)
        if threshold_table is not VAT_THRESHOLDS:
            validate_threshold_table(threshold_table)
        self._rates = rate_table
        self._thresholds = threshold_table
        self._notes = country_notes

    def resolve_rate(self, country: CountryKey, product_type: ProductTypeKey) -> Decimal:
        return resolve_rate(country, product_type, self._rates)

    @staticmethod
    def calculate_vat(sale_price: Amount, vat_rate: Amount) -> Decimal:
        return calculate_vat(sale_price, vat_rate)

    @staticmethod
    def exclusive_price(sale_price: Amount, vat_rate: Amount) -> Decimal:
        return exclusive_price(sale_price, vat_rate)

    def threshold_for(self, country: CountryKey) -> Decimal:
        return threshold_for(country, self._thresholds)

    def is_over_threshold(self, country: CountryKey, total_sales: Amount) -> bool:
        return is_over_threshold(country, total_sales, self._thresholds)

    def classify_rate(self, country: CountryKey, product_type: ProductTypeKey) -> VATType:
        """
        Classify the resolved rate against the country's standard rate.

        Returns ZERO for a 0% rate, STANDARD when it equals the country's
        standard rate, REDUCED otherwise.
        """
        rate = self.resolve_rate(country, product_type)
        if rate == 0:
            return VATType.ZERO
        if rate == self.resolve_rate(country, ProductType.STANDARD):
            return VATType.STANDARD
        return VATType.REDUCED

    def country_note(self, country: CountryKey) -> Optional[str]:
        return _lookup(self._notes, _country(country))

    def stamp(self, income: IncomeRecord, force: bool = False) -> IncomeRecord:
        """
        Return a copy of `income` carrying its VAT rate snapshot.

        A record that already has a rate keeps it unless `force` is set.
        Editing a record is the only time its rate should be re-resolved.
        """
        if income.vat_rate is not None and not force:
            return income
        rate = self.resolve_rate(income.customer_country, income.product_type)
        return income.model_copy(update={"vat_rate": rate})
