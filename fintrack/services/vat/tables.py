"""
VAT reference data.

Hand-authored tables for every supported jurisdiction. The rate table
must cover every (Country, ProductType) pair; this is checked when the
module is imported so a gap can never surface as a silent zero in a
report.

Thresholds are denominated in the threshold currency (EUR by default,
see VATSettings).
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from fintrack.models.records import Country, ProductType
from fintrack.services.errors import VATTableIncompleteError

RateTable = Mapping[Country, Mapping[ProductType, Decimal]]
ThresholdTable = Mapping[Country, Decimal]


def _rates(standard: str, food: str, books: str, digital: str) -> Mapping[ProductType, Decimal]:
    return MappingProxyType({
        ProductType.STANDARD: Decimal(standard),
        ProductType.FOOD: Decimal(food),
        ProductType.BOOKS: Decimal(books),
        ProductType.DIGITAL: Decimal(digital),
    })


VAT_RATES: RateTable = MappingProxyType({
    #               standard  food     books    digital
    Country.NL: _rates("0.21", "0.09", "0.09", "0.21"),
    Country.DE: _rates("0.19", "0.07", "0.07", "0.19"),
    Country.FR: _rates("0.20", "0.055", "0.055", "0.20"),
    Country.BE: _rates("0.21", "0.06", "0.06", "0.21"),
    Country.IT: _rates("0.22", "0.04", "0.04", "0.22"),
    Country.ES: _rates("0.21", "0.10", "0.04", "0.21"),
    Country.SE: _rates("0.25", "0.12", "0.06", "0.25"),
    Country.DK: _rates("0.25", "0.25", "0.25", "0.25"),
    Country.IE: _rates("0.23", "0.00", "0.09", "0.23"),
    Country.AT: _rates("0.20", "0.10", "0.10", "0.20"),
    Country.CH: _rates("0.077", "0.025", "0.025", "0.077"),
    Country.UK: _rates("0.20", "0.00", "0.00", "0.20"),
    Country.NO: _rates("0.25", "0.15", "0.00", "0.25"),
    Country.AU: _rates("0.10", "0.10", "0.10", "0.10"),
    Country.CA: _rates("0.15", "0.15", "0.15", "0.15"),
    Country.US: _rates("0.10", "0.10", "0.10", "0.10"),
})

VAT_THRESHOLDS: ThresholdTable = MappingProxyType({
    Country.NL: Decimal("100000"),
    Country.DE: Decimal("100000"),
    Country.FR: Decimal("100000"),
    Country.BE: Decimal("100000"),
    Country.IT: Decimal("100000"),
    Country.ES: Decimal("100000"),
    Country.SE: Decimal("100000"),
    Country.DK: Decimal("100000"),
    Country.IE: Decimal("100000"),
    Country.AT: Decimal("100000"),
    Country.CH: Decimal("100000"),
    Country.UK: Decimal("85000"),
    Country.NO: Decimal("50000"),
    Country.AU: Decimal("75000"),
    Country.CA: Decimal("30000"),
    Country.US: Decimal("100000"),
})

COUNTRY_NOTES: Mapping[Country, str] = MappingProxyType({
    Country.CA: "GST/HST rates differ by province (5%-15%)",
    Country.US: "Sales tax varies by state (0%-10%)",
    Country.CH: "MwSt (VAT equivalent)",
    Country.AU: "GST (Goods and Services Tax)",
})


def validate_rate_table(table: RateTable) -> None:
    """
    Check that `table` has a rate for every country and product type.

    Raises:
        VATTableIncompleteError: Listing every missing combination
    """
    missing = []
    for country in Country:
        rates = table.get(country)
        if rates is None:
            missing.extend(f"{country.name}/{pt.value}" for pt in ProductType)
            continue
        missing.extend(
            f"{country.name}/{pt.value}" for pt in ProductType if pt not in rates
        )
    if missing:
        raise VATTableIncompleteError(missing)


def validate_threshold_table(table: ThresholdTable) -> None:
    """Check that `table` has a threshold for every country."""
    missing = [country.name for country in Country if country not in table]
    if missing:
        raise VATTableIncompleteError(missing)


validate_rate_table(VAT_RATES)
validate_threshold_table(VAT_THRESHOLDS)
