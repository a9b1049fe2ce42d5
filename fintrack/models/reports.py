"""
Report Models

Plain results handed to rendering and export collaborators (charts,
PDF/Excel). Every amount is already converted into `currency`.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from fintrack.models.money import Currency
from fintrack.models.records import Country, ExpenseCategory


class ReportFilter(BaseModel):
    """
    Selection criteria for period reports.

    Date selection, in order of precedence:
    1. `date_from`/`date_to` (inclusive; either end may be open)
    2. `year` with optional `month`
    3. nothing: every record
    """

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)

    # Expense-only filters
    category: Optional[ExpenseCategory] = None
    paid_by: Optional[str] = None
    tax_relevant_only: bool = False

    # Income-only filters
    added_by: Optional[str] = None
    product_search: Optional[str] = None

    @model_validator(mode="after")
    def validate_selection(self) -> "ReportFilter":
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to cannot be before date_from")
        if self.month is not None and self.year is None:
            raise ValueError("month requires year")
        return self

    def matches_date(self, value: date) -> bool:
        if self.date_from or self.date_to:
            if self.date_from and value < self.date_from:
                return False
            if self.date_to and value > self.date_to:
                return False
            return True
        if self.year is not None:
            if value.year != self.year:
                return False
            return self.month is None or value.month == self.month
        return True


class PeriodTotals(BaseModel):
    """Totals for one reporting period."""

    currency: Currency
    expenses: Decimal = Decimal("0")
    income: Decimal = Field(
        default=Decimal("0"),
        description="Net income: VAT-exclusive sales minus cost and ad spend"
    )
    vat: Decimal = Field(
        default=Decimal("0"),
        description="VAT contained in sales"
    )

    @property
    def profit(self) -> Decimal:
        return self.income - self.expenses


class MonthlyTotals(PeriodTotals):
    """Period totals for a single calendar month."""

    year: int
    month: int = Field(ge=1, le=12)


class VATTransaction(BaseModel):
    """One income record as it appears on a VAT report."""

    income_id: UUID
    sale_date: date
    product: str
    quantity: int
    sale_price: Decimal
    vat_rate: Decimal
    exclusive_price: Decimal
    vat_amount: Decimal = Field(
        ...,
        description="VAT for the whole line (unit VAT times quantity)"
    )


class VATReport(BaseModel):
    """VAT report for one country and date range."""

    country: Country
    date_from: date
    date_to: date
    currency: Currency
    total_sales: Decimal
    total_vat: Decimal
    threshold: Decimal
    threshold_currency: Currency
    is_over_threshold: bool
    transactions: list[VATTransaction] = Field(default_factory=list)
    note: Optional[str] = None


class IncomeSummary(BaseModel):
    """Gross income figures, as the income listing shows them."""

    currency: Currency
    total_sales: Decimal = Decimal("0")
    total_ad_spend: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")

    @property
    def net_profit(self) -> Decimal:
        return self.total_sales - self.total_ad_spend - self.total_cost


class DashboardTotals(BaseModel):
    """
    Headline figures for the dashboard.

    NOTE: `total_income` is gross, VAT-inclusive sales. Period reports use
    VAT-exclusive net income instead, so the two profit figures differ
    for the same records.
    """

    currency: Currency
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    total_ad_spend: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")

    @property
    def net_profit(self) -> Decimal:
        return (
            self.total_income
            - self.total_expenses
            - self.total_ad_spend
            - self.total_cost
        )
