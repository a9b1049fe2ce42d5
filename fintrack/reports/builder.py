"""
Report Builder

DESIGN DECISION: Report figures are DETERMINISTIC functions of the
records passed in. The builder holds no records of its own; the caller
decides which records a report covers and the builder only filters,
converts and sums.

Every amount is converted into the reporting currency before it is
added to anything else.

Net income and VAT share one inclusive/exclusive split (see
fintrack.services.vat.engine), so for every record

    exclusive price + VAT amount == sale price
"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from fintrack.models.money import Currency
from fintrack.models.records import Country, Expense, ExpenseCategory, IncomeRecord
from fintrack.models.reports import (
    DashboardTotals,
    IncomeSummary,
    MonthlyTotals,
    PeriodTotals,
    ReportFilter,
    VATReport,
    VATTransaction,
)
from fintrack.services.currency import DEFAULT_RATES, CurrencyConverter
from fintrack.services.currency.converter import CurrencyCode, RateTable
from fintrack.services.vat import VATEngine, calculate_vat, exclusive_price

ZERO = Decimal("0")


class ReportBuilder:
    """
    Builds period, monthly, VAT, income and dashboard figures.

    Income figures use each record's VAT rate snapshot; a record without
    one is a data error and is rejected rather than guessed at.
    """

    def __init__(
        self,
        reporting_currency: CurrencyCode = Currency.EUR,
        rate_table: RateTable = DEFAULT_RATES,
        vat_engine: Optional[VATEngine] = None,
        threshold_currency: CurrencyCode = Currency.EUR,
    ):
        self._converter = CurrencyConverter(reporting_currency, rate_table)
        self._threshold_converter = CurrencyConverter(threshold_currency, rate_table)
        self._vat = vat_engine or VATEngine()

    @property
    def currency(self) -> Currency:
        return self._converter.target

    # -------------------------------------------------------------------------
    # Filtering
    # -------------------------------------------------------------------------

    def filter_expenses(
        self,
        expenses: Iterable[Expense],
        report_filter: Optional[ReportFilter] = None,
    ) -> list[Expense]:
        f = report_filter or ReportFilter()
        return [
            e for e in expenses
            if f.matches_date(e.expense_date)
            and (f.category is None or e.category == f.category)
            and (f.paid_by is None or e.paid_by == f.paid_by)
            and (not f.tax_relevant_only or e.tax_relevant)
        ]

    def filter_incomes(
        self,
        incomes: Iterable[IncomeRecord],
        report_filter: Optional[ReportFilter] = None,
    ) -> list[IncomeRecord]:
        f = report_filter or ReportFilter()
        search = f.product_search.lower() if f.product_search else None
        return [
            i for i in incomes
            if f.matches_date(i.sale_date)
            and (f.added_by is None or i.added_by == f.added_by)
            and (search is None or search in i.product.lower())
        ]

    # -------------------------------------------------------------------------
    # Per-record figures
    # -------------------------------------------------------------------------

    def _expense_amount(self, expense: Expense) -> Decimal:
        return self._converter.to_target(expense.amount, expense.currency)

    def _income_net_and_vat(self, income: IncomeRecord) -> tuple[Decimal, Decimal]:
        """(net income, VAT) for a whole line, in the reporting currency."""
        rate = income.require_vat_rate()
        sale = self._converter.to_target(income.sale_price, income.currency)
        cost = self._converter.to_target(income.cost_price, income.currency)
        ad_spend = self._converter.to_target(income.ad_spend, income.currency)

        net = (exclusive_price(sale, rate) - cost - ad_spend) * income.quantity
        vat = calculate_vat(sale, rate) * income.quantity
        return net, vat

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def period_totals(
        self,
        expenses: Iterable[Expense],
        incomes: Iterable[IncomeRecord],
        report_filter: Optional[ReportFilter] = None,
    ) -> PeriodTotals:
        """
        Expenses, net income and VAT for the filtered records.

        net income = sum((sale / (1 + vat) - cost - ad_spend) * quantity)
        VAT        = sum((sale - sale / (1 + vat)) * quantity)
        """
        totals = PeriodTotals(currency=self.currency)
        for expense in self.filter_expenses(expenses, report_filter):
            totals.expenses += self._expense_amount(expense)
        for income in self.filter_incomes(incomes, report_filter):
            net, vat = self._income_net_and_vat(income)
            totals.income += net
            totals.vat += vat
        return totals

    def monthly_totals(
        self,
        expenses: Iterable[Expense],
        incomes: Iterable[IncomeRecord],
        year: int,
        report_filter: Optional[ReportFilter] = None,
    ) -> list[MonthlyTotals]:
        """
        Period totals for each of the twelve months of `year`.

        Any date selection in `report_filter` is replaced by `year`; the
        other filters still apply.
        """
        base = (report_filter or ReportFilter()).model_copy(
            update={"date_from": None, "date_to": None, "year": year, "month": None}
        )
        months = [
            MonthlyTotals(currency=self.currency, year=year, month=m)
            for m in range(1, 13)
        ]

        for expense in self.filter_expenses(expenses, base):
            months[expense.expense_date.month - 1].expenses += self._expense_amount(expense)
        for income in self.filter_incomes(incomes, base):
            net, vat = self._income_net_and_vat(income)
            bucket = months[income.sale_date.month - 1]
            bucket.income += net
            bucket.vat += vat
        return months

    def vat_report(
        self,
        incomes: Iterable[IncomeRecord],
        country: Country,
        date_from: date,
        date_to: date,
    ) -> VATReport:
        """
        VAT report for sales into one country over an inclusive date range.

        The threshold check compares total VAT-inclusive sales, converted
        into the threshold currency, strictly against the country's
        registration threshold.
        """
        threshold = self._vat.threshold_for(country)
        country = Country(country)
        period = ReportFilter(date_from=date_from, date_to=date_to)

        transactions = []
        total_sales = ZERO
        total_vat = ZERO
        for income in self.filter_incomes(incomes, period):
            if income.customer_country != country:
                continue
            rate = income.require_vat_rate()
            sale = self._converter.to_target(income.sale_price, income.currency)
            line_vat = calculate_vat(sale, rate) * income.quantity

            total_sales += sale * income.quantity
            total_vat += line_vat
            transactions.append(VATTransaction(
                income_id=income.id,
                sale_date=income.sale_date,
                product=income.product,
                quantity=income.quantity,
                sale_price=sale,
                vat_rate=rate,
                exclusive_price=exclusive_price(sale, rate),
                vat_amount=line_vat,
            ))

        sales_in_threshold_currency = self._converter.convert(
            total_sales, self.currency, self._threshold_converter.target
        )

        return VATReport(
            country=country,
            date_from=date_from,
            date_to=date_to,
            currency=self.currency,
            total_sales=total_sales,
            total_vat=total_vat,
            threshold=threshold,
            threshold_currency=self._threshold_converter.target,
            is_over_threshold=self._vat.is_over_threshold(
                country, sales_in_threshold_currency
            ),
            transactions=transactions,
            note=self._vat.country_note(country),
        )

    def income_summary(
        self,
        incomes: Iterable[IncomeRecord],
        report_filter: Optional[ReportFilter] = None,
    ) -> IncomeSummary:
        """
        Gross sales, ad spend and cost for the income listing.

        Ad spend is counted once per record here, while cost scales with
        quantity.
        """
        summary = IncomeSummary(currency=self.currency)
        to_target = self._converter.to_target
        for income in self.filter_incomes(incomes, report_filter):
            summary.total_sales += to_target(income.gross_sales, income.currency)
            summary.total_ad_spend += to_target(income.ad_spend, income.currency)
            summary.total_cost += to_target(
                income.cost_price * income.quantity, income.currency
            )
        return summary

    def dashboard_totals(
        self,
        expenses: Iterable[Expense],
        incomes: Iterable[IncomeRecord],
    ) -> DashboardTotals:
        """
        Headline totals over every record.

        NOTE: Income here is gross, VAT-inclusive revenue, unlike
        period_totals() which reports VAT-exclusive net income.
        """
        incomes = list(incomes)
        summary = self.income_summary(incomes)
        totals = DashboardTotals(
            currency=self.currency,
            total_income=summary.total_sales,
            total_ad_spend=summary.total_ad_spend,
            total_cost=summary.total_cost,
        )
        for expense in expenses:
            totals.total_expenses += self._expense_amount(expense)
        return totals

    def expenses_by_category(
        self,
        expenses: Iterable[Expense],
        report_filter: Optional[ReportFilter] = None,
    ) -> "OrderedDict[ExpenseCategory, Decimal]":
        """Converted expense totals per category, every category present."""
        totals = OrderedDict((category, ZERO) for category in ExpenseCategory)
        for expense in self.filter_expenses(expenses, report_filter):
            totals[expense.category] += self._expense_amount(expense)
        return totals
