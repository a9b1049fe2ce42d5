"""
Tests for fintrack models

Test strategy:
1. Unit tests for individual models and their validators
2. Integration tests for flows live in test_tracker.py
3. No real storage backends in tests (use the in-memory store)
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from fintrack.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Country,
    Currency,
    Expense,
    ExpenseCategory,
    IncomeRecord,
    Money,
    Payment,
    PeriodTotals,
    ProductType,
    ReportFilter,
)


class TestMoneyModels:
    """Tests for Currency and Money."""

    def test_currency_minor_units(self):
        """Test JPY has no minor units and the rest have two."""
        assert Currency.JPY.minor_units == 0
        assert Currency.EUR.minor_units == 2
        assert Currency.CHF.minor_units == 2

    def test_money_is_frozen(self):
        """Test Money cannot be mutated after creation."""
        money = Money(amount=Decimal("10"), currency=Currency.EUR)
        with pytest.raises(ValueError):
            money.amount = Decimal("20")

    def test_money_str(self):
        """Test Money renders amount and code."""
        assert str(Money(amount=Decimal("12.50"), currency=Currency.USD)) == "12.50 USD"


class TestExpenseModel:
    """Tests for the Expense model."""

    def test_expense_creation(self):
        """Test Expense model creation with defaults."""
        expense = Expense(amount=Decimal("25.00"), paid_by="A")
        assert expense.currency == Currency.EUR
        assert expense.category == ExpenseCategory.OTHER
        assert expense.shared_with == []
        assert expense.is_shared is False

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from participant names."""
        expense = Expense(amount=Decimal("10"), paid_by="  A  ", shared_with=[" B "])
        assert expense.paid_by == "A"
        assert expense.shared_with == ["B"]
        assert expense.is_shared is True

    def test_expense_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Expense(amount=Decimal("-1"), paid_by="A")

    def test_expense_rejects_payer_as_sharer(self):
        """Test the payer cannot also be listed as a sharer."""
        with pytest.raises(ValueError, match="Payer cannot also be listed"):
            Expense(amount=Decimal("10"), paid_by="A", shared_with=["A", "B"])

    def test_expense_rejects_duplicate_sharers(self):
        """Test a sharer cannot be listed twice."""
        with pytest.raises(ValueError, match="duplicate"):
            Expense(amount=Decimal("10"), paid_by="A", shared_with=["B", "B"])

    def test_expense_rejects_blank_sharer(self):
        """Test blank sharer names are rejected."""
        with pytest.raises(ValueError):
            Expense(amount=Decimal("10"), paid_by="A", shared_with=["   "])

    def test_expense_rejects_unknown_currency(self):
        """Test currencies outside the supported set are rejected."""
        with pytest.raises(ValueError):
            Expense(amount=Decimal("10"), paid_by="A", currency="XYZ")

    def test_expense_money(self):
        """Test the money property pairs amount and currency."""
        expense = Expense(amount=Decimal("10"), paid_by="A", currency=Currency.GBP)
        assert expense.money == Money(amount=Decimal("10"), currency=Currency.GBP)


class TestPaymentModel:
    """Tests for the Payment model."""

    def test_payment_creation(self):
        """Test Payment model creation."""
        payment = Payment(from_participant="B", to_participant="A", amount=Decimal("30"))
        assert payment.currency == Currency.EUR
        assert payment.payment_date <= date.today()

    def test_payment_requires_two_parties(self):
        """Test a participant cannot pay themselves."""
        with pytest.raises(ValueError, match="two different participants"):
            Payment(from_participant="A", to_participant="A", amount=Decimal("5"))

    def test_payment_rejects_zero_amount(self):
        """Test payments must be positive."""
        with pytest.raises(ValueError):
            Payment(from_participant="B", to_participant="A", amount=Decimal("0"))


class TestIncomeModel:
    """Tests for the IncomeRecord model."""

    def test_country_accepts_code_and_name(self):
        """Test Country lookup by short code or display name."""
        assert Country("NL") is Country.NL
        assert Country("netherlands") is Country.NL
        assert Country("United Kingdom") is Country.UK
        with pytest.raises(ValueError):
            Country("Atlantis")

    def test_gross_sales(self, dutch_sale):
        """Test gross sales multiply the unit price by quantity."""
        record = dutch_sale.model_copy(update={"quantity": 3})
        assert record.gross_sales == Decimal("363")

    def test_quantity_must_be_positive(self):
        """Test quantity below one is rejected."""
        with pytest.raises(ValueError):
            IncomeRecord(
                product="Lamp",
                product_type=ProductType.STANDARD,
                customer_country=Country.NL,
                quantity=0,
                sale_price=Decimal("10"),
            )

    def test_vat_rate_bounds(self):
        """Test the VAT rate snapshot must be between 0 and 1."""
        with pytest.raises(ValueError):
            IncomeRecord(
                product="Lamp",
                product_type=ProductType.STANDARD,
                customer_country=Country.NL,
                sale_price=Decimal("10"),
                vat_rate=Decimal("1.5"),
            )

    def test_require_vat_rate(self):
        """Test an unstamped record refuses to report a rate."""
        record = IncomeRecord(
            product="Lamp",
            product_type=ProductType.STANDARD,
            customer_country="Germany",
            sale_price=Decimal("10"),
        )
        assert record.customer_country is Country.DE
        with pytest.raises(ValueError, match="no VAT rate snapshot"):
            record.require_vat_rate()


class TestReportFilter:
    """Tests for ReportFilter selection rules."""

    def test_date_range_validation(self):
        """Test that date_to cannot be before date_from."""
        with pytest.raises(ValueError, match="date_to cannot be before date_from"):
            ReportFilter(date_from=date(2024, 5, 1), date_to=date(2024, 4, 1))

    def test_month_requires_year(self):
        """Test a month alone is not a valid selection."""
        with pytest.raises(ValueError, match="month requires year"):
            ReportFilter(month=3)

    def test_range_is_inclusive(self):
        """Test both ends of the date range match."""
        f = ReportFilter(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))
        assert f.matches_date(date(2024, 1, 1))
        assert f.matches_date(date(2024, 1, 31))
        assert not f.matches_date(date(2024, 2, 1))

    def test_range_takes_precedence_over_year(self):
        """Test an explicit range wins over year/month."""
        f = ReportFilter(date_from=date(2023, 6, 1), year=2024)
        assert f.matches_date(date(2023, 7, 1))

    def test_year_and_month(self):
        """Test year/month selection."""
        f = ReportFilter(year=2024, month=2)
        assert f.matches_date(date(2024, 2, 29))
        assert not f.matches_date(date(2024, 3, 1))
        assert not f.matches_date(date(2023, 2, 1))

    def test_period_profit(self):
        """Test profit is income minus expenses."""
        totals = PeriodTotals(currency=Currency.EUR, expenses=Decimal("30"), income=Decimal("100"))
        assert totals.profit == Decimal("70")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Test expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.PAYMENT_LOGGED,
            description="Payment logged",
            details={"from": "B", "amount": "30"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "payment_logged"
        assert log_dict["details"]["from"] == "B"
        assert log_dict["entity_id"] is None

    def test_audit_event_builder_expense_added(self):
        """Test AuditEventBuilder.expense_added stores deltas as strings."""
        expense_id = uuid4()
        correlation_id = uuid4()

        event = AuditEventBuilder.expense_added(
            expense_id=expense_id,
            paid_by="A",
            amount="90",
            currency="EUR",
            deltas={"A": Decimal("60"), "B": Decimal("-30")},
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.entity_id == expense_id
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True
        assert event.details["balance_deltas"] == {"A": "60", "B": "-30"}

    def test_audit_event_builder_income_saved(self):
        """Test income_saved picks the event type from is_update."""
        income_id = uuid4()
        added = AuditEventBuilder.income_saved(income_id, "Lamp", "Netherlands", "0.21")
        updated = AuditEventBuilder.income_saved(
            income_id, "Lamp", "Netherlands", "0.21", is_update=True
        )
        assert added.event_type == AuditEventType.INCOME_ADDED
        assert updated.event_type == AuditEventType.INCOME_UPDATED

    def test_audit_event_builder_data_integrity_error(self):
        """Test data integrity errors are logged at ERROR severity."""
        event = AuditEventBuilder.data_integrity_error(
            error_type="UnknownCurrencyError",
            error_message="Unknown currency: 'XYZ'",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_code == "UnknownCurrencyError"

    def test_audit_event_builder_system_error(self):
        """Test unexpected failures carry their exception type as the error code."""
        event = AuditEventBuilder.system_error(
            error_type="CorruptRecordError",
            error_message="Stored 'expenses' could not be decoded: 1 errors",
            details={"operation": "add_expense"},
        )
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.error_code == "CorruptRecordError"
        assert event.details == {"operation": "add_expense"}


class TestExpenseCategories:
    """Tests for expense category enum."""

    def test_all_categories_exist(self):
        """Test that expected categories exist."""
        expected = ["Shopify", "Advertising", "Transportation", "Office Supplies", "Other"]
        for cat in expected:
            assert ExpenseCategory(cat) is not None

    def test_category_values(self):
        """Test category string values."""
        assert ExpenseCategory.OFFICE_SUPPLIES.value == "Office Supplies"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
