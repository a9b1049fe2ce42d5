"""Shared fixtures for fintrack tests."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.audit import AuditLogger
from fintrack.config import get_settings
from fintrack.models import (
    Country,
    Currency,
    Expense,
    ExpenseCategory,
    IncomeRecord,
    ProductType,
)
from fintrack.services.storage import InMemoryKeyValueStore, KeyValueAuditStorage
from fintrack.tracker import FinanceTracker


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings, whatever the shell exports."""
    for name in (
        "FINTRACK_LEDGER_REPORTING_CURRENCY",
        "FINTRACK_LEDGER_BALANCE_TOLERANCE",
        "FINTRACK_VAT_THRESHOLD_CURRENCY",
        "LOG_LEVEL",
        "APP_ENVIRONMENT",
        "DEBUG_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_storage(store):
    return KeyValueAuditStorage(store)


@pytest.fixture
def tracker(store, audit_storage):
    return FinanceTracker(store=store, audit_logger=AuditLogger(audit_storage))


@pytest.fixture
def dinner():
    """A 90 EUR expense paid by A and shared with B and C."""
    return Expense(
        expense_date=date(2024, 3, 10),
        category=ExpenseCategory.OTHER,
        amount=Decimal("90"),
        currency=Currency.EUR,
        paid_by="A",
        shared_with=["B", "C"],
        description="Team dinner",
    )


@pytest.fixture
def dutch_sale():
    """One 121 EUR standard-rated sale into the Netherlands, already stamped."""
    return IncomeRecord(
        sale_date=date(2024, 3, 15),
        product="Desk lamp",
        product_type=ProductType.STANDARD,
        customer_country=Country.NL,
        quantity=1,
        cost_price=Decimal("40"),
        sale_price=Decimal("121"),
        ad_spend=Decimal("10"),
        currency=Currency.EUR,
        added_by="A",
        vat_rate=Decimal("0.21"),
    )
