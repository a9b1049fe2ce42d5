"""
Data Models Package

This package contains all Pydantic models used in fintrack.
All data flowing through the system must conform to these schemas.
"""

from fintrack.models.money import (
    ZERO_DECIMAL_CURRENCIES,
    Currency,
    Money,
)
from fintrack.models.records import (
    Country,
    Expense,
    ExpenseCategory,
    IncomeRecord,
    Payment,
    ProductType,
    VATType,
)
from fintrack.models.reports import (
    DashboardTotals,
    IncomeSummary,
    MonthlyTotals,
    PeriodTotals,
    ReportFilter,
    VATReport,
    VATTransaction,
)
from fintrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Money
    "ZERO_DECIMAL_CURRENCIES",
    "Currency",
    "Money",
    # Records
    "Country",
    "Expense",
    "ExpenseCategory",
    "IncomeRecord",
    "Payment",
    "ProductType",
    "VATType",
    # Reports
    "DashboardTotals",
    "IncomeSummary",
    "MonthlyTotals",
    "PeriodTotals",
    "ReportFilter",
    "VATReport",
    "VATTransaction",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
