"""
Finance Tracker Orchestrator

This module ties the components together and defines the end-to-end
flows the UI drives:
1. Expenses (add / edit / delete -> storage + ledger + audit)
2. Payments (log / delete -> storage + ledger + audit)
3. Income (add / edit / delete -> VAT snapshot + storage + audit)
4. Reporting currency changes (preference + full ledger recompute)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The calculation core never sees storage
- Every balance change goes through the ledger's apply/reverse
- Edits are reverse(old) then apply(new), using the STORED old version
- Data-integrity failures are audited and re-raised, never swallowed
- Any other failure inside a flow is audited as a system error and re-raised
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterable, Iterator, Optional
from uuid import UUID

from fintrack.audit import AuditLogger, create_correlation_id
from fintrack.config import Settings, get_settings
from fintrack.models.audit import AuditEventBuilder
from fintrack.models.money import Currency
from fintrack.models.records import Country, Expense, IncomeRecord, Payment
from fintrack.models.reports import (
    DashboardTotals,
    MonthlyTotals,
    PeriodTotals,
    ReportFilter,
    VATReport,
)
from fintrack.reports import ReportBuilder
from fintrack.services.currency import DEFAULT_RATES
from fintrack.services.currency.converter import CurrencyCode, RateTable
from fintrack.services.errors import DataIntegrityError
from fintrack.services.ledger import BalanceLedger
from fintrack.services.storage import (
    DuplicateError,
    ExpenseRepository,
    IncomeRepository,
    InMemoryKeyValueStore,
    KeyValueAuditStorage,
    KeyValueStore,
    NotFoundError,
    PaymentRepository,
    PreferenceStore,
)
from fintrack.services.vat import VATEngine


class FinanceTracker:
    """
    Orchestrates record changes and the balances derived from them.

    Flow for an expense edit:
    1. Check the new version converts (fail before touching anything)
    2. Replace the stored record, getting the old version back
    3. Ledger: reverse old, apply new
    4. Audit the change
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        settings: Optional[Settings] = None,
        rate_table: RateTable = DEFAULT_RATES,
        vat_engine: Optional[VATEngine] = None,
        reporting_currency: Optional[CurrencyCode] = None,
        threshold_currency: Optional[CurrencyCode] = None,
        audit_logger: Optional[AuditLogger] = None,
        participants: Iterable[str] = (),
    ):
        settings = settings if settings is not None else get_settings()
        ledger_settings = settings.ledger

        self._store = store if store is not None else InMemoryKeyValueStore()
        self._expenses = ExpenseRepository(self._store)
        self._incomes = IncomeRepository(self._store)
        self._payments = PaymentRepository(self._store)
        self._preferences = PreferenceStore(self._store)

        self._rates = rate_table
        self._vat = vat_engine or VATEngine()
        self._threshold_currency = (
            threshold_currency or settings.vat.threshold_currency
        )
        self._tolerance = ledger_settings.balance_tolerance
        self._audit_logger = audit_logger
        self._participants: list[str] = list(dict.fromkeys(participants))

        currency = (
            reporting_currency
            or self._preferences.get_reporting_currency()
            or ledger_settings.reporting_currency
        )
        self._ledger = self._build_ledger(currency)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def reporting_currency(self) -> Currency:
        return self._ledger.reporting_currency

    @property
    def ledger(self) -> BalanceLedger:
        return self._ledger

    @property
    def balances(self) -> dict:
        return self._ledger.balances

    @property
    def participants(self) -> list[str]:
        return list(self._participants)

    @property
    def reports(self) -> ReportBuilder:
        """A report builder bound to the current reporting currency."""
        return ReportBuilder(
            reporting_currency=self.reporting_currency,
            rate_table=self._rates,
            vat_engine=self._vat,
            threshold_currency=self._threshold_currency,
        )

    def is_balanced(self) -> bool:
        """Zero-sum check at the configured tolerance."""
        return self._ledger.is_balanced(self._tolerance)

    def expenses(self) -> list[Expense]:
        return self._expenses.list_all()

    def incomes(self) -> list[IncomeRecord]:
        return self._incomes.list_all()

    def payments(self) -> list[Payment]:
        return self._payments.list_all()

    def add_participant(self, name: str) -> None:
        name = name.strip()
        if not name:
            raise ValueError("Participant name cannot be empty")
        if name not in self._participants:
            self._participants.append(name)
        self._ledger.ensure_participants([name])

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        expense: Expense,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("add_expense", correlation_id):
            self._check_convertible(expense.currency)
            self._expenses.add(expense)
            deltas = self._ledger.apply(expense)

        self._audit(AuditEventBuilder.expense_added(
            expense_id=expense.id,
            paid_by=expense.paid_by,
            amount=str(expense.amount),
            currency=expense.currency.value,
            deltas=deltas,
            correlation_id=correlation_id,
        ))
        return expense

    def update_expense(
        self,
        expense: Expense,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Replace a stored expense by id.

        Raises:
            NotFoundError: If no expense has that id
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("update_expense", correlation_id):
            self._check_convertible(expense.currency)
            old = self._expenses.update(expense)
            self._ledger.replace(old, expense)

        old_fields = old.model_dump()
        changed = [
            name for name, value in expense.model_dump().items()
            if old_fields.get(name) != value
        ]
        self._audit(AuditEventBuilder.expense_updated(
            expense_id=expense.id,
            changed_fields=changed,
            correlation_id=correlation_id,
        ))
        return expense

    def delete_expense(
        self,
        expense_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Delete an expense and reverse its balance effect.

        Raises:
            NotFoundError: If no expense has that id
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("delete_expense", correlation_id):
            old = self._expenses.delete(expense_id)
            deltas = self._ledger.reverse(old)

        self._audit(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            deltas=deltas,
            correlation_id=correlation_id,
        ))
        return old

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def log_payment(
        self,
        payment: Payment,
        correlation_id: Optional[UUID] = None,
    ) -> Payment:
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("log_payment", correlation_id):
            self._check_convertible(payment.currency)
            self._payments.add(payment)
            self._ledger.settle(payment)

        self._audit(AuditEventBuilder.payment_logged(
            payment_id=payment.id,
            from_participant=payment.from_participant,
            to_participant=payment.to_participant,
            amount=str(payment.amount),
            currency=payment.currency.value,
            correlation_id=correlation_id,
        ))
        return payment

    def delete_payment(
        self,
        payment_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Payment:
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("delete_payment", correlation_id):
            old = self._payments.delete(payment_id)
            self._ledger.unsettle(old)

        self._audit(AuditEventBuilder.payment_deleted(
            payment_id=payment_id,
            correlation_id=correlation_id,
        ))
        return old

    # -------------------------------------------------------------------------
    # Income
    # -------------------------------------------------------------------------

    def add_income(
        self,
        income: IncomeRecord,
        correlation_id: Optional[UUID] = None,
    ) -> IncomeRecord:
        """
        Store an income record with its VAT rate snapshot.

        A record that already carries a rate (e.g. imported history)
        keeps it; otherwise the current table rate is stamped on.
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("add_income", correlation_id):
            stamped = self._vat.stamp(income)
            self._incomes.add(stamped)

        self._audit(AuditEventBuilder.income_saved(
            income_id=stamped.id,
            product=stamped.product,
            country=stamped.customer_country.value,
            vat_rate=str(stamped.vat_rate),
            correlation_id=correlation_id,
        ))
        return stamped

    def update_income(
        self,
        income: IncomeRecord,
        correlation_id: Optional[UUID] = None,
    ) -> IncomeRecord:
        """Replace an income record, re-resolving its VAT rate snapshot."""
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("update_income", correlation_id):
            stamped = self._vat.stamp(income, force=True)
            self._incomes.update(stamped)

        self._audit(AuditEventBuilder.income_saved(
            income_id=stamped.id,
            product=stamped.product,
            country=stamped.customer_country.value,
            vat_rate=str(stamped.vat_rate),
            is_update=True,
            correlation_id=correlation_id,
        ))
        return stamped

    def delete_income(
        self,
        income_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> IncomeRecord:
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("delete_income", correlation_id):
            old = self._incomes.delete(income_id)

        self._audit(AuditEventBuilder.income_deleted(
            income_id=income_id,
            correlation_id=correlation_id,
        ))
        return old

    # -------------------------------------------------------------------------
    # Ledger maintenance
    # -------------------------------------------------------------------------

    def change_currency(
        self,
        currency: CurrencyCode,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """
        Switch the reporting currency and recompute every balance in it.

        Returns the recomputed balances.
        """
        correlation_id = correlation_id or create_correlation_id()
        old_currency = self.reporting_currency

        with self._integrity_guard("change_currency", correlation_id):
            ledger = self._build_ledger(currency, self._ledger.balances)
            self._preferences.set_reporting_currency(ledger.reporting_currency)
            self._ledger = ledger

        self._audit(AuditEventBuilder.reporting_currency_changed(
            old_currency=old_currency.value,
            new_currency=self.reporting_currency.value,
            correlation_id=correlation_id,
        ))
        return self._ledger.balances

    def recompute_balances(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """
        Rebuild the ledger from the stored records.

        Always equivalent to the incremental history; useful after the
        store was changed from outside this tracker.
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._integrity_guard("recompute_balances", correlation_id):
            self._ledger = self._build_ledger(
                self.reporting_currency, self._ledger.balances
            )

        self._audit(AuditEventBuilder.balances_recomputed(
            reporting_currency=self.reporting_currency.value,
            expense_count=len(self._expenses.list_all()),
            payment_count=len(self._payments.list_all()),
            correlation_id=correlation_id,
        ))
        return self._ledger.balances

    # -------------------------------------------------------------------------
    # Report shortcuts over the stored records
    # -------------------------------------------------------------------------

    def period_totals(self, report_filter: Optional[ReportFilter] = None) -> PeriodTotals:
        return self.reports.period_totals(self.expenses(), self.incomes(), report_filter)

    def monthly_totals(
        self,
        year: int,
        report_filter: Optional[ReportFilter] = None,
    ) -> list[MonthlyTotals]:
        return self.reports.monthly_totals(
            self.expenses(), self.incomes(), year, report_filter
        )

    def vat_report(self, country: Country, date_from: date, date_to: date) -> VATReport:
        return self.reports.vat_report(self.incomes(), country, date_from, date_to)

    def dashboard_totals(self) -> DashboardTotals:
        return self.reports.dashboard_totals(self.expenses(), self.incomes())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _build_ledger(
        self,
        currency: CurrencyCode,
        known: Iterable[str] = (),
    ) -> BalanceLedger:
        # Participants already shown at zero stay visible after a rebuild
        participants = list(dict.fromkeys([*self._participants, *known]))
        return BalanceLedger.from_records(
            self._expenses.list_all(),
            self._payments.list_all(),
            reporting_currency=currency,
            rate_table=self._rates,
            participants=participants,
        )

    def _check_convertible(self, currency: CurrencyCode) -> None:
        # Raises UnknownCurrencyError before anything is stored
        self._ledger.converter.to_target(0, currency)

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    @contextmanager
    def _integrity_guard(self, operation: str, correlation_id: UUID) -> Iterator[None]:
        try:
            yield
        except DataIntegrityError as e:
            self._audit(AuditEventBuilder.data_integrity_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation},
                correlation_id=correlation_id,
            ))
            raise
        except (NotFoundError, DuplicateError):
            # Caller errors; nothing to audit
            raise
        except Exception as e:
            self._audit(AuditEventBuilder.system_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation},
                correlation_id=correlation_id,
            ))
            raise


def create_tracker(
    store: Optional[KeyValueStore] = None,
    persist_audit: bool = True,
    participants: Iterable[str] = (),
) -> FinanceTracker:
    """
    Factory function to create a tracker with its audit trail.

    Args:
        store: Key-value store for records. In-memory if None.
        persist_audit: Whether audit events are also written to the store.
                       Set to False for local-only structured logging.
        participants: Known participants, shown at zero until they
                      appear in a record.
    """
    store = store if store is not None else InMemoryKeyValueStore()

    if persist_audit:
        audit_logger = AuditLogger(KeyValueAuditStorage(store))
    else:
        audit_logger = AuditLogger()  # Local-only logging

    return FinanceTracker(
        store=store,
        audit_logger=audit_logger,
        participants=participants,
    )
