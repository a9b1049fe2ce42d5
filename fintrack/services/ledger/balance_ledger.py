"""
Balance Ledger

Running net balances per participant, in one reporting currency.

Sign convention:
    positive -> the group owes this participant
    negative -> this participant owes the group

Split policy for a shared expense of amount A paid by P and shared with
S1..Sn:

    share      = A / (n + 1)
    P         += A - share
    each Si   -= share

so every expense moves money between participants without creating or
destroying any: the balances of a closed set of expenses sum to zero.

CRITICAL: Edits are always reverse(old) followed by apply(new). A direct
diff would need to know which fields changed and how each affects every
participant; reversing and re-applying is correct whatever changed.
"""

import threading
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Protocol

import structlog

from fintrack.models.money import Currency
from fintrack.models.records import Payment
from fintrack.services.currency.converter import (
    Amount,
    CurrencyCode,
    CurrencyConverter,
    RateTable,
    currency_code,
)
from fintrack.services.currency.rates import DEFAULT_RATES

logger = structlog.get_logger(__name__)


class SharedExpenseLike(Protocol):
    """What the ledger reads from an expense."""
    amount: Decimal
    currency: Currency
    paid_by: str
    shared_with: list[str]


class BalanceLedger:
    """
    Participant -> net balance map with incremental updates.

    All mutation happens under a lock: `apply` is a read-modify-write on
    several entries at once, and a reader must never see half of one.
    """

    def __init__(
        self,
        reporting_currency: CurrencyCode = Currency.EUR,
        rate_table: RateTable = DEFAULT_RATES,
    ):
        self._converter = CurrencyConverter(reporting_currency, rate_table)
        self._balances: dict[str, Decimal] = defaultdict(Decimal)
        self._transactions = 0
        self._lock = threading.RLock()

    @classmethod
    def from_records(
        cls,
        expenses: Iterable[SharedExpenseLike],
        payments: Iterable[Payment] = (),
        reporting_currency: CurrencyCode = Currency.EUR,
        rate_table: RateTable = DEFAULT_RATES,
        participants: Iterable[str] = (),
    ) -> "BalanceLedger":
        """
        Build a ledger from scratch out of the full record set.

        Equivalent to applying every expense and settling every payment
        on an empty ledger, in order.
        """
        ledger = cls(reporting_currency, rate_table)
        ledger.ensure_participants(participants)
        for expense in expenses:
            ledger.apply(expense)
        for payment in payments:
            ledger.settle(payment)
        return ledger

    @property
    def reporting_currency(self) -> Currency:
        return self._converter.target

    @property
    def converter(self) -> CurrencyConverter:
        return self._converter

    @property
    def transaction_count(self) -> int:
        """Expenses and payments applied (or reversed) since the last reset."""
        with self._lock:
            return self._transactions

    @property
    def balances(self) -> dict[str, Decimal]:
        """A consistent snapshot of every balance."""
        with self._lock:
            return dict(self._balances)

    def balance_of(self, participant: str) -> Decimal:
        with self._lock:
            return self._balances.get(participant, Decimal("0"))

    def total(self) -> Decimal:
        """Sum of all balances; zero (within tolerance) for a closed expense set."""
        with self._lock:
            return sum(self._balances.values(), Decimal("0"))

    def ensure_participants(self, participants: Iterable[str]) -> None:
        """Make sure every participant shows up, at zero if they have no history."""
        with self._lock:
            for name in participants:
                self._balances[name] += 0

    def reset(self) -> None:
        with self._lock:
            self._balances.clear()
            self._transactions = 0

    def apply(
        self,
        expense: SharedExpenseLike,
        reverse: bool = False,
    ) -> dict[str, Decimal]:
        """
        Apply (or reverse) one shared expense.

        Returns the deltas added to each participant's balance.

        Raises:
            UnknownCurrencyError: If the expense currency has no rate
        """
        converted = self._converter.to_target(expense.amount, expense.currency)
        share = converted / (len(expense.shared_with) + 1)
        sign = -1 if reverse else 1

        deltas: dict[str, Decimal] = defaultdict(Decimal)
        deltas[expense.paid_by] += sign * (converted - share)
        for sharer in expense.shared_with:
            deltas[sharer] -= sign * share

        self._add(deltas)

        logger.debug(
            "ledger_expense_reversed" if reverse else "ledger_expense_applied",
            paid_by=expense.paid_by,
            amount=str(expense.amount),
            currency=currency_code(expense.currency),
            sharers=len(expense.shared_with),
            reporting_currency=self.reporting_currency.value,
        )
        return dict(deltas)

    def reverse(self, expense: SharedExpenseLike) -> dict[str, Decimal]:
        """Undo the balance effect of a previously applied expense."""
        return self.apply(expense, reverse=True)

    def replace(
        self,
        old: SharedExpenseLike,
        new: SharedExpenseLike,
    ) -> dict[str, Decimal]:
        """
        Swap an applied expense for its edited version.

        Returns the combined deltas of both steps.
        """
        with self._lock:
            combined: dict[str, Decimal] = defaultdict(Decimal)
            for name, delta in self.reverse(old).items():
                combined[name] += delta
            for name, delta in self.apply(new).items():
                combined[name] += delta
        return dict(combined)

    def settle_payment(
        self,
        from_participant: str,
        to_participant: str,
        amount: Amount,
        currency: CurrencyCode,
    ) -> dict[str, Decimal]:
        """
        Record a direct payment from one participant to another.

        The payer's debt shrinks (credit) and the receiver is owed that
        much less (debit).
        """
        converted = self._converter.to_target(amount, currency)
        deltas = {
            from_participant: converted,
            to_participant: -converted,
        }
        self._add(deltas)

        logger.debug(
            "ledger_payment_settled",
            from_participant=from_participant,
            to_participant=to_participant,
            amount=str(amount),
            currency=currency_code(currency),
        )
        return deltas

    def settle(self, payment: Payment) -> dict[str, Decimal]:
        return self.settle_payment(
            payment.from_participant,
            payment.to_participant,
            payment.amount,
            payment.currency,
        )

    def unsettle(self, payment: Payment) -> dict[str, Decimal]:
        """Reverse a previously settled payment."""
        return self.settle_payment(
            payment.to_participant,
            payment.from_participant,
            payment.amount,
            payment.currency,
        )

    def is_balanced(self, tolerance: Optional[Decimal] = None) -> bool:
        """
        Check that balances sum to zero within `tolerance` per transaction.

        Expenses and payments are both zero-sum, so this holds for any
        history built through this ledger. Rounding can accumulate once per
        applied expense or payment, so the bound grows with their count.
        """
        tolerance = tolerance if tolerance is not None else Decimal("1e-9")
        with self._lock:
            bound = tolerance * max(1, self._transactions)
            return abs(self.total()) <= bound

    def _add(self, deltas: dict[str, Decimal]) -> None:
        with self._lock:
            self._transactions += 1
            for name, delta in deltas.items():
                self._balances[name] += delta
