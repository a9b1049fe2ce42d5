"""Balance ledger package."""

from fintrack.services.ledger.balance_ledger import BalanceLedger, SharedExpenseLike

__all__ = ["BalanceLedger", "SharedExpenseLike"]
