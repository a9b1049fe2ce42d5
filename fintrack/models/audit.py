"""
Audit Models for fintrack

Every change to the record set, and every derived balance change, is
logged. This makes it possible to explain a balance after the fact:
which expense moved it, which payment settled it, which edit reversed it.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Settlement
    PAYMENT_LOGGED = "payment_logged"
    PAYMENT_DELETED = "payment_deleted"

    # Income
    INCOME_ADDED = "income_added"
    INCOME_UPDATED = "income_updated"
    INCOME_DELETED = "income_deleted"

    # Ledger
    BALANCES_RECOMPUTED = "balances_recomputed"
    REPORTING_CURRENCY_CHANGED = "reporting_currency_changed"

    # Failures
    DATA_INTEGRITY_ERROR = "data_integrity_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'income', 'payment')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one edit and its recompute)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


def _balances_detail(deltas: dict[str, Decimal]) -> dict[str, str]:
    # Decimals go into details as strings so the event stays JSON-safe
    return {name: str(value) for name, value in deltas.items()}


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "Alice", "90", "EUR", deltas)
        event = AuditEventBuilder.payment_logged(payment_id, "Bob", "Alice", "30", "EUR")
    """

    @staticmethod
    def expense_added(
        expense_id: UUID,
        paid_by: str,
        amount: str,
        currency: str,
        deltas: dict[str, Decimal],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {paid_by} paid {amount} {currency}",
            details={
                "paid_by": paid_by,
                "amount": amount,
                "currency": currency,
                "balance_deltas": _balances_detail(deltas),
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: UUID,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense updated ({len(changed_fields)} fields changed)",
            details={
                "changed_fields": changed_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: UUID,
        deltas: dict[str, Decimal],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="Expense deleted and its balance effect reversed",
            details={
                "balance_deltas": _balances_detail(deltas),
            },
            is_user_action=True,
        )

    @staticmethod
    def payment_logged(
        payment_id: UUID,
        from_participant: str,
        to_participant: str,
        amount: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_LOGGED,
            entity_type="payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=(
                f"Payment logged: {from_participant} paid {to_participant} "
                f"{amount} {currency}"
            ),
            details={
                "from": from_participant,
                "to": to_participant,
                "amount": amount,
                "currency": currency,
            },
            is_user_action=True,
        )

    @staticmethod
    def payment_deleted(
        payment_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_DELETED,
            entity_type="payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description="Payment deleted and its settlement reversed",
            is_user_action=True,
        )

    @staticmethod
    def income_saved(
        income_id: UUID,
        product: str,
        country: str,
        vat_rate: str,
        is_update: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.INCOME_UPDATED
            if is_update
            else AuditEventType.INCOME_ADDED
        )
        verb = "updated" if is_update else "added"
        return AuditEvent(
            event_type=event_type,
            entity_type="income",
            entity_id=income_id,
            correlation_id=correlation_id,
            description=f"Income {verb}: {product} ({country}, VAT {vat_rate})",
            details={
                "product": product,
                "customer_country": country,
                "vat_rate": vat_rate,
            },
            is_user_action=True,
        )

    @staticmethod
    def income_deleted(
        income_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_DELETED,
            entity_type="income",
            entity_id=income_id,
            correlation_id=correlation_id,
            description="Income record deleted",
            is_user_action=True,
        )

    @staticmethod
    def balances_recomputed(
        reporting_currency: str,
        expense_count: int,
        payment_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCES_RECOMPUTED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=(
                f"Balances recomputed in {reporting_currency} from "
                f"{expense_count} expenses and {payment_count} payments"
            ),
            details={
                "reporting_currency": reporting_currency,
                "expense_count": expense_count,
                "payment_count": payment_count,
            },
        )

    @staticmethod
    def reporting_currency_changed(
        old_currency: str,
        new_currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORTING_CURRENCY_CHANGED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Reporting currency changed from {old_currency} to {new_currency}",
            details={
                "old_currency": old_currency,
                "new_currency": new_currency,
            },
            is_user_action=True,
        )

    @staticmethod
    def data_integrity_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_INTEGRITY_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Data integrity error: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
