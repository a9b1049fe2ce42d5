"""
Audit Logger

DESIGN DECISION: Every change to the record set is logged.
This provides:
1. Traceability of every balance movement
2. Debugging capability when a total looks wrong
3. A history the user can review

The audit logger:
- Always logs locally through structlog
- Persists through an optional AuditStorageInterface
- Never lets a storage failure break the operation being audited
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from fintrack.models.audit import AuditEvent, AuditSeverity
from fintrack.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route structlog output through the stdlib root logger at `level`.

    Defaults to the configured AppSettings.log_level.
    """
    if level is None:
        from fintrack.config import get_settings
        level = get_settings().app.log_level
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))
    logging.getLogger().setLevel(getattr(logging, level.upper()))


_SEVERITY_METHODS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
    AuditSeverity.CRITICAL: "critical",
}


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("fintrack.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_method = getattr(self._logger, _SEVERITY_METHODS[event.severity])
        log_method("audit_event", **event.to_log_dict())

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., an expense edit)
    and pass it through everything the action triggers.
    """
    return uuid4()
