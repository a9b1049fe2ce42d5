"""Tests for the audit logger."""

import logging
from decimal import Decimal
from uuid import uuid4

from fintrack.audit import AuditLogger, configure_logging, create_correlation_id
from fintrack.models import AuditEvent, AuditEventBuilder
from fintrack.services.storage import AuditStorageInterface, StorageError


class FailingAuditStorage(AuditStorageInterface):
    """Audit storage whose writes always fail."""

    def append_event(self, event: AuditEvent) -> bool:
        raise StorageError("disk full")

    def get_events_by_correlation_id(self, correlation_id):
        return []

    def get_events_by_entity(self, entity_type, entity_id):
        return []

    def get_recent_events(self, limit=100):
        return []


def _event() -> AuditEvent:
    return AuditEventBuilder.expense_added(
        expense_id=uuid4(),
        paid_by="A",
        amount="90",
        currency="EUR",
        deltas={"A": Decimal("60"), "B": Decimal("-60")},
    )


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_local_only(self):
        """Test logging without storage succeeds."""
        logger = AuditLogger()
        assert logger.storage is None
        assert logger.log(_event()) is True

    def test_persists_to_storage(self, audit_storage):
        """Test events are appended to the configured storage."""
        logger = AuditLogger(audit_storage)
        event = _event()
        assert logger.log(event) is True
        assert [e.event_id for e in audit_storage.get_recent_events()] == [event.event_id]

    def test_storage_failure_does_not_raise(self):
        """Test a failing storage write is reported, not raised."""
        logger = AuditLogger(FailingAuditStorage())
        assert logger.log(_event()) is False

    def test_writes_structured_log(self, caplog):
        """Test the event is emitted through the stdlib logger."""
        with caplog.at_level(logging.INFO, logger="fintrack.audit"):
            AuditLogger().log(_event())
        assert "expense_added" in caplog.text

    def test_error_events_log_at_error(self, caplog):
        """Test event severity picks the log level."""
        event = AuditEventBuilder.data_integrity_error("UnknownCurrencyError", "Unknown currency: 'XYZ'")
        with caplog.at_level(logging.ERROR, logger="fintrack.audit"):
            AuditLogger().log(event)
        assert any(record.levelno == logging.ERROR for record in caplog.records)


class TestHelpers:
    """Tests for module helpers."""

    def test_correlation_ids_are_unique(self):
        """Test each call yields a fresh id."""
        assert create_correlation_id() != create_correlation_id()

    def test_configure_logging(self):
        """Test the root logger level follows the argument."""
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging("debug")
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)

    def test_configure_logging_defaults_to_settings(self, monkeypatch):
        """Test the level comes from settings when not given."""
        from fintrack.config import get_settings

        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        get_settings.cache_clear()
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging()
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)
