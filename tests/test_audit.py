"""Tests for AuditLogger and logging setup."""

import logging

import pytest

from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.models.audit import AuditEventType, AuditSeverity


class TestAuditLogger:
    """Tests for the in-memory audit history."""

    def test_recent_events_newest_first(self):
        audit = AuditLogger(history_size=10)
        audit.log_expense_added(expense_id=1, amount="1.00", category="Food")
        audit.log_expense_updated(expense_id=1, changed_fields=["amount"])
        audit.log_expense_deleted(expense_id=1)

        events = audit.recent_events()
        assert [e.event_type for e in events] == [
            AuditEventType.EXPENSE_DELETED,
            AuditEventType.EXPENSE_UPDATED,
            AuditEventType.EXPENSE_ADDED,
        ]

    def test_history_is_bounded(self):
        """Only the last history_size events are kept."""
        audit = AuditLogger(history_size=2)
        for expense_id in (1, 2, 3):
            audit.log_expense_deleted(expense_id=expense_id)
        assert [e.expense_id for e in audit.recent_events()] == [3, 2]

    def test_recent_events_limit(self):
        audit = AuditLogger(history_size=10)
        for expense_id in (1, 2, 3):
            audit.log_expense_deleted(expense_id=expense_id)
        assert [e.expense_id for e in audit.recent_events(limit=1)] == [3]

    def test_history_size_from_settings(self, monkeypatch):
        monkeypatch.setenv("EXPENSES_AUDIT_HISTORY_SIZE", "1")
        audit = AuditLogger()
        audit.log_expense_deleted(expense_id=1)
        audit.log_expense_deleted(expense_id=2)
        assert len(audit.recent_events()) == 1

    def test_problem_events_have_severity(self):
        """File problems are logged above INFO."""
        audit = AuditLogger(history_size=10)
        audit.log_line_skipped(line_number=2, line="bad", reason="expected 5 fields, found 1")
        audit.log_load_failed(source="expenses.txt", error_message="permission denied")
        audit.log_save_failed(operation="add", error_message="disk full", expense_id=4)

        severities = [e.severity for e in audit.recent_events()]
        assert severities == [AuditSeverity.ERROR, AuditSeverity.ERROR, AuditSeverity.WARNING]

    def test_validation_failed_event(self):
        audit = AuditLogger(history_size=10)
        audit.log_validation_failed(
            operation="update",
            issues=[{"field": "amount", "message": "Amount must be greater than zero."}],
            expense_id=2,
        )
        event = audit.recent_events()[0]
        assert event.event_type == AuditEventType.VALIDATION_FAILED
        assert event.expense_id == 2


class TestConfigureLogging:
    """Tests for configure_logging."""

    def teardown_method(self):
        configure_logging(level="INFO", log_format="json")

    def test_sets_root_level(self):
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_level_from_settings(self, monkeypatch):
        monkeypatch.setenv("EXPENSES_LOG_LEVEL", "warning")
        configure_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_console_format(self):
        """Console rendering can be selected without errors."""
        configure_logging(level="INFO", log_format="console")
        AuditLogger(history_size=1).log_expense_deleted(expense_id=1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
