"""
Audit Logger

DESIGN DECISION: Every change to the user's records is logged, and so is
every problem with the backing file. This provides:
1. Traceability (which id was added, changed, removed and when)
2. Debugging capability when the file is damaged or unwritable
3. A recent-activity view in the UI

The audit logger:
- Writes structured log lines through structlog
- Keeps a bounded in-memory history for display
- Never raises into the caller
"""

import logging
from collections import deque
from typing import Optional

import structlog

from expense_tracker.config import get_settings
from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


_SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def _configure_structlog(renderer) -> None:
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
_configure_structlog(structlog.processors.JSONRenderer())


def configure_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Apply the configured log level and output format.

    Call once at application startup. Arguments override settings.
    """
    app_settings = get_settings().app
    level = level or app_settings.log_level
    log_format = log_format or app_settings.log_format

    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)

    if log_format == "console":
        _configure_structlog(structlog.dev.ConsoleRenderer())
    else:
        _configure_structlog(structlog.processors.JSONRenderer())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for the UI)
    """

    def __init__(self, history_size: Optional[int] = None):
        """
        Initialize audit logger.

        Args:
            history_size: How many events to remember.
                    Defaults to the configured audit_history_size.
        """
        size = history_size or get_settings().app.audit_history_size
        self._history: deque[AuditEvent] = deque(maxlen=size)
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def log_expense_added(self, expense_id: int, amount: str, category: str) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            category=category,
        ))

    def log_expense_updated(self, expense_id: int, changed_fields: list[str]) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            changed_fields=changed_fields,
        ))

    def log_expense_deleted(self, expense_id: int) -> None:
        self.log(AuditEventBuilder.expense_deleted(expense_id=expense_id))

    def log_validation_failed(
        self,
        operation: str,
        issues: list[dict],
        expense_id: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            operation=operation,
            issues=issues,
            expense_id=expense_id,
        ))

    def log_store_loaded(self, source: str, loaded_count: int, skipped_count: int) -> None:
        self.log(AuditEventBuilder.store_loaded(
            source=source,
            loaded_count=loaded_count,
            skipped_count=skipped_count,
        ))

    def log_line_skipped(self, line_number: int, line: str, reason: str) -> None:
        self.log(AuditEventBuilder.line_skipped(
            line_number=line_number,
            line=line,
            reason=reason,
        ))

    def log_load_failed(self, source: str, error_message: str) -> None:
        self.log(AuditEventBuilder.load_failed(
            source=source,
            error_message=error_message,
        ))

    def log_save_failed(
        self,
        operation: str,
        error_message: str,
        expense_id: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.save_failed(
            operation=operation,
            error_message=error_message,
            expense_id=expense_id,
        ))
