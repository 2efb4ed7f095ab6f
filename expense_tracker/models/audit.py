"""
Audit Models for Expense Tracker

Every change to the user's records, and every problem with the backing
file, becomes an AuditEvent. This provides:
1. Traceability of what happened to each expense id
2. Debugging information when the file could not be read or written
3. A history the UI can show

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    STORE_LOADED = "store_loaded"
    LINE_SKIPPED = "line_skipped"
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which expense this is about, if any
    expense_id: Optional[int] = Field(
        default=None,
        description="ID of the expense this event relates to"
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
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "expense_id": self.expense_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, amount, category)
        event = AuditEventBuilder.save_failed("add", error_message)
    """

    @staticmethod
    def expense_added(
        expense_id: int,
        amount: str,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            expense_id=expense_id,
            description=f"Expense added: {category} - {amount}",
            details={
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def expense_updated(
        expense_id: int,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            expense_id=expense_id,
            description=f"Expense updated: {', '.join(changed_fields) or 'no changes'}",
            details={
                "changed_fields": changed_fields,
            },
        )

    @staticmethod
    def expense_deleted(expense_id: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            expense_id=expense_id,
            description=f"Expense deleted: {expense_id}",
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
        expense_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            expense_id=expense_id,
            description=f"{operation.capitalize()} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
        )

    @staticmethod
    def store_loaded(
        source: str,
        loaded_count: int,
        skipped_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            description=f"Loaded {loaded_count} expenses from {source}",
            details={
                "source": source,
                "loaded_count": loaded_count,
                "skipped_count": skipped_count,
            },
        )

    @staticmethod
    def line_skipped(
        line_number: int,
        line: str,
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LINE_SKIPPED,
            severity=AuditSeverity.WARNING,
            description=f"Could not parse line {line_number}",
            details={
                "line_number": line_number,
                "line": line,
            },
            error_message=reason,
        )

    @staticmethod
    def load_failed(
        source: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Error loading data from {source}",
            details={
                "source": source,
            },
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        expense_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            expense_id=expense_id,
            description=f"Error saving data after {operation}",
            details={
                "operation": operation,
            },
            error_message=error_message,
        )
