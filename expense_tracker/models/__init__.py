"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the store must conform to these schemas.
"""

from expense_tracker.models.expense import (
    DELIMITER,
    ESCAPE_TOKEN,
    CategoryTotal,
    DecodeIssue,
    Expense,
    ExpenseExtremes,
    ExpenseReport,
    ExpenseUpdate,
    LoadReport,
    MutationResult,
    ValidationIssue,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # File format constants
    "DELIMITER",
    "ESCAPE_TOKEN",
    # Expense models
    "CategoryTotal",
    "DecodeIssue",
    "Expense",
    "ExpenseExtremes",
    "ExpenseReport",
    "ExpenseUpdate",
    "LoadReport",
    "MutationResult",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
