"""
Exceptions for Expense Tracker

Every error the store can raise derives from ExpenseTrackerError, so the UI
can catch one type and render the message.
"""

from typing import Optional

from expense_tracker.models.expense import ValidationIssue


class ExpenseTrackerError(Exception):
    """Base exception for the expense tracker."""
    pass


class ExpenseValidationError(ExpenseTrackerError, ValueError):
    """A caller-supplied field failed a domain constraint."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))


class ExpenseNotFoundError(ExpenseTrackerError, LookupError):
    """The operation targeted an id that is not in the store."""

    def __init__(self, expense_id: int):
        self.expense_id = expense_id
        super().__init__(f"Expense with ID {expense_id} not found")


class EmptyStoreError(ExpenseTrackerError):
    """An aggregate was requested over an empty collection."""

    def __init__(self, message: str = "No expenses found"):
        super().__init__(message)


class DecodeError(ExpenseTrackerError):
    """A persisted line could not be turned back into an expense."""

    def __init__(self, reason: str, line: Optional[str] = None):
        self.reason = reason
        self.line = line
        super().__init__(f"Could not parse line: {reason}")


class StorageError(ExpenseTrackerError):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """Reading or writing the backing file failed."""
    pass
