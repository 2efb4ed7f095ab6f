"""Validation package."""

from expense_tracker.validation.validator import ExpenseValidator, to_decimal

__all__ = ["ExpenseValidator", "to_decimal"]
