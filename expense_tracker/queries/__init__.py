"""Query execution package."""

from expense_tracker.queries.executor import ExpenseQueryExecutor, expense_to_dict

__all__ = ["ExpenseQueryExecutor", "expense_to_dict"]
