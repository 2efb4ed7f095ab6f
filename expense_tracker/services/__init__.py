"""Services package."""

from expense_tracker.services.storage import (
    ExpenseBackendInterface,
    FlatFileExpenseBackend,
    InMemoryExpenseBackend,
    PersistenceError,
    StorageError,
    decode_expense,
    encode_expense,
)

__all__ = [
    "ExpenseBackendInterface",
    "FlatFileExpenseBackend",
    "InMemoryExpenseBackend",
    "PersistenceError",
    "StorageError",
    "decode_expense",
    "encode_expense",
]
