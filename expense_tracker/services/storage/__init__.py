"""
Storage Services Package

Provides the abstract backend interface, the line codec, and concrete
backends. The flat file is the real one; the in-memory backend exists for
tests and throwaway sessions.
"""

from expense_tracker.services.storage.interface import (
    ExpenseBackendInterface,
    PersistenceError,
    StorageError,
)
from expense_tracker.services.storage.codec import (
    FIELD_COUNT,
    decode_expense,
    encode_expense,
)
from expense_tracker.services.storage.flat_file import FlatFileExpenseBackend
from expense_tracker.services.storage.memory import InMemoryExpenseBackend

__all__ = [
    # Interface
    "ExpenseBackendInterface",
    # Exceptions
    "PersistenceError",
    "StorageError",
    # Codec
    "FIELD_COUNT",
    "decode_expense",
    "encode_expense",
    # Implementations
    "FlatFileExpenseBackend",
    "InMemoryExpenseBackend",
]
