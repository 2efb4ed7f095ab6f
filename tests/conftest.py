"""
Shared fixtures.

Stores are always built on a temporary file or the in-memory backend;
tests never read or write a real expenses.txt.
"""

from datetime import date
from decimal import Decimal

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.services.storage import FlatFileExpenseBackend, InMemoryExpenseBackend
from expense_tracker.store import ExpenseStore


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test in an empty directory with fresh settings."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "EXPENSES_DATA_FILE",
        "EXPENSES_ENCODING",
        "EXPENSES_WRITE_RETRY_ATTEMPTS",
        "EXPENSES_LOG_LEVEL",
        "EXPENSES_LOG_FORMAT",
        "EXPENSES_CURRENCY_SYMBOL",
        "EXPENSES_AUDIT_HISTORY_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "expenses.txt"


@pytest.fixture
def file_backend(data_file):
    return FlatFileExpenseBackend(data_file, write_attempts=1)


@pytest.fixture
def file_store(file_backend):
    return ExpenseStore(file_backend, audit_logger=AuditLogger(history_size=50))


@pytest.fixture
def memory_backend():
    return InMemoryExpenseBackend()


@pytest.fixture
def store(memory_backend):
    return ExpenseStore(memory_backend, audit_logger=AuditLogger(history_size=50))


@pytest.fixture
def populated_store(store):
    """Store holding the three sample expenses with ids 1, 2, 3."""
    store.add(Decimal("25.50"), "Food", date(2024, 3, 15), "Lunch at restaurant")
    store.add(Decimal("15.00"), "Transportation", date(2024, 3, 15), "Bus fare")
    store.add(Decimal("9.99"), "Food", date(2024, 3, 10), "Coffee beans")
    return store
