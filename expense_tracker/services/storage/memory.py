"""In-memory backend, used by tests and for throwaway sessions."""

from typing import Iterable, Optional

from expense_tracker.services.storage.interface import (
    ExpenseBackendInterface,
    PersistenceError,
)


class InMemoryExpenseBackend(ExpenseBackendInterface):
    """
    Keeps the "file" as a list of lines.

    fail_writes / fail_reads make the next operations raise PersistenceError,
    which is how tests exercise the save-failure path.
    """

    def __init__(self, lines: Optional[Iterable[str]] = None):
        self._lines: Optional[list[str]] = list(lines) if lines is not None else None
        self.fail_writes = False
        self.fail_reads = False
        self.write_count = 0

    @property
    def location(self) -> str:
        return "memory"

    @property
    def lines(self) -> list[str]:
        return list(self._lines or [])

    def exists(self) -> bool:
        return self._lines is not None

    def read_lines(self) -> list[str]:
        if self.fail_reads:
            raise PersistenceError("Simulated read failure")
        return list(self._lines or [])

    def write_lines(self, lines: Iterable[str]) -> None:
        if self.fail_writes:
            raise PersistenceError("Simulated write failure")
        self._lines = list(lines)
        self.write_count += 1
