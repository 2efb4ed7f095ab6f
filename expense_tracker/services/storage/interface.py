"""
Abstract Storage Interface

DESIGN DECISION: The store talks to its backing file through a tiny
line-oriented interface. This allows us to:
1. Use in-memory storage for testing
2. Simulate failing disks without touching the filesystem
3. Keep encoding/decoding and business rules out of the I/O code

The interface is intentionally simple: read every line, replace every line.
There is no append and no partial update; every save is a full snapshot.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from expense_tracker.exceptions import PersistenceError, StorageError


class ExpenseBackendInterface(ABC):
    """
    Abstract interface for the durable copy of the expense collection.

    Any backend (flat file, in-memory, ...) must implement these methods.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the data lives."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """
        Check whether there is any stored data yet.

        Returns:
            False if nothing was ever saved
        """
        pass

    @abstractmethod
    def read_lines(self) -> list[str]:
        """
        Read every stored line, in storage order, without line terminators.

        A line holding bytes that are not valid text comes back with those
        bytes as lone surrogates ("surrogateescape"); the codec rejects it.

        Returns:
            All lines, or an empty list if nothing was ever saved

        Raises:
            PersistenceError: If the data exists but cannot be read
        """
        pass

    @abstractmethod
    def write_lines(self, lines: Iterable[str]) -> None:
        """
        Replace the stored data with the given lines.

        Args:
            lines: Encoded records, without line terminators

        Raises:
            PersistenceError: If the data cannot be written
        """
        pass


__all__ = [
    "ExpenseBackendInterface",
    "PersistenceError",
    "StorageError",
]
