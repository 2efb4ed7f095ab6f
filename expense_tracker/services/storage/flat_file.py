"""
Flat-File Storage Implementation

DESIGN DECISION: A plain text file, one expense per line, because:
1. The user can open and read their data in any editor
2. No database setup required
3. Easy to back up (copy one file)

TRADEOFFS:
- Every save rewrites the whole file (fine for a personal ledger)
- No atomic replace: a crash mid-write can leave a damaged file, which the
  next load survives by skipping the lines it cannot parse
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.config import get_settings
from expense_tracker.services.storage.interface import (
    ExpenseBackendInterface,
    PersistenceError,
)


logger = structlog.get_logger(__name__)


class FlatFileExpenseBackend(ExpenseBackendInterface):
    """
    Stores encoded expense lines in a single text file.

    Writes are retried on OSError (e.g. the file is briefly locked by a
    backup tool) before giving up with PersistenceError.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        encoding: Optional[str] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.data_file
        self._encoding = encoding or settings.encoding
        self._write_attempts = write_attempts or settings.write_retry_attempts

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.exists()

    def read_lines(self) -> list[str]:
        """
        Read the file and split it on "\\n", the only terminator write_lines uses.

        Bytes that are not valid in the file encoding are kept as lone
        surrogates ("surrogateescape") so the codec can reject that one line
        instead of the whole file being unreadable.
        """
        if not self._path.exists():
            return []
        try:
            with self._path.open(
                "r",
                encoding=self._encoding,
                errors="surrogateescape",
                newline="",
            ) as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Unable to read {self._path}: {e}") from e

        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        return lines

    def write_lines(self, lines: Iterable[str]) -> None:
        payload = "".join(f"{line}\n" for line in lines)
        retrying = Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
            retry=retry_if_exception_type(OSError),
            before_sleep=self._log_retry,
        )
        try:
            retrying(self._write_payload, payload)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise PersistenceError(f"Unable to write {self._path}: {cause}") from cause
        except UnicodeEncodeError as e:
            raise PersistenceError(
                f"Unable to encode data for {self._path} as {self._encoding}: {e}"
            ) from e

    def _write_payload(self, payload: str) -> None:
        with self._path.open("w", encoding=self._encoding, newline="\n") as handle:
            handle.write(payload)

    def _log_retry(self, retry_state) -> None:
        logger.warning(
            "write_retry",
            path=str(self._path),
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()),
        )
