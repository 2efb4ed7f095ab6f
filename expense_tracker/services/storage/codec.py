"""
Line Codec for the Flat-File Format

One expense is one line:

    id|amount|category|date|description

- id is a positive integer (a leading "+" is tolerated on read)
- amount is a plain decimal with "." as separator (never an exponent,
  grouping or underscores)
- date is YYYY-MM-DD
- a "|" inside category or description is written as "&#124;"
- category and description never contain line breaks

Decoding is all-or-nothing: a line either becomes a fully valid Expense or
raises DecodeError. Blank lines decode to None.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError

from expense_tracker.exceptions import DecodeError
from expense_tracker.models.expense import DELIMITER, ESCAPE_TOKEN, Expense


FIELD_COUNT = 5

_ID_PATTERN = re.compile(r"^\+?(\d+)$", re.ASCII)
_AMOUNT_PATTERN = re.compile(r"^\d+(\.\d+)?$", re.ASCII)
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)

# Bytes the backend could not decode arrive as lone surrogates
# (the "surrogateescape" error handler).
_UNDECODABLE = re.compile("[\udc80-\udcff]")


def escape_field(value: str) -> str:
    return value.replace(DELIMITER, ESCAPE_TOKEN)


def unescape_field(value: str) -> str:
    return value.replace(ESCAPE_TOKEN, DELIMITER)


def format_amount(amount: Decimal) -> str:
    """Render an amount without grouping, locale or exponent notation."""
    return format(amount, "f")


def encode_expense(expense: Expense) -> str:
    """Convert an expense to one line of the backing file (no newline)."""
    return DELIMITER.join([
        str(expense.id),
        format_amount(expense.amount),
        escape_field(expense.category),
        expense.date.isoformat(),
        escape_field(expense.description),
    ])


def decode_expense(line: str) -> Optional[Expense]:
    """
    Convert one line of the backing file back to an expense.

    Returns:
        The expense, or None for a blank line

    Raises:
        DecodeError: If any field is missing or malformed
    """
    if not line or not line.strip():
        return None

    if _UNDECODABLE.search(line):
        raise DecodeError(
            "line contains bytes that are not valid in the file encoding",
            _UNDECODABLE.sub("\ufffd", line.rstrip("\r\n")),
        )

    parts = line.rstrip("\r\n").split(DELIMITER)
    if len(parts) != FIELD_COUNT:
        raise DecodeError(
            f"expected {FIELD_COUNT} fields, found {len(parts)}",
            line,
        )

    raw_id, raw_amount, raw_category, raw_date, raw_description = parts

    expense_id = _parse_id(raw_id, line)
    amount = _parse_amount(raw_amount, line)
    expense_date = _parse_date(raw_date, line)

    try:
        return Expense(
            id=expense_id,
            amount=amount,
            category=unescape_field(raw_category),
            date=expense_date,
            description=unescape_field(raw_description),
        )
    except ValidationError as e:
        raise DecodeError(_summarize_validation_error(e), line) from e


def _parse_id(raw: str, line: str) -> int:
    match = _ID_PATTERN.match(raw.strip())
    if not match:
        raise DecodeError(f"id is not an integer: {raw!r}", line)
    return int(match.group(1))


def _parse_amount(raw: str, line: str) -> Decimal:
    value = raw.strip()
    if not _AMOUNT_PATTERN.match(value):
        raise DecodeError(f"amount is not a plain decimal number: {raw!r}", line)
    return Decimal(value)


def _parse_date(raw: str, line: str) -> date:
    value = raw.strip()
    if not _DATE_PATTERN.match(value):
        raise DecodeError(f"date is not YYYY-MM-DD: {raw!r}", line)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise DecodeError(f"date does not exist: {raw!r}", line)


def _summarize_validation_error(error: ValidationError) -> str:
    messages = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        messages.append(f"{location}: {err['msg']}")
    return "; ".join(messages)
