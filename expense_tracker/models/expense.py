"""
Core Data Models for Expense Tracker

These models define the strict schemas for everything the store holds or
hands back to its callers. They are designed to:
1. Enforce the record invariants at construction time
2. Provide clear validation error messages
3. Be safe to share (records are frozen, reports are snapshots)

DESIGN DECISION: Money is Decimal, never float.
Totals of 25.50 + 15.00 + 9.99 must be exactly 50.49.
"""

import datetime
import unicodedata
from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Field separator of the on-disk format and the token that stands in for it
# inside free-text fields.
DELIMITER = "|"
ESCAPE_TOKEN = "&#124;"

# Unicode categories that cannot appear inside one record: control characters
# (\n, \r, \x85, ...) and the line/paragraph separators.
_FORBIDDEN_CATEGORIES = {"Cc", "Zl", "Zp"}


def has_control_characters(value: str) -> bool:
    """True if value holds a line break or control character (tab is allowed)."""
    return any(
        unicodedata.category(char) in _FORBIDDEN_CATEGORIES
        for char in value
        if char != "\t"
    )


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    One expense entry.

    CRITICAL: Only the store creates these, and only with an id it assigned.
    Instances are frozen; an update replaces the record with a revalidated copy.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: int = Field(
        ...,
        gt=0,
        description="Store-assigned identifier, never reused"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Free-text category label (matched case-insensitively)"
    )
    date: datetime.date = Field(
        ...,
        description="Day the money was spent"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )

    @field_validator('category', 'description')
    @classmethod
    def reject_escape_token(cls, v: str) -> str:
        """The escape token and line breaks are reserved by the file format."""
        if ESCAPE_TOKEN in v:
            raise ValueError(f"Text may not contain the reserved sequence {ESCAPE_TOKEN}")
        if has_control_characters(v):
            raise ValueError("Text may not contain line breaks or control characters")
        return v

    def format_amount(self, currency_symbol: str = "$") -> str:
        return f"{currency_symbol}{self.amount:,.2f}"

    def __str__(self) -> str:
        return (
            f"ID: {self.id} | Amount: {self.format_amount()} | "
            f"Category: {self.category} | Date: {self.date.isoformat()} | "
            f"Description: {self.description}"
        )


class ExpenseUpdate(BaseModel):
    """
    Partial replacement values for an existing expense.

    None means "not supplied". Blank text is treated the same way, so a form
    left empty keeps the current value.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Decimal] = None
    category: Optional[str] = None
    date: Optional[datetime.date] = None
    description: Optional[str] = None

    def changes(self) -> dict:
        """Return only the fields that should overwrite the stored values."""
        result = {}
        if self.amount is not None:
            result["amount"] = self.amount
        if self.category:
            result["category"] = self.category
        if self.date is not None:
            result["date"] = self.date
        if self.description:
            result["description"] = self.description
        return result

    @property
    def is_empty(self) -> bool:
        return not self.changes()


# =============================================================================
# QUERY RESULT MODELS
# =============================================================================

class ExpenseReport(BaseModel):
    """
    An ordered selection of expenses and their total.

    Returned by every listing and filter operation.
    """

    expenses: list[Expense] = Field(
        default_factory=list,
        description="Matching expenses, oldest first"
    )
    total: Decimal = Field(
        default=Decimal("0"),
        description="Sum of the amounts of the matching expenses"
    )
    description: str = Field(
        ...,
        description="Human-readable description of what was queried"
    )

    @property
    def count(self) -> int:
        return len(self.expenses)

    @property
    def is_empty(self) -> bool:
        return not self.expenses


class ExpenseExtremes(BaseModel):
    """Highest and lowest expense in the store."""

    highest: Expense
    lowest: Expense


class CategoryTotal(BaseModel):
    """Aggregate for one category."""

    category: str
    total: Decimal
    count: int = Field(ge=1)


# =============================================================================
# VALIDATION / LOAD / MUTATION OUTCOMES
# =============================================================================

class ValidationIssue(BaseModel):
    """A single failed domain check on caller-supplied input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'invalid_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class DecodeIssue(BaseModel):
    """A line of the backing file that was skipped during load."""

    line_number: int = Field(ge=1)
    line: str
    reason: str


class LoadReport(BaseModel):
    """
    Summary of one load of the backing file.

    Load never raises; everything that went wrong ends up in here.
    """

    source: str = Field(
        ...,
        description="Where the records were read from"
    )
    loaded_at: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
    file_found: bool = True
    loaded_count: int = Field(default=0, ge=0)
    issues: list[DecodeIssue] = Field(default_factory=list)
    read_error: Optional[str] = None

    @property
    def skipped_count(self) -> int:
        return len(self.issues)

    @property
    def has_problems(self) -> bool:
        return bool(self.issues) or self.read_error is not None


class MutationResult(BaseModel):
    """
    Outcome of add, update or delete.

    The in-memory change has always happened when one of these is returned.
    persisted is False when the following save failed; warning says why.
    """

    operation: str = Field(
        ...,
        pattern="^(add|update|delete)$"
    )
    expense_id: int = Field(gt=0)
    persisted: bool = True
    warning: Optional[str] = None
