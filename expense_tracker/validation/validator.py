"""
Input Validation for Store Operations

DESIGN DECISION: Every caller-supplied value is checked here before the
store touches its collection. Checks collect ALL issues rather than stopping
at the first one, so the UI can show everything that needs fixing at once.

IMPORTANT: Validation NEVER silently fixes values (beyond trimming
whitespace). It reports issues; the store raises ExpenseValidationError.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from expense_tracker.exceptions import ExpenseValidationError
from expense_tracker.models.expense import (
    ESCAPE_TOKEN,
    ExpenseUpdate,
    ValidationIssue,
    has_control_characters,
)


AmountInput = Union[Decimal, int, float, str]

# Typed amounts: optional sign, digits, optional fraction. No grouping,
# underscores or exponents.
_AMOUNT_TEXT = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$", re.ASCII)


class ExpenseValidator:
    """
    Validates values supplied for add, update and the query filters.

    All check_* methods return a list of issues (empty means valid).
    ensure() raises ExpenseValidationError when there are issues.
    """

    def check_amount(self, amount: Optional[AmountInput]) -> list[ValidationIssue]:
        if amount is None:
            return [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
            )]

        parsed = to_decimal(amount)
        if parsed is None:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount is not a valid number: {amount!r}",
                suggested_fix="Enter a number such as 12.50",
            )]

        if parsed <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero.",
                suggested_fix="Enter a positive number",
            )]

        return []

    def check_text(self, field: str, value: Optional[str]) -> list[ValidationIssue]:
        """Check a required free-text field (category or description)."""
        label = field.capitalize()
        if value is None or not value.strip():
            return [ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} cannot be empty.",
            )]

        if ESCAPE_TOKEN in value:
            return [ValidationIssue(
                field=field,
                issue_type="reserved_text",
                message=f"{label} may not contain the sequence {ESCAPE_TOKEN}.",
            )]

        if has_control_characters(value):
            return [ValidationIssue(
                field=field,
                issue_type="reserved_text",
                message=f"{label} must be a single line of text.",
                suggested_fix="Remove line breaks and control characters",
            )]

        return []

    def check_date(self, value: Optional[date], field: str = "date") -> list[ValidationIssue]:
        if not isinstance(value, date):
            return [ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{field.replace('_', ' ').capitalize()} must be a calendar date",
                suggested_fix="Use the format YYYY-MM-DD",
            )]
        return []

    def check_new_expense(
        self,
        amount: Optional[AmountInput],
        category: Optional[str],
        expense_date: Optional[date],
        description: Optional[str],
    ) -> list[ValidationIssue]:
        issues = []
        issues.extend(self.check_amount(amount))
        issues.extend(self.check_text("category", category))
        issues.extend(self.check_date(expense_date))
        issues.extend(self.check_text("description", description))
        return issues

    def check_update(self, update: ExpenseUpdate) -> list[ValidationIssue]:
        """
        Check the supplied fields of a partial update.

        Blank category/description count as "not supplied" and are not issues.
        """
        issues = []
        if update.amount is not None:
            issues.extend(self.check_amount(update.amount))
        if update.category:
            issues.extend(self.check_text("category", update.category))
        if update.description:
            issues.extend(self.check_text("description", update.description))
        return issues

    def check_category_query(self, category: Optional[str]) -> list[ValidationIssue]:
        if category is None or not category.strip():
            return [ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category cannot be empty.",
            )]
        return []

    def check_date_range(
        self,
        start: Optional[date],
        end: Optional[date],
    ) -> list[ValidationIssue]:
        issues = []
        issues.extend(self.check_date(start, "start_date"))
        issues.extend(self.check_date(end, "end_date"))
        if not issues and start > end:
            issues.append(ValidationIssue(
                field="start_date",
                issue_type="invalid_range",
                message="Start date cannot be later than end date.",
                suggested_fix="Swap the two dates",
            ))
        return issues

    @staticmethod
    def ensure(issues: list[ValidationIssue]) -> None:
        """Raise ExpenseValidationError if any issue was found."""
        if issues:
            raise ExpenseValidationError(issues)


def to_decimal(value: AmountInput) -> Optional[Decimal]:
    """
    Convert a caller-supplied amount to a finite Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary
    expansion. Text must be a plain decimal such as "12.50" or "-3".
    Returns None when the value is not a finite number.
    """
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, float):
            parsed = Decimal(str(value))
        elif isinstance(value, str):
            text = value.strip()
            if not _AMOUNT_TEXT.match(text):
                return None
            parsed = Decimal(text)
        else:
            parsed = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not parsed.is_finite():
        return None
    return parsed
