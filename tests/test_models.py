"""
Tests for Expense Tracker

Test strategy:
1. Unit tests for individual components (models, codec, validator, queries)
2. Store tests against in-memory and temporary-file backends
3. No tests touch a real expenses.txt
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import ValidationError

from expense_tracker.models.expense import (
    DecodeIssue,
    Expense,
    ExpenseReport,
    ExpenseUpdate,
    LoadReport,
    MutationResult,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestExpenseModel:
    """Tests for the Expense record."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(
            id=1,
            amount=Decimal("25.50"),
            category="Food",
            date=date(2024, 3, 15),
            description="Lunch at restaurant",
        )
        assert expense.id == 1
        assert expense.amount == Decimal("25.50")
        assert expense.date == date(2024, 3, 15)

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from text fields."""
        expense = Expense(
            id=1,
            amount=Decimal("1"),
            category="  Food  ",
            date=date(2024, 3, 15),
            description=" Lunch ",
        )
        assert expense.category == "Food"
        assert expense.description == "Lunch"

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-0.01"), Decimal("Infinity")])
    def test_expense_rejects_bad_amount(self, amount):
        """Test that only positive finite amounts are accepted."""
        with pytest.raises(ValidationError):
            Expense(
                id=1,
                amount=amount,
                category="Food",
                date=date(2024, 3, 15),
                description="x",
            )

    def test_expense_rejects_non_positive_id(self):
        """Test ids start at 1."""
        with pytest.raises(ValidationError):
            Expense(
                id=0,
                amount=Decimal("1"),
                category="Food",
                date=date(2024, 3, 15),
                description="x",
            )

    @pytest.mark.parametrize("field", ["category", "description"])
    def test_expense_rejects_blank_text(self, field):
        """Test that blank category/description are rejected."""
        fields = {
            "id": 1,
            "amount": Decimal("1"),
            "category": "Food",
            "date": date(2024, 3, 15),
            "description": "x",
        }
        fields[field] = "   "
        with pytest.raises(ValidationError):
            Expense(**fields)

    def test_expense_rejects_escape_token(self):
        """Test the file format's escape token is reserved."""
        with pytest.raises(ValidationError, match="reserved sequence"):
            Expense(
                id=1,
                amount=Decimal("1"),
                category="A&#124;B",
                date=date(2024, 3, 15),
                description="x",
            )

    @pytest.mark.parametrize("text", ["a\nb", "a\rb", "a\u2028b", "a\u2029b", "a\x85b", "a\x00b"])
    def test_expense_rejects_line_breaks(self, text):
        """Test text fields must stay on one line."""
        with pytest.raises(ValidationError, match="line breaks"):
            Expense(
                id=1,
                amount=Decimal("1"),
                category="Food",
                date=date(2024, 3, 15),
                description=text,
            )

    def test_expense_allows_tab_and_long_text(self):
        """Test tabs are allowed and there is no length limit."""
        expense = Expense(
            id=1,
            amount=Decimal("1"),
            category="c" * 1000,
            date=date(2024, 3, 15),
            description="a\tb" * 1000,
        )
        assert len(expense.category) == 1000

    def test_expense_is_frozen(self):
        """Test that records cannot be modified in place."""
        expense = Expense(
            id=1,
            amount=Decimal("1"),
            category="Food",
            date=date(2024, 3, 15),
            description="x",
        )
        with pytest.raises(ValidationError):
            expense.amount = Decimal("2")

    def test_expense_str(self):
        """Test the one-line display form."""
        expense = Expense(
            id=1,
            amount=Decimal("1234.5"),
            category="Rent",
            date=date(2024, 3, 1),
            description="March",
        )
        assert str(expense) == (
            "ID: 1 | Amount: $1,234.50 | Category: Rent | "
            "Date: 2024-03-01 | Description: March"
        )
        assert expense.format_amount("€") == "€1,234.50"


class TestExpenseUpdate:
    """Tests for partial updates."""

    def test_changes_skip_missing_fields(self):
        """Test None fields are not part of the changes."""
        update = ExpenseUpdate(amount=Decimal("5"))
        assert update.changes() == {"amount": Decimal("5")}

    def test_changes_skip_blank_text(self):
        """Test blank text counts as not supplied."""
        update = ExpenseUpdate(category="   ", description="")
        assert update.changes() == {}
        assert update.is_empty

    def test_changes_strip_text(self):
        """Test supplied text is trimmed."""
        update = ExpenseUpdate(category=" Travel ", date=date(2024, 1, 1))
        assert update.changes() == {"category": "Travel", "date": date(2024, 1, 1)}


class TestResultModels:
    """Tests for report and outcome models."""

    def test_empty_report(self):
        """Test the defaults of an empty report."""
        report = ExpenseReport(description="All expenses")
        assert report.is_empty
        assert report.count == 0
        assert report.total == Decimal("0")

    def test_load_report_problems(self):
        """Test has_problems covers both skipped lines and read errors."""
        assert not LoadReport(source="memory").has_problems
        report = LoadReport(
            source="memory",
            issues=[DecodeIssue(line_number=2, line="bad", reason="expected 5 fields, found 1")],
        )
        assert report.has_problems
        assert report.skipped_count == 1
        assert LoadReport(source="memory", read_error="boom").has_problems

    def test_mutation_result_operation(self):
        """Test only known operations are accepted."""
        assert MutationResult(operation="add", expense_id=1).persisted is True
        with pytest.raises(ValidationError):
            MutationResult(operation="merge", expense_id=1)


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(
            expense_id=3,
            amount="9.99",
            category="Food",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["expense_id"] == 3
        assert log_dict["details"]["amount"] == "9.99"

    def test_audit_event_builder_line_skipped(self):
        """Test AuditEventBuilder.line_skipped."""
        event = AuditEventBuilder.line_skipped(
            line_number=4,
            line="garbage",
            reason="expected 5 fields, found 1",
        )
        assert event.event_type == AuditEventType.LINE_SKIPPED
        assert event.severity == AuditSeverity.WARNING
        assert event.details["line_number"] == 4
        assert event.error_message == "expected 5 fields, found 1"

    def test_audit_event_builder_save_failed(self):
        """Test AuditEventBuilder.save_failed."""
        event = AuditEventBuilder.save_failed(
            operation="update",
            error_message="disk full",
            expense_id=7,
        )
        assert event.event_type == AuditEventType.SAVE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.expense_id == 7


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
