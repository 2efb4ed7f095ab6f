"""
Query Execution Engine

DESIGN DECISION: Queries are pure functions of a snapshot of the
collection. The executor never sees the backend and never mutates
anything, so the store can hand it its list directly.

Ordering is always imposed here, never inherited from storage order:
- listings are sorted by (date, id)
- extremes break ties by the lowest id
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from expense_tracker.exceptions import EmptyStoreError
from expense_tracker.models.expense import (
    CategoryTotal,
    Expense,
    ExpenseExtremes,
    ExpenseReport,
)


logger = structlog.get_logger(__name__)


class ExpenseQueryExecutor:
    """
    Executes read-only queries over a collection of expenses.

    GUARANTEES:
    - Results only contain records that were passed in
    - Totals are exact Decimal sums
    - Same input gives the same output order
    """

    def list_all(self, expenses: Iterable[Expense]) -> ExpenseReport:
        """All expenses, oldest first."""
        return self._report(expenses, "All expenses")

    def by_category(self, expenses: Iterable[Expense], category: str) -> ExpenseReport:
        """
        Expenses whose category matches case-insensitively.

        The query is trimmed; the caller is expected to have rejected blank
        queries already.
        """
        wanted = category.strip()
        key = wanted.casefold()
        matching = [e for e in expenses if e.category.casefold() == key]
        return self._report(matching, f"Expenses in category: {wanted}")

    def by_date_range(
        self,
        expenses: Iterable[Expense],
        start: date,
        end: date,
    ) -> ExpenseReport:
        """Expenses with start <= date <= end."""
        matching = [e for e in expenses if start <= e.date <= end]
        return self._report(
            matching,
            f"Expenses {self._date_range_str(start, end)}",
        )

    def extremes(self, expenses: Iterable[Expense]) -> ExpenseExtremes:
        """
        Highest and lowest expense by amount.

        Raises:
            EmptyStoreError: If there are no expenses
        """
        items = list(expenses)
        if not items:
            raise EmptyStoreError()

        highest = max(items, key=lambda e: (e.amount, -e.id))
        lowest = min(items, key=lambda e: (e.amount, e.id))
        return ExpenseExtremes(highest=highest, lowest=lowest)

    def categories(self, expenses: Iterable[Expense]) -> list[str]:
        """Distinct category spellings, alphabetical."""
        return sorted(
            {e.category for e in expenses},
            key=lambda c: (c.casefold(), c),
        )

    def totals_by_category(self, expenses: Iterable[Expense]) -> list[CategoryTotal]:
        """
        Sum and count per category.

        Categories are grouped case-insensitively; each group is labelled
        with the spelling of its lowest-id expense.
        """
        groups: dict[str, list[Expense]] = {}
        for expense in sorted(expenses, key=lambda e: e.id):
            groups.setdefault(expense.category.casefold(), []).append(expense)

        totals = [
            CategoryTotal(
                category=members[0].category,
                total=_sum_amounts(members),
                count=len(members),
            )
            for members in groups.values()
        ]
        totals.sort(key=lambda t: (t.category.casefold(), t.category))
        return totals

    def _report(self, expenses: Iterable[Expense], description: str) -> ExpenseReport:
        ordered = sorted(expenses, key=lambda e: (e.date, e.id))
        report = ExpenseReport(
            expenses=ordered,
            total=_sum_amounts(ordered),
            description=description,
        )
        logger.debug(
            "query_executed",
            description=description,
            result_count=report.count,
            total=str(report.total),
        )
        return report

    def _date_range_str(
        self,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> str:
        """Format date range for description."""
        if date_from and date_to:
            if date_from == date_to:
                return f"on {date_from.isoformat()}"
            return f"from {date_from.isoformat()} to {date_to.isoformat()}"
        elif date_from:
            return f"from {date_from.isoformat()}"
        elif date_to:
            return f"until {date_to.isoformat()}"
        return ""


def expense_to_dict(expense: Expense) -> dict:
    """Convert an expense to a flat dictionary for tables and JSON output."""
    return {
        "id": expense.id,
        "date": expense.date.isoformat(),
        "category": expense.category,
        "amount": format(expense.amount, "f"),
        "description": expense.description,
    }


def _sum_amounts(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in expenses), Decimal("0"))
