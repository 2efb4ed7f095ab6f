"""
Expense Store

This module ties together the backend, the codec, the validator, the query
executor and the audit logger. It is the only owner of the expense
collection.

DESIGN DECISION: The store enforces the record invariants:
- Ids are assigned here, start at 1, and never go backwards (not even on reload)
- Nothing enters the collection without passing validation
- Every mutation is followed by a full rewrite of the backing file

A failed save does NOT undo the mutation. The caller gets a MutationResult
with persisted=False and a warning; the next successful save writes the
full collection again, so the file catches up.
"""

from datetime import date, datetime
from typing import Optional

import structlog
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.exceptions import (
    DecodeError,
    ExpenseNotFoundError,
    ExpenseValidationError,
    PersistenceError,
)
from expense_tracker.models.expense import (
    CategoryTotal,
    DecodeIssue,
    Expense,
    ExpenseExtremes,
    ExpenseReport,
    ExpenseUpdate,
    LoadReport,
    MutationResult,
    ValidationIssue,
)
from expense_tracker.queries import ExpenseQueryExecutor
from expense_tracker.services.storage import (
    ExpenseBackendInterface,
    FlatFileExpenseBackend,
    decode_expense,
    encode_expense,
)
from expense_tracker.validation import ExpenseValidator, to_decimal
from expense_tracker.validation.validator import AmountInput


logger = structlog.get_logger(__name__)


class ExpenseStore:
    """
    In-memory expense collection synchronized with a backend.

    Loads the backend once at construction. Queries only read memory;
    add/update/delete write the whole collection back.
    """

    def __init__(
        self,
        backend: ExpenseBackendInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ExpenseValidator] = None,
        query_executor: Optional[ExpenseQueryExecutor] = None,
    ):
        self._backend = backend
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or ExpenseValidator()
        self._queries = query_executor or ExpenseQueryExecutor()

        self._expenses: list[Expense] = []
        self._next_id = 1
        self._load_report = self.load()

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def next_id(self) -> int:
        """The id the next added expense will receive."""
        return self._next_id

    @property
    def load_report(self) -> LoadReport:
        """What happened during the most recent load."""
        return self._load_report

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def location(self) -> str:
        return self._backend.location

    def __len__(self) -> int:
        return len(self._expenses)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def load(self) -> LoadReport:
        """
        Replace the in-memory collection with the backend's contents.

        Never raises. Lines that cannot be decoded are skipped and reported;
        a read failure leaves the store empty, is reported too, and blocks
        save() until a later load succeeds.
        next_id only ever grows, so ids handed out before a reload are not
        handed out again.
        """
        source = self._backend.location
        self._expenses = []

        if not self._backend.exists():
            logger.info("data_file_missing", source=source, next_id=self._next_id)
            self._load_report = LoadReport(source=source, file_found=False)
            return self._load_report

        try:
            lines = self._backend.read_lines()
        except PersistenceError as e:
            logger.error("load_failed", source=source, error=str(e))
            self._audit_logger.log_load_failed(source=source, error_message=str(e))
            self._load_report = LoadReport(source=source, read_error=str(e))
            return self._load_report

        issues = []
        seen_ids = set()
        for line_number, line in enumerate(lines, start=1):
            try:
                expense = decode_expense(line)
            except DecodeError as e:
                issues.append(self._skip_line(line_number, line, e.reason))
                continue

            if expense is None:
                continue

            if expense.id in seen_ids:
                issues.append(
                    self._skip_line(line_number, line, f"duplicate id {expense.id}")
                )
                continue

            seen_ids.add(expense.id)
            self._expenses.append(expense)
            if expense.id >= self._next_id:
                self._next_id = expense.id + 1

        self._load_report = LoadReport(
            source=source,
            loaded_count=len(self._expenses),
            issues=issues,
        )
        self._audit_logger.log_store_loaded(
            source=source,
            loaded_count=len(self._expenses),
            skipped_count=len(issues),
        )
        return self._load_report

    def save(self) -> None:
        """
        Overwrite the backend with the full collection, ordered by id.

        Refused while the last load could not read the backend: the file may
        still hold records this store never saw.

        Raises:
            PersistenceError: If the backend could not be written, or was
                not read successfully
        """
        if self._load_report.read_error is not None:
            raise PersistenceError(
                f"{self._backend.location} could not be read, so it will not be "
                "overwritten. Fix the file and reload."
            )
        ordered = sorted(self._expenses, key=lambda e: e.id)
        self._backend.write_lines(encode_expense(e) for e in ordered)
        logger.debug("store_saved", source=self._backend.location, count=len(ordered))

    def _skip_line(self, line_number: int, line: str, reason: str) -> DecodeIssue:
        logger.warning("line_skipped", line_number=line_number, line=line, reason=reason)
        self._audit_logger.log_line_skipped(
            line_number=line_number,
            line=line,
            reason=reason,
        )
        return DecodeIssue(line_number=line_number, line=line, reason=reason)

    def _save_after(self, operation: str, expense_id: int) -> MutationResult:
        try:
            self.save()
        except PersistenceError as e:
            logger.error(
                "save_failed",
                operation=operation,
                expense_id=expense_id,
                error=str(e),
            )
            self._audit_logger.log_save_failed(
                operation=operation,
                error_message=str(e),
                expense_id=expense_id,
            )
            return MutationResult(
                operation=operation,
                expense_id=expense_id,
                persisted=False,
                warning=f"Error saving data: {e}",
            )
        return MutationResult(operation=operation, expense_id=expense_id)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add(
        self,
        amount: AmountInput,
        category: str,
        expense_date: date,
        description: str,
    ) -> MutationResult:
        """
        Add a new expense and assign it the next id.

        Returns:
            MutationResult carrying the new expense_id

        Raises:
            ExpenseValidationError: If amount <= 0 or category/description
                are blank
        """
        expense_date = _as_date(expense_date)
        issues = self._validator.check_new_expense(
            amount, category, expense_date, description
        )
        self._reject_if_invalid("add", issues)

        expense = self._build_expense(
            "add",
            id=self._next_id,
            amount=to_decimal(amount),
            category=category.strip(),
            date=expense_date,
            description=description.strip(),
        )
        self._next_id += 1
        self._expenses.append(expense)

        logger.info("expense_added", expense_id=expense.id, category=expense.category)
        self._audit_logger.log_expense_added(
            expense_id=expense.id,
            amount=str(expense.amount),
            category=expense.category,
        )
        return self._save_after("add", expense.id)

    def update(
        self,
        expense_id: int,
        amount: Optional[AmountInput] = None,
        category: Optional[str] = None,
        expense_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> MutationResult:
        """
        Replace the supplied fields of an existing expense.

        None means "keep the current value". Blank category or description
        are treated the same way. All checks run before anything changes, so
        an invalid amount leaves the expense untouched.

        Raises:
            ExpenseNotFoundError: If no expense has this id
            ExpenseValidationError: If a supplied amount is not positive
        """
        index = self._index_of(expense_id)

        issues = []
        if amount is not None:
            issues.extend(self._validator.check_amount(amount))
        if expense_date is not None:
            expense_date = _as_date(expense_date)
            issues.extend(self._validator.check_date(expense_date))
        self._reject_if_invalid("update", issues, expense_id)

        update = ExpenseUpdate(
            amount=to_decimal(amount) if amount is not None else None,
            category=category,
            date=expense_date,
            description=description,
        )
        self._reject_if_invalid("update", self._validator.check_update(update), expense_id)

        changes = update.changes()
        current = self._expenses[index]
        self._expenses[index] = self._build_expense(
            "update",
            **{**current.model_dump(), **changes},
        )

        logger.info("expense_updated", expense_id=expense_id, fields=sorted(changes))
        self._audit_logger.log_expense_updated(
            expense_id=expense_id,
            changed_fields=sorted(changes),
        )
        return self._save_after("update", expense_id)

    def delete(self, expense_id: int) -> MutationResult:
        """
        Remove an expense. Its id is never handed out again.

        Raises:
            ExpenseNotFoundError: If no expense has this id
        """
        index = self._index_of(expense_id)
        del self._expenses[index]

        logger.info("expense_deleted", expense_id=expense_id)
        self._audit_logger.log_expense_deleted(expense_id=expense_id)
        return self._save_after("delete", expense_id)

    def _index_of(self, expense_id: int) -> int:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        raise ExpenseNotFoundError(expense_id)

    def _build_expense(self, operation: str, **fields) -> Expense:
        """Construct a record, turning model constraint failures into issues."""
        try:
            return Expense(**fields)
        except ValidationError as e:
            issues = [
                ValidationIssue(
                    field=".".join(str(part) for part in err["loc"]) or "expense",
                    issue_type=err["type"],
                    message=err["msg"],
                )
                for err in e.errors()
            ]
            self._reject_if_invalid(operation, issues, fields.get("id"))
            raise

    def _reject_if_invalid(
        self,
        operation: str,
        issues: list,
        expense_id: Optional[int] = None,
    ) -> None:
        if not issues:
            return
        self._audit_logger.log_validation_failed(
            operation=operation,
            issues=[
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in issues
            ],
            expense_id=expense_id,
        )
        raise ExpenseValidationError(issues)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get(self, expense_id: int) -> Expense:
        """
        Raises:
            ExpenseNotFoundError: If no expense has this id
        """
        return self._expenses[self._index_of(expense_id)]

    def list_expenses(self) -> ExpenseReport:
        """Every expense ordered by date (then id), with the total."""
        return self._queries.list_all(self._expenses)

    def filter_by_category(self, category: str) -> ExpenseReport:
        """
        Expenses in a category, matched case-insensitively after trimming.

        Raises:
            ExpenseValidationError: If the category is blank
        """
        self._validator.ensure(self._validator.check_category_query(category))
        return self._queries.by_category(self._expenses, category)

    def filter_by_date_range(self, start: date, end: date) -> ExpenseReport:
        """
        Expenses dated between start and end, both inclusive.

        Raises:
            ExpenseValidationError: If start is after end
        """
        start = _as_date(start)
        end = _as_date(end)
        self._validator.ensure(self._validator.check_date_range(start, end))
        return self._queries.by_date_range(self._expenses, start, end)

    def extremes(self) -> ExpenseExtremes:
        """
        Highest and lowest expense; ties go to the lowest id.

        Raises:
            EmptyStoreError: If there are no expenses
        """
        return self._queries.extremes(self._expenses)

    def categories(self) -> list[str]:
        """Distinct categories, alphabetical."""
        return self._queries.categories(self._expenses)

    def totals_by_category(self) -> list[CategoryTotal]:
        return self._queries.totals_by_category(self._expenses)


def _as_date(value):
    # datetime is a date subclass; keep only the calendar day
    if isinstance(value, datetime):
        return value.date()
    return value


def open_store(
    data_file: Optional[str] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> ExpenseStore:
    """
    Factory for a store backed by the configured flat file.

    Args:
        data_file: Override the configured data file path.
        audit_logger: Share an audit logger between components.

    Returns:
        A loaded ExpenseStore
    """
    backend = FlatFileExpenseBackend(path=data_file)
    store = ExpenseStore(backend, audit_logger=audit_logger)
    report = store.load_report
    if report.has_problems:
        logger.warning(
            "store_opened_with_problems",
            source=report.source,
            skipped=report.skipped_count,
            read_error=report.read_error,
        )
    return store
