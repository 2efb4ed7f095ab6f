"""
Streamlit Frontend for Expense Tracker

This is the interactive layer. It owns everything the store does not:
- Prompting and parsing raw input into typed values
- Confirmation before destructive actions
- Rendering reports, errors and save warnings

DESIGN PRINCIPLES:
1. The UI never touches the data file; it only calls the store
2. Explicit confirmation before a delete
3. Errors from the store are shown as-is, in plain language
"""

from datetime import date

import streamlit as st

from expense_tracker.audit import configure_logging
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.exceptions import EmptyStoreError, ExpenseTrackerError
from expense_tracker.models.expense import ExpenseReport, MutationResult
from expense_tracker.queries import expense_to_dict
from expense_tracker.store import ExpenseStore, open_store
from expense_tracker.validation import to_decimal


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


PAGES = [
    "➕ Add Expense",
    "✏️ Update Expense",
    "🗑️ Delete Expense",
    "📋 All Expenses",
    "🏷️ Filter by Category",
    "📅 Filter by Date Range",
    "📊 Statistics",
    "⚙️ Settings",
]


@st.cache_resource
def get_store() -> ExpenseStore:
    """Get or create the store (cached for the whole session)."""
    configure_logging()
    return open_store()


def currency() -> str:
    return get_settings().app.currency_symbol


def parse_amount(raw: str):
    """Parse a typed amount; returns None when the text is not a plain number."""
    return to_decimal(raw)


def main():
    """Main application entry point."""
    store = get_store()

    st.sidebar.title("💰 Expense Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio("Navigate to:", PAGES, index=0)

    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Data file:** `{store.location}`")
    st.sidebar.markdown(f"**Expenses:** {len(store)}")

    if store.load_report.has_problems:
        st.sidebar.warning(
            f"{store.load_report.skipped_count} line(s) could not be read. "
            "See Settings for details."
        )

    if page == PAGES[0]:
        render_add_page(store)
    elif page == PAGES[1]:
        render_update_page(store)
    elif page == PAGES[2]:
        render_delete_page(store)
    elif page == PAGES[3]:
        render_report(store.list_expenses(), "Total Amount")
    elif page == PAGES[4]:
        render_category_page(store)
    elif page == PAGES[5]:
        render_date_range_page(store)
    elif page == PAGES[6]:
        render_statistics_page(store)
    elif page == PAGES[7]:
        render_settings_page(store)


def render_mutation_result(result: MutationResult, success_message: str):
    if result.persisted:
        st.success(success_message)
    else:
        st.warning(f"{success_message} {result.warning}")


def render_report(report: ExpenseReport, total_label: str):
    """Render a table of expenses and their total."""
    st.subheader(report.description)

    if report.is_empty:
        st.info("No expenses found.")
        return

    st.dataframe(
        [expense_to_dict(expense) for expense in report.expenses],
        use_container_width=True,
        hide_index=True,
    )
    st.markdown(f"**{total_label}:** {currency()}{report.total:,.2f}")


def render_add_page(store: ExpenseStore):
    """Render the add expense form."""
    st.title("➕ Add Expense")

    known_categories = store.categories()

    with st.form("add_expense", clear_on_submit=True):
        amount_input = st.text_input(f"Amount ({currency()}) *", placeholder="25.50")

        if known_categories:
            picked = st.selectbox(
                "Existing category",
                options=[""] + known_categories,
                format_func=lambda c: "New category..." if c == "" else c,
            )
        else:
            picked = ""
        new_category = st.text_input("Category *", placeholder="Food")

        expense_date = st.date_input("Date *", value=date.today())
        description = st.text_input("Description *", placeholder="Lunch at restaurant")

        submitted = st.form_submit_button("Save Expense", type="primary")

    if not submitted:
        return

    amount = parse_amount(amount_input)
    if amount is None or amount <= 0:
        st.error("Invalid amount. Please enter a positive number.")
        return

    category = new_category.strip() or picked
    try:
        result = store.add(amount, category, expense_date, description)
    except ExpenseTrackerError as e:
        st.error(str(e))
        return

    render_mutation_result(result, f"Expense added successfully! ID: {result.expense_id}")


def render_update_page(store: ExpenseStore):
    """Render the update expense form. Blank fields keep their value."""
    st.title("✏️ Update Expense")
    render_report(store.list_expenses(), "Total Amount")

    expense_id = st.number_input("Expense ID to update", min_value=1, step=1)

    try:
        current = store.get(int(expense_id))
    except ExpenseTrackerError as e:
        st.info(str(e))
        return

    st.markdown(f"**Current:** {current}")
    st.markdown("*Leave blank to keep current value*")

    with st.form("update_expense"):
        amount_input = st.text_input(f"New amount ({currency()})")
        category = st.text_input("New category")
        change_date = st.checkbox("Change date")
        new_date = st.date_input("New date", value=current.date)
        description = st.text_input("New description")

        submitted = st.form_submit_button("Update Expense", type="primary")

    if not submitted:
        return

    amount = None
    if amount_input.strip():
        amount = parse_amount(amount_input)
        if amount is None or amount <= 0:
            st.error("Invalid amount. Update cancelled.")
            return

    try:
        result = store.update(
            current.id,
            amount=amount,
            category=category or None,
            expense_date=new_date if change_date else None,
            description=description or None,
        )
    except ExpenseTrackerError as e:
        st.error(str(e))
        return

    render_mutation_result(result, "Expense updated successfully!")


def render_delete_page(store: ExpenseStore):
    """Render the delete page with an explicit confirmation step."""
    st.title("🗑️ Delete Expense")
    render_report(store.list_expenses(), "Total Amount")

    expense_id = st.number_input("Expense ID to delete", min_value=1, step=1)
    confirmed = st.checkbox("Yes, I am sure I want to delete this expense")

    if not st.button("Delete Expense", type="primary"):
        return

    if not confirmed:
        st.info("Delete cancelled.")
        return

    try:
        result = store.delete(int(expense_id))
    except ExpenseTrackerError as e:
        st.error(str(e))
        return

    render_mutation_result(result, "Expense deleted successfully!")


def render_category_page(store: ExpenseStore):
    st.title("🏷️ Filter by Category")

    categories = store.categories()
    if not categories:
        st.info("No categories found.")
        return

    picked = st.selectbox("Available categories", options=categories)
    typed = st.text_input("...or type a category name")

    try:
        report = store.filter_by_category(typed.strip() or picked)
    except ExpenseTrackerError as e:
        st.error(str(e))
        return

    render_report(report, "Category Total")


def render_date_range_page(store: ExpenseStore):
    st.title("📅 Filter by Date Range")

    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("Start date", value=date.today().replace(day=1))
    with col2:
        end = st.date_input("End date", value=date.today())

    try:
        report = store.filter_by_date_range(start, end)
    except ExpenseTrackerError as e:
        st.error(str(e))
        return

    render_report(report, "Date Range Total")


def render_statistics_page(store: ExpenseStore):
    st.title("📊 Statistics")

    try:
        extremes = store.extremes()
    except EmptyStoreError as e:
        st.info(str(e))
        return

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Highest Expense", f"{currency()}{extremes.highest.amount:,.2f}")
        st.caption(str(extremes.highest))
    with col2:
        st.metric("Lowest Expense", f"{currency()}{extremes.lowest.amount:,.2f}")
        st.caption(str(extremes.lowest))

    st.markdown("### By Category")
    st.dataframe(
        [
            {
                "category": total.category,
                "count": total.count,
                "total": format(total.total, "f"),
            }
            for total in store.totals_by_category()
        ],
        use_container_width=True,
        hide_index=True,
    )


def render_settings_page(store: ExpenseStore):
    st.title("⚙️ Settings")

    st.markdown("### Configuration")
    status = validate_all_settings()
    for key in ("storage", "app"):
        if status.get(key, False):
            st.success(f"✅ {key} settings loaded")
        else:
            st.error(f"❌ {key} settings - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown("### Last Load")
    report = store.load_report
    st.markdown(f"**Source:** `{report.source}`")
    st.markdown(f"**Loaded:** {report.loaded_count} expense(s)")
    if not report.file_found:
        st.info("No data file yet. It will be created when you add an expense.")
    if report.read_error:
        st.error(f"Error loading data: {report.read_error}")
    for issue in report.issues:
        st.warning(f"Line {issue.line_number}: {issue.reason}\n\n`{issue.line}`")

    st.markdown("### Recent Activity")
    events = store.audit_logger.recent_events(limit=20)
    if not events:
        st.info("Nothing has happened yet.")
    for event in events:
        st.markdown(
            f"`{event.timestamp:%Y-%m-%d %H:%M:%S}` **{event.event_type.value}** "
            f"{event.description}"
        )


if __name__ == "__main__":
    main()
