"""
Streamlit Frontend for the Bookkeeping System

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Nothing is deleted without an explicit confirmation

Two views share one page:
- Transactions: expense form, receipt scan, filters and the list
- Reports: totals per category for the filtered transactions

A scanned receipt only pre-fills the form. The user still presses
"Add Transaction" to record it.
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from bookkeeping.config import get_settings, validate_all_settings
from bookkeeping.diagnostics import configure_logging
from bookkeeping.ledger import TransactionValidationError
from bookkeeping.models import TransactionDraft, TransactionType, ViewMode
from bookkeeping.orchestrator import Bookkeeper, create_app_components
from bookkeeping.queries import format_currency
from bookkeeping.services.storage import PersistenceError


# Page configuration
st.set_page_config(
    page_title="Bookkeeping",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)

FORM_KEYS = {
    "date": "form_date",
    "description": "form_description",
    "amount": "form_amount",
    "type": "form_type",
    "notes": "form_notes",
}
CATEGORIES = list(TransactionType)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_shared_bookkeeper() -> Bookkeeper:
    """Load the ledger once per server process."""
    app_settings = get_settings().app
    configure_logging(level=app_settings.log_level, json_output=app_settings.log_json)
    return create_app_components()


def get_bookkeeper() -> Bookkeeper:
    """This browser session's filters and view over the shared ledger."""
    if "bookkeeper" not in st.session_state:
        st.session_state.bookkeeper = get_shared_bookkeeper().new_session()
    return st.session_state.bookkeeper


def money(amount: Decimal) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def main():
    """Main application entry point."""
    try:
        bookkeeper = get_bookkeeper()
    except PersistenceError as e:
        st.error(f"Could not load your saved transactions: {e}")
        st.stop()

    init_form_state()

    # Sidebar
    st.sidebar.title("📒 Bookkeeping")
    st.sidebar.markdown("---")
    label = "📊 Show Reports" if bookkeeper.view_mode == ViewMode.TRANSACTIONS else "📋 Show Transactions"
    if st.sidebar.button(label):
        bookkeeper.toggle_view()
        st.rerun()

    report = bookkeeper.report()
    st.sidebar.metric("Total Expenses", money(report.total))
    st.sidebar.caption(bookkeeper.filter_spec.describe())

    if bookkeeper.ledger.pending_save:
        st.sidebar.warning("⚠️ Latest changes are not saved yet.")
        if st.sidebar.button("🔁 Retry Save"):
            bookkeeper.ledger.flush()
            st.rerun()

    render_settings_status()

    if bookkeeper.view_mode == ViewMode.REPORTS:
        render_reports_page(bookkeeper)
    else:
        render_transactions_page(bookkeeper)


# =============================================================================
# FORM STATE
# =============================================================================

def init_form_state():
    defaults = {
        FORM_KEYS["date"]: date.today(),
        FORM_KEYS["description"]: "",
        FORM_KEYS["amount"]: None,
        FORM_KEYS["type"]: TransactionType.OTHER,
        FORM_KEYS["notes"]: "",
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value
    if "scan_message" not in st.session_state:
        st.session_state.scan_message = None

    # Widget values can only be changed before the widgets are drawn
    pending = st.session_state.pop("pending_draft", None)
    if pending is not None:
        draft_to_form(pending)


def draft_from_form() -> TransactionDraft:
    amount = st.session_state[FORM_KEYS["amount"]]
    return TransactionDraft(
        date=st.session_state[FORM_KEYS["date"]],
        description=st.session_state[FORM_KEYS["description"]],
        amount=Decimal(str(amount)) if amount is not None else None,
        type=st.session_state[FORM_KEYS["type"]],
        notes=st.session_state[FORM_KEYS["notes"]],
    )


def draft_to_form(draft: TransactionDraft):
    st.session_state[FORM_KEYS["date"]] = draft.date or date.today()
    st.session_state[FORM_KEYS["description"]] = draft.description
    st.session_state[FORM_KEYS["amount"]] = float(draft.amount) if draft.amount is not None else None
    st.session_state[FORM_KEYS["type"]] = draft.type
    st.session_state[FORM_KEYS["notes"]] = draft.notes or ""


def queue_draft(draft: TransactionDraft):
    st.session_state.pending_draft = draft


# =============================================================================
# TRANSACTIONS VIEW
# =============================================================================

def render_transactions_page(bookkeeper: Bookkeeper):
    """Render the expense form and transaction list."""
    st.title("📋 Transactions")

    render_receipt_scan(bookkeeper)
    render_expense_form(bookkeeper)

    st.markdown("---")
    render_filters(bookkeeper)
    render_transaction_table(bookkeeper)


def render_receipt_scan(bookkeeper: Bookkeeper):
    if not bookkeeper.can_scan:
        st.info("Receipt scanning is off. Set MINDEE_API_KEY in `.env` to enable it.")
        return

    app_settings = get_settings().app
    uploaded_file = st.file_uploader(
        "Scan a receipt (optional)",
        type=app_settings.supported_formats_list,
        help="The total, date and merchant are filled in for you to check",
    )

    if uploaded_file and st.button("🔍 Scan Receipt"):
        if uploaded_file.size > app_settings.max_upload_size_bytes:
            st.error(f"File is too large (max {app_settings.max_upload_size_mb} MB).")
        else:
            with st.spinner("Reading your receipt..."):
                outcome = run_async(
                    bookkeeper.scan_receipt(
                        uploaded_file.getvalue(),
                        uploaded_file.name,
                        draft_from_form(),
                    )
                )
            if outcome is None:
                st.session_state.scan_message = ("warning", "A receipt is already being scanned.")
            elif outcome.error:
                st.session_state.scan_message = ("error", f"Could not read the receipt: {outcome.error}")
            elif not outcome.applied:
                st.session_state.scan_message = (
                    "warning",
                    "The receipt total or date could not be found. Please fill in the form.",
                )
            else:
                queue_draft(outcome.draft)
                notes = " ".join(outcome.extraction.warnings) if outcome.extraction else ""
                st.session_state.scan_message = ("success", f"Receipt read. Please check the details. {notes}".strip())
            st.rerun()

    if st.session_state.scan_message:
        kind, text = st.session_state.scan_message
        getattr(st, kind)(text)
        if st.button("Dismiss"):
            st.session_state.scan_message = None
            st.rerun()


def render_expense_form(bookkeeper: Bookkeeper):
    st.subheader("➕ Add Expense")

    col1, col2 = st.columns(2)
    with col1:
        st.date_input("Date *", key=FORM_KEYS["date"])
        st.text_input("Description *", key=FORM_KEYS["description"])
    with col2:
        st.number_input(
            f"Amount ({get_settings().app.currency_symbol}) *",
            value=None,
            min_value=0.0,
            step=0.01,
            placeholder="0.00",
            format="%.2f",
            key=FORM_KEYS["amount"],
        )
        st.selectbox(
            "Category *",
            options=CATEGORIES,
            format_func=lambda x: x.value,
            key=FORM_KEYS["type"],
        )
    st.text_area("Notes (optional)", key=FORM_KEYS["notes"])

    if st.button("✅ Add Transaction", type="primary"):
        try:
            transaction = bookkeeper.record(draft_from_form())
        except TransactionValidationError as e:
            st.error(bookkeeper.validation_message(e))
            return
        queue_draft(TransactionDraft())
        st.session_state.scan_message = (
            "success",
            f"Saved {transaction.description} ({money(transaction.amount)}).",
        )
        st.rerun()


def render_filters(bookkeeper: Bookkeeper):
    spec = bookkeeper.filter_spec
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        search = st.text_input("Search", value=spec.search)
    with col2:
        start_date = st.date_input("From", value=spec.start_date)
    with col3:
        end_date = st.date_input("To", value=spec.end_date)
    with col4:
        options = [None] + CATEGORIES
        category = st.selectbox(
            "Category",
            options=options,
            index=options.index(spec.type),
            format_func=lambda x: "All Categories" if x is None else x.value,
        )

    updated = bookkeeper.set_filter(
        search=search,
        start_date=start_date,
        end_date=end_date,
        type=category,
    )
    if updated != spec:
        st.rerun()


def render_transaction_table(bookkeeper: Bookkeeper):
    transactions = bookkeeper.visible_transactions()
    if not transactions:
        st.info("📋 No transactions to show. Add one above or change the filters.")
        return

    for transaction in transactions:
        col1, col2, col3, col4, col5 = st.columns([2, 4, 3, 2, 1])
        col1.write(transaction.date.strftime("%d %b %Y"))
        col2.write(transaction.description)
        col3.write(transaction.type.value)
        col4.write(money(transaction.amount))

        confirm_key = f"confirm_delete_{transaction.id}"
        if st.session_state.get(confirm_key):
            if col5.button("Confirm", key=f"yes_{transaction.id}"):
                bookkeeper.delete(transaction.id)
                st.session_state.pop(confirm_key, None)
                st.rerun()
        elif col5.button("🗑️", key=f"delete_{transaction.id}"):
            st.session_state[confirm_key] = True
            st.rerun()

        if transaction.notes:
            st.caption(transaction.notes)


# =============================================================================
# REPORTS VIEW
# =============================================================================

def render_reports_page(bookkeeper: Bookkeeper):
    """Render category totals for the filtered transactions."""
    st.title("📊 Reports")
    st.caption(bookkeeper.filter_spec.describe())

    report = bookkeeper.report()
    if report.is_empty:
        st.info("No expenses match the current filters.")
        return

    col1, col2 = st.columns(2)
    col1.metric("Total Expenses", money(report.total))
    col2.metric("Transactions", report.count)

    st.subheader("Expenses by Category")
    rows = [
        {
            "Category": label,
            "Amount": money(amount),
            "Share": f"{report.share(label)}%",
        }
        for label, amount in report.by_category.items()
    ]
    st.table(rows)
    st.bar_chart({label: float(amount) for label, amount in report.by_category.items()})

    if len(report.by_month) > 1:
        st.subheader("Expenses by Month")
        st.line_chart({month: float(amount) for month, amount in report.by_month.items()})


def render_settings_status():
    with st.sidebar.expander("⚙️ Connection Status"):
        status = validate_all_settings()
        services = [
            ("Mindee (Receipts)", "mindee"),
            ("Storage", "storage"),
            ("Google Sheets", "google_sheets"),
        ]
        for name, key in services:
            if key not in status:
                continue
            if status[key]:
                st.success(f"✅ {name}")
            else:
                st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")
        st.markdown("See `.env.example` for the required variables.")


if __name__ == "__main__":
    main()
