"""
Streamlit Frontend for the Ledger

This is the screen people use every day to record transfers and check
where the month stands.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. The charge is shown before saving - no surprises
3. Clear error messages in simple language
4. All ledger rules live in src/; this file only renders and forwards

The UI never edits the transaction list itself. Every change goes
through the LedgerStore, which persists first and updates second.
"""

import asyncio
from decimal import Decimal

import streamlit as st

from src.config import get_settings, validate_all_settings
from src.ledger import (
    FIXED_CHARGES,
    MONTH_NAMES,
    NothingToExportError,
    build_month_export,
    build_year_export,
    calculate_charge,
    group_by_month,
    month_label,
    totals,
)
from src.models.transaction import DebitType, Transaction
from src.orchestrator import create_ledger_components, create_storage
from src.services.storage import (
    InMemoryTransactionStorage,
    NotFoundError,
    PersistenceError,
    RemoteUnavailableError,
)
from src.validation import TransactionValidator, ValidationError


# Page configuration
st.set_page_config(
    page_title="bDesh2bKash",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


VALIDATOR = TransactionValidator()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_storage():
    """One storage backend shared by every browser session."""
    settings = get_settings().app
    try:
        return create_storage(settings.storage_backend)
    except Exception as e:
        st.warning(f"Remote storage not configured ({e}). Data is kept in memory only.")
        return InMemoryTransactionStorage()


def get_components():
    """Per-browser-session ledger (each user sees only their own records)."""
    if "ledger" not in st.session_state:
        session_manager, store = create_ledger_components(storage=get_storage())
        st.session_state.session_manager = session_manager
        st.session_state.ledger = store
    return st.session_state.session_manager, st.session_state.ledger


def money(amount) -> str:
    currency = get_settings().app.currency_code
    return f"{currency} {Decimal(amount or 0):,.2f}"


def main():
    """Main application entry point."""
    session_manager, store = get_components()

    st.sidebar.title("💰 bDesh2bKash")
    render_account_box(session_manager, store)
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Transaction", "📒 Transactions", "📊 Summary", "⚙️ Settings"],
        index=0,
    )

    if store.last_error:
        st.markdown(f"""
        <div class="error-box">
            <p>{store.last_error}</p>
        </div>
        """, unsafe_allow_html=True)

    if page == "➕ Add Transaction":
        render_add_page(store)
    elif page == "📒 Transactions":
        render_transactions_page(store)
    elif page == "📊 Summary":
        render_summary_page(store)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_account_box(session_manager, store):
    """Sign in / sign out in the sidebar."""
    if session_manager.is_authenticated:
        st.sidebar.markdown(f"Signed in as **{session_manager.identity.display_name}**")
        if st.sidebar.button("Sign out"):
            run_async(session_manager.sign_out())
            st.rerun()
        if st.sidebar.button("🔄 Reload"):
            try:
                run_async(store.load())
            except RemoteUnavailableError:
                st.toast(store.last_error)
            st.rerun()
        return

    with st.sidebar.form("sign_in"):
        email = st.text_input("Email")
        submitted = st.form_submit_button("Sign in")
    if submitted and email:
        try:
            run_async(session_manager.sign_in(user_id=email.strip().lower(), email=email.strip()))
        except ValueError as e:
            st.sidebar.error(str(e))
            return
        except RemoteUnavailableError:
            st.toast(store.last_error)
        st.rerun()


def transaction_form(prefix: str, current: Transaction = None) -> dict:
    """Render the entry fields and return the raw values."""
    col1, col2 = st.columns(2)
    type_options = [None] + list(DebitType)

    with col1:
        credit_date = st.date_input(
            "Credit Date",
            value=current.credit_date if current else None,
            key=f"{prefix}_credit_date",
        )
        credit_amount = st.number_input(
            "Credit Amount",
            value=float(current.credit_amount) if current and current.credit_amount is not None else None,
            min_value=0.0,
            step=0.01,
            format="%.2f",
            key=f"{prefix}_credit_amount",
        )

    with col2:
        debit_date = st.date_input(
            "Debit Date",
            value=current.debit_date if current else None,
            key=f"{prefix}_debit_date",
        )
        debit_amount = st.number_input(
            "Debit Amount",
            value=float(current.debit_amount) if current and current.debit_amount is not None else None,
            min_value=0.0,
            step=0.01,
            format="%.2f",
            key=f"{prefix}_debit_amount",
        )
        debit_type = st.selectbox(
            "Debit Type",
            options=type_options,
            index=type_options.index(current.debit_type) if current else 0,
            format_func=lambda x: "Select type" if x is None else f"{x.value} ({money(FIXED_CHARGES[x])})",
            key=f"{prefix}_debit_type",
        )

    preview = calculate_charge(
        Decimal(str(debit_amount)) if debit_amount is not None else None,
        debit_type,
    )
    st.markdown(f"**Charge:** {money(preview)}")

    return {
        "credit_date": credit_date,
        "credit_amount": str(credit_amount) if credit_amount is not None else None,
        "debit_date": debit_date,
        "debit_amount": str(debit_amount) if debit_amount is not None else None,
        "debit_type": debit_type,
    }


def render_add_page(store):
    """Render the add-transaction page."""
    st.title("➕ Add Transaction")

    values = transaction_form("add")

    if st.button("💾 Save Transaction", type="primary"):
        try:
            run_async(store.add(values))
            st.success("Transaction saved.")
        except ValidationError as e:
            st.error(VALIDATOR.get_user_friendly_summary(e.issues))
        except (PersistenceError, RemoteUnavailableError):
            st.error(store.last_error or "Failed to add transaction. Please try again.")


def period_selector(store, key: str):
    """Year / month pickers. Returns (year, month) with None for 'All'."""
    col1, col2 = st.columns(2)
    with col1:
        year = st.selectbox(
            "Year",
            options=[None] + store.available_years(),
            format_func=lambda x: "All years" if x is None else str(x),
            key=f"{key}_year",
        )
    with col2:
        month = st.selectbox(
            "Month",
            options=[None] + list(range(1, 13)),
            format_func=lambda x: "All months" if x is None else MONTH_NAMES[x - 1],
            key=f"{key}_month",
        )
    return year, month


def render_downloads(store, year, month):
    """Month/year CSV download buttons."""
    product = get_settings().app.product_name
    col1, col2 = st.columns(2)

    with col1:
        if year and month:
            try:
                export = build_month_export(store.transactions, product, year, month)
                st.download_button(
                    "⬇️ Download Month CSV",
                    data=export.content,
                    file_name=export.filename,
                    mime=export.mime_type,
                )
            except NothingToExportError:
                st.caption("No data to export for this month.")
        else:
            st.caption("Pick a year and month to download a month CSV.")

    with col2:
        if year:
            try:
                export = build_year_export(store.transactions, product, year)
                st.download_button(
                    "⬇️ Download Year CSV",
                    data=export.content,
                    file_name=export.filename,
                    mime=export.mime_type,
                )
            except NothingToExportError:
                st.caption("No data to export for this year.")


def render_transactions_page(store):
    """Render the transaction table grouped by month."""
    st.title("📒 Transactions")

    year, month = period_selector(store, "table")
    render_downloads(store, year, month)
    st.markdown("---")

    visible = store.filtered(year, month)
    if not visible:
        st.info("No transactions yet. Use 'Add Transaction' to record your first one.")
        return

    for month_key, group in group_by_month(visible, newest_first=True).items():
        month_totals = totals(group)
        st.subheader(month_label(month_key))
        st.caption(
            f"Credit {money(month_totals.total_credit)} · "
            f"Debit {money(month_totals.total_debit)} · "
            f"Charges {money(month_totals.total_charge)} · "
            f"Net {money(month_totals.net_balance)}"
        )
        for transaction in group:
            render_transaction_row(store, transaction)


def render_transaction_row(store, transaction: Transaction):
    """One transaction with edit and delete controls."""
    summary = []
    if transaction.credit_amount is not None:
        summary.append(f"+{money(transaction.credit_amount)} ({transaction.credit_date or '-'})")
    if transaction.debit_amount is not None:
        summary.append(
            f"-{money(transaction.debit_amount)} {transaction.debit_type.value if transaction.debit_type else ''}"
            f" ({transaction.debit_date or '-'}) charge {money(transaction.charge)}"
        )

    with st.expander(" | ".join(summary) or f"Transaction {transaction.id}"):
        values = transaction_form(f"edit_{transaction.id}", current=transaction)
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Save changes", key=f"save_{transaction.id}"):
                try:
                    run_async(store.update(transaction.id, values))
                    st.rerun()
                except ValidationError as e:
                    st.error(VALIDATOR.get_user_friendly_summary(e.issues))
                except (NotFoundError, PersistenceError, RemoteUnavailableError):
                    st.error(store.last_error)
        with col2:
            if st.button("🗑️ Delete", key=f"delete_{transaction.id}"):
                try:
                    run_async(store.remove(transaction.id))
                    st.rerun()
                except (NotFoundError, PersistenceError, RemoteUnavailableError):
                    st.error(store.last_error)


def render_summary_page(store):
    """Render totals and charts."""
    st.title("📊 Summary")

    year, month = period_selector(store, "summary")
    overall = store.totals(year, month)

    cols = st.columns(4)
    for col, (label, value) in zip(cols, [
        ("Total Credit", overall.total_credit),
        ("Total Debit", overall.total_debit),
        ("Total Charges", overall.total_charge),
        ("Net Balance", overall.net_balance),
    ]):
        with col:
            st.markdown(f"**{label}**")
            st.markdown(f'<div class="big-number">{money(value)}</div>', unsafe_allow_html=True)

    breakdown = store.debit_type_breakdown(year, month)
    if breakdown:
        st.subheader("Debit Types Distribution")
        st.bar_chart({
            "type": [debit_type.value for debit_type in breakdown],
            "amount": [float(amount) for amount in breakdown.values()],
        }, x="type", y="amount")

    series = store.monthly_series(year, month)
    if series:
        st.subheader("Monthly Comparison")
        st.bar_chart({
            "month": [summary.label for summary in series],
            "credit": [float(summary.totals.total_credit) for summary in series],
            "debit": [float(summary.totals.total_debit) for summary in series],
            "charges": [float(summary.totals.total_charge) for summary in series],
        }, x="month", y=["credit", "debit", "charges"])

    yearly = store.yearly_series()
    if len(yearly) > 1:
        st.subheader("By Year")
        for summary in yearly:
            st.markdown(
                f"**{summary.label}** ({summary.transaction_count} transactions): "
                f"net {money(summary.totals.net_balance)}"
            )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()
    app_settings = get_settings().app

    st.markdown(f"**Storage backend:** `{app_settings.storage_backend}`")

    if status.get("google_sheets", False):
        st.success("✅ Google Sheets (Storage) - Configured")
    else:
        error = status.get("google_sheets_error", "Not configured")
        st.error(f"❌ Google Sheets (Storage) - {error}")

    st.markdown("---")
    st.markdown("### Charges")
    for debit_type, fee in FIXED_CHARGES.items():
        st.markdown(f"- **{debit_type.value}**: {money(fee)} per transfer")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "Set `STORAGE_BACKEND=google_sheets` together with "
        "`GOOGLE_SHEETS_CREDENTIALS_PATH` and `GOOGLE_SHEETS_SPREADSHEET_ID` "
        "to keep the ledger in a spreadsheet."
    )


if __name__ == "__main__":
    main()
