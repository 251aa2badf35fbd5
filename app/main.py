"""
Streamlit Frontend for WealthWise

The screen layer of the ledger. Every page reads from and writes to the
LedgerService; no financial rule lives here.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Nothing is saved without an explicit "Save" action
3. Clear error messages in simple language
4. Visual feedback for all operations

Entries that would overdraw the balance are blocked with the available
amount shown, so the user can correct the form.
"""

import asyncio
from datetime import datetime
from decimal import Decimal

import pandas as pd
import streamlit as st

from wealthwise.config import get_settings, validate_all_settings
from wealthwise.ledger import InsufficientFundsError, NotFoundError, ValidationError
from wealthwise.models import (
    CATEGORY_STYLES,
    ICON_POOL,
    Category,
    Period,
    SortField,
    SortOrder,
    Transaction,
    TransactionType,
    TypeFilter,
    quantize_money,
)
from wealthwise.orchestrator import (
    LedgerService,
    create_app_components,
    default_entry_datetime,
)
from wealthwise.reports import format_currency, format_signed


PAGES = [
    "🏠 Home",
    "➕ Add Entry",
    "📜 History",
    "🐷 Savings",
    "📊 Statistics",
    "🎯 Budgets",
    "⚙️ Settings",
]
HOME, ADD, HISTORY, SAVINGS, STATISTICS, BUDGETS, SETTINGS = PAGES

QUICK_CATEGORIES = [
    Category.FOOD,
    Category.TRANSPORT,
    Category.SHOPPING,
    Category.UTILITIES,
    Category.ENTERTAINMENT,
    Category.HEALTH,
    Category.SALARY,
    Category.INVESTMENT,
]


# Page configuration
st.set_page_config(
    page_title="WealthWise",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .warning-box {
        padding: 16px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 8px 0;
    }
    .error-box {
        padding: 16px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 8px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> LedgerService:
    """Get or create the ledger service (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Could not open saved data, starting an empty session: {e}")
        return create_app_components(use_storage=False)


def go_to(page: str) -> None:
    # Applied on the next run, before the sidebar radio exists
    st.session_state.next_page = page


def start_edit(transaction: Transaction) -> None:
    st.session_state.editing_id = transaction.id
    st.session_state.form_values = transaction.to_draft().model_dump()
    go_to(ADD)


def start_quick_entry(service: LedgerService, category: Category) -> None:
    entry = service.quick_add_draft(category)
    st.session_state.editing_id = None
    st.session_state.form_values = entry.model_dump()
    go_to(ADD)


def ask_delete(transaction_id) -> None:
    # None closes the confirmation
    st.session_state.delete_confirm_id = transaction_id


def reset_form() -> None:
    st.session_state.editing_id = None
    st.session_state.form_values = None


def set_entry_date(days_ago: int) -> None:
    values = st.session_state.get("form_values") or {}
    values["date"] = default_entry_datetime(days_ago=days_ago)
    st.session_state.form_values = values


def category_label(service: LedgerService, category: Category) -> str:
    return f"{service.icon_for(category)} {category.display_name}"


def main():
    """Main application entry point."""
    service = get_components()
    symbol = get_settings().app.currency_symbol

    if "next_page" in st.session_state:
        st.session_state.page = st.session_state.pop("next_page")
    if "page" not in st.session_state:
        st.session_state.page = HOME
    if "editing_id" not in st.session_state:
        reset_form()

    st.sidebar.title("💰 WealthWise")
    st.sidebar.markdown("---")
    page = st.sidebar.radio("Navigate to:", PAGES, key="page")

    st.sidebar.markdown("---")
    st.sidebar.metric("Balance", format_currency(service.summary().balance, symbol))

    if page == HOME:
        render_home_page(service, symbol)
    elif page == ADD:
        render_entry_page(service, symbol)
    elif page == HISTORY:
        render_history_page(service, symbol)
    elif page == SAVINGS:
        render_savings_page(service, symbol)
    elif page == STATISTICS:
        render_statistics_page(service, symbol)
    elif page == BUDGETS:
        render_budgets_page(service, symbol)
    elif page == SETTINGS:
        render_settings_page(service)


def render_transaction_row(service: LedgerService, transaction: Transaction, symbol: str, actions: bool = False):
    cols = st.columns([1, 4, 2, 1, 1] if actions else [1, 4, 2])
    cols[0].markdown(f"### {service.icon_for(transaction.category)}")
    cols[1].markdown(
        f"**{transaction.description}**  \n"
        f"{transaction.category.display_name} · {transaction.date.strftime('%Y-%m-%d %H:%M')}"
    )
    cols[2].markdown(f"**{format_signed(transaction, symbol)}**")
    if actions:
        cols[3].button("✏️", key=f"edit_{transaction.id}", on_click=start_edit, args=(transaction,))
        cols[4].button("🗑️", key=f"delete_{transaction.id}", on_click=ask_delete, args=(transaction.id,))
        if st.session_state.get("delete_confirm_id") == transaction.id:
            st.warning(f"Delete \"{transaction.description}\"? This cannot be undone.")
            col1, col2 = st.columns(2)
            if col1.button("Confirm Delete", key=f"confirm_delete_{transaction.id}", type="primary"):
                st.session_state.delete_confirm_id = None
                try:
                    service.delete_transaction(transaction.id)
                except NotFoundError as e:
                    st.error(str(e))
                    return
                st.rerun()
            col2.button("Cancel", key=f"cancel_delete_{transaction.id}", on_click=ask_delete, args=(None,))


def render_home_page(service: LedgerService, symbol: str):
    """Render the home page: balance, quick entry, warnings, recent records."""
    st.title("🏠 Home")
    dashboard = service.dashboard(datetime.now())
    summary = dashboard.summary

    st.markdown(
        f'<div class="big-number">{format_currency(summary.balance, symbol)}</div>',
        unsafe_allow_html=True,
    )
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_currency(summary.total_income, symbol))
    col2.metric("Expenses", format_currency(summary.total_expense, symbol))
    col3.metric("Savings", format_currency(summary.total_saving, symbol))

    st.markdown("### Quick Entry")
    cols = st.columns(len(QUICK_CATEGORIES))
    for col, category in zip(cols, QUICK_CATEGORIES):
        col.button(
            category_label(service, category),
            key=f"quick_{category.value}",
            on_click=start_quick_entry,
            args=(service, category),
        )

    for warning in dashboard.budget_warnings:
        box = "error-box" if warning.is_over_limit else "warning-box"
        title = "Budget exceeded" if warning.is_over_limit else "Approaching budget"
        st.markdown(f"""
        <div class="{box}">
            <strong>{title}: {category_label(service, warning.category)}</strong>
            <p>{format_currency(warning.spent, symbol)} of {format_currency(warning.limit, symbol)}
            ({warning.percent:.0f}%)</p>
        </div>
        """, unsafe_allow_html=True)

    st.markdown("### Recent Records")
    if not dashboard.recent:
        st.info("No records yet. Use Quick Entry or 'Add Entry' to record your first one.")
    for transaction in dashboard.recent:
        render_transaction_row(service, transaction, symbol)


def render_entry_page(service: LedgerService, symbol: str):
    """Render the add/edit form."""
    editing_id = st.session_state.editing_id
    st.title("✏️ Edit Entry" if editing_id else "➕ Add Entry")

    values = st.session_state.form_values or {}
    entry_date = values.get("date") or default_entry_datetime()

    available = service.available_balance(editing_id)
    st.caption(f"Available: {format_currency(available, symbol)}")

    col1, col2 = st.columns(2)
    col1.button("🕒 Now", on_click=set_entry_date, args=(0,))
    col2.button("📅 Yesterday", on_click=set_entry_date, args=(1,))

    types = list(TransactionType)
    categories = list(Category)

    with st.form("entry_form"):
        transaction_type = st.selectbox(
            "Type *",
            options=types,
            index=types.index(TransactionType(values.get("type", TransactionType.EXPENSE))),
            format_func=lambda x: x.value.title(),
        )
        category = st.selectbox(
            "Category *",
            options=categories,
            index=categories.index(Category(values.get("category", Category.FOOD))),
            format_func=lambda x: category_label(service, x),
        )
        amount = st.number_input(
            f"Amount ({symbol}) *",
            value=float(values.get("amount") or 0.0),
            min_value=0.0,
            step=0.01,
            format="%.2f",
        )
        description = st.text_input(
            "Description (optional)",
            value=values.get("description", ""),
            max_chars=200,
            help="Left empty, the category name is used",
        )
        col1, col2 = st.columns(2)
        day = col1.date_input("Date *", value=entry_date.date())
        time = col2.time_input("Time *", value=entry_date.time(), step=60)

        submitted = st.form_submit_button("💾 Save", type="primary")

    if st.button("Cancel"):
        reset_form()
        go_to(HOME)
        st.rerun()

    if submitted:
        if amount <= 0:
            st.error("Please enter an amount greater than zero")
            return
        # number_input yields a float; keep whole cents
        amount = quantize_money(Decimal(str(amount)))
        if transaction_type != TransactionType.INCOME and amount > available:
            st.error(
                f"Not enough balance: {format_currency(amount, symbol)} requested, "
                f"{format_currency(available, symbol)} available"
            )
            return
        draft = {
            "amount": amount,
            "category": category,
            "type": transaction_type,
            "description": description,
            "date": datetime.combine(day, time),
        }
        try:
            service.save_transaction(draft, editing_id=editing_id)
        except InsufficientFundsError as e:
            st.error(str(e))
            return
        except (ValidationError, NotFoundError) as e:
            st.error(str(e))
            return

        reset_form()
        st.success("Saved!")
        go_to(HOME)
        st.rerun()


def render_history_page(service: LedgerService, symbol: str):
    """Render the full transaction history with filter and sort."""
    st.title("📜 History")

    col1, col2, col3 = st.columns(3)
    type_filter = col1.selectbox(
        "Show", options=list(TypeFilter), format_func=lambda x: x.value.title()
    )
    sort_by = col2.selectbox(
        "Sort by", options=list(SortField), format_func=lambda x: x.value.title()
    )
    order = col3.selectbox(
        "Order",
        options=[SortOrder.DESC, SortOrder.ASC],
        format_func=lambda x: "Descending" if x == SortOrder.DESC else "Ascending",
    )

    st.markdown("---")
    records = service.history(type_filter, sort_by, order)
    if not records:
        st.info("No records match this filter.")
    for transaction in records:
        render_transaction_row(service, transaction, symbol, actions=True)


def render_savings_page(service: LedgerService, symbol: str):
    """Render total savings, the saving ratio and saving history."""
    st.title("🐷 Savings")
    dashboard = service.dashboard(datetime.now())

    col1, col2 = st.columns(2)
    col1.metric("Total Saved", format_currency(dashboard.summary.total_saving, symbol))
    col2.metric("Share of Income Saved", f"{dashboard.saving_ratio:.1f}%")

    st.markdown("### Saving History")
    if not dashboard.saving_history:
        st.info("No savings recorded yet.")
    for transaction in dashboard.saving_history:
        render_transaction_row(service, transaction, symbol, actions=True)


def render_statistics_page(service: LedgerService, symbol: str):
    """Render period totals and the category breakdown."""
    st.title("📊 Statistics")

    period = st.radio(
        "Period",
        options=list(Period),
        format_func=lambda x: x.value.title(),
        horizontal=True,
        index=list(Period).index(Period.MONTH),
    )
    stats = service.statistics(period, datetime.now())

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", format_currency(stats.summary.total_income, symbol))
    col2.metric("Expenses", format_currency(stats.summary.total_expense, symbol))
    col3.metric("Savings", format_currency(stats.summary.total_saving, symbol))
    col4.metric("Savings Rate", f"{stats.surplus_rate:.1f}%")

    if not stats.breakdown:
        st.info("No spending in this period.")
        return

    frame = pd.DataFrame(
        [
            {"Category": category_label(service, c), "Amount": float(v)}
            for c, v in sorted(stats.breakdown.items(), key=lambda kv: kv[1], reverse=True)
        ]
    ).set_index("Category")
    st.bar_chart(frame)
    st.dataframe(frame, use_container_width=True)


def render_budgets_page(service: LedgerService, symbol: str):
    """Render monthly budget limits per category."""
    st.title("🎯 Budgets")
    st.markdown("Set a monthly limit per category. Set 0 to remove it.")

    limits = {b.category: b.limit for b in service.budgets}
    candidates = [c for c in Category if not c.is_income_only]

    with st.form("budget_form"):
        category = st.selectbox(
            "Category", options=candidates, format_func=lambda x: category_label(service, x)
        )
        limit = st.number_input(
            f"Monthly limit ({symbol})", min_value=0.0, step=10.0, format="%.2f"
        )
        if st.form_submit_button("💾 Save Budget", type="primary"):
            try:
                service.set_budget(category, Decimal(str(limit)))
                st.rerun()
            except ValidationError as e:
                st.error(str(e))

    st.markdown("### This Month")
    warnings = {w.category: w for w in service.budget_warnings(datetime.now())}
    if not limits:
        st.info("No budgets set.")
    for category, cap in limits.items():
        warning = warnings.get(category)
        status = ""
        if warning is not None:
            status = " 🔴" if warning.is_over_limit else " 🟡"
        st.markdown(f"**{category_label(service, category)}**: limit {format_currency(cap, symbol)}{status}")


def render_settings_page(service: LedgerService):
    """Render preferences, export, AI advice and data reset."""
    st.title("⚙️ Settings")

    st.markdown("### Category Icons")
    col1, col2, col3 = st.columns([3, 2, 1])
    category = col1.selectbox(
        "Category", options=list(Category), format_func=lambda x: category_label(service, x)
    )
    icon = col2.selectbox("Icon", options=list(ICON_POOL))
    if col3.button("Apply"):
        service.set_category_icon(category, icon)
        st.rerun()
    if category in service.category_icons:
        if st.button(f"Reset to {CATEGORY_STYLES[category].icon}"):
            service.reset_category_icon(category)
            st.rerun()

    st.markdown("---")
    st.markdown("### Export Report")
    col1, col2 = st.columns([3, 1])
    fmt = col1.radio(
        "Format",
        options=["text", "csv"],
        format_func=lambda x: "📄 Text report" if x == "text" else "📊 CSV",
        horizontal=True,
    )
    if col2.button("Prepare Report"):
        st.session_state.report_file = service.export_report(datetime.now(), fmt=fmt)

    report_file = st.session_state.get("report_file")
    if report_file is not None:
        st.download_button(
            f"⬇️ Download {report_file.file_name}",
            data=report_file.content,
            file_name=report_file.file_name,
            mime=report_file.mime_type,
        )

    st.markdown("---")
    st.markdown("### AI Financial Advice")
    if st.button("✨ Get Advice", type="primary"):
        with st.spinner("Analyzing your records..."):
            response = run_async(service.get_insights())
        if response.error:
            st.warning(response.text)
        else:
            st.info(response.text)

    st.markdown("---")
    st.markdown("### Connection Status")
    status = validate_all_settings()
    if status.get("gemini", False):
        st.success("✅ Gemini (AI advice) - Configured")
    else:
        st.error(f"❌ Gemini (AI advice) - {status.get('gemini_error', 'Not configured')}")

    st.markdown("---")
    st.markdown("### Danger Zone")
    confirm = st.checkbox("I understand this deletes every record permanently")
    if st.button("🗑️ Clear All Data", disabled=not confirm):
        removed = service.clear_all()
        st.success(f"Removed {removed} records.")


if __name__ == "__main__":
    main()
