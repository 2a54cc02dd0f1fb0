"""
Streamlit Frontend for FinTrack

Projects, their transactions and categories, with optional Google
Drive sync and AI insights.

DESIGN PRINCIPLES:
1. Works fully in local mode - sync and AI only add buttons
2. Every local change is saved before anything talks to the network
3. Network failures show a short message and never lose data

All async work runs on one long-lived event loop in a background
thread, so pushes spawned after a change keep running across reruns.
"""

import asyncio
import logging
import threading
from datetime import date

import pandas as pd
import streamlit as st

from fintrack.config import get_settings, validate_all_settings
from fintrack.controller import FinanceController, create_app_controller
from fintrack.models.finance import CategoryColor, CategoryIcon, TransactionType
from fintrack.services.storage import ProtectedCategoryError


# Page configuration
st.set_page_config(
    page_title="FinTrack Pro",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_event_loop() -> asyncio.AbstractEventLoop:
    """Start the shared background event loop (cached)."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, name="fintrack-async", daemon=True)
    thread.start()
    return loop


def run_async(coro):
    """Run a coroutine on the shared loop and wait for its result."""
    return asyncio.run_coroutine_threadsafe(coro, get_event_loop()).result()


@st.cache_resource
def get_controller() -> FinanceController:
    """Get or create the application controller (cached)."""
    logging.basicConfig(level=get_settings().app.log_level)
    return create_app_controller()


def format_money(amount: float, currency: str) -> str:
    return f"{currency} {amount:,.2f}"


def main():
    """Main application entry point."""
    controller = get_controller()

    render_sidebar(controller)

    if controller.error_message:
        message, dismiss = st.columns([8, 1])
        message.error(f"⚠️ {controller.error_message}")
        if dismiss.button("✖", help="Dismiss"):
            controller.dismiss_error()
            st.rerun()

    page = st.session_state.get("page", "📁 Projects")
    if page == "⚙️ Settings":
        render_settings_page(controller)
    elif controller.active_project is not None:
        render_project_dashboard(controller)
    else:
        render_projects_page(controller)


def render_sidebar(controller: FinanceController):
    st.sidebar.title("💰 FinTrack Pro")
    st.sidebar.markdown("---")

    st.sidebar.radio(
        "Navigate to:",
        ["📁 Projects", "⚙️ Settings"],
        key="page",
    )

    st.sidebar.markdown("---")

    if not controller.sync_enabled:
        st.sidebar.caption("Local Mode")
        return

    if controller.is_authenticated:
        st.sidebar.success("☁️ Cloud Sync Active")
        if st.sidebar.button("🔄 Sync", disabled=controller.is_syncing):
            with st.spinner("Syncing with Google Drive..."):
                run_async(controller.sync(pull=True))
            st.rerun()
        if st.sidebar.button("🚪 Logout"):
            run_async(controller.logout())
            st.rerun()
    else:
        if st.sidebar.button("🔑 Google Login", type="primary"):
            with st.spinner("Waiting for Google sign-in in your browser..."):
                run_async(controller.login())
            st.rerun()


def render_projects_page(controller: FinanceController):
    """Render the project list and the create form."""
    st.title("📁 Projects")
    st.markdown("Each project keeps its own income and expenses.")

    with st.expander("➕ New Project", expanded=not controller.projects):
        with st.form("new_project", clear_on_submit=True):
            name = st.text_input("Project Name *")
            description = st.text_area("Description")
            currency = st.text_input(
                "Currency",
                value=get_settings().app.default_currency,
                max_chars=3,
            )
            if st.form_submit_button("Create Project", type="primary"):
                if not name.strip():
                    st.error("Please enter a project name")
                else:
                    try:
                        run_async(controller.create_project(name, description, currency))
                        st.rerun()
                    except ValueError as e:
                        st.error(f"Could not create project: {e}")

    if not controller.projects:
        st.info("No projects yet. Create your first one above.")
        return

    columns = st.columns(3)
    for idx, project in enumerate(controller.projects):
        with columns[idx % 3]:
            with st.container(border=True):
                st.subheader(project.name)
                if project.description:
                    st.caption(project.description)
                st.caption(f"{project.currency} · created {project.created_at:%d %b %Y}")
                if st.button("Open", key=f"open_{project.id}"):
                    controller.select_project(project.id)
                    st.rerun()


def render_project_dashboard(controller: FinanceController):
    """Render totals, chart, transactions and AI insights for one project."""
    project = controller.active_project

    header, back = st.columns([5, 1])
    with header:
        st.title(project.name)
        if project.description:
            st.caption(project.description)
    with back:
        if st.button("⬅️ Back"):
            controller.clear_selection()
            st.rerun()

    summary = controller.summary()
    col1, col2, col3 = st.columns(3)
    col1.metric("📈 Income", format_money(summary.total_income, project.currency))
    col2.metric("📉 Expenses", format_money(summary.total_expense, project.currency))
    col3.metric("💵 Balance", format_money(summary.balance, project.currency))

    tab_tx, tab_add, tab_cats, tab_ai = st.tabs(
        ["🧾 Transactions", "➕ Add Transaction", "🏷️ Categories", "🧠 AI Insights"]
    )

    with tab_tx:
        render_breakdown(controller)
        render_transaction_list(controller)
    with tab_add:
        render_transaction_form(controller)
    with tab_cats:
        render_category_manager(controller)
    with tab_ai:
        render_ai_insights(controller)


def render_breakdown(controller: FinanceController):
    breakdown = controller.expense_breakdown()
    if not breakdown:
        return
    st.markdown("#### Expenses by Category")
    frame = pd.DataFrame(
        {
            "Category": [item.name for item in breakdown],
            "Amount": [item.total for item in breakdown],
            "Color": [item.color.hex for item in breakdown],
        }
    )
    st.bar_chart(frame, x="Category", y="Amount", color="Color")


def render_transaction_list(controller: FinanceController):
    project = controller.active_project
    if not controller.transactions:
        st.info("No transactions yet. Use the 'Add Transaction' tab.")
        return

    by_id = {c.id: c for c in controller.categories}
    for tx in controller.transactions_newest_first():
        category = by_id.get(tx.category)
        icon = category.icon.emoji if category else CategoryIcon.MORE.emoji
        sign = "+" if tx.type == TransactionType.INCOME else "-"

        col1, col2, col3 = st.columns([6, 2, 1])
        with col1:
            st.markdown(f"{icon} **{tx.title}** · {controller.category_label(tx.category)}")
            caption = tx.date.strftime("%d %b %Y")
            if tx.description:
                caption += f" · {tx.description}"
            st.caption(caption)
        with col2:
            st.markdown(f"**{sign}{format_money(tx.amount, project.currency)}**")
        with col3:
            if st.button("🗑️", key=f"del_{tx.id}", help="Delete transaction"):
                st.session_state.confirm_delete = tx.id

        if st.session_state.get("confirm_delete") == tx.id:
            st.warning(f"Delete '{tx.title}'?")
            yes, no = st.columns(2)
            if yes.button("Yes, delete", key=f"confirm_{tx.id}", type="primary"):
                st.session_state.pop("confirm_delete")
                run_async(controller.delete_transaction(tx.id))
                st.rerun()
            if no.button("Cancel", key=f"cancel_{tx.id}"):
                st.session_state.pop("confirm_delete")
                st.rerun()


def render_transaction_form(controller: FinanceController):
    category_ids = [c.id for c in controller.categories]

    if "tx_suggested" in st.session_state:
        st.session_state.tx_category = st.session_state.pop("tx_suggested")
    if "tx_category" not in st.session_state or st.session_state.tx_category not in category_ids:
        st.session_state.tx_category = category_ids[0] if category_ids else "other"

    tx_type = st.radio(
        "Type",
        options=list(TransactionType),
        format_func=lambda t: t.value.title(),
        horizontal=True,
        index=1,
    )
    title = st.text_input("Title *", key="tx_title")
    description = st.text_input("Description", key="tx_description")
    amount = st.text_input("Amount *", placeholder="0.00")

    col1, col2 = st.columns([3, 1])
    with col1:
        category = st.selectbox(
            "Category",
            options=category_ids,
            format_func=controller.category_label,
            key="tx_category",
        )
    with col2:
        st.write("")
        if controller.advisor_enabled and st.button("✨ Suggest"):
            with st.spinner("Asking AI..."):
                suggested = run_async(controller.suggest_category(title, description))
            if suggested in category_ids:
                st.session_state.tx_suggested = suggested
                st.rerun()

    on = st.date_input("Date", value=date.today())

    if st.button("💾 Save Transaction", type="primary"):
        if not title.strip():
            st.error("Please enter a title")
            return
        try:
            run_async(
                controller.add_transaction(
                    title=title,
                    amount=amount,
                    type=tx_type,
                    category=category,
                    on=on,
                    description=description,
                )
            )
        except ValueError as e:
            st.error(f"Invalid transaction: {e}")
            return
        st.success("Transaction saved")
        st.rerun()


def render_category_manager(controller: FinanceController):
    for category in controller.categories:
        col1, col2 = st.columns([6, 1])
        with col1:
            st.markdown(
                f"{category.icon.emoji} <span style='color:{category.palette_color.hex}'>"
                f"**{category.name}**</span> `{category.id}`",
                unsafe_allow_html=True,
            )
        with col2:
            if not category.is_default and st.button("🗑️", key=f"delcat_{category.id}"):
                try:
                    run_async(controller.delete_category(category.id))
                except ProtectedCategoryError as e:
                    st.error(str(e))
                else:
                    st.rerun()

    st.markdown("---")
    with st.form("new_category", clear_on_submit=True):
        st.markdown("**New Category**")
        name = st.text_input("Name")
        color = st.selectbox(
            "Colour",
            options=list(CategoryColor),
            index=list(CategoryColor).index(CategoryColor.INDIGO),
            format_func=lambda c: c.label,
        )
        icon = st.selectbox(
            "Icon",
            options=list(CategoryIcon),
            index=list(CategoryIcon).index(CategoryIcon.MORE),
            format_func=lambda i: f"{i.emoji} {i.value}",
        )
        if st.form_submit_button("Add Category"):
            if run_async(controller.add_category(name, color.value, icon.value)) is None:
                st.error("Please enter a category name")
            else:
                st.rerun()


def render_ai_insights(controller: FinanceController):
    if not controller.advisor_enabled:
        st.info("AI insights are disabled. Set GEMINI_API_KEY to enable them.")
        return

    if st.button("🧠 Analyze Project", type="primary"):
        with st.spinner("Analyzing your transactions..."):
            run_async(controller.analyze_active_project())

    if controller.ai_insight:
        st.markdown(controller.ai_insight)


def render_settings_page(controller: FinanceController):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Features")

    status = validate_all_settings()

    features = [
        ("Google Drive (Sync)", "google_drive", "GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET"),
        ("Gemini (AI Insights)", "gemini", "GEMINI_API_KEY"),
    ]

    for name, key, env_vars in features:
        if status.get(key, False):
            st.success(f"✅ {name} - Enabled")
        else:
            error = status.get(f"{key}_error", f"Set {env_vars} to enable")
            st.warning(f"➖ {name} - {error}")

    st.markdown(f"**Local data:** `{get_settings().app.data_dir}`")
    st.markdown(f"**Sync session:** {controller.session.state.value}")

    st.markdown("---")
    st.markdown("### Recent Activity")
    events = controller.activity.recent(limit=20)
    if not events:
        st.caption("Nothing yet.")
    for event in events:
        line = f"`{event.timestamp:%H:%M:%S}` {event.description}"
        if event.error_message:
            line += f" - {event.error_message}"
        st.markdown(line)


if __name__ == "__main__":
    main()
