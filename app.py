import logging
import time
from datetime import date

import pandas as pd
import streamlit as st
from pydantic import ValidationError

from alerts import check_budgets_and_create_alerts, fetch_alerts, mark_alert_as_read, mark_all_alerts_as_read
from auth import AuthError, LoginThrottle, sign_in, sign_up
from budgets import (
    DuplicateBudgetError,
    create_budget,
    current_month_str,
    delete_budget,
    fetch_budgets,
    update_budget,
)
from config import (
    ALERT_MONTHLY_SUMMARY,
    ALERT_OVER_BUDGET,
    ALERT_THRESHOLD,
    CRITICAL_THRESHOLD,
    EXPENSE_CATEGORIES,
    PAYMENT_METHODS,
    WARNING_THRESHOLD,
    configure_logging,
)
from dashboard import _kpis, cat_spend, compute_dashboard_stats, daily_spend, monthly_trend
from database import NotFoundError, SessionLocal, init_db
from expenses import add_expense, delete_expense, expenses_to_frame, list_expenses, update_expense
from export import CSV_FILENAME, expenses_to_csv
from schemas import BudgetCreate, BudgetUpdate, ExpenseCreate, ExpenseFilters, ExpenseUpdate

logger = logging.getLogger(__name__)

ALERT_ICONS = {ALERT_THRESHOLD: "⚠️", ALERT_OVER_BUDGET: "🚨", ALERT_MONTHLY_SUMMARY: "📅"}

# --- Configuration ---
st.set_page_config(page_title="Personal Finance Tracker", layout="wide", page_icon="💰")
configure_logging()

# --- Database Session ---
init_db()

if "db" not in st.session_state:
    st.session_state.db = SessionLocal()


def get_db():
    return st.session_state.db


def _validation_messages(exc: ValidationError) -> str:
    return "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())


# --- Authentication ---
def check_login():
    """Sign-in / sign-up page; returns True once a user is in the session."""
    if "authenticated" not in st.session_state:
        st.session_state["authenticated"] = False
        st.session_state["user_id"] = None
        st.session_state["email"] = None
        st.session_state["throttle"] = LoginThrottle()

    if st.session_state.get("authenticated", False):
        return True

    st.title("💰 Personal Finance Tracker")
    mode = st.radio("Account", ["Sign In", "Sign Up"], horizontal=True, label_visibility="collapsed")

    email = st.text_input("Email", placeholder="Enter your email", key="login_user")
    password = st.text_input("Password", type="password", placeholder="Enter your password", key="login_pass")

    throttle: LoginThrottle = st.session_state["throttle"]
    wait_for = throttle.seconds_locked()
    if mode == "Sign In" and wait_for:
        st.error(f"Too many failed attempts. Please wait {wait_for} seconds before trying again.")
        return False

    if not st.button(mode, key="login_btn", type="primary", use_container_width=True):
        return False

    db = get_db()
    try:
        if mode == "Sign Up":
            user = sign_up(db, email, password)
            st.success("✅ Account created!")
        else:
            user = sign_in(db, email, password)
            throttle.record_success()
    except ValidationError as exc:
        st.error(_validation_messages(exc))
        return False
    except AuthError as exc:
        if mode == "Sign In":
            throttle.record_failure()
            if throttle.seconds_locked():
                st.warning("Too many failed attempts. Login temporarily locked.")
        st.error(f"❌ {exc}")
        return False

    st.session_state["authenticated"] = True
    st.session_state["user_id"] = user.id
    st.session_state["email"] = user.email
    time.sleep(0.5)
    st.rerun()


if not check_login():
    st.stop()

user_id = st.session_state["user_id"]
db = get_db()

# Sidebar
with st.sidebar:
    st.header("Account")
    st.caption(f"Signed in as **{st.session_state['email']}**")
    if st.button("🚪 Sign Out", use_container_width=True):
        st.session_state["authenticated"] = False
        st.session_state["user_id"] = None
        st.session_state["email"] = None
        st.rerun()

st.title("💰 Personal Finance Tracker")

tab1, tab2, tab3 = st.tabs(["📊 Dashboard", "💳 Expenses", "🎯 Budgets"])

with tab1:
    all_df = expenses_to_frame(list_expenses(db, user_id))
    if all_df.empty:
        st.info("No expenses yet. Add your first expense to get started.")
    else:
        stats = compute_dashboard_stats(all_df)
        _kpis(stats)

        col1, col2 = st.columns(2)
        with col1:
            if stats.category_breakdown:
                st.plotly_chart(cat_spend(stats), use_container_width=True)
            else:
                st.info("No spending recorded this month.")
        with col2:
            st.plotly_chart(monthly_trend(stats), use_container_width=True)

        st.plotly_chart(daily_spend(all_df), use_container_width=True)

        if stats.category_breakdown:
            st.subheader("Category Breakdown")
            st.dataframe(
                pd.DataFrame([c.model_dump() for c in stats.category_breakdown]).rename(
                    columns={"category": "Category", "amount": "Amount", "percentage": "% of Month"}
                ),
                use_container_width=True,
                hide_index=True,
            )

with tab2:
    with st.expander("➕ Add Expense", expanded=False):
        with st.form("add_expense", clear_on_submit=True):
            amount = st.number_input("Amount ($) *", min_value=0.0, step=1.0, format="%.2f")
            category = st.selectbox("Category *", [""] + EXPENSE_CATEGORIES)
            exp_date = st.date_input("Date *", value=date.today())
            method = st.selectbox("Payment method *", [""] + PAYMENT_METHODS)
            description = st.text_input("Description")

            if st.form_submit_button("Add Expense"):
                try:
                    payload = ExpenseCreate(
                        amount=amount,
                        category=category,
                        date=exp_date,
                        payment_method=method,
                        description=description or None,
                    )
                    add_expense(db, user_id, payload)
                    st.toast("Expense added successfully!")
                    st.rerun()
                except ValidationError as exc:
                    st.error(_validation_messages(exc))

    st.subheader("Expense Log")
    col1, col2, col3, col4 = st.columns(4)
    start = col1.date_input("From", value=None)
    end = col2.date_input("To", value=None)
    sel_cat = col3.selectbox("Category", ["All"] + EXPENSE_CATEGORIES)
    sel_method = col4.selectbox("Payment method", ["All"] + PAYMENT_METHODS)

    filters = ExpenseFilters(
        start_date=start,
        end_date=end,
        category=None if sel_cat == "All" else sel_cat,
        payment_method=None if sel_method == "All" else sel_method,
    )
    rows = list_expenses(db, user_id, filters)

    if not rows:
        hint = "Try adjusting your filters." if filters.is_active() else "Add your first expense to get started."
        st.info(f"No expenses found. {hint}")
    else:
        filt_df = expenses_to_frame(rows)
        filt_df["Date"] = filt_df["Date"].dt.date
        st.caption(f"{len(rows)} expenses • ${filt_df['Amount'].sum():,.2f} total")

        edited_df = st.data_editor(
            filt_df,
            key="expense_editor",
            disabled=["ID"],
            hide_index=True,
            use_container_width=True,
            column_config={
                "Category": st.column_config.SelectboxColumn(options=EXPENSE_CATEGORIES),
                "Payment Method": st.column_config.SelectboxColumn(options=PAYMENT_METHODS),
                "Amount": st.column_config.NumberColumn(min_value=0.01, format="$%.2f"),
            },
        )

        col_a, col_b, col_c = st.columns(3)
        if col_a.button("Save Changes"):
            changes = st.session_state["expense_editor"]["edited_rows"]
            field_map = {
                "Amount": "amount",
                "Category": "category",
                "Date": "date",
                "Payment Method": "payment_method",
                "Description": "description",
            }
            try:
                for idx, change in changes.items():
                    real_id = int(filt_df.iloc[idx]["ID"])
                    payload = ExpenseUpdate(**{field_map[k]: v for k, v in change.items() if k in field_map})
                    update_expense(db, user_id, real_id, payload)
                st.toast("Expense updated successfully!")
                st.rerun()
            except ValidationError as exc:
                st.error(_validation_messages(exc))
            except NotFoundError as exc:
                st.error(f"Failed to update expense: {exc}")

        to_delete = col_b.selectbox(
            "Delete expense",
            [None] + filt_df["ID"].tolist(),
            format_func=lambda i: "Select…" if i is None else f"#{i}",
            label_visibility="collapsed",
        )
        if to_delete is not None and col_b.button("🗑️ Delete"):
            try:
                delete_expense(db, user_id, int(to_delete))
                st.toast("Expense deleted successfully!")
                st.rerun()
            except NotFoundError as exc:
                st.error(f"Failed to delete expense: {exc}")

        col_c.download_button(
            "⬇️ Export CSV",
            data=expenses_to_csv(rows),
            file_name=CSV_FILENAME,
            mime="text/csv",
            use_container_width=True,
        )


def _status_icon(pct: float) -> str:
    if pct >= 100:
        return "🔴"
    if pct >= CRITICAL_THRESHOLD:
        return "🟡"
    if pct >= WARNING_THRESHOLD:
        return "🟠"
    return "🟢"


with tab3:
    col_month, _ = st.columns([1, 3])
    selected_month = col_month.text_input("Month (YYYY-MM)", value=current_month_str())

    try:
        budgets = fetch_budgets(db, user_id, selected_month)
    except ValueError:
        st.error("Month must be in YYYY-MM format.")
        st.stop()

    # Raise alerts for whatever the freshly loaded budgets warrant
    check_budgets_and_create_alerts(db, budgets)

    alerts = fetch_alerts(db, user_id)
    if alerts:
        st.subheader("🔔 Budget Alerts")
        if st.button("Mark all as read"):
            mark_all_alerts_as_read(db, user_id)
            st.rerun()
        for alert in alerts[:5]:
            col_msg, col_btn = st.columns([5, 1])
            icon = ALERT_ICONS.get(alert.alert_type, "🔔")
            text = f"{icon} {alert.message}"
            col_msg.markdown(text if alert.is_read else f"**{text}**")
            if not alert.is_read and col_btn.button("Mark read", key=f"read_{alert.id}"):
                mark_alert_as_read(db, user_id, alert.id)
                st.rerun()

    with st.expander("➕ Add Budget"):
        with st.form("add_budget", clear_on_submit=True):
            category = st.selectbox("Category", [""] + EXPENSE_CATEGORIES)
            limit = st.number_input("Budget amount ($)", min_value=0.0, step=50.0)

            if st.form_submit_button("Save Budget"):
                try:
                    create_budget(db, user_id, BudgetCreate(category=category, amount=limit, month=selected_month))
                    st.toast(f"Budget saved for {category}.")
                    st.rerun()
                except ValidationError as exc:
                    st.error(_validation_messages(exc))
                except DuplicateBudgetError as exc:
                    st.error(str(exc))

    if not budgets:
        st.info(f"No budgets configured for {selected_month} yet.")

    for b in budgets:
        st.markdown(
            f"{_status_icon(b.percentage_used)} **{b.category}**: "
            f"${b.actual_spending:,.2f} / ${b.amount:,.2f}"
        )
        st.progress(
            min(1.0, b.percentage_used / 100),
            text=f"{b.percentage_used:.1f}% used • ${b.remaining:,.2f} left",
        )
        if b.is_over_budget:
            st.error(f"Over budget by ${b.actual_spending - b.amount:,.2f}")

        with st.expander(f"Edit {b.category}"):
            with st.form(f"edit_budget_{b.id}"):
                new_cat = st.selectbox(
                    "Category",
                    EXPENSE_CATEGORIES,
                    index=EXPENSE_CATEGORIES.index(b.category) if b.category in EXPENSE_CATEGORIES else 0,
                )
                new_amount = st.number_input("Budget amount ($)", min_value=0.0, step=50.0, value=float(b.amount))
                save_col, delete_col = st.columns(2)
                save = save_col.form_submit_button("Save")
                remove = delete_col.form_submit_button("🗑️ Delete")

            if save:
                try:
                    update_budget(db, user_id, b.id, BudgetUpdate(category=new_cat, amount=new_amount))
                    st.toast("Budget updated.")
                    st.rerun()
                except ValidationError as exc:
                    st.error(_validation_messages(exc))
                except DuplicateBudgetError as exc:
                    st.error(str(exc))
            if remove:
                delete_budget(db, user_id, b.id)
                st.toast("Budget deleted.")
                st.rerun()
