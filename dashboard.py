# dashboard.py: month-over-month totals, category split and trend charts

import streamlit as st
import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from datetime import date
from typing import Optional

from config import TREND_MONTHS
from schemas import CategoryShare, DashboardStats, MonthTotal


def _prep(df):
    """
    Prepares the expense dataframe for dashboarding.
    """
    if df.empty:
        return df

    df = df.copy()
    df['Date'] = pd.to_datetime(df['Date'])
    df['Month'] = df['Date'].dt.to_period('M')

    # Ensure Amount is numeric
    df['Amount'] = pd.to_numeric(df['Amount'], errors='coerce').fillna(0)
    df['Category'] = df['Category'].fillna('Other').replace('', 'Other')
    return df


def compute_dashboard_stats(df: pd.DataFrame, today: Optional[date] = None) -> DashboardStats:
    """
    Summarise one user's expenses relative to ``today``.

    Totals cover the calendar month of ``today`` and the month before it.
    The trend starts on the first day of the month ``TREND_MONTHS - 1``
    months back and only lists months that have expenses.
    """
    if df.empty:
        return DashboardStats(
            total_this_month=0.0,
            total_last_month=0.0,
            percentage_change=0.0,
            category_breakdown=[],
            monthly_trend=[],
        )

    df = _prep(df)
    this_month = pd.Period(pd.Timestamp(today or date.today()), freq='M')
    last_month = this_month - 1
    trend_start = (this_month - (TREND_MONTHS - 1)).start_time

    this_df = df[df['Month'] == this_month]
    total_this = float(this_df['Amount'].sum())
    total_last = float(df[df['Month'] == last_month]['Amount'].sum())

    # Guard against division by zero
    pct_change = (total_this - total_last) / total_last * 100 if total_last > 0 else 0.0

    by_cat = this_df.groupby('Category')['Amount'].sum().sort_values(ascending=False, kind='stable')
    breakdown = [
        CategoryShare(
            category=cat,
            amount=float(amount),
            percentage=float(amount) / total_this * 100 if total_this > 0 else 0.0,
        )
        for cat, amount in by_cat.items()
    ]

    trend_df = df[df['Date'] >= trend_start]
    monthly = trend_df.groupby('Month')['Amount'].sum().sort_index()
    trend = [MonthTotal(month=period.strftime('%b %Y'), amount=float(amount)) for period, amount in monthly.items()]

    return DashboardStats(
        total_this_month=total_this,
        total_last_month=total_last,
        percentage_change=pct_change,
        category_breakdown=breakdown,
        monthly_trend=trend,
    )


def _kpis(stats: DashboardStats):
    """
    Displays the top-level KPIs for the current month.
    """
    col1, col2, col3 = st.columns(3)
    col1.metric(
        "💸 Spent This Month",
        f"${stats.total_this_month:,.2f}",
        delta=f"{stats.percentage_change:+.1f}% vs last month",
        delta_color="inverse",
    )
    col2.metric("📅 Last Month", f"${stats.total_last_month:,.2f}")
    top = stats.category_breakdown[0] if stats.category_breakdown else None
    col3.metric("🏷️ Top Category", top.category if top else "n/a", help=f"${top.amount:,.2f}" if top else None)


def cat_spend(stats: DashboardStats):
    """
    Donut chart of this month's spending by category.
    """
    by_cat = pd.DataFrame([c.model_dump() for c in stats.category_breakdown], columns=['category', 'amount', 'percentage'])

    fig = px.pie(by_cat, values='amount', names='category', hole=0.4, title="Spending by Category")
    fig.update_traces(textposition='inside', textinfo='percent+label')
    return fig


def monthly_trend(stats: DashboardStats):
    """
    Bar chart of total spending per month.
    """
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[m.month for m in stats.monthly_trend],
        y=[m.amount for m in stats.monthly_trend],
        name='Expenses',
        marker_color='#FF5252',
    ))
    fig.update_layout(title=f"Spending Trend (last {TREND_MONTHS} months)", height=400)
    return fig


def daily_spend(df: pd.DataFrame, today: Optional[date] = None):
    """
    Line chart of spending per day in the current month.
    """
    this_month = pd.Period(pd.Timestamp(today or date.today()), freq='M')
    daily = pd.DataFrame(columns=['Day', 'Amount'])
    if not df.empty:
        df = _prep(df)
        month_df = df[df['Month'] == this_month]
        daily = month_df.groupby('Date')['Amount'].sum().reset_index().sort_values('Date')
        daily['Day'] = daily['Date'].dt.strftime('%b %d')

    fig = px.line(daily, x='Day', y='Amount', markers=True, title="Daily Spending This Month")
    fig.update_traces(line_color='#9E7FFF')
    fig.update_layout(height=350)
    return fig
