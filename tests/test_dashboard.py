from datetime import date

import pandas as pd
import pytest

from dashboard import cat_spend, compute_dashboard_stats, daily_spend, monthly_trend

TODAY = date(2024, 6, 15)


def _frame(rows):
    return pd.DataFrame(rows, columns=["Date", "Amount", "Category"])


@pytest.fixture
def history():
    return _frame([
        (date(2024, 6, 1), 100.0, "Food & Dining"),
        (date(2024, 6, 14), 50.0, "Travel"),
        (date(2024, 6, 30), 50.0, "Food & Dining"),
        (date(2024, 5, 1), 80.0, "Travel"),
        (date(2024, 5, 31), 20.0, "Shopping"),
        (date(2024, 1, 5), 10.0, "Other"),
        (date(2023, 12, 31), 999.0, "Other"),
    ])


def test_month_totals_and_change(history):
    stats = compute_dashboard_stats(history, TODAY)

    assert stats.total_this_month == 200.0
    assert stats.total_last_month == 100.0
    assert stats.percentage_change == 100.0


def test_no_previous_month_means_no_change():
    stats = compute_dashboard_stats(_frame([(date(2024, 6, 2), 40.0, "Travel")]), TODAY)

    assert stats.total_last_month == 0
    assert stats.percentage_change == 0


def test_category_breakdown_sorted_with_percentages(history):
    stats = compute_dashboard_stats(history, TODAY)

    assert [(c.category, c.amount, c.percentage) for c in stats.category_breakdown] == [
        ("Food & Dining", 150.0, 75.0),
        ("Travel", 50.0, 25.0),
    ]


def test_trend_covers_six_months_and_skips_empty_ones(history):
    stats = compute_dashboard_stats(history, TODAY)

    assert [(m.month, m.amount) for m in stats.monthly_trend] == [
        ("Jan 2024", 10.0),
        ("May 2024", 100.0),
        ("Jun 2024", 200.0),
    ]


def test_empty_frame():
    stats = compute_dashboard_stats(_frame([]), TODAY)

    assert stats.total_this_month == 0
    assert stats.category_breakdown == []
    assert stats.monthly_trend == []


def test_charts_build(history):
    stats = compute_dashboard_stats(history, TODAY)

    assert cat_spend(stats).data[0].type == "pie"
    assert list(monthly_trend(stats).data[0].x) == ["Jan 2024", "May 2024", "Jun 2024"]
    daily = daily_spend(history, TODAY)
    assert list(daily.data[0].y) == [100.0, 50.0, 50.0]
