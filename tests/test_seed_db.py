from datetime import date

from auth import sign_in
from budgets import fetch_budgets
from config import DEMO_EMAIL, DEMO_PASSWORD
from database import Budget, Expense
from seed_db import SAMPLE_BUDGETS, SAMPLE_EXPENSES, seed_demo_data


def test_seed_creates_demo_account_and_is_idempotent(db):
    today = date(2024, 3, 20)

    user = seed_demo_data(db, today)
    again = seed_demo_data(db, today)

    assert again.id == user.id
    assert sign_in(db, DEMO_EMAIL, DEMO_PASSWORD).id == user.id
    assert db.query(Expense).count() == len(SAMPLE_EXPENSES)
    assert db.query(Budget).count() == len(SAMPLE_BUDGETS)
    assert {b.category for b in fetch_budgets(db, user.id, "2024-03")} == set(SAMPLE_BUDGETS)


def test_seed_early_in_month_keeps_dates_in_month(db):
    user = seed_demo_data(db, date(2024, 3, 2))

    dates = {e.date for e in db.query(Expense).filter(Expense.user_id == user.id)}

    assert dates <= {date(2024, 3, 1), date(2024, 3, 2)}
