from datetime import date
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from alerts import check_budgets_and_create_alerts
from budgets import (
    DuplicateBudgetError,
    compute_budget_spending,
    create_budget,
    current_month_str,
    delete_budget,
    fetch_budgets,
    month_bounds,
    update_budget,
)
from database import BudgetAlert, NotFoundError
from schemas import BudgetCreate, BudgetUpdate


def _budget(amount, category="Food & Dining", month="2024-03", user_id=1, id=1):
    return SimpleNamespace(id=id, user_id=user_id, amount=amount, category=category, month=month)


def _expense(amount, category="Food & Dining", on=date(2024, 3, 10), user_id=1):
    return SimpleNamespace(user_id=user_id, amount=amount, category=category, date=on)


def test_month_bounds_handles_leap_february():
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds("2023-02") == (date(2023, 2, 1), date(2023, 2, 28))
    assert month_bounds("2024-12") == (date(2024, 12, 1), date(2024, 12, 31))


def test_current_month_str():
    assert current_month_str(date(2024, 7, 31)) == "2024-07"


def test_spending_counts_only_matching_user_category_and_month():
    expenses = [
        _expense(30.0),
        _expense(20.0, on=date(2024, 3, 1)),
        _expense(10.0, on=date(2024, 3, 31)),
        _expense(99.0, on=date(2024, 2, 29)),
        _expense(99.0, on=date(2024, 4, 1)),
        _expense(99.0, category="Travel"),
        _expense(99.0, user_id=2),
    ]

    result = compute_budget_spending(_budget(100.0), expenses)

    assert result.actual_spending == 60.0
    assert result.remaining == 40.0
    assert result.percentage_used == 60.0
    assert result.is_over_budget is False


def test_remaining_goes_negative_when_over_budget():
    result = compute_budget_spending(_budget(50.0), [_expense(80.0)])

    assert result.remaining == -30.0
    assert result.percentage_used == 160.0
    assert result.is_over_budget is True


def test_spending_equal_to_budget_is_not_over():
    result = compute_budget_spending(_budget(50.0), [_expense(50.0)])

    assert result.percentage_used == 100.0
    assert result.is_over_budget is False


def test_zero_budget_reports_zero_percent():
    result = compute_budget_spending(_budget(0.0), [_expense(5.0)])

    assert result.percentage_used == 0
    assert result.is_over_budget is True


def test_no_expenses():
    result = compute_budget_spending(_budget(200.0), [])

    assert result.actual_spending == 0
    assert result.remaining == 200.0
    assert result.percentage_used == 0


def test_fetch_budgets_for_month(db, user, other_user, make_budget, make_expense):
    make_budget(user.id, 100.0, "Food & Dining")
    make_budget(user.id, 50.0, "Travel")
    make_budget(user.id, 70.0, "Food & Dining", month="2024-04")
    make_budget(other_user.id, 10.0, "Food & Dining")
    make_expense(user.id, 80.0, "Food & Dining")
    make_expense(other_user.id, 500.0, "Food & Dining")

    budgets = fetch_budgets(db, user.id, "2024-03")

    assert [b.category for b in budgets] == ["Food & Dining", "Travel"]
    food = budgets[0]
    assert food.actual_spending == 80.0
    assert food.percentage_used == 80.0
    assert budgets[1].actual_spending == 0


def test_fetch_budgets_empty_month(db, user):
    assert fetch_budgets(db, user.id, "2030-01") == []


def test_create_budget_rejects_duplicate(db, user):
    create_budget(db, user.id, BudgetCreate(amount=100, category="Travel", month="2024-03"))

    with pytest.raises(DuplicateBudgetError):
        create_budget(db, user.id, BudgetCreate(amount=200, category="Travel", month="2024-03"))


def test_same_category_other_user_is_allowed(db, user, other_user):
    create_budget(db, user.id, BudgetCreate(amount=100, category="Travel", month="2024-03"))
    budget = create_budget(db, other_user.id, BudgetCreate(amount=100, category="Travel", month="2024-03"))

    assert budget.user_id == other_user.id


@pytest.mark.parametrize(
    "payload",
    [
        {"amount": 0, "category": "Travel", "month": "2024-03"},
        {"amount": 10, "category": "  ", "month": "2024-03"},
        {"amount": 10, "category": "Travel", "month": "2024-3"},
        {"amount": 10, "category": "Travel", "month": "2024-13"},
    ],
)
def test_budget_validation(payload):
    with pytest.raises(ValidationError):
        BudgetCreate(**payload)


def test_update_budget(db, user, make_budget):
    budget = make_budget(user.id, 100.0)

    updated = update_budget(db, user.id, budget.id, BudgetUpdate(amount=250.0))

    assert updated.amount == 250.0
    assert updated.category == "Food & Dining"


def test_update_budget_into_existing_slot_fails(db, user, make_budget):
    make_budget(user.id, 100.0, "Travel")
    budget = make_budget(user.id, 100.0, "Shopping")

    with pytest.raises(DuplicateBudgetError):
        update_budget(db, user.id, budget.id, BudgetUpdate(category="Travel"))


def test_update_other_users_budget_is_not_found(db, user, other_user, make_budget):
    budget = make_budget(other_user.id, 100.0)

    with pytest.raises(NotFoundError):
        update_budget(db, user.id, budget.id, BudgetUpdate(amount=1.0))


def test_delete_budget_keeps_alerts_without_budget(db, user, make_budget, make_expense):
    budget = make_budget(user.id, 100.0)
    make_expense(user.id, 120.0)
    check_budgets_and_create_alerts(db, fetch_budgets(db, user.id, "2024-03"))

    delete_budget(db, user.id, budget.id)

    alerts = db.query(BudgetAlert).filter(BudgetAlert.user_id == user.id).all()
    assert len(alerts) == 1
    assert alerts[0].budget_id is None
    assert fetch_budgets(db, user.id, "2024-03") == []


@pytest.mark.parametrize("month", ["2024-1", "March", "2024-13"])
def test_fetch_budgets_rejects_malformed_month(db, user, make_budget, month):
    make_budget(user.id, 100.0, month="2024-01")

    with pytest.raises(ValueError):
        fetch_budgets(db, user.id, month)
