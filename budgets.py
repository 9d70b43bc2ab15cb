"""Monthly category budgets and the spending derived from expenses."""

import calendar
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from database import Budget, BudgetAlert, Expense, NotFoundError
from schemas import BudgetCreate, BudgetUpdate, BudgetWithSpending, validate_month

logger = logging.getLogger(__name__)


class DuplicateBudgetError(ValueError):
    """A budget for the same category and month already exists."""


def current_month_str(today: Optional[date] = None) -> str:
    """Return current month string YYYY-MM."""
    today = today or date.today()
    return today.strftime("%Y-%m")


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of a YYYY-MM month, both inclusive."""
    first = datetime.strptime(month, "%Y-%m").date()
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def compute_budget_spending(budget, expenses: Iterable) -> BudgetWithSpending:
    """Derive spending figures for ``budget`` from any iterable of expense records.

    Only expenses of the budget's user and category dated inside the budget's
    month count; everything else in ``expenses`` is ignored.
    """
    start, end = month_bounds(budget.month)
    actual_spending = sum(
        float(e.amount)
        for e in expenses
        if e.user_id == budget.user_id and e.category == budget.category and start <= e.date <= end
    )
    amount = float(budget.amount)
    percentage_used = actual_spending / amount * 100 if amount > 0 else 0.0

    return BudgetWithSpending(
        id=budget.id,
        user_id=budget.user_id,
        amount=amount,
        category=budget.category,
        month=budget.month,
        actual_spending=actual_spending,
        remaining=amount - actual_spending,
        percentage_used=percentage_used,
        is_over_budget=actual_spending > amount,
    )


def fetch_budgets(db: Session, user_id: int, month: Optional[str] = None) -> List[BudgetWithSpending]:
    target_month = validate_month(month or current_month_str())
    start, end = month_bounds(target_month)
    budgets = (
        db.query(Budget)
        .filter(Budget.user_id == user_id, Budget.month == target_month)
        .order_by(Budget.category)
        .all()
    )
    if not budgets:
        return []

    month_expenses = (
        db.query(Expense)
        .filter(Expense.user_id == user_id, Expense.date >= start, Expense.date <= end)
        .all()
    )
    return [compute_budget_spending(b, month_expenses) for b in budgets]


def get_budget(db: Session, user_id: int, budget_id: int) -> Budget:
    budget = db.query(Budget).filter(Budget.id == budget_id, Budget.user_id == user_id).first()
    if budget is None:
        raise NotFoundError("Budget not found")
    return budget


def _ensure_unique(db: Session, user_id: int, category: str, month: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Budget).filter(
        Budget.user_id == user_id, Budget.category == category, Budget.month == month
    )
    if exclude_id is not None:
        query = query.filter(Budget.id != exclude_id)
    if query.first():
        raise DuplicateBudgetError(f"A {category} budget for {month} already exists")


def create_budget(db: Session, user_id: int, payload: BudgetCreate) -> Budget:
    _ensure_unique(db, user_id, payload.category, payload.month)
    budget = Budget(user_id=user_id, **payload.model_dump())
    db.add(budget)
    db.commit()
    db.refresh(budget)
    logger.info("User %s created %s budget for %s", user_id, budget.category, budget.month)
    return budget


def update_budget(db: Session, user_id: int, budget_id: int, payload: BudgetUpdate) -> Budget:
    budget = get_budget(db, user_id, budget_id)
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    _ensure_unique(
        db,
        user_id,
        changes.get("category", budget.category),
        changes.get("month", budget.month),
        exclude_id=budget.id,
    )
    for field, value in changes.items():
        setattr(budget, field, value)
    db.commit()
    db.refresh(budget)
    return budget


def delete_budget(db: Session, user_id: int, budget_id: int) -> None:
    budget = get_budget(db, user_id, budget_id)
    # Alerts outlive their budget
    db.query(BudgetAlert).filter(BudgetAlert.budget_id == budget.id).update(
        {BudgetAlert.budget_id: None}, synchronize_session=False
    )
    db.delete(budget)
    db.commit()
    logger.info("User %s deleted budget %s", user_id, budget_id)
