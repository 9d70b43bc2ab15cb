import logging
from typing import List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from database import Expense, NotFoundError
from schemas import ExpenseCreate, ExpenseFilters, ExpenseUpdate

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["ID", "Date", "Amount", "Category", "Payment Method", "Description"]


def list_expenses(db: Session, user_id: int, filters: Optional[ExpenseFilters] = None) -> List[Expense]:
    """Return the user's expenses, newest first, narrowed by ``filters``."""
    query = db.query(Expense).filter(Expense.user_id == user_id)

    if filters:
        if filters.start_date:
            query = query.filter(Expense.date >= filters.start_date)
        if filters.end_date:
            query = query.filter(Expense.date <= filters.end_date)
        if filters.category:
            query = query.filter(Expense.category == filters.category)
        if filters.payment_method:
            query = query.filter(Expense.payment_method == filters.payment_method)

    return query.order_by(Expense.date.desc(), Expense.id.desc()).all()


def get_expense(db: Session, user_id: int, expense_id: int) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id, Expense.user_id == user_id).first()
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


def add_expense(db: Session, user_id: int, payload: ExpenseCreate) -> Expense:
    expense = Expense(user_id=user_id, **payload.model_dump())
    db.add(expense)
    db.commit()
    db.refresh(expense)
    logger.info("User %s added expense %s (%s %.2f)", user_id, expense.id, expense.category, expense.amount)
    return expense


def update_expense(db: Session, user_id: int, expense_id: int, payload: ExpenseUpdate) -> Expense:
    expense = get_expense(db, user_id, expense_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field != "description":
            continue
        setattr(expense, field, value)
    db.commit()
    db.refresh(expense)
    return expense


def delete_expense(db: Session, user_id: int, expense_id: int) -> None:
    expense = get_expense(db, user_id, expense_id)
    db.delete(expense)
    db.commit()
    logger.info("User %s deleted expense %s", user_id, expense_id)


def expenses_to_frame(expenses: List[Expense]) -> pd.DataFrame:
    if not expenses:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "ID": e.id,
                "Date": e.date,
                "Amount": float(e.amount),
                "Category": e.category,
                "Payment Method": e.payment_method,
                "Description": e.description or "",
            }
            for e in expenses
        ]
    )
    df["Date"] = pd.to_datetime(df["Date"])
    return df
