"""REST API over the expense, budget and alert operations, served with FastAPI."""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from alerts import check_budgets_and_create_alerts, fetch_alerts, mark_alert_as_read, mark_all_alerts_as_read
from auth import AuthError, sign_in, sign_up
from budgets import (
    DuplicateBudgetError,
    compute_budget_spending,
    create_budget,
    delete_budget,
    fetch_budgets,
    month_bounds,
    update_budget,
)
from config import configure_logging
from dashboard import compute_dashboard_stats
from database import Expense, NotFoundError, User, get_db, init_db
from expenses import add_expense, delete_expense, expenses_to_frame, list_expenses, update_expense
from export import CSV_FILENAME, expenses_to_csv
from schemas import (
    AlertRead,
    BudgetCreate,
    BudgetUpdate,
    BudgetWithSpending,
    DashboardStats,
    ExpenseCreate,
    ExpenseFilters,
    ExpenseRead,
    ExpenseUpdate,
    SignUpRequest,
    validate_month,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(title="Personal Finance Tracker API", version="0.1.0", lifespan=lifespan)
security = HTTPBasic()


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(DuplicateBudgetError)
async def duplicate_budget_handler(request: Request, exc: DuplicateBudgetError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def get_current_user(credentials: HTTPBasicCredentials = Depends(security), db: Session = Depends(get_db)) -> User:
    try:
        return sign_in(db, credentials.username, credentials.password)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Basic"},
        ) from exc


class AccountResponse(BaseModel):
    id: int
    email: str


class MarkAllResponse(BaseModel):
    updated: int


@app.post("/auth/signup", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def signup(req: SignUpRequest, db: Session = Depends(get_db)):
    try:
        user = sign_up(db, req.email, req.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return AccountResponse(id=user.id, email=user.email)


# --- Expenses ---

@app.get("/expenses", response_model=List[ExpenseRead])
def get_expenses(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    payment_method: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    filters = ExpenseFilters(
        start_date=start_date, end_date=end_date, category=category, payment_method=payment_method
    )
    return list_expenses(db, user.id, filters)


@app.get("/expenses/export")
def export_expenses(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    payment_method: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    filters = ExpenseFilters(
        start_date=start_date, end_date=end_date, category=category, payment_method=payment_method
    )
    csv_text = expenses_to_csv(list_expenses(db, user.id, filters))
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@app.post("/expenses", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def post_expense(req: ExpenseCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return add_expense(db, user.id, req)


@app.put("/expenses/{expense_id}", response_model=ExpenseRead)
def put_expense(
    expense_id: int, req: ExpenseUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return update_expense(db, user.id, expense_id, req)


@app.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_expense(expense_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    delete_expense(db, user.id, expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Budgets ---

def _checked_month(month: Optional[str]) -> Optional[str]:
    if month is None:
        return None
    try:
        return validate_month(month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="month must be YYYY-MM") from exc


def _with_spending(db: Session, budget) -> BudgetWithSpending:
    start, end = month_bounds(budget.month)
    month_expenses = (
        db.query(Expense)
        .filter(Expense.user_id == budget.user_id, Expense.date >= start, Expense.date <= end)
        .all()
    )
    return compute_budget_spending(budget, month_expenses)


@app.get("/budgets", response_model=List[BudgetWithSpending])
def get_budgets(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to current month"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return fetch_budgets(db, user.id, _checked_month(month))


@app.post("/budgets", response_model=BudgetWithSpending, status_code=status.HTTP_201_CREATED)
def post_budget(req: BudgetCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _with_spending(db, create_budget(db, user.id, req))


@app.put("/budgets/{budget_id}", response_model=BudgetWithSpending)
def put_budget(
    budget_id: int, req: BudgetUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return _with_spending(db, update_budget(db, user.id, budget_id, req))


@app.delete("/budgets/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_budget(budget_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    delete_budget(db, user.id, budget_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Alerts ---

@app.get("/alerts", response_model=List[AlertRead])
def get_alerts(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return fetch_alerts(db, user.id)


@app.post("/alerts/check", response_model=List[AlertRead])
def check_alerts(
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to current month"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return check_budgets_and_create_alerts(db, fetch_budgets(db, user.id, _checked_month(month)))


@app.post("/alerts/read-all", response_model=MarkAllResponse)
def read_all_alerts(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return MarkAllResponse(updated=mark_all_alerts_as_read(db, user.id))


@app.post("/alerts/{alert_id}/read", response_model=AlertRead)
def read_alert(alert_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return mark_alert_as_read(db, user.id, alert_id)


# --- Dashboard ---

@app.get("/dashboard", response_model=DashboardStats)
def dashboard(
    today: Optional[date] = Query(None, description="Reference day, defaults to today"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    df = expenses_to_frame(list_expenses(db, user.id))
    return compute_dashboard_stats(df, today)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="0.0.0.0", port=8001, reload=True)
