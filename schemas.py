"""Input and output models shared by the Streamlit forms and the REST API."""

from datetime import date as Date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from config import MAX_PASSWORD_BYTES, MIN_PASSWORD_LENGTH


def validate_month(v: str) -> str:
    try:
        datetime.strptime(v, "%Y-%m")
    except ValueError as exc:
        raise ValueError("month must be in YYYY-MM format") from exc
    if len(v) != 7:
        raise ValueError("month must be in YYYY-MM format")
    return v


def _require_text(v: str, label: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError(f"{label} is required")
    return v


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class ExpenseFilters(BaseModel):
    """Optional filters for the expense list; unset fields are ignored."""
    start_date: Optional[Date] = None
    end_date: Optional[Date] = None
    category: Optional[str] = None
    payment_method: Optional[str] = None

    def is_active(self) -> bool:
        return any(v for v in self.model_dump().values())


class ExpenseCreate(BaseModel):
    amount: float = Field(..., ge=0.01, description="Amount must be greater than 0")
    category: str
    date: Date
    description: Optional[str] = Field(None, max_length=500)
    payment_method: str

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return _require_text(v, "Category")

    @field_validator("payment_method")
    @classmethod
    def validate_payment_method(cls, v: str) -> str:
        return _require_text(v, "Payment method")


class ExpenseUpdate(BaseModel):
    """Partial update; only the fields that are set are written."""
    amount: Optional[float] = Field(None, ge=0.01)
    category: Optional[str] = None
    date: Optional[Date] = None
    description: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[str] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _require_text(v, "Category")

    @field_validator("payment_method")
    @classmethod
    def validate_payment_method(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _require_text(v, "Payment method")


class ExpenseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float
    category: str
    date: Date
    description: Optional[str]
    payment_method: str
    created_at: datetime
    updated_at: datetime


class BudgetCreate(BaseModel):
    amount: float = Field(..., gt=0, description="Amount must be greater than 0")
    category: str
    month: str = Field(..., description="Month in YYYY-MM format.")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return _require_text(v, "Category")

    @field_validator("month")
    @classmethod
    def check_month(cls, v: str) -> str:
        return validate_month(v)


class BudgetUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = None
    month: Optional[str] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _require_text(v, "Category")

    @field_validator("month")
    @classmethod
    def check_month(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else validate_month(v)


class BudgetWithSpending(BaseModel):
    """A budget row plus the spending derived from the month's expenses."""
    id: Optional[int] = None
    user_id: int
    amount: float
    category: str
    month: str
    actual_spending: float
    remaining: float
    percentage_used: float
    is_over_budget: bool


class AlertRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    budget_id: Optional[int]
    alert_type: str
    message: str
    is_read: bool
    created_at: datetime


class CategoryShare(BaseModel):
    category: str
    amount: float
    percentage: float


class MonthTotal(BaseModel):
    month: str
    amount: float


class DashboardStats(BaseModel):
    total_this_month: float
    total_last_month: float
    percentage_change: float
    category_breakdown: List[CategoryShare]
    monthly_trend: List[MonthTotal]
