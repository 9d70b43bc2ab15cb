import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from config import (
    ALERT_HISTORY_LIMIT,
    ALERT_OVER_BUDGET,
    ALERT_THRESHOLD,
    CRITICAL_THRESHOLD,
    WARNING_THRESHOLD,
)
from database import BudgetAlert, NotFoundError
from schemas import BudgetWithSpending

logger = logging.getLogger(__name__)


def evaluate_alerts(budget: BudgetWithSpending) -> List[Tuple[str, str]]:
    """Return the (alert type, message) pairs a budget's spending warrants."""
    warranted = []

    pct = budget.percentage_used
    if WARNING_THRESHOLD <= pct < CRITICAL_THRESHOLD:
        warranted.append(
            (ALERT_THRESHOLD, f"Warning: You've used {pct:.1f}% of your {budget.category} budget.")
        )

    if budget.actual_spending > budget.amount:
        over = budget.actual_spending - budget.amount
        warranted.append(
            (ALERT_OVER_BUDGET, f"Alert: You've exceeded your {budget.category} budget by ${over:.2f}.")
        )

    return warranted


def _has_unread(db: Session, user_id: int, budget_id: int, alert_type: str) -> bool:
    return (
        db.query(BudgetAlert.id)
        .filter(
            BudgetAlert.user_id == user_id,
            BudgetAlert.budget_id == budget_id,
            BudgetAlert.alert_type == alert_type,
            BudgetAlert.is_read.is_(False),
        )
        .first()
        is not None
    )


def check_budgets_and_create_alerts(db: Session, budgets: List[BudgetWithSpending]) -> List[BudgetAlert]:
    """Store the alerts each budget warrants unless an unread one of that type exists."""
    created = []
    for budget in budgets:
        if budget.id is None:
            continue
        for alert_type, message in evaluate_alerts(budget):
            if _has_unread(db, budget.user_id, budget.id, alert_type):
                continue
            alert = BudgetAlert(
                user_id=budget.user_id,
                budget_id=budget.id,
                alert_type=alert_type,
                message=message,
                is_read=False,
            )
            db.add(alert)
            # Visible to _has_unread for the rest of this check
            db.flush()
            created.append(alert)
            logger.info("Raised %s alert for budget %s", alert_type, budget.id)

    if created:
        db.commit()
        for alert in created:
            db.refresh(alert)
    return created


def fetch_alerts(db: Session, user_id: int, limit: int = ALERT_HISTORY_LIMIT) -> List[BudgetAlert]:
    return (
        db.query(BudgetAlert)
        .filter(BudgetAlert.user_id == user_id)
        .order_by(BudgetAlert.created_at.desc(), BudgetAlert.id.desc())
        .limit(limit)
        .all()
    )


def mark_alert_as_read(db: Session, user_id: int, alert_id: int) -> BudgetAlert:
    alert = db.query(BudgetAlert).filter(BudgetAlert.id == alert_id, BudgetAlert.user_id == user_id).first()
    if alert is None:
        raise NotFoundError("Alert not found")
    if not alert.is_read:
        alert.is_read = True
        db.commit()
        db.refresh(alert)
    return alert


def mark_all_alerts_as_read(db: Session, user_id: int) -> int:
    """Mark every unread alert of the user as read; returns how many changed."""
    count = (
        db.query(BudgetAlert)
        .filter(BudgetAlert.user_id == user_id, BudgetAlert.is_read.is_(False))
        .update({BudgetAlert.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return count
