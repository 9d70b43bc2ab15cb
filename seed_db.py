import logging
from datetime import date

from sqlalchemy.orm import Session

from auth import hash_password
from budgets import current_month_str
from config import DEMO_EMAIL, DEMO_PASSWORD, configure_logging
from database import Budget, Expense, SessionLocal, User, init_db

logger = logging.getLogger(__name__)

SAMPLE_EXPENSES = [
    # (day, amount, category, payment method, description)
    (1, 42.50, "Food & Dining", "Credit Card", "Groceries"),
    (2, 60.00, "Transportation", "Debit Card", "Monthly transit pass"),
    (3, 85.75, "Utilities", "Bank Transfer", "Electricity bill"),
    (5, 18.20, "Food & Dining", "Cash", "Lunch"),
    (6, 120.00, "Shopping", "Credit Card", "Running shoes"),
    (7, 15.99, "Entertainment", "Digital Wallet", "Streaming subscription"),
]

SAMPLE_BUDGETS = {
    "Food & Dining": 400.0,
    "Transportation": 80.0,
    "Utilities": 100.0,
    "Shopping": 100.0,
}


def seed_demo_data(db: Session, today: date | None = None) -> User:
    """Create the demo account with sample data for the current month.

    Does nothing beyond returning the account if it already exists.
    """
    user = db.query(User).filter(User.email == DEMO_EMAIL).first()
    if user:
        logger.info("Demo user already exists. Skipping seed.")
        return user

    today = today or date.today()
    month = current_month_str(today)

    user = User(email=DEMO_EMAIL, password_hash=hash_password(DEMO_PASSWORD))
    db.add(user)
    db.flush()

    for day, amount, category, method, description in SAMPLE_EXPENSES:
        db.add(Expense(
            user_id=user.id,
            amount=amount,
            category=category,
            date=today.replace(day=min(day, today.day)),
            payment_method=method,
            description=description,
        ))
    for category, amount in SAMPLE_BUDGETS.items():
        db.add(Budget(user_id=user.id, category=category, amount=amount, month=month))

    db.commit()
    db.refresh(user)
    logger.info("Database initialized with demo user %s.", DEMO_EMAIL)
    return user


if __name__ == "__main__":
    configure_logging()
    init_db()
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
