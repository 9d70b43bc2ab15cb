import logging
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Default to local SQLite, but allow override for a hosted Postgres
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///finance_tracker.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEMO_EMAIL = os.getenv("DEMO_EMAIL", "demo@example.com")
DEMO_PASSWORD = os.getenv("DEMO_PASSWORD", "demo1234")

EXPENSE_CATEGORIES = [
    "Food & Dining",
    "Transportation",
    "Utilities",
    "Entertainment",
    "Healthcare",
    "Shopping",
    "Education",
    "Travel",
    "Insurance",
    "Other",
]

PAYMENT_METHODS = [
    "Cash",
    "Credit Card",
    "Debit Card",
    "Digital Wallet",
    "Bank Transfer",
    "Check",
]

ALERT_THRESHOLD = "threshold"
ALERT_OVER_BUDGET = "over_budget"
ALERT_MONTHLY_SUMMARY = "monthly_summary"

# Percent of a budget used
WARNING_THRESHOLD = 75.0
CRITICAL_THRESHOLD = 90.0

ALERT_HISTORY_LIMIT = 50
TREND_MONTHS = 6

MIN_PASSWORD_LENGTH = 6
# bcrypt only hashes the first 72 bytes
MAX_PASSWORD_BYTES = 72
MAX_FAILED_LOGINS = 5
FAILED_LOGIN_WINDOW_SECONDS = 300
LOGIN_LOCK_SECONDS = 60


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
