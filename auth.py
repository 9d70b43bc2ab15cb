"""Email/password accounts backed by bcrypt hashes in the users table."""

import logging
import time
from typing import List, Optional

import bcrypt
from sqlalchemy.orm import Session

from config import FAILED_LOGIN_WINDOW_SECONDS, LOGIN_LOCK_SECONDS, MAX_FAILED_LOGINS, MAX_PASSWORD_BYTES
from database import User
from schemas import SignUpRequest

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Sign-up or sign-in was refused."""


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    # Sign-up never stores such a password
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def sign_up(db: Session, email: str, password: str) -> User:
    """Create an account. Raises pydantic's ValidationError on bad input."""
    payload = SignUpRequest(email=_normalize_email(email), password=password)
    if db.query(User).filter(User.email == payload.email).first():
        raise AuthError("An account with this email already exists")

    user = User(email=payload.email, password_hash=hash_password(payload.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created account %s", user.id)
    return user


def sign_in(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == _normalize_email(email)).first()
    if user is None or not verify_password(password or "", user.password_hash):
        logger.warning("Failed sign-in attempt for %s", _normalize_email(email))
        raise AuthError("Invalid credentials")
    return user


class LoginThrottle:
    """Locks sign-in for a while after repeated failures.

    Keeps failure timestamps from the last ``window`` seconds; once
    ``max_failures`` are recorded the throttle stays locked for ``lock_seconds``.
    """

    def __init__(
        self,
        max_failures: int = MAX_FAILED_LOGINS,
        window: int = FAILED_LOGIN_WINDOW_SECONDS,
        lock_seconds: int = LOGIN_LOCK_SECONDS,
    ):
        self.max_failures = max_failures
        self.window = window
        self.lock_seconds = lock_seconds
        self.failed_attempts: List[float] = []
        self.lock_until: Optional[float] = None

    def seconds_locked(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        if self.lock_until and now < self.lock_until:
            return int(self.lock_until - now)
        return 0

    def record_failure(self, now: Optional[float] = None) -> None:
        now = time.time() if now is None else now
        # Prune stale attempts
        self.failed_attempts = [t for t in self.failed_attempts if now - t < self.window]
        self.failed_attempts.append(now)
        if len(self.failed_attempts) >= self.max_failures:
            self.lock_until = now + self.lock_seconds

    def record_success(self) -> None:
        self.failed_attempts = []
        self.lock_until = None
