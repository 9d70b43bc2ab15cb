from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, Budget, Expense, User, get_db


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    # Hash is never checked by the repository-level tests
    u = User(email="alice@example.com", password_hash="x")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def other_user(db):
    u = User(email="bob@example.com", password_hash="x")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def make_expense(db):
    def _make(user_id, amount, category="Food & Dining", on=date(2024, 3, 10), method="Cash", description=None):
        e = Expense(
            user_id=user_id,
            amount=amount,
            category=category,
            date=on,
            payment_method=method,
            description=description,
        )
        db.add(e)
        db.commit()
        db.refresh(e)
        return e

    return _make


@pytest.fixture
def make_budget(db):
    def _make(user_id, amount, category="Food & Dining", month="2024-03"):
        b = Budget(user_id=user_id, amount=amount, category=category, month=month)
        db.add(b)
        db.commit()
        db.refresh(b)
        return b

    return _make


@pytest.fixture
def client(session_factory):
    from api_server import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
