import os

# Must be set before any app module is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"

from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.completion_log import CompletionLog
from app.models.database import Base, SessionLocal, engine
from app.models.habit import Habit
from app.models.user import User
from app.utils.jwt_utils import create_access_token


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    return TestClient(app)


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make_user(name: str = "Ada"):
        counter["n"] += 1
        user = User(name=name, email=f"{name.lower()}{counter['n']}@example.com")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_habit(db):
    def _make_habit(user, title: str = "Read", is_active: bool = True, created_at: datetime = None, **kwargs):
        habit = Habit(
            user_id=user.id,
            title=title,
            is_active=is_active,
            created_at=created_at or datetime.utcnow(),
            **kwargs,
        )
        db.add(habit)
        db.commit()
        db.refresh(habit)
        return habit

    return _make_habit


@pytest.fixture()
def log_days(db):
    def _log_days(habit, days, completed: bool = True):
        for day in days:
            db.add(CompletionLog(habit_id=habit.id, date=day, completed=completed))
        db.commit()

    return _log_days


def auth_headers(user_id) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def days_ago(today: date, *offsets):
    return [today - timedelta(days=offset) for offset in offsets]
