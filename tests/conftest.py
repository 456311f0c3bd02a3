"""Root conftest for all tests.

Provides an in-memory SQLite database shared by repository, service and CLI
tests, plus small builders for plan blocks and actual sessions.
"""

from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dayplan.calendar.intervals import IntervalKind, TimeInterval
from dayplan.db.models import Base

TEST_DATE = date(2025, 2, 17)


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite engine with the full schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def use_test_database(monkeypatch, db_engine, session_factory):
    """Point dayplan.db.session at the in-memory database (for CLI tests)."""
    import dayplan.db.session as db_session_module

    monkeypatch.setattr(db_session_module, "_engine", db_engine)
    monkeypatch.setattr(db_session_module, "_SessionLocal", session_factory)
    return session_factory


def make_interval(
    start: str,
    end: str,
    label: str = "Work",
    kind: IntervalKind = IntervalKind.PLAN,
    day: date = TEST_DATE,
    task_id: int | None = None,
    interval_id: int | None = None,
) -> TimeInterval:
    """Build an interval from HH:MM strings."""
    return TimeInterval(
        date=day,
        start=time.fromisoformat(start),
        end=time.fromisoformat(end),
        label=label,
        kind=kind,
        linked_task_id=task_id,
        id=interval_id,
    )


@pytest.fixture
def plan():
    def _plan(start: str, end: str, label: str = "Planned Work", **kwargs) -> TimeInterval:
        return make_interval(start, end, label, kind=IntervalKind.PLAN, **kwargs)

    return _plan


@pytest.fixture
def actual():
    def _actual(start: str, end: str, label: str = "Actual Work", **kwargs) -> TimeInterval:
        return make_interval(start, end, label, kind=IntervalKind.ACTUAL, **kwargs)

    return _actual
