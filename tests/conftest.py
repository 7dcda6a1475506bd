"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from talentdesk.api.main import create_app
from talentdesk.core.config import Settings
from talentdesk.db.base import Base
from talentdesk.services.notifications import NotificationCenter
from talentdesk.services.role_store import SqlRoleStore, SqlUserStore


CURRENT_USER_ID = "current-user-id"


@pytest.fixture
def engine():
    """In-memory SQLite database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Session for arranging data directly; committed so stores can see it."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return NotificationCenter()


@pytest.fixture
def role_store(session_factory, notifier):
    return SqlRoleStore(session_factory, notifier)


@pytest.fixture
def user_store(session_factory, notifier):
    return SqlUserStore(session_factory, notifier)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        current_user_id=CURRENT_USER_ID,
        create_tables=True,
        seed_defaults=True,
        log_to_file=False,
    )


@pytest.fixture
def app(settings, engine, session_factory):
    return create_app(settings, engine=engine, session_factory=session_factory)


@pytest.fixture
def client(app):
    """Test client with startup run: default roles seeded, current user is Admin."""
    with TestClient(app) as test_client:
        yield test_client
