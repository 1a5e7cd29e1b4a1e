"""
Pytest configuration and fixtures.

Provides:
- An in-memory SQLite database shared by the app and the test (StaticPool)
- ``client``: TestClient whose ``get_db`` yields sessions on that database
- ``fallback_client``: TestClient whose ``get_db`` yields None (no database configured)
- Small factories for seeding rows directly

Usage:
    pytest tests/ -v
"""

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fcm_hub.db import Base, enable_sqlite_savepoints, get_db
from fcm_hub.limiter import limiter
from fcm_hub.main import app
from fcm_hub.models.models import Project, User


# Rate limits are exercised separately; the in-memory counters would otherwise
# leak between tests that share the "testclient" address.
limiter.enabled = False


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test, with SAVEPOINT and FK support."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fallback_client() -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(session_factory) -> Callable[..., User]:
    """Insert a user and return it detached (ids readable after close)."""
    counter = {"n": 0}

    def _make(**overrides) -> User:
        counter["n"] += 1
        values = {
            "username": f"user{counter['n']}",
            "password": "secret",
            "password_hash": "secret",
            "full_name": f"User {counter['n']}",
            "position": "Engineer",
        }
        values.update(overrides)
        with session_factory() as db:
            user = User(**values)
            db.add(user)
            db.commit()
            return user

    return _make


@pytest.fixture
def make_project(session_factory) -> Callable[..., Project]:
    def _make(**overrides) -> Project:
        values = {"project_name": "Warehouse Roofing", "client_name": "ACME Corp"}
        values.update(overrides)
        with session_factory() as db:
            project = Project(**values)
            db.add(project)
            db.commit()
            return project

    return _make


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    """Identity headers the frontend sends for a logged-in user."""

    def _headers(user: User) -> dict:
        return {"x-user-id": str(user.id), "x-username": user.username}

    return _headers
