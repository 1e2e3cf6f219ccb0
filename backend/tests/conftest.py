# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from userservice.config import Settings
from userservice.main import create_app


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", LOG_LEVEL="DEBUG")


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def app(settings, engine):
    return create_app(settings=settings, engine=engine)


@pytest.fixture
def client(app):
    # Entering the client runs startup, which creates the table
    with TestClient(app) as client:
        yield client


@pytest.fixture
def broken_engine(tmp_path):
    """An engine whose every connection attempt fails."""
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'users.db'}")
    yield engine
    engine.dispose()

