"""Pytest configuration and fixtures."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from config.settings import Settings
from schemas.exercise import ExerciseRecord
from tests.fakes import FakeUserStore


@pytest.fixture
def store():
    """Empty in-memory user store."""
    return FakeUserStore()


@pytest.fixture
def app(store):
    """Application wired to the in-memory store."""
    settings = Settings(_env_file=None)
    return create_app(settings=settings, user_store=store)


@pytest.fixture
def client(app):
    """Test client that does not open a MongoDB connection."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_log():
    """Unordered log with distinct dates."""
    return [
        ExerciseRecord(description="swim", duration=45, date=date(2024, 3, 10)),
        ExerciseRecord(description="run", duration=30, date=date(2024, 1, 5)),
        ExerciseRecord(description="bike", duration=60, date=date(2024, 2, 20)),
        ExerciseRecord(description="row", duration=20, date=date(2024, 4, 1)),
    ]
