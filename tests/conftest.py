"""
Pytest configuration and shared fixtures.

Provides:
- anyio backend selection (asyncio only)
- An in-memory users collection and a UserService bound to it
- A seeded collection with five users created one minute apart
- FastAPI TestClient with the users collection dependency overridden
"""

import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set environment before importing app; settings are read at import time
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("OBSERVABILITY_STRUCTURED_LOGS", "false")

from app.core.db import get_users_collection  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.user_service import UserService  # noqa: E402
from tests.fakes import FakeCollection  # noqa: E402

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

SEED_USERS: list[dict[str, Any]] = [
    {"name": "Ada", "email": "ada@example.com", "age": 36},
    {"name": "Grace", "email": "grace@example.com", "age": 45},
    {"name": "Linus", "email": "linus@example.com", "age": 21},
    {"name": "Margaret", "email": "margaret@example.com", "age": 33},
    {"name": "Alan", "email": "alan@example.com", "age": 41},
]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def users_collection() -> FakeCollection:
    """Empty in-memory users collection."""
    return FakeCollection()


@pytest.fixture
def seeded_users(users_collection: FakeCollection) -> FakeCollection:
    """Collection holding SEED_USERS, createdAt increasing in list order."""
    for offset, user in enumerate(SEED_USERS):
        created = BASE_TIME + timedelta(minutes=offset)
        users_collection._store({**user, "createdAt": created, "updatedAt": created})
    return users_collection


@pytest.fixture
def user_service(users_collection: FakeCollection) -> UserService:
    return UserService(users_collection)


@pytest.fixture
def client(users_collection: FakeCollection):
    """TestClient whose requests read and write the in-memory collection."""
    app = create_app()
    app.dependency_overrides[get_users_collection] = lambda: users_collection
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
