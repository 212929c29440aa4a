# tests/conftest.py
import asyncio
import os

import pytest

TEST_SECRET = "test-secret-with-at-least-thirty-two-bytes"

# storeapi builds its default settings at import time and requires a secret
os.environ.setdefault("JWT_SECRET", TEST_SECRET)

from fastapi.testclient import TestClient  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402

from storeapi.config import Settings  # noqa: E402
from storeapi.main import create_app  # noqa: E402


@pytest.fixture
def settings():
    return Settings(
        APP_ENV="testing",
        JWT_SECRET=TEST_SECRET,
        BCRYPT_ROUNDS=4,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def database():
    """In-memory stand-in for the MongoDB database, fresh per test."""
    return AsyncMongoMockClient()["api_store_test"]


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app):
    # entering the context runs the lifespan (services + unique indexes)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def run():
    """Run a store coroutine to completion from a sync test."""
    return asyncio.run


@pytest.fixture
def alice_headers(client):
    client.post("/users/register", json={"username": "alice", "password": "pw1"})
    r = client.post("/users/login", json={"username": "alice", "password": "pw1"})
    return {"Authorization": f"Bearer {r.json()['token']}"}
