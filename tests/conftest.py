"""Pytest configuration and fixtures."""

import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import recipebook.services.realtime as realtime_module
from recipebook.database import Base, create_db_engine, get_db
from recipebook.main import app


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and username."""

    def __init__(self, *args, user_id: int | None = None, username: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.username = username


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database next to the app database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").rsplit("/", 1)[0] + "/recipebook_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_db_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def session_factory():
    """Session factory for tests that need independent connections."""
    return TestingSessionLocal


@pytest.fixture(autouse=True)
def mock_redis():
    """Replace the publishing Redis client so tests never need a server."""
    mock_client = MagicMock()
    realtime_module._sync_redis = mock_client
    yield mock_client
    realtime_module._sync_redis = None


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Create the initial user, log in and return auth headers with user info."""
    response = client.post(
        "/api/v1/auth/register-initial-user",
        json={"username": "cook", "password": "testpass123"},
    )
    assert response.status_code == 201

    response = client.post(
        "/api/v1/auth/login",
        json={"username": "cook", "password": "testpass123"},
    )
    assert response.status_code == 200
    data = response.json()
    token = data["access_token"]

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"},
        user_id=data["user"]["id"],
        username=data["user"]["username"],
    )


@pytest.fixture
def catalog(client, auth_headers):
    """Create two categories and a handful of ingredients.

    Returns a dict mapping ingredient names and category names to their ids.
    """
    ids = {}
    for name in ["Bakery", "Dairy"]:
        response = client.post("/api/v1/categories", json={"name": name}, headers=auth_headers)
        assert response.status_code == 201
        ids[name] = response.json()["id"]

    for name, unit, category in [
        ("Flour", "g", "Bakery"),
        ("Eggs", "pcs", "Dairy"),
        ("Milk", "ml", "Dairy"),
        ("Salt", "g", None),
    ]:
        response = client.post(
            "/api/v1/ingredients",
            json={"name": name, "unit": unit, "category_id": ids.get(category)},
            headers=auth_headers,
        )
        assert response.status_code == 201
        ids[name] = response.json()["id"]

    return ids


@pytest.fixture
def create_recipe(client, auth_headers):
    """Factory fixture creating a recipe from {ingredient_id: amount} lines."""

    def _create(name: str, lines: dict[int, str]) -> int:
        response = client.post(
            "/api/v1/recipes",
            json={
                "name": name,
                "ingredients": [
                    {"ingredient_id": ingredient_id, "amount": amount}
                    for ingredient_id, amount in lines.items()
                ],
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        return response.json()["id"]

    return _create
