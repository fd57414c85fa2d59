"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from todo_api.database import Base, get_db
from todo_api.main import app
from todo_api.models.category import seed_system_categories

TEST_PASSWORD = "testpass123"  # noqa: S105


class AuthHeaders(dict):
    """Dict subclass that also stores the user and session that issued the token."""

    def __init__(
        self,
        *args,
        user_id: int | None = None,
        email: str | None = None,
        refresh_token: str | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.refresh_token = refresh_token

    @property
    def token(self) -> str:
        return self["Authorization"].removeprefix("Bearer ")


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/todo_api", "/todo_api_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
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
def system_categories(db):
    """Seed the shared system categories."""
    seed_system_categories(db)
    from todo_api.models.category import Category

    return db.query(Category).filter(Category.is_system.is_(True)).order_by(Category.sort_order).all()


@pytest.fixture
def register_user(client):
    """Factory that registers a user and returns auth headers for them."""

    def _register(email: str, password: str = TEST_PASSWORD) -> AuthHeaders:
        response = client.post("/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.json()
        data = response.json()
        return AuthHeaders(
            {"Authorization": f"Bearer {data['accessToken']}"},
            user_id=data["user"]["id"],
            email=data["user"]["email"],
            refresh_token=data["refreshToken"],
        )

    return _register


@pytest.fixture
def auth_headers(register_user):
    """Create a user and return auth headers with user info."""
    return register_user("test@example.com")


@pytest.fixture
def other_auth_headers(register_user):
    """A second, unrelated user."""
    return register_user("other@example.com")
