"""API endpoint tests."""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from todo_api.models.user import User
from todo_api.services.stores import UserStore


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_user(client):
    """Test user registration."""
    response = client.post(
        "/auth/register",
        json={"email": "newuser@example.com", "password": "password123"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["accessToken"]
    assert data["refreshToken"]
    assert data["user"]["email"] == "newuser@example.com"
    assert "password_hash" not in data["user"]


def test_register_duplicate_email(client, auth_headers, db):
    """Test registration with duplicate email fails and creates no user."""
    response = client.post(
        "/auth/register",
        json={"email": auth_headers.email, "password": "password123"},
    )
    assert response.status_code == 409
    assert response.json() == {"error": "conflict", "message": "Email already exists"}
    assert db.query(User).count() == 1


def test_register_duplicate_email_differs_only_in_case(client, auth_headers, db):
    response = client.post(
        "/auth/register",
        json={"email": "  TEST@Example.com ", "password": "password123"},
    )
    assert response.status_code == 409
    assert db.query(User).count() == 1


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["accessToken"]
    assert data["user"]["id"] == auth_headers.user_id


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post(
        "/auth/login", json={"email": auth_headers.email, "password": "wrongpass1"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized", "message": "Invalid credentials"}


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email
    assert response.json()["id"] == auth_headers.user_id


def test_unauthorized_access(client):
    """Test that protected endpoints require a bearer token."""
    for method, path in [
        ("get", "/todos"),
        ("post", "/todos"),
        ("get", "/todos/1"),
        ("put", "/todos/1"),
        ("delete", "/todos/1"),
        ("get", "/categories"),
        ("get", "/categories/stats"),
        ("post", "/auth/logout"),
        ("get", "/auth/me"),
    ]:
        response = client.request(method, path)
        assert response.status_code == 401, path
        assert response.json() == {
            "error": "unauthorized",
            "message": "Authorization header required",
        }
        assert response.headers["www-authenticate"] == "Bearer"


def test_full_session_flow(client):
    """Register, use the API, refresh, then log out."""
    register = client.post(
        "/auth/register", json={"email": "flow@example.com", "password": "flowpass1"}
    )
    tokens = register.json()
    headers = {"Authorization": f"Bearer {tokens['accessToken']}"}

    created = client.post("/todos", headers=headers, json={"title": "Write tests"})
    assert created.status_code == 201

    refreshed = client.post("/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert refreshed.status_code == 200
    new_headers = {"Authorization": f"Bearer {refreshed.json()['accessToken']}"}

    listed = client.get("/todos", headers=new_headers)
    assert [todo["title"] for todo in listed.json()["todos"]] == ["Write tests"]

    logout = client.post(
        "/auth/logout",
        headers=new_headers,
        json={"refreshToken": refreshed.json()["refreshToken"]},
    )
    assert logout.status_code == 200
    assert logout.json() == {"message": "Logged out successfully"}

    assert client.get("/todos", headers=new_headers).status_code == 401
    assert (
        client.post(
            "/auth/refresh", json={"refreshToken": refreshed.json()["refreshToken"]}
        ).status_code
        == 401
    )


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "message": "Not found"}


def test_database_error_returns_generic_500(client):
    """Storage failures are logged and hidden behind a generic message."""
    failure = OperationalError("SELECT 1", {}, Exception("connection refused"))
    with patch.object(UserStore, "find_by_email", side_effect=failure):
        response = client.post(
            "/auth/login", json={"email": "someone@example.com", "password": "password123"}
        )

    assert response.status_code == 500
    assert response.json() == {"error": "server_error", "message": "Internal server error"}
    assert "connection refused" not in response.text
