"""Tests for bearer-token authentication."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from todo_api.config import Settings
from todo_api.services.auth import (
    AUTH_HEADER_REQUIRED,
    INVALID_AUTH_FORMAT,
    INVALID_TOKEN,
    Authenticator,
)
from todo_api.services.errors import AuthenticationError
from todo_api.services.security import TokenIssuer
from todo_api.services.stores import TokenBlacklistStore, utcnow

SECRET = "unit-test-secret"  # noqa: S105


@pytest.fixture
def settings():
    return Settings(jwt_secret=SECRET)


@pytest.fixture
def issuer(settings):
    return TokenIssuer(settings)


@pytest.fixture
def authenticator(issuer, db):
    return Authenticator(issuer, TokenBlacklistStore(db))


def _expect_failure(authenticator, header, message):
    with pytest.raises(AuthenticationError) as exc_info:
        authenticator.authenticate(header)
    assert exc_info.value.message == message
    assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


def test_valid_token(authenticator, issuer):
    token = issuer.issue_access_token(7, "seven@example.com")
    user = authenticator.authenticate(f"Bearer {token}")
    assert user.user_id == 7
    assert user.email == "seven@example.com"
    assert user.token == token
    assert user.expires_at > datetime.now(UTC)


def test_scheme_is_case_insensitive(authenticator, issuer):
    token = issuer.issue_access_token(7, "seven@example.com")
    assert authenticator.authenticate(f"bearer {token}").user_id == 7


@pytest.mark.parametrize("header", [None, ""])
def test_missing_header(authenticator, header):
    _expect_failure(authenticator, header, AUTH_HEADER_REQUIRED)


@pytest.mark.parametrize("header", ["Bearer", "Bearer ", "Basic abc", "Token abc", "Bearer a b"])
def test_bad_header_format(authenticator, header):
    _expect_failure(authenticator, header, INVALID_AUTH_FORMAT)


def test_garbage_token(authenticator):
    _expect_failure(authenticator, "Bearer not.a.jwt", INVALID_TOKEN)


def test_wrong_signature(authenticator):
    forged = TokenIssuer(Settings(jwt_secret="someone-else")).issue_access_token(1, "a@b.co")
    _expect_failure(authenticator, f"Bearer {forged}", INVALID_TOKEN)


def test_expired_token(authenticator):
    expired = TokenIssuer(Settings(jwt_secret=SECRET, jwt_expiration_minutes=-1))
    token = expired.issue_access_token(1, "a@b.co")
    _expect_failure(authenticator, f"Bearer {token}", INVALID_TOKEN)


def test_token_with_wrong_type(authenticator):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "1", "type": "refresh", "iat": now, "exp": now + timedelta(hours=1)},
        SECRET,
        algorithm="HS256",
    )
    _expect_failure(authenticator, f"Bearer {token}", INVALID_TOKEN)


def test_token_with_non_numeric_subject(authenticator):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "abc", "type": "access", "iat": now, "exp": now + timedelta(hours=1)},
        SECRET,
        algorithm="HS256",
    )
    _expect_failure(authenticator, f"Bearer {token}", INVALID_TOKEN)


def test_blacklisted_token(authenticator, issuer, db):
    token = issuer.issue_access_token(1, "a@b.co")
    TokenBlacklistStore(db).insert(token, utcnow() + timedelta(days=1))
    db.commit()
    _expect_failure(authenticator, f"Bearer {token}", INVALID_TOKEN)


def test_blacklist_entry_past_its_expiry_still_rejects(authenticator, issuer, db):
    token = issuer.issue_access_token(1, "a@b.co")
    TokenBlacklistStore(db).insert(token, utcnow() - timedelta(days=1))
    db.commit()
    _expect_failure(authenticator, f"Bearer {token}", INVALID_TOKEN)
