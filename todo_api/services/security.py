"""Password hashing and token issuance."""

import logging
import re
import secrets
import uuid
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from todo_api.config import Settings
from todo_api.models.refresh_token import RefreshToken
from todo_api.models.user import User
from todo_api.services.stores import RefreshTokenStore, refresh_token_expiry

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"  # noqa: S105

# secrets.token_urlsafe(32) always yields 43 url-safe base64 characters
REFRESH_TOKEN_BYTES = 32
REFRESH_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{43}$")


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int):
        self.rounds = rounds
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        # Hash of a random secret no password matches, at the same work factor as real hashes
        self.dummy_hash = self.hash(secrets.token_urlsafe(32))

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self.context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash.

        A malformed or unrecognised hash counts as a mismatch.
        """
        try:
            return self.context.verify(password, password_hash)
        except (ValueError, TypeError):
            return False


@lru_cache
def get_password_hasher(rounds: int) -> PasswordHasher:
    """Get a shared hasher for the given work factor."""
    return PasswordHasher(rounds)


def verify_credentials(hasher: PasswordHasher, user: User | None, password: str) -> bool:
    """Check a login attempt in constant shape.

    The verify primitive runs exactly once whether or not the user exists, so
    "unknown email" and "wrong password" take the same time.
    """
    password_hash = user.password_hash if user is not None else hasher.dummy_hash
    password_ok = hasher.verify(password, password_hash)
    return user is not None and password_ok


def is_refresh_token_format(token: str) -> bool:
    """Check the lexical shape of a refresh token before any store lookup."""
    return bool(REFRESH_TOKEN_PATTERN.match(token))


class TokenIssuer:
    """Mints signed access tokens and opaque refresh tokens."""

    def __init__(self, settings: Settings, refresh_tokens: RefreshTokenStore | None = None):
        self.settings = settings
        self.refresh_tokens = refresh_tokens

    def issue_access_token(self, user_id: int, email: str) -> str:
        """Create a signed, stateless JWT access token."""
        now = datetime.now(UTC)
        claims = {
            "sub": str(user_id),
            "email": email,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + timedelta(minutes=self.settings.jwt_expiration_minutes),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def decode_access_token(self, token: str) -> dict[str, Any] | None:
        """Verify signature and expiry. Returns the claims or None."""
        try:
            payload = jwt.decode(
                token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm]
            )
        except JWTError as e:
            logger.info(f"Access token rejected: {e}")
            return None

        if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
            logger.info("Access token rejected: unexpected claims")
            return None
        return payload

    @staticmethod
    def issue_refresh_token() -> str:
        """Create an opaque, random refresh token with no embedded claims."""
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)

    def persist_refresh_token(
        self, user_id: int, token: str, ttl_days: int | None = None
    ) -> RefreshToken:
        """Stage a refresh-token row expiring ``ttl_days`` from now."""
        if self.refresh_tokens is None:
            raise RuntimeError("TokenIssuer was created without a refresh token store")
        days = ttl_days if ttl_days is not None else self.settings.refresh_token_expiration_days
        return self.refresh_tokens.insert(user_id, token, refresh_token_expiry(days))
