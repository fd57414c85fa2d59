"""Persistence helpers for users, refresh tokens and the access-token blacklist.

The stores only stage changes on the session. Committing is left to the caller
so that multi-step flows (e.g. refresh-token rotation) run in one transaction.
"""

from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from todo_api.models.refresh_token import RefreshToken
from todo_api.models.token_blacklist import TokenBlacklist
from todo_api.models.user import User


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class UserStore:
    """Lookup and creation of user records."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def insert(self, email: str, password_hash: str) -> User:
        """Stage a new user and flush to obtain its id.

        Raises IntegrityError if the email is already taken.
        """
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        self.db.flush()
        return user


class RefreshTokenStore:
    """Refresh-token rows keyed by their opaque token value."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_token(self, token: str) -> RefreshToken | None:
        return self.db.query(RefreshToken).filter(RefreshToken.token == token).first()

    def insert(self, user_id: int, token: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(user_id=user_id, token=token, expires_at=expires_at)
        self.db.add(record)
        self.db.flush()
        return record

    def delete_by_token(self, token: str) -> int:
        """Delete a token row. Returns the number of rows removed (0 or 1)."""
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .delete(synchronize_session=False)
        )

    def delete_by_token_and_user(self, token: str, user_id: int) -> int:
        """Delete a token row only if it belongs to ``user_id``."""
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.token == token, RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def count_for_user(self, user_id: int) -> int:
        return self.db.query(RefreshToken).filter(RefreshToken.user_id == user_id).count()

    def purge_expired(self, now: datetime | None = None) -> int:
        cutoff = now or utcnow()
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.expires_at < cutoff)
            .delete(synchronize_session=False)
        )


class TokenBlacklistStore:
    """Revoked access tokens.

    Existence of a row means the token is rejected, whether or not its
    ``expires_at`` has already passed.
    """

    def __init__(self, db: Session):
        self.db = db

    def exists(self, token: str) -> bool:
        return (
            self.db.query(TokenBlacklist.id).filter(TokenBlacklist.token == token).first()
            is not None
        )

    def insert(self, token: str, expires_at: datetime) -> TokenBlacklist:
        """Stage a blacklist entry.

        Raises IntegrityError if the token is already blacklisted.
        """
        entry = TokenBlacklist(token=token, expires_at=expires_at)
        self.db.add(entry)
        self.db.flush()
        return entry

    def count(self) -> int:
        return self.db.query(TokenBlacklist).count()

    def purge_expired(self, now: datetime | None = None) -> int:
        cutoff = now or utcnow()
        return (
            self.db.query(TokenBlacklist)
            .filter(TokenBlacklist.expires_at < cutoff)
            .delete(synchronize_session=False)
        )


def refresh_token_expiry(ttl_days: int, now: datetime | None = None) -> datetime:
    """Expiry timestamp for a refresh token issued ``now``."""
    return (now or utcnow()) + timedelta(days=ttl_days)
