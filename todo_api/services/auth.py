"""Authentication service: request authentication and the session lifecycle.

Sessions are a pair of tokens. The access token is a stateless JWT checked on
every request together with the blacklist; the refresh token is an opaque
database-backed key that is rotated (consumed and replaced) on every refresh.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todo_api.config import Settings
from todo_api.models.user import User
from todo_api.services.errors import AuthenticationError, ConflictError, ValidationError
from todo_api.services.security import (
    TokenIssuer,
    get_password_hasher,
    is_refresh_token_format,
    verify_credentials,
)
from todo_api.services.stores import (
    RefreshTokenStore,
    TokenBlacklistStore,
    UserStore,
    as_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

AUTH_HEADER_REQUIRED = "Authorization header required"
INVALID_AUTH_FORMAT = "Invalid authorization format"
INVALID_TOKEN = "Invalid or expired token"  # noqa: S105
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"  # noqa: S105
EXPIRED_REFRESH_TOKEN = "Refresh token expired"  # noqa: S105


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity of the caller after a successful token check."""

    user_id: int
    email: str
    token: str = field(repr=False, default="")
    expires_at: datetime | None = None


@dataclass
class IssuedSession:
    """Tokens handed out by register, login and refresh."""

    access_token: str
    refresh_token: str = field(repr=False)
    user: User | None = None


class Authenticator:
    """Turns an Authorization header into an AuthenticatedUser.

    Every failure after the header has the right shape produces the same
    message, so callers cannot tell a bad signature from a revoked token.
    """

    def __init__(self, issuer: TokenIssuer, blacklist: TokenBlacklistStore):
        self.issuer = issuer
        self.blacklist = blacklist

    @staticmethod
    def extract_bearer_token(authorization: str | None) -> str:
        if not authorization:
            raise AuthenticationError(AUTH_HEADER_REQUIRED)

        scheme, _, token = authorization.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token or " " in token:
            raise AuthenticationError(INVALID_AUTH_FORMAT)
        return token

    def authenticate_token(self, token: str) -> AuthenticatedUser:
        payload = self.issuer.decode_access_token(token)
        if payload is None:
            raise AuthenticationError(INVALID_TOKEN)

        if self.blacklist.exists(token):
            logger.info("Access token rejected: blacklisted")
            raise AuthenticationError(INVALID_TOKEN)

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError(INVALID_TOKEN) from None

        return AuthenticatedUser(
            user_id=user_id,
            email=payload.get("email", ""),
            token=token,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )

    def authenticate(self, authorization: str | None) -> AuthenticatedUser:
        """Authenticate a request from its Authorization header value."""
        return self.authenticate_token(self.extract_bearer_token(authorization))


class AuthService:
    """Register, login, refresh and logout flows."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.users = UserStore(db)
        self.refresh_tokens = RefreshTokenStore(db)
        self.blacklist = TokenBlacklistStore(db)
        self.hasher = get_password_hasher(settings.bcrypt_rounds)
        self.issuer = TokenIssuer(settings, self.refresh_tokens)
        self.authenticator = Authenticator(self.issuer, self.blacklist)

    def _start_session(self, user: User) -> IssuedSession:
        """Issue an access token and stage a new refresh-token row for ``user``."""
        access_token = self.issuer.issue_access_token(user.id, user.email)
        refresh_token = self.issuer.issue_refresh_token()
        self.issuer.persist_refresh_token(user.id, refresh_token)
        return IssuedSession(access_token=access_token, refresh_token=refresh_token, user=user)

    def register(self, email: str, password: str) -> IssuedSession:
        """Create a user and start their first session.

        ``email`` must already be validated and normalized.
        """
        if self.users.find_by_email(email) is not None:
            raise ConflictError("Email already exists")

        password_hash = self.hasher.hash(password)
        try:
            user = self.users.insert(email, password_hash)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            raise ConflictError("Email already exists") from None

        session = self._start_session(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return session

    def login(self, email: str, password: str) -> IssuedSession:
        """Check credentials and start a new session."""
        user = self.users.find_by_email(email)
        if not verify_credentials(self.hasher, user, password):
            logger.info("Login failed")
            raise AuthenticationError(INVALID_CREDENTIALS)

        session = self._start_session(user)
        self.db.commit()
        logger.info(f"Login successful for user {user.id}")
        return session

    def refresh(self, refresh_token: str) -> IssuedSession:
        """Exchange a refresh token for a new access token and a new refresh token.

        The presented token is consumed. Delete and insert share one transaction
        and the insert only happens if the delete removed the row, so a token
        raced by two concurrent calls is honoured at most once.
        """
        if not is_refresh_token_format(refresh_token):
            raise ValidationError("refreshToken has an invalid format")

        record = self.refresh_tokens.find_by_token(refresh_token)
        if record is None:
            logger.info("Refresh token not found")
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        if as_utc(record.expires_at) < utcnow():
            # The row is gone after the commit, so read what we log first
            user_id = record.user_id
            self.refresh_tokens.delete_by_token(refresh_token)
            self.db.commit()
            logger.info(f"Expired refresh token removed for user {user_id}")
            raise AuthenticationError(EXPIRED_REFRESH_TOKEN)

        user = self.users.find_by_id(record.user_id)
        if user is None:
            logger.warning(f"Refresh token references missing user {record.user_id}")
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        if self.refresh_tokens.delete_by_token(refresh_token) != 1:
            self.db.rollback()
            logger.warning(f"Refresh token for user {user.id} was consumed concurrently")
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        session = self._start_session(user)
        self.db.commit()
        logger.info(f"Tokens rotated for user {user.id}")
        return session

    def logout(self, current: AuthenticatedUser, refresh_token: str | None = None) -> None:
        """Revoke the caller's access token and, optionally, one of their refresh tokens.

        A refresh token that does not exist or belongs to someone else is ignored.
        """
        expires_at = current.expires_at or utcnow()
        try:
            self.blacklist.insert(current.token, expires_at)
        except IntegrityError:
            # A concurrent logout with the same token got there first
            self.db.rollback()
            raise AuthenticationError(INVALID_TOKEN) from None

        if refresh_token:
            deleted = self.refresh_tokens.delete_by_token_and_user(refresh_token, current.user_id)
            logger.info(
                f"User {current.user_id} logged out, refresh tokens deleted: {deleted}"
            )
        else:
            logger.info(f"User {current.user_id} logged out")

        self.db.commit()

    def authenticate(self, authorization: str | None) -> AuthenticatedUser:
        return self.authenticator.authenticate(authorization)

    def current_user(self, current: AuthenticatedUser) -> User:
        """Load the caller's user record."""
        user = self.users.find_by_id(current.user_id)
        if user is None:
            raise AuthenticationError(INVALID_TOKEN)
        return user


def purge_expired_tokens(db: Session, now: datetime | None = None) -> dict[str, int]:
    """Delete blacklist entries and refresh tokens whose expiry has passed.

    Maintenance hook; not called on the request path.
    """
    cutoff = now or utcnow()
    removed = {
        "blacklisted_tokens": TokenBlacklistStore(db).purge_expired(cutoff),
        "refresh_tokens": RefreshTokenStore(db).purge_expired(cutoff),
    }
    db.commit()
    logger.info(f"Purged expired tokens: {removed}")
    return removed
