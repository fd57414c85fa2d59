"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from todo_api.config import Settings, get_settings
from todo_api.database import get_db
from todo_api.services.auth import AuthenticatedUser, AuthService


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db, settings)


def get_current_user(
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthenticatedUser:
    """Get the current authenticated user from the bearer token."""
    return auth_service.authenticate(authorization)
