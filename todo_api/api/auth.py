"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from todo_api.api.dependencies import get_auth_service, get_current_user
from todo_api.schemas.auth import (
    AuthResponse,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    TokenPair,
    UserLogin,
    UserRegister,
    UserResponse,
)
from todo_api.services.auth import AuthenticatedUser, AuthService, IssuedSession

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(session: IssuedSession) -> AuthResponse:
    return AuthResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user=UserResponse.model_validate(session.user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    session = auth_service.register(user_data.email, user_data.password)
    return _auth_response(session)


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    session = auth_service.login(credentials.email, credentials.password)
    return _auth_response(session)


@router.post("/refresh", response_model=TokenPair)
def refresh(
    payload: RefreshRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Exchange a refresh token for new tokens. The old refresh token stops working."""
    session = auth_service.refresh(payload.refresh_token)
    return TokenPair(access_token=session.access_token, refresh_token=session.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    payload: LogoutRequest | None = None,
):
    """Revoke the access token and, if given, one of the caller's refresh tokens."""
    refresh_token = payload.refresh_token if payload else None
    auth_service.logout(current_user, refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Get current user information."""
    return auth_service.current_user(current_user)
