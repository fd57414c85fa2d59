"""Authentication schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def normalize_email(value: str) -> str:
    """Trim and lower-case an email so lookups are case-insensitive."""
    email = value.strip().lower()
    if not email:
        raise ValueError("Email cannot be empty")
    return email


def check_email_format(email: str) -> str:
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must be {EMAIL_MAX_LENGTH} characters or less")
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    local_part = email.split("@", 1)[0]
    if local_part.startswith(".") or local_part.endswith(".") or ".." in local_part:
        raise ValueError("Invalid email format")
    return email


def check_password_strength(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValueError(f"Password must be {PASSWORD_MAX_LENGTH} characters or less")
    if "\x00" in password:
        raise ValueError("Password cannot contain NUL characters")
    if not re.search(r"[a-zA-Z]", password):
        raise ValueError("Password must contain at least one letter")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one number")
    return password


class UserRegister(BaseModel):
    """User registration request."""

    model_config = ConfigDict(extra="forbid")

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email_format(normalize_email(value))

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)


class UserLogin(BaseModel):
    """User login request. Only presence is checked, not strength."""

    model_config = ConfigDict(extra="forbid")

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError("Password cannot be empty")
        return value


class RefreshRequest(BaseModel):
    """Refresh token exchange request."""

    model_config = ConfigDict(extra="forbid")

    refresh_token: str = Field(..., alias="refreshToken")

    @field_validator("refresh_token")
    @classmethod
    def validate_refresh_token(cls, value: str) -> str:
        token = value.strip()
        if not token:
            raise ValueError("refreshToken cannot be empty")
        return token


class LogoutRequest(BaseModel):
    """Optional logout body."""

    model_config = ConfigDict(extra="forbid")

    refresh_token: str | None = Field(None, alias="refreshToken")

    @field_validator("refresh_token")
    @classmethod
    def validate_refresh_token(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("refreshToken cannot be empty")
        return value.strip() if value is not None else None


class UserResponse(BaseModel):
    """Public user information. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created_at: datetime


class TokenPair(BaseModel):
    """Access and refresh tokens returned by a refresh."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")


class AuthResponse(TokenPair):
    """Authentication response with tokens and user info."""

    user: UserResponse


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
