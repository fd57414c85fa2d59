"""SQLAlchemy models."""

from todo_api.models.category import Category
from todo_api.models.refresh_token import RefreshToken
from todo_api.models.todo import Todo
from todo_api.models.token_blacklist import TokenBlacklist
from todo_api.models.user import User

__all__ = [
    "User",
    "RefreshToken",
    "TokenBlacklist",
    "Category",
    "Todo",
]
