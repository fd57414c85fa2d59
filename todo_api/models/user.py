"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from todo_api.database import Base
from todo_api.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Relationships
    refresh_tokens = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    todos = relationship("Todo", back_populates="user", cascade="all, delete-orphan")
