"""Category model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import Session, relationship

from todo_api.database import Base
from todo_api.models.mixins import TimestampMixin

# Shared categories available to every user (user_id is NULL)
SYSTEM_CATEGORIES = [
    {"name": "Work", "color": "#3B82F6", "icon": "📋", "sort_order": 1},
    {"name": "Personal", "color": "#10B981", "icon": "🏠", "sort_order": 2},
    {"name": "Shopping", "color": "#F59E0B", "icon": "🛒", "sort_order": 3},
    {"name": "Health", "color": "#EF4444", "icon": "💪", "sort_order": 4},
    {"name": "Learning", "color": "#8B5CF6", "icon": "📚", "sort_order": 5},
]


class Category(Base, TimestampMixin):
    """Category model for organizing todos.

    System categories have no owner and are visible to everyone; user categories
    are only visible to their owner.
    """

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    color = Column(String(7), nullable=False)
    icon = Column(String(16), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    is_system = Column(Boolean, default=False, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    # Relationships
    todos = relationship("Todo", back_populates="category")


def seed_system_categories(db: Session) -> int:
    """Insert any missing system categories. Returns the number created."""
    existing = {
        name
        for (name,) in db.query(Category.name).filter(Category.is_system.is_(True)).all()
    }
    created = 0
    for data in SYSTEM_CATEGORIES:
        if data["name"] in existing:
            continue
        db.add(Category(user_id=None, is_system=True, **data))
        created += 1
    if created:
        db.commit()
    return created
