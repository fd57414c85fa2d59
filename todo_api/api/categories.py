"""Category API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from todo_api.api.dependencies import get_current_user
from todo_api.database import get_db
from todo_api.models.category import Category
from todo_api.models.todo import Todo
from todo_api.schemas.auth import MessageResponse
from todo_api.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    CategoryStats,
    CategoryStatsResponse,
    CategoryUpdate,
    UncategorizedStats,
)
from todo_api.services.auth import AuthenticatedUser
from todo_api.services.errors import ForbiddenError
from todo_api.services.ownership import fetch_owned, scoped_query

router = APIRouter(prefix="/categories", tags=["categories"])


def get_category(db: Session, category_id: int, user: AuthenticatedUser) -> Category:
    """Get a system category or one of the user's own categories."""
    return fetch_owned(
        db, Category, category_id, user.user_id, include_shared=True, detail="Category not found"
    )


def _completed_sum():
    return func.coalesce(func.sum(case((Todo.completed == True, 1), else_=0)), 0)  # noqa: E712


@router.get("", response_model=CategoryListResponse)
def get_categories(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get system categories followed by the user's own categories."""
    categories = (
        scoped_query(db, Category, current_user.user_id, include_shared=True)
        .order_by(Category.is_system.desc(), Category.sort_order, Category.name)
        .all()
    )
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(category) for category in categories]
    )


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new category for the user."""
    category = Category(
        name=category_data.name,
        color=category_data.color,
        icon=category_data.icon,
        user_id=current_user.user_id,
        is_system=False,
        sort_order=0,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@router.get("/stats", response_model=CategoryStatsResponse)
def get_category_stats(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Count the user's todos (total and completed) per category."""
    user_id = current_user.user_id

    rows = (
        scoped_query(db, Category, user_id, include_shared=True)
        .outerjoin(Todo, and_(Todo.category_id == Category.id, Todo.user_id == user_id))
        .add_columns(func.count(Todo.id), _completed_sum())
        .group_by(Category.id)
        .order_by(Category.is_system.desc(), Category.sort_order, Category.name)
        .all()
    )
    stats = [
        CategoryStats(
            id=category.id,
            name=category.name,
            color=category.color,
            icon=category.icon,
            is_system=category.is_system,
            sort_order=category.sort_order,
            todo_count=todo_count or 0,
            completed_count=completed_count or 0,
        )
        for category, todo_count, completed_count in rows
    ]

    todo_count, completed_count = (
        scoped_query(db, Todo, user_id)
        .filter(Todo.category_id.is_(None))
        .with_entities(func.count(Todo.id), _completed_sum())
        .one()
    )

    return CategoryStatsResponse(
        stats=stats,
        uncategorized=UncategorizedStats(
            todo_count=todo_count or 0, completed_count=completed_count or 0
        ),
    )


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update one of the user's categories."""
    category = get_category(db, category_id, current_user)
    if category.is_system:
        raise ForbiddenError("Cannot modify system categories")

    for field, value in category_data.model_dump(exclude_unset=True).items():
        setattr(category, field, value)

    db.commit()
    db.refresh(category)
    return category


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete one of the user's categories. Its todos become uncategorized."""
    category = get_category(db, category_id, current_user)
    if category.is_system:
        raise ForbiddenError("Cannot delete system categories")

    scoped_query(db, Todo, current_user.user_id).filter(Todo.category_id == category.id).update(
        {Todo.category_id: None}, synchronize_session=False
    )
    db.delete(category)
    db.commit()
    return MessageResponse(message="Category deleted successfully")
