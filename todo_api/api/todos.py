"""Todo API endpoints.

Every query is scoped to the authenticated user; another user's todo is a 404.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from todo_api.api.dependencies import get_current_user
from todo_api.config import Settings, get_settings
from todo_api.database import get_db
from todo_api.models.category import Category
from todo_api.models.todo import Todo
from todo_api.schemas.auth import MessageResponse
from todo_api.schemas.todo import (
    Pagination,
    TodoCreate,
    TodoListResponse,
    TodoResponse,
    TodoUpdate,
)
from todo_api.services.auth import AuthenticatedUser
from todo_api.services.errors import ValidationError
from todo_api.services.ownership import fetch_owned, scoped_query

router = APIRouter(prefix="/todos", tags=["todos"])

TODO_NOT_FOUND = "Todo not found"


def ensure_category_visible(db: Session, category_id: int, user_id: int) -> None:
    """Reject category ids that are neither system categories nor owned by the user."""
    visible = (
        scoped_query(db, Category, user_id, include_shared=True)
        .filter(Category.id == category_id)
        .first()
    )
    if visible is None:
        raise ValidationError("Category not found or access denied")


def get_user_todo(db: Session, todo_id: int, user: AuthenticatedUser) -> Todo:
    """Get a todo owned by the user."""
    return fetch_owned(db, Todo, todo_id, user.user_id, detail=TODO_NOT_FOUND)


@router.get("", response_model=TodoListResponse)
def get_todos(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, Query(ge=1)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    category_id: Annotated[int | None, Query(ge=1)] = None,
):
    """Get a page of the user's todos, newest first."""
    page_size = min(limit or settings.default_page_size, settings.max_page_size)

    query = scoped_query(db, Todo, current_user.user_id)
    if category_id is not None:
        query = query.filter(Todo.category_id == category_id)

    total = query.count()
    todos = (
        query.options(joinedload(Todo.category))
        .order_by(Todo.created_at.desc(), Todo.id.desc())
        .limit(page_size)
        .offset(offset)
        .all()
    )

    return TodoListResponse(
        todos=[TodoResponse.model_validate(todo) for todo in todos],
        pagination=Pagination(
            limit=page_size,
            offset=offset,
            total=total,
            has_more=offset + page_size < total,
        ),
    )


@router.post("", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
def create_todo(
    todo_data: TodoCreate,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new todo."""
    if todo_data.category_id is not None:
        ensure_category_visible(db, todo_data.category_id, current_user.user_id)

    todo = Todo(
        title=todo_data.title,
        description=todo_data.description,
        completed=todo_data.completed,
        category_id=todo_data.category_id,
        user_id=current_user.user_id,
    )
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return todo


@router.get("/{todo_id}", response_model=TodoResponse)
def get_todo(
    todo_id: int,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific todo."""
    return get_user_todo(db, todo_id, current_user)


@router.put("/{todo_id}", response_model=TodoResponse)
def update_todo(
    todo_id: int,
    todo_data: TodoUpdate,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a todo."""
    todo = get_user_todo(db, todo_id, current_user)

    changes = todo_data.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None:
        ensure_category_visible(db, changes["category_id"], current_user.user_id)

    for field, value in changes.items():
        setattr(todo, field, value)

    db.commit()
    db.refresh(todo)
    return todo


@router.delete("/{todo_id}", response_model=MessageResponse)
def delete_todo(
    todo_id: int,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a todo."""
    todo = get_user_todo(db, todo_id, current_user)
    db.delete(todo)
    db.commit()
    return MessageResponse(message="Todo deleted successfully")
