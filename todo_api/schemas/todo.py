"""Todo schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from todo_api.schemas.category import CategorySummary

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000


def check_title(value: str) -> str:
    title = value.strip()
    if not title:
        raise ValueError("Title cannot be empty")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be {TITLE_MAX_LENGTH} characters or less")
    return title


def check_description(value: str | None) -> str | None:
    if value is not None and len(value) > DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less")
    return value


class TodoCreate(BaseModel):
    """Create a new todo."""

    model_config = ConfigDict(extra="forbid")

    title: str
    description: str | None = None
    completed: bool = False
    category_id: int | None = Field(None, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return check_title(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return check_description(value)


class TodoUpdate(BaseModel):
    """Update a todo. Omitted fields are left unchanged; null clears description/category."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    completed: bool | None = None
    category_id: int | None = Field(None, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("Title cannot be null")
        return check_title(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return check_description(value)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, value: bool | None) -> bool:
        if value is None:
            raise ValueError("Completed cannot be null")
        return value


class TodoResponse(BaseModel):
    """Todo response with its category, if any."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    completed: bool
    category_id: int | None
    category: CategorySummary | None
    user_id: int
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    """Pagination metadata for list responses."""

    model_config = ConfigDict(populate_by_name=True)

    limit: int
    offset: int
    total: int
    has_more: bool = Field(..., alias="hasMore")


class TodoListResponse(BaseModel):
    """A page of todos."""

    todos: list[TodoResponse]
    pagination: Pagination
