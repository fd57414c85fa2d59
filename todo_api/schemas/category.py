"""Category schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

NAME_MAX_LENGTH = 50
ICON_MAX_LENGTH = 16
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def check_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("Name cannot be empty")
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError(f"Name must be {NAME_MAX_LENGTH} characters or less")
    return name


def check_color(value: str) -> str:
    if not COLOR_PATTERN.match(value):
        raise ValueError("Color must be a hex color like #3B82F6")
    return value.upper()


def check_icon(value: str) -> str:
    icon = value.strip()
    if not icon:
        raise ValueError("Icon cannot be empty")
    if len(icon) > ICON_MAX_LENGTH:
        raise ValueError(f"Icon must be {ICON_MAX_LENGTH} characters or less")
    return icon


class CategoryCreate(BaseModel):
    """Create a new category."""

    model_config = ConfigDict(extra="forbid")

    name: str
    color: str
    icon: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return check_name(value)

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str) -> str:
        return check_color(value)

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, value: str) -> str:
        return check_icon(value)


class CategoryUpdate(BaseModel):
    """Update a category. Omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    color: str | None = None
    icon: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("Name cannot be null")
        return check_name(value)

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("Color cannot be null")
        return check_color(value)

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("Icon cannot be null")
        return check_icon(value)


class CategorySummary(BaseModel):
    """Category fields embedded in a todo."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    icon: str


class CategoryResponse(CategorySummary):
    """Category response."""

    user_id: int | None
    is_system: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class CategoryListResponse(BaseModel):
    """All categories visible to the user."""

    categories: list[CategoryResponse]


class CategoryStats(BaseModel):
    """Todo counts for one category."""

    id: int
    name: str
    color: str
    icon: str
    is_system: bool
    sort_order: int
    todo_count: int
    completed_count: int


class UncategorizedStats(BaseModel):
    """Todo counts for todos without a category."""

    todo_count: int
    completed_count: int


class CategoryStatsResponse(BaseModel):
    """Per-category todo counts for the current user."""

    stats: list[CategoryStats]
    uncategorized: UncategorizedStats
