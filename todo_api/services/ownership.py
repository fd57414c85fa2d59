"""Per-user scoping of resource queries.

Every todo and category lookup goes through these helpers so that the owner
filter cannot be forgotten. A row owned by someone else is reported exactly
like a missing row (404), which keeps resource ids from being enumerated.
"""

from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from todo_api.services.errors import NotFoundError


def scoped_query(db: Session, model: Any, user_id: int, *, include_shared: bool = False) -> Query:
    """Query ``model`` rows visible to ``user_id``.

    With ``include_shared`` rows without an owner (system rows) are visible too.
    """
    if user_id is None:
        raise ValueError("user_id is required to scope a resource query")

    if include_shared:
        return db.query(model).filter(or_(model.user_id == user_id, model.user_id.is_(None)))
    return db.query(model).filter(model.user_id == user_id)


def fetch_owned(
    db: Session,
    model: Any,
    resource_id: int,
    user_id: int,
    *,
    include_shared: bool = False,
    detail: str = "Not found",
) -> Any:
    """Get one row visible to ``user_id`` or raise NotFoundError."""
    resource = (
        scoped_query(db, model, user_id, include_shared=include_shared)
        .filter(model.id == resource_id)
        .first()
    )
    if resource is None:
        raise NotFoundError(detail)
    return resource
