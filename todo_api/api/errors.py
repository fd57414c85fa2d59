"""Exception handlers producing the ``{"error": ..., "message": ...}`` envelope."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_api.services.errors import ServiceError

logger = logging.getLogger(__name__)

_STATUS_TO_CODE = {
    400: "validation_error",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    500: "server_error",
}

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Locations FastAPI prefixes to field paths
_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def error_response(
    status_code: int,
    message: str,
    code: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an error response with a stable machine-readable code."""
    error_code = code or _STATUS_TO_CODE.get(status_code, "server_error")
    return JSONResponse(
        status_code=status_code,
        content={"error": error_code, "message": message},
        headers=headers,
    )


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part not in _LOCATION_PREFIXES]
    return ".".join(parts)


def format_validation_errors(errors: list[dict[str, Any]]) -> str:
    """Describe the first failing rule in a single human-readable sentence."""
    if not errors:
        return "Invalid request"

    unknown = [
        _field_name(error["loc"]) for error in errors if error["type"] == "extra_forbidden"
    ]
    if unknown:
        return f"Unknown fields: {', '.join(unknown)}"

    error = errors[0]
    error_type = error["type"]
    field = _field_name(error["loc"])

    if error_type == "json_invalid":
        return "Request body must be valid JSON"
    if error_type in {"model_attributes_type", "dict_type"} or (
        not field and error_type != "missing"
    ):
        return "Request body must be a JSON object"
    if error_type == "missing":
        return f"{field} is required" if field else "Request body is required"
    if error_type == "value_error":
        # Message raised by a field validator
        return str(error["ctx"]["error"]) if "ctx" in error else error["msg"]
    if error_type == "string_type":
        return f"{field} must be a string"
    return f"{field}: {error['msg']}"


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for service, validation, HTTP and database errors."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return error_response(exc.status_code, INTERNAL_ERROR_MESSAGE, exc.error_code)
        logger.info(
            f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}"
        )
        return error_response(exc.status_code, exc.message, exc.error_code, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        message = format_validation_errors(list(exc.errors()))
        logger.info(f"{request.method} {request.url.path} -> 400 {message}")
        return error_response(status.HTTP_400_BAD_REQUEST, message, "validation_error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
            message = "Not found"
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)
