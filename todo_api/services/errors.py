"""Service-layer exceptions mapped to HTTP error responses.

Each class carries the HTTP ``status_code`` and the machine-readable
``error_code`` rendered in the ``{"error": ..., "message": ...}`` envelope.
401 and 404 messages are deliberately generic so that responses never reveal
which check failed.
"""


class ServiceError(Exception):
    """Base class for errors the API layer turns into JSON responses."""

    status_code: int = 400
    error_code: str = "validation_error"

    def __init__(self, message: str, *, headers: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.headers = headers


class ValidationError(ServiceError):
    """Malformed, missing or out-of-range input (400)."""

    status_code = 400
    error_code = "validation_error"


class AuthenticationError(ServiceError):
    """Bad credentials or a bad, expired or revoked token (401)."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ServiceError):
    """Operation not permitted on a resource the caller can see (403)."""

    status_code = 403
    error_code = "forbidden"


class NotFoundError(ServiceError):
    """Resource absent or not owned by the caller (404)."""

    status_code = 404
    error_code = "not_found"


class ConflictError(ServiceError):
    """Duplicate resource, e.g. an email that is already registered (409)."""

    status_code = 409
    error_code = "conflict"


class InternalError(ServiceError):
    """Store or crypto failure (500). The message is never shown to clients."""

    status_code = 500
    error_code = "server_error"
