"""
errors.py — Application error taxonomy.
Each error knows the HTTP status it renders as; main.py turns them into
{"error": message} JSON bodies.
"""


class AppError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(AppError):
    """Missing or malformed request field."""
    status_code = 400
    message = "Invalid request"


class AuthError(AppError):
    status_code = 401
    message = "Not authenticated"


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class StorageError(AppError):
    """
    A call to the external store failed. `upstream_status` is the PostgREST
    HTTP status when there was one (409 = unique key conflict). The detail is
    for server logs only; clients get the generic message.
    """
    status_code = 500

    def __init__(self, message: str | None = None, upstream_status: int | None = None, detail: str = ""):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.detail = detail

    @property
    def is_conflict(self) -> bool:
        return self.upstream_status == 409


class DeliveryError(AppError):
    """A single push delivery failed. Logged and counted, never rendered."""

    def __init__(self, message: str | None = None, status: int | None = None):
        super().__init__(message or "Push delivery failed")
        self.status = status
