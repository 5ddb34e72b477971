"""Application error taxonomy shared by services and controllers."""

from __future__ import annotations


class AppError(Exception):
    """Base error carrying a stable code, an HTTP status and a readable message."""

    code = "error"
    status = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AppError):
    code = "unauthenticated"
    status = 401
    default_message = "Unauthorized"


class NotFound(AppError):
    code = "not_found"
    status = 404
    default_message = "Not found"


class ValidationFailed(AppError):
    code = "validation_error"
    status = 400
    default_message = "Invalid input"
