"""Domain errors shared by services and the HTTP layer."""

from typing import Any, Dict

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    """Referenced member, payment, report or notification does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class ValidationFailedError(AppError):
    """Input is missing, malformed or references a nonexistent member."""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message, "validation_failed", status.HTTP_400_BAD_REQUEST)


class ConflictError(AppError):
    """Entity still has dependent rows and cannot be removed."""

    def __init__(self, message: str = "Conflict"):
        super().__init__(message, "conflict", status.HTTP_400_BAD_REQUEST)


class UnauthorizedError(AppError):
    """Request carries no identity claim."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "unauthorized", status.HTTP_401_UNAUTHORIZED)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


__all__ = [
    "AppError",
    "NotFoundError",
    "ValidationFailedError",
    "ConflictError",
    "UnauthorizedError",
    "error_response",
]
