"""Domain errors raised by the service layer and mapped to HTTP responses in ``app.main``."""

from __future__ import annotations

from fastapi import status


class DomainError(Exception):
    """Base class for errors the API reports to clients as-is."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "DomainError"
    message: str = "The request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NotFound"
    message = "The requested resource was not found."


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "Forbidden"
    message = "Access denied"
