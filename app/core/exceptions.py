"""
Domain exceptions.

Services raise these; a single handler registered in ``app.main`` turns
them into ``{"detail": ...}`` JSON responses with the carried status code.
"""

from fastapi import status


class FieldWorkBookError(Exception):
    """Base class for errors that are reported back to the client."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FieldWorkBookError):
    """Malformed input or a failed precondition."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(FieldWorkBookError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ForbiddenError(FieldWorkBookError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class InvalidStateError(FieldWorkBookError):
    """An amount request is no longer pending."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Invalid request or request already processed"


class InsufficientFundsError(FieldWorkBookError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Insufficient team balance"
