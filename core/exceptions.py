"""
Service-layer exception taxonomy.

Services raise these synchronously; the error handlers in
``core.middleware.error_handling`` translate them into HTTP responses.
"""

from typing import Any, Optional
from fastapi import status


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "SERVICE_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    """Referenced resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ValidationError(ServiceError, ValueError):
    """Malformed enum value, out-of-range rating, non-future date, etc."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class PreconditionFailedError(ServiceError):
    """Operation attempted while the resource is in the wrong state."""

    status_code = status.HTTP_412_PRECONDITION_FAILED
    code = "PRECONDITION_FAILED"


class ConflictError(ServiceError):
    """Resource already exists."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class AuthenticationFailedError(ServiceError):
    """Credentials were rejected."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_FAILED"


class ForbiddenError(ServiceError, PermissionError):
    """Actor is not allowed to mutate the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
