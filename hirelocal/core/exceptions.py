"""
Custom exceptions for the HireLocal API.
Every error carries a machine-readable code so the presentation layer
can tell "upgrade required" apart from "lead no longer available".
"""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from hirelocal.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class HireLocalException(Exception):
    """Base exception for HireLocal"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"

    def __init__(self, message: str = "An error occurred", code: str = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(self.message)


class NotFoundError(HireLocalException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class NotEligibleError(HireLocalException):
    """Freelancer lacks the subscription required for the action"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "upgrade_required"

    def __init__(self, message: str = "Active lead plan required to accept leads"):
        super().__init__(message)


class ConflictError(HireLocalException):
    """Requested state change lost to a concurrent or earlier change"""
    status_code = status.HTTP_409_CONFLICT
    code = "lead_unavailable"

    def __init__(self, message: str = "Lead is no longer available", code: str = None):
        super().__init__(message, code)


class UnauthorizedError(HireLocalException):
    """Authentication failed"""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ForbiddenError(HireLocalException):
    """Access denied"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(message)


class ValidationError(HireLocalException):
    """Validation failed"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"

    def __init__(self, message: str = "Validation failed", field: str = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class DeliveryError(HireLocalException):
    """Live push or secondary notification failed. Logged, never surfaced."""
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "delivery_failed"

    def __init__(self, user_id: str = None, message: str = None):
        msg = "Notification delivery failed"
        if user_id:
            msg = f"{msg} for user '{user_id}'"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


class StorageError(HireLocalException):
    """Underlying persistence unavailable"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_unavailable"

    def __init__(self, message: str = None):
        msg = "Storage unavailable"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


class OperationTimeoutError(HireLocalException):
    """Request exceeded its time budget"""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    code = "timeout"

    def __init__(self, operation: str = "Operation"):
        super().__init__(f"{operation} timed out")


async def hirelocal_exception_handler(request: Request, exc: HireLocalException) -> JSONResponse:
    """Render a domain exception as {"detail", "code"}."""
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.message, code=exc.code).model_dump(),
        headers=headers,
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures surface as StorageError, never as a bare 500."""
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return await hirelocal_exception_handler(request, StorageError(type(exc).__name__))
