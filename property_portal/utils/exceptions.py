"""
Custom exception classes for the Property Portal API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Missing or malformed input. Rendered as 400 with field-level details."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )


class BadRequestError(APIException):
    """Bad request exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="BAD_REQUEST"
        )


class InternalServerError(APIException):
    """Internal server error exception."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_SERVER_ERROR"
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    """JWT token expired exception."""

    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Invalid JWT token exception."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class InsufficientPermissionsError(ForbiddenError):
    """Insufficient permissions exception."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# Domain lookups
class ManagerRequestNotFoundError(NotFoundError):

    def __init__(self, request_id: str):
        super().__init__("Manager request", request_id)


class UserNotFoundError(NotFoundError):

    def __init__(self, identifier: Optional[str] = None):
        super().__init__("User", identifier)


class PropertyOwnerNotFoundError(NotFoundError):

    def __init__(self, name: str):
        super().__init__("Property owner", name)


class RentalApplicationNotFoundError(NotFoundError):

    def __init__(self, application_id: str):
        super().__init__("Rental application", application_id)


# Workflow exceptions
class InvalidTransitionError(ConflictError):
    """A state change that the workflow does not allow."""

    def __init__(self, machine: str, current: Any, target: Any):
        super().__init__(
            f"Invalid {machine} transition from '{current}' to '{target}'",
            error_code="INVALID_TRANSITION"
        )
        self.current = current
        self.target = target


class DuplicateResourceError(ConflictError):
    """Duplicate resource exception."""

    def __init__(self, resource: str, identifier: Optional[str] = None, detail: Optional[str] = None):
        message = detail or f"{resource} with identifier '{identifier}' already exists"
        super().__init__(message, error_code="DUPLICATE_RESOURCE")


# Upstream dependency exceptions
class UpstreamServiceError(APIException):
    """A payment, identity or blob provider call failed. Message passed through."""

    def __init__(self, service: str, detail: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=f"{service.upper()}_ERROR"
        )
        self.service = service


# File upload exceptions
class UnsupportedFileTypeError(ValidationError):
    """Unsupported file type exception."""

    def __init__(self, file_type: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(
            f"Unsupported file type '{file_type}'. Supported types: {supported}",
            field_errors=[{"field": "file", "message": "unsupported content type"}]
        )


class FileSizeExceededError(ValidationError):
    """File size exceeded exception."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File size {size} bytes exceeds maximum allowed size {max_size} bytes",
            field_errors=[{"field": "file", "message": "file too large"}]
        )
