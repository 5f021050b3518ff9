"""
Error response schemas for API documentation and consistent error formatting.
Provides standardized error response models for OpenAPI documentation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["email"])
    message: str = Field(..., description="Human-readable error message", examples=["Invalid email format"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["value_error"])
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
    details: Optional[List[ErrorDetail]] = Field(None, description="Field-level details for validation errors")


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _example(code: str, message: str, details: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    body = {
        "code": code,
        "message": message,
        "timestamp": "2024-01-01T00:00:00.000000Z",
        "request_id": "abc12345",
    }
    if details:
        body["details"] = details
    return {"application/json": {"example": {"error": body}}}


COMMON_ERROR_RESPONSES = {
    400: {
        "description": "Bad Request - missing or malformed fields",
        "model": APIErrorResponse,
        "content": _example(
            "VALIDATION_ERROR",
            "Request validation failed",
            [{"field": "phone", "message": "Invalid phone number", "type": "value_error"}],
        ),
    },
    401: {
        "description": "Unauthorized - authentication required",
        "model": APIErrorResponse,
        "content": _example("UNAUTHORIZED", "Authentication required"),
    },
    403: {
        "description": "Forbidden - wrong role or shared key",
        "model": APIErrorResponse,
        "content": _example("FORBIDDEN", "Insufficient permissions to update manager requests"),
    },
    404: {
        "description": "Not Found - resource not found",
        "model": APIErrorResponse,
        "content": _example("NOT_FOUND", "Manager request not found with ID: 123e4567-e89b-12d3-a456-426614174000"),
    },
    409: {
        "description": "Conflict - duplicate resource or invalid workflow transition",
        "model": APIErrorResponse,
        "content": _example("INVALID_TRANSITION", "Invalid status transition from 'finished' to 'pending'"),
    },
    500: {
        "description": "Internal Server Error - database or upstream provider failure",
        "model": APIErrorResponse,
        "content": _example("PAYMENTS_ERROR", "Your card was declined."),
    },
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response definitions for specific status codes.

    Args:
        *status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response definitions
    """
    return {code: COMMON_ERROR_RESPONSES[code] for code in status_codes if code in COMMON_ERROR_RESPONSES}


def get_common_error_responses() -> Dict[int, Dict[str, Any]]:
    """Error responses shared by every authenticated endpoint."""
    return get_error_responses(400, 401, 403, 404, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Error responses for endpoints that create or change state."""
    return get_error_responses(400, 401, 403, 404, 409, 500)
