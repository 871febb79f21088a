"""
Error response schemas for API documentation and consistent error formatting.
Provides the standard error envelope used by every failing endpoint.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(
        None,
        description="Field name that caused the error",
        examples=["email"]
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["value is not a valid email address"]
    )
    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["value_error"]
    )
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Detailed error information for validation errors"
    )


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


# (description, code, message) per status for OpenAPI examples
_ERROR_EXAMPLES = {
    400: ("Bad Request - Invalid input", "VALIDATION_ERROR", "Request validation failed"),
    401: ("Unauthorized - Login required", "UNAUTHORIZED", "Authentication required"),
    403: ("Forbidden - Access denied", "FORBIDDEN", "You don't own this property"),
    404: ("Not Found - Resource not found", "NOT_FOUND", "Property not found with ID: 42"),
    409: ("Conflict - Resource conflict", "CONFLICT", "Favorite with identifier '7' already exists"),
    413: ("Payload Too Large", "REQUEST_TOO_LARGE", "Request size exceeds maximum allowed size"),
    500: ("Internal Server Error", "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."),
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary usable as a route's ``responses`` argument
    """
    responses = {}
    for code in status_codes:
        if code not in _ERROR_EXAMPLES:
            continue
        description, error_code, message = _ERROR_EXAMPLES[code]
        responses[code] = {
            "description": description,
            "model": APIErrorResponse,
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": error_code,
                            "message": message,
                            "timestamp": "2024-01-01T00:00:00Z",
                            "request_id": "abc12345"
                        }
                    }
                }
            }
        }
    return responses


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication and authorization error response schemas."""
    return get_error_responses(401, 403)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 500)
