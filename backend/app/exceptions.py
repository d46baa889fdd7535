"""
CarVault Backend — Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the authorization gate; caught by global handlers.

Exception Hierarchy:
    CarVaultError (base)
    ├── AuthenticationError   → 401 Unauthorized (missing/invalid token, bad login)
    ├── ValidationError       → 400 Bad Request (client can fix)
    ├── NotFoundError         → 404 Not Found (absent OR not owned)
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CarVaultError(Exception):
    """
    Base exception for all CarVault application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client,
                  except for ValidationError details)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(CarVaultError):
    """
    Raised when the caller's identity cannot be established.

    When:    No bearer token, malformed/expired/forged token, or wrong login
             credentials.
    HTTP:    401 Unauthorized with `WWW-Authenticate: Bearer`

    Unknown email and wrong password produce the same message so that the
    login endpoint cannot be used to enumerate registered accounts.
    """

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(CarVaultError):
    """
    Raised when client input fails validation.

    When:    Empty title/description, malformed tags payload, too many or
             oversized images, invalid base64 in a kept image, duplicate email.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "A car can hold at most 10 images (got 11)",
            "details": {"field": "images", "max_images": 10, "count": 11}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(CarVaultError):
    """
    Raised when a requested resource does not exist for the caller.

    HTTP:    404 Not Found

    For cars this also covers records owned by another user; the response
    is identical to the one for an id that does not exist.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(CarVaultError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
