"""
Parcel Delivery Backend — Custom Exception Hierarchy
======================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the auth layer and middleware; caught by global handlers.

Exception Hierarchy:
    ParcelServiceError (base)
    ├── ValidationError          → 400 Bad Request (malformed id, missing field)
    ├── AuthenticationError      → 401 Unauthorized (missing/malformed bearer header)
    ├── ForbiddenError           → 403 Forbidden (bad token, identity mismatch)
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error (generic message)
    ├── PaymentGatewayError      → 500 Internal Server Error (provider message)
    ├── ConfigurationError       → 500 Internal Server Error (missing credentials)
    └── RateLimitExceededError   → 429 Too Many Requests (rendered by the rate limiter)
"""

from typing import Any, Dict, Optional


class ParcelServiceError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ParcelServiceError):
    """
    Raised when client input fails validation.

    When:    Malformed object id, missing required field, unsupported role.
    HTTP:    400 Bad Request
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


class AuthenticationError(ParcelServiceError):
    """
    Raised when a request carries no usable bearer credential.

    When:    Authorization header absent, not "Bearer <token>", or empty token.
             Raised before any verification attempt is made.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized: No token provided",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(ParcelServiceError):
    """
    Raised when a credential is present but not acceptable.

    When:    Token verification failed (expired, revoked, bad signature), or the
             authenticated identity does not own the requested resource.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden: Invalid or expired token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ParcelServiceError):
    """
    Raised when a requested document does not exist.

    HTTP:    404 Not Found

    `message` overrides the generated text for cases where "not found" is
    ambiguous, e.g. a parcel that exists but is already paid.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ParcelServiceError):
    """
    Raised when document store operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Driver errors and statement details are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentGatewayError(ParcelServiceError):
    """
    Raised when the payment provider rejects or fails a request.

    HTTP:    500 Internal Server Error

    Unlike DatabaseError, the provider's own message is returned to the
    client: the checkout form shows it to the payer (e.g. "Invalid amount").
    """

    def __init__(
        self,
        message: str = "Payment provider request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(ParcelServiceError):
    """Raised when a required credential or setting is missing at call time."""

    def __init__(
        self,
        message: str = "The server is not configured for this operation",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ParcelServiceError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
