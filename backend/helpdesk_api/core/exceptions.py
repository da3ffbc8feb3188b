"""
Error taxonomy shared by the services and the HTTP boundary.

Every error maps to exactly one status code and renders as
``{"success": false, "error": <message>}``.
"""
from typing import Optional

from .enums import ValidationFailure
from ..api.schemas.common import ErrorResponse


class HelpdeskAPIError(Exception):
    """Base exception for the helpdesk backend."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert to the error envelope sent to the client."""
        return ErrorResponse(error=self.message)


class ValidationInputError(HelpdeskAPIError):
    """Malformed or missing request fields."""

    status_code = 400
    default_message = "Invalid request"


class AuthFailure(HelpdeskAPIError):
    """Extension token or web session rejected."""

    status_code = 401
    default_message = "Not authenticated"

    def __init__(self, reason: Optional[ValidationFailure] = None, message: Optional[str] = None):
        self.reason = reason
        super().__init__(message or (reason.value if reason else None))


class MethodNotAllowed(HelpdeskAPIError):
    status_code = 405
    default_message = "Method Not Allowed"


class StorageError(HelpdeskAPIError):
    """Backend unreachable or a write failed. The message carries the driver detail."""

    status_code = 500
    default_message = "Storage error"


class PermissionDenied(HelpdeskAPIError):
    status_code = 403
    default_message = "Not allowed"


class ServiceUnavailable(HelpdeskAPIError):
    """A feature is switched off by configuration."""

    status_code = 503
    default_message = "Service unavailable"
