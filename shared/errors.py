"""
Shared error handling for the identity gateway.

Every failure surfaced to a caller is rendered as the same envelope:
``{"success": false, "message": ..., "errors": [...]}`` where ``errors`` is
only present when the upstream provider reported structured causes.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    message: str
    errors: Optional[List[Dict[str, Any]]] = None


class GatewayError(Exception):
    """Base exception for gateway services."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message or self.default_message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(message=self.message, errors=self.errors)

    def to_content(self) -> Dict[str, Any]:
        """JSON body for the response, without unset optional keys."""
        return self.to_response().model_dump(exclude_none=True)


class ValidationError(GatewayError):
    """Caller input errors, detected before any upstream call."""

    status_code = 400
    default_message = "Validation failed"


class AuthenticationError(GatewayError):
    """Missing, malformed or rejected credentials."""

    status_code = 401
    default_message = "Authentication failed"


class UpstreamValidationError(GatewayError):
    """Structured validation failure reported by the identity provider."""

    status_code = 400
    default_message = "Provider validation failed"


class ServiceError(GatewayError):
    """Service-related errors."""

    status_code = 500
    default_message = "Service error"
