"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── AuthenticationError - Missing or invalid credentials
    └── InfrastructureError - Backing services unavailable
        └── GatewayNotInitializedError - Realtime gateway missing

Usage:
    from core.exceptions import AuthenticationError

    raise AuthenticationError("Authentication token required", error_code="TOKEN_MISSING")

Expected business-rule failures are returned as core.services.ServiceResult;
these exceptions cover the cases that cannot be, such as a rejected
handshake or a missing collaborator.

api_exception_handler is registered as DRF's EXCEPTION_HANDLER and renders
every error raised from a view in the same failure envelope services use.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used when the error escapes a view
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to the failure envelope.

        Example:
            {
                "success": False,
                "message": "Authentication token required",
                "error_code": "TOKEN_MISSING",
            }
        """
        result: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class AuthenticationError(BaseApplicationError):
    """
    Raised when a credential is missing, malformed, expired or unknown.

    Example:
        raise AuthenticationError("Invalid token", error_code="TOKEN_INVALID")
    """

    default_error_code: str = "AUTHENTICATION_FAILED"
    status_code: int = status.HTTP_401_UNAUTHORIZED


class InfrastructureError(BaseApplicationError):
    """
    Raised when a backing service (database, channel layer) is unusable.

    Log the original error for debugging but don't expose internal
    details to clients.
    """

    default_error_code: str = "INFRASTRUCTURE_ERROR"
    status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE


class GatewayNotInitializedError(InfrastructureError):
    """Raised when a notification is dispatched before the realtime gateway exists."""

    default_error_code: str = "GATEWAY_NOT_INITIALIZED"


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """
    DRF exception handler producing the failure envelope.

    - BaseApplicationError: rendered with its own status and error code
    - DatabaseError: 503 with a generic message (the transaction has
      already been rolled back by the time it reaches here)
    - DRF exceptions: DRF's status, wrapped in the envelope
    """
    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.error(
            "Database error in %s",
            view.__class__.__name__ if view else "unknown view",
            exc_info=exc,
        )
        return Response(
            {
                "success": False,
                "message": "Service temporarily unavailable",
                "error_code": InfrastructureError.default_error_code,
            },
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, DRFValidationError):
        errors = response.data if isinstance(response.data, dict) else {"non_field_errors": response.data}
        response.data = {
            "success": False,
            "message": "Validation failed",
            "error_code": "VALIDATION_ERROR",
            "errors": errors,
        }
        return response

    detail = response.data.get("detail") if isinstance(response.data, dict) else None
    codes = exc.get_codes() if hasattr(exc, "get_codes") else None
    response.data = {
        "success": False,
        "message": str(detail) if detail is not None else "Request failed",
        "error_code": str(codes).upper() if isinstance(codes, str) else "ERROR",
    }
    return response
