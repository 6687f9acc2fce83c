"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with logging and transaction helpers

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, business rules)
    - Exceptions: Use for unexpected failures (database errors, bugs)

Usage:
    from core.services import BaseService, ServiceResult

    class ChatService(BaseService):
        def get_chat(self, requester, chat_id) -> ServiceResult[Chat]:
            chat = Chat.objects.filter(pk=chat_id).first()
            if chat is None:
                return ServiceResult.failure(
                    "Chat not found",
                    error_code="CHAT_NOT_FOUND",
                )
            return ServiceResult.success(chat, message="Chat retrieved successfully")

    # In view
    result = service.get_chat(request.user, chat_id)
    if not result.success:
        return Response(result.to_response(), status=404)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        message: Human-readable outcome, shown to the client on success
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures
        details: Extra machine-readable context (e.g. the id of a duplicate)

    Usage:
        return ServiceResult.failure(
            "A chat with this user already exists",
            error_code="DUPLICATE_CHAT",
            details={"chat_id": existing.id},
        )
    """

    success: bool
    data: T | None = None
    message: str | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    details: dict[str, Any] | None = field(default=None)

    @classmethod
    def success(cls, data: T, message: str | None = None) -> ServiceResult[T]:
        """Create a successful result."""
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
            details: Additional context for the client

        Example:
            return ServiceResult.failure(
                f"User with ID {user_id} not found",
                "USER_NOT_FOUND",
                details={"user_id": user_id},
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
            details=details,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to the API response envelope.

        Success: {"success": true, "message": ..., "data": ...}
        Failure: {"success": false, "message": ..., "error_code": ...,
                  "errors"?: ..., "details"?: ...}
        """
        if self.success:
            return {"success": True, "message": self.message, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "message": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        if self.details:
            response["details"] = self.details
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Services hold collaborators (not request state) on the instance
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

