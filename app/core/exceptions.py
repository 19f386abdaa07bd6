"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (HTTP 400)
    ├── NotFoundError - Resource not found (HTTP 404)
    ├── PermissionDeniedError - Wrong role or non-participant (HTTP 403)
    └── ConflictError - Illegal state transitions, concurrent modifications (HTTP 409)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    raise ValidationError(
        "Milestone percentages must sum to 100",
        error_code="INVALID_PERCENTAGE_TOTAL",
        details={"total": "99.98"},
    )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, ids, states)
        http_status: Status code used when the error reaches an API view
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

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
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Commission not found",
                "error_code": "COMMISSION_NOT_FOUND",
                "details": {"commission_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
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


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for non-positive amounts, percentage totals outside tolerance,
    missing deliverables and malformed provider payloads.

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 400


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        commission = Commission.objects.filter(id=commission_id).first()
        if not commission:
            raise NotFoundError(
                f"Commission {commission_id} not found",
                error_code="COMMISSION_NOT_FOUND",
                details={"commission_id": str(commission_id)},
            )
    """

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller may not perform an operation.

    Covers both non-participants and participants acting in the wrong role
    (e.g. a client trying to accept a commission).

    Note:
        For authentication failures (missing/invalid token), DRF's
        NotAuthenticated applies. Use this for authorization failures.
    """

    default_error_code: str = "PERMISSION_DENIED"
    http_status: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Invalid state transitions (editing a confirmed plan, starting a locked milestone)
    - Duplicate creation (generating a second milestone plan)
    - Optimistic locking failures
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


__all__ = [
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
]
