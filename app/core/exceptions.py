"""
Base exception classes for application-wide error handling.

Every domain error carries a human-readable message, a stable
machine-readable error code and an optional details dict, so the API layer
can turn any of them into a consistent response.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Bad input; nothing happened, fix and retry
    ├── NotFoundError - Resource missing for this user; nothing happened
    ├── ConflictError - Resource state forbids the operation
    └── InfrastructureError - Storage/broker failure; safe to retry as-is

Usage:
    from core.exceptions import ValidationError, NotFoundError

    raise ValidationError("Amount must be positive", error_code="INVALID_AMOUNT")

    raise NotFoundError(
        "Account not found",
        error_code="ACCOUNT_NOT_FOUND",
        details={"account_id": str(account_id)},
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
        details: Additional error context (ids, field errors)
        http_status: Status code used by the API exception handler
        retryable: Whether the same request may succeed if simply retried
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400
    retryable: bool = False

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
                "error": "Invoice already paid",
                "error_code": "INVOICE_ALREADY_PAID",
                "details": {"invoice_id": "..."}
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

    Use for missing attribution, non-positive amounts, unknown cadences and
    any other input the caller has to fix before retrying.
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 400


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Lookups are always scoped to the requesting user, so this is also what
    another user's resource looks like.
    """

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class ConflictError(BaseApplicationError):
    """
    Raised when the operation conflicts with the current resource state.

    Example:
        if invoice.paid:
            raise ConflictError(
                "Invoice already paid",
                error_code="INVOICE_ALREADY_PAID",
                details={"invoice_id": str(invoice.id)},
            )
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


class InfrastructureError(BaseApplicationError):
    """
    Raised when the database or another backing service fails mid-operation.

    The enclosing unit of work has been rolled back, so the request can be
    retried unchanged.
    """

    default_error_code: str = "INFRASTRUCTURE_ERROR"
    http_status: int = 503
    retryable: bool = True
