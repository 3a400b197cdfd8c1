"""
Base exception class for application-wide error handling.

This module provides the root of the exception hierarchy so that every
error raised by the library:
- Carries a human-readable message
- Carries a machine-readable error code for client handling
- Carries structured details for debugging

Domain packages subclass BaseApplicationError and set
``default_error_code``. See ``stripe_gateway.exceptions`` for the
gateway error family.

Usage:
    from core.exceptions import BaseApplicationError

    class QuotaExceededError(BaseApplicationError):
        default_error_code = "QUOTA_EXCEEDED"

    raise QuotaExceededError(
        "Monthly quota exceeded",
        details={"quota": 100, "used": 101},
    )
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
        details: Additional error context (ids, remote codes, etc.)

    Example:
        try:
            client_call()
        except BaseApplicationError as e:
            logger.warning(f"Call failed: {e.error_code}")
            return e.to_dict()
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to a plain dictionary.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Customer cus_123 not found",
                "error_code": "NOT_FOUND",
                "details": {"customer_id": "cus_123"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": str(self.error_code),
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )
