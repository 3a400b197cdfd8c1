"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Pattern Comparison:
    - Exceptions: Raised inside services for every failure path
    - ServiceResult: Returned at the public boundary so callers handle
      failures explicitly instead of catching exceptions

Usage:
    from core.services import BaseService, ServiceResult

    class GreetingService(BaseService):
        def greet(self, name: str) -> str:
            if self.missing_required(name=name):
                raise InvalidArgumentError("Name is required")
            self.get_logger().info("Greeting %s", name)
            return f"Hello {name}"

    try:
        result = ServiceResult.ok(GreetingService().greet("Ada"))
    except BaseApplicationError as exc:
        result = ServiceResult.from_exception(exc)

    if result.success:
        print(result.data)
    else:
        print(f"Error: {result.error} ({result.error_code})")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from core.exceptions import BaseApplicationError

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed, or an empty lookup)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        exception: The exception the failure was built from, if any

    Usage:
        # Success case
        return ServiceResult.ok(customer_id)

        # Empty lookup
        return ServiceResult.ok(None)

        # Failure case
        return ServiceResult.from_exception(DuplicateEmailError("Email already exists"))

    Note:
        A successful result may carry ``data=None``: "nothing found" is
        not a failure for optional lookups.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    exception: BaseException | None = field(default=None, repr=False, compare=False)

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def from_exception(cls, exc: Exception) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own message and error code; any
        other exception is named after its class.

        Args:
            exc: The caught exception

        Returns:
            ServiceResult with error details from exception

        Example:
            try:
                customers.create_customer(email, description)
            except StripeGatewayError as e:
                return ServiceResult.from_exception(e)
        """
        if isinstance(exc, BaseApplicationError):
            message = exc.message
            code = str(exc.error_code)
        else:
            message = str(exc)
            code = exc.__class__.__name__.upper()
        return cls(
            success=False,
            error=message,
            error_code=code,
            exception=exc,
        )

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            result = client.delete_customer(customer_id)
            if result:  # Same as: if result.success
                print("Deleted")
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Required-field validation

    Design Notes:
        - Collaborators are injected through __init__
        - Services hold no mutable state between calls
        - Raise exceptions inside services; convert at the boundary
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
    def missing_required(cls, **kwargs) -> list[str]:
        """
        Return the names of required fields that are None or blank.

        Example:
            missing = cls.missing_required(email=email, description=description)
            if missing:
                raise InvalidArgumentError(...)
        """
        return [
            field_name
            for field_name, value in kwargs.items()
            if value is None or (isinstance(value, str) and not value.strip())
        ]
