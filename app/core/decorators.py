"""
Custom decorators for service boundaries.

This module provides generic infrastructure decorators for:
- Converting raised application errors into ServiceResult values
- Logging the operation that failed with a per-error log level

These are domain-agnostic decorators that can be used by any facade that
wraps exception-raising services.

Usage:
    from core.decorators import returns_service_result

    class Facade:
        @returns_service_result()
        def create_thing(self, name):
            return self.things.create(name)

    result = Facade().create_thing("widget")
    if not result:
        print(result.error_code)
"""

from __future__ import annotations

import functools
import logging
from typing import Callable

from core.exceptions import BaseApplicationError
from core.services import ServiceResult


def returns_service_result(
    catch: tuple[type[Exception], ...] = (BaseApplicationError,),
    log_level_for: Callable[[Exception], int] | None = None,
    logger_name: str | None = None,
):
    """
    Return the wrapped call's value as a ServiceResult.

    A normal return becomes a successful result (``data`` may be None). An
    exception listed in ``catch`` is logged and becomes a failed result
    carrying its message, error code and the exception itself. Anything
    else propagates.

    Args:
        catch: Exception types converted into failed results
        log_level_for: Maps a caught exception to a logging level
            (defaults to ERROR for everything)
        logger_name: Optional logger name (defaults to the function module)

    Returns:
        Decorator function

    Example:
        @returns_service_result(
            catch=(StripeGatewayError,),
            log_level_for=lambda exc: logging.WARNING,
        )
        def delete_customer(self, customer_id):
            self.customers.delete_customer(customer_id)
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ServiceResult:
            try:
                data = func(*args, **kwargs)
            except catch as exc:
                level = log_level_for(exc) if log_level_for else logging.ERROR
                log = logging.getLogger(logger_name or func.__module__)
                log.log(
                    level,
                    f"{func.__name__} failed: {exc}",
                    exc_info=level >= logging.ERROR,
                    extra={
                        "operation": func.__name__,
                        "error_code": str(getattr(exc, "error_code", "")),
                    },
                )
                return ServiceResult.from_exception(exc)

            return ServiceResult.ok(data)

        return wrapper

    return decorator
