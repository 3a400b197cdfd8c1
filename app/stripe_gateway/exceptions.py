"""
Gateway client exceptions.

Every failure surfaced by the gateway client is a StripeGatewayError.
The concrete subclass (and its ``error_code``) tells callers which
category of failure occurred; the remote Stripe error, when there is one,
is chained as ``__cause__``.

Exception Hierarchy:
    StripeGatewayError (base, inherits BaseApplicationError)
    ├── InvalidArgumentError - Required input missing or blank
    ├── DuplicateEmailError - Email already bound to an active customer
    ├── EntityNotFoundError - Referenced id does not resolve
    ├── AmbiguousResultError - "At most one" lookup returned several
    ├── InvalidPlanError - Plan does not exist on the gateway
    ├── InvalidCouponError - Coupon does not exist on the gateway
    ├── NoPaymentSourceError - Customer has no default payment source
    ├── InternalInconsistencyError - Gateway state contradicts a prior write
    └── GatewayError - Any other remote-call failure
        ├── GatewayCardDeclinedError - Card declined (permanent)
        ├── GatewayInvalidRequestError - Invalid request params (permanent)
        ├── GatewayAuthenticationError - Bad API key (permanent)
        ├── GatewayRateLimitError - Rate limited (transient, retry)
        └── GatewayUnavailableError - Network/server error (transient, retry)

Usage:
    from stripe_gateway.exceptions import DuplicateEmailError, ErrorCode

    raise DuplicateEmailError(
        "A customer with this email address already exists",
        details={"email": email},
    )

    if result.error_code == ErrorCode.DUPLICATE_EMAIL:
        ...
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any


class ErrorCode(str, Enum):
    """Failure categories reported by the gateway client."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS_RESULT = "AMBIGUOUS_RESULT"
    INVALID_PLAN = "INVALID_PLAN"
    INVALID_COUPON = "INVALID_COUPON"
    NO_PAYMENT_SOURCE = "NO_PAYMENT_SOURCE"
    INTERNAL_INCONSISTENCY = "INTERNAL_INCONSISTENCY"
    GATEWAY_ERROR = "GATEWAY_ERROR"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Base
# =============================================================================


class StripeGatewayError(BaseApplicationError):
    """
    Base exception for all gateway client errors.

    Example:
        try:
            customers.create_customer(email, description)
        except StripeGatewayError as e:
            logger.warning("Customer creation failed", extra=e.to_dict())
    """

    default_error_code: str = ErrorCode.GATEWAY_ERROR


# =============================================================================
# Local Precondition and Business Rule Errors
# =============================================================================


class InvalidArgumentError(StripeGatewayError):
    """
    A required input was missing or blank.

    Raised before any remote call is made.

    Example:
        if not email:
            raise InvalidArgumentError(
                "Email address needed for creating a customer",
                details={"fields": ["email"]},
            )
    """

    default_error_code: str = ErrorCode.INVALID_ARGUMENT


class DuplicateEmailError(StripeGatewayError):
    """
    The email is already bound to an active customer.

    Deleted customers do not count; delete the existing customer to
    reuse its email address.
    """

    default_error_code: str = ErrorCode.DUPLICATE_EMAIL


class EntityNotFoundError(StripeGatewayError):
    """
    A referenced entity id does not resolve on the gateway.

    Optional lookups return an empty result instead; this is raised when
    a write or update targets a missing entity.
    """

    default_error_code: str = ErrorCode.NOT_FOUND


class AmbiguousResultError(StripeGatewayError):
    """
    A lookup bounded to zero or one result returned more than one.

    Indicates a data integrity problem on the gateway side (two customers
    with one email, two live subscriptions for one customer).
    """

    default_error_code: str = ErrorCode.AMBIGUOUS_RESULT


class InvalidPlanError(StripeGatewayError):
    """The plan id does not exist on the gateway."""

    default_error_code: str = ErrorCode.INVALID_PLAN


class InvalidCouponError(StripeGatewayError):
    """The coupon id does not exist on the gateway."""

    default_error_code: str = ErrorCode.INVALID_COUPON


class NoPaymentSourceError(StripeGatewayError):
    """The customer has no default payment source on file."""

    default_error_code: str = ErrorCode.NO_PAYMENT_SOURCE


class InternalInconsistencyError(StripeGatewayError):
    """
    Gateway state contradicts a write that just succeeded.

    Example: a subscription was created but cannot be found afterwards.
    """

    default_error_code: str = ErrorCode.INTERNAL_INCONSISTENCY


# =============================================================================
# Remote Call Errors
# =============================================================================


class GatewayError(StripeGatewayError):
    """
    Base exception for failures reported by (or reaching) Stripe.

    Attributes:
        stripe_code: Stripe's error code, if any
        http_status: HTTP status of the failed request, if any
        is_retryable: Whether the same call may succeed on retry

    The client never retries by itself. Callers that want retries check
    ``is_retryable`` and back off:

        except GatewayError as e:
            if e.is_retryable:
                time.sleep(backoff_delay(attempt))
    """

    default_error_code: str = ErrorCode.GATEWAY_ERROR
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        http_status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if http_status:
            details["http_status"] = http_status
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.http_status = http_status


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class GatewayCardDeclinedError(GatewayError):
    """
    Card was declined by the issuing bank.

    The decline_code attribute contains the specific reason
    (generic_decline, insufficient_funds, expired_card, ...).
    """

    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        http_status: int | None = None,
    ):
        details = {"decline_code": decline_code} if decline_code else None
        super().__init__(
            message,
            stripe_code=stripe_code,
            http_status=http_status,
            details=details,
        )
        self.decline_code = decline_code


class GatewayInvalidRequestError(GatewayError):
    """
    Invalid request parameters sent to Stripe.

    The request will never succeed with the same parameters.
    """

    is_retryable: bool = False


class GatewayAuthenticationError(GatewayError):
    """
    Stripe rejected the API key.

    Operational issue: check the configured secret key.
    """

    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class GatewayRateLimitError(GatewayError):
    """Rate limited by the Stripe API."""

    is_retryable: bool = True


class GatewayUnavailableError(GatewayError):
    """
    Stripe could not be reached or failed on its side.

    Covers network errors, timeouts and 5xx responses. A mutation may
    have been applied even though the call failed.
    """

    is_retryable: bool = True
