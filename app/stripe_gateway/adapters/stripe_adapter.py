"""
Stripe API adapter for gateway entity operations.

This module provides the StripeGatewayAdapter class which encapsulates all
Stripe API interactions. Every remote call of the gateway client goes
through this adapter to get consistent error handling, timing and
structured logging.

Features:
- API key, API version and retry count carried by the adapter instance
  and sent with every request
- Automatic error translation to gateway exceptions
- Structured logging with timing metrics
- One method per remote call; listing methods return a single Page

Configuration (via Django settings, see from_settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_API_TIMEOUT_SECONDS: HTTP timeout (default: 10)
- STRIPE_MAX_RETRIES: Network retries done by the Stripe SDK (default: 0)
- STRIPE_API_VERSION: Stripe API version sent with each request

Usage:
    from stripe_gateway.adapters import StripeGatewayAdapter

    adapter = StripeGatewayAdapter(api_key="sk_test_...")

    customer = adapter.create_customer(
        email="ada@example.com",
        description="Ada Lovelace",
        metadata={"category": "gold"},
    )

    page = adapter.list_customers_page(limit=100)
    next_page = adapter.list_customers_page(limit=100, starting_after=page.items[-1].id)
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable

import stripe
from django.conf import settings

from stripe_gateway.exceptions import (
    EntityNotFoundError,
    GatewayAuthenticationError,
    GatewayCardDeclinedError,
    GatewayError,
    GatewayInvalidRequestError,
    GatewayRateLimitError,
    GatewayUnavailableError,
)
from stripe_gateway.types import (
    ChargeResult,
    CouponResult,
    CustomerResult,
    InvoiceResult,
    Page,
    PaymentSourceResult,
    PlanResult,
    SubscriptionResult,
)

# Subscriptions created here charge the default source immediately
COLLECTION_METHOD = "charge_automatically"

# Stripe error code for ids that do not resolve
RESOURCE_MISSING = "resource_missing"

# API version the requests below are written against. Later versions drop
# `coupon` on customer update and the `charge` reference on invoices.
STRIPE_API_VERSION = "2024-12-18.acacia"


# =============================================================================
# Retry Logic Helpers
# =============================================================================


def is_retryable_gateway_error(error: Exception) -> bool:
    """
    Check if a gateway error is retryable.

    The client never retries by itself; callers that do can use this
    to decide:

        for attempt in range(3):
            result = client.get_charge(charge_id)
            if result or not is_retryable_gateway_error(result.exception):
                break
            time.sleep(backoff_delay(attempt))

    Args:
        error: The exception to check

    Returns:
        True if the error is a transient gateway error that can be retried
    """
    if isinstance(error, GatewayError):
        return getattr(error, "is_retryable", False)
    return False


def backoff_delay(attempt: int, base: float = 1.0, max_delay: float = 60.0) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        base: Base delay in seconds (default: 1.0)
        max_delay: Maximum delay in seconds (default: 60.0)

    Returns:
        Delay in seconds with jitter (0-25% of calculated delay)

    Example:
        # Attempt 0: 1.0 - 1.25 seconds
        # Attempt 1: 2.0 - 2.5 seconds
        # Attempt 2: 4.0 - 5.0 seconds
        delay = backoff_delay(attempt=2)
    """
    delay = min(base * (2**attempt), max_delay)
    jitter = delay * random.uniform(0, 0.25)
    return delay + jitter


def _without_none(**params: Any) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


def _page(listing: Any, converter: Callable[[Any], Any]) -> Page:
    data = getattr(listing, "data", None) or []
    return Page(
        items=[converter(item) for item in data],
        has_more=getattr(listing, "has_more", None),
    )


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeGatewayAdapter:
    """
    Adapter for Stripe API operations.

    One instance per API key. The key, the pinned API version and the
    network retry count are never written to the ``stripe`` module; they
    travel with each request, so several adapters with different settings
    can live in one process.

    The HTTP timeout is the exception: the Stripe SDK only reads it from
    the process-wide HTTP client, which is installed when the adapter is
    created. Building adapters with different timeouts logs a warning.

    Features:
    - Automatic error translation to gateway exceptions
    - Structured logging with timing metrics
    - Not-found translated to None for optional lookups
    """

    def __init__(
        self,
        api_key: str,
        timeout_seconds: int = 10,
        max_retries: int = 0,
        api_version: str = STRIPE_API_VERSION,
    ):
        if not api_key or not api_key.strip():
            raise ValueError(
                "A Stripe API key is required. "
                "It may be obtained from https://dashboard.stripe.com/apikeys"
            )
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")
        self._api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.api_version = api_version or STRIPE_API_VERSION
        self._configure_transport()

    @classmethod
    def from_settings(cls) -> StripeGatewayAdapter:
        """Build an adapter from the STRIPE_* Django settings."""
        return cls(
            api_key=getattr(settings, "STRIPE_SECRET_KEY", ""),
            timeout_seconds=getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10),
            max_retries=getattr(settings, "STRIPE_MAX_RETRIES", 0),
            api_version=getattr(settings, "STRIPE_API_VERSION", STRIPE_API_VERSION),
        )

    # =========================================================================
    # Configuration
    # =========================================================================

    def _configure_transport(self) -> None:
        """Install the Stripe HTTP client with this adapter's timeout."""
        current_timeout = getattr(stripe.default_http_client, "_timeout", None)
        if isinstance(current_timeout, (int, float)) and current_timeout != self.timeout_seconds:
            self.get_logger().warning(
                "Replacing the shared Stripe HTTP client timeout of %ss with %ss",
                current_timeout,
                self.timeout_seconds,
            )
        stripe.default_http_client = stripe.RequestsClient(timeout=self.timeout_seconds)

    def _request_options(self) -> dict[str, Any]:
        return {
            "api_key": self._api_key,
            "stripe_version": self.api_version,
            "max_network_retries": self.max_retries,
        }

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(api_key='{self._api_key[:7]}...')"

    def _call(
        self,
        operation: str,
        func: Callable[..., Any],
        *args: Any,
        log_context: dict[str, Any] | None = None,
        mutation: bool = False,
        **params: Any,
    ) -> Any:
        """
        Run one Stripe call with the adapter's request options, timing
        and logging.

        Mutations log at INFO, reads at DEBUG.

        Raises:
            StripeGatewayError: Translated from any failure
        """
        logger = self.get_logger()
        level = logging.INFO if mutation else logging.DEBUG
        context = {"operation": operation, **(log_context or {})}

        start_time = time.time()
        logger.log(level, "Starting Stripe operation", extra=context)

        try:
            result = func(*args, **self._request_options(), **params)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, context, duration_ms)
            raise  # Never reached, but satisfies type checker

        duration_ms = (time.time() - start_time) * 1000
        logger.log(
            level,
            "Stripe operation completed",
            extra={**context, "duration_ms": duration_ms},
        )
        return result

    # =========================================================================
    # Customers
    # =========================================================================

    def create_customer(
        self,
        email: str,
        description: str,
        metadata: dict[str, str] | None = None,
    ) -> CustomerResult:
        """
        Create a Stripe Customer.

        Args:
            email: Customer email
            description: Customer description
            metadata: Optional metadata (e.g. {"category": "gold"})

        Returns:
            CustomerResult for the created customer
        """
        customer = self._call(
            "create_customer",
            stripe.Customer.create,
            log_context={"email": email},
            mutation=True,
            **_without_none(email=email, description=description, metadata=metadata),
        )
        return CustomerResult.from_stripe(customer)

    def retrieve_customer(self, customer_id: str) -> CustomerResult | None:
        """
        Retrieve a customer by id.

        Returns:
            CustomerResult, or None if the id does not resolve or the
            customer has been deleted

        Raises:
            GatewayError: Any failure other than not-found
        """
        try:
            customer = self._call(
                "retrieve_customer",
                stripe.Customer.retrieve,
                customer_id,
                log_context={"customer_id": customer_id},
            )
        except EntityNotFoundError:
            self.get_logger().debug(
                "Could not find customer", extra={"customer_id": customer_id}
            )
            return None

        result = CustomerResult.from_stripe(customer)
        if result.deleted:
            return None
        return result

    def list_customers_page(
        self,
        limit: int = 100,
        starting_after: str | None = None,
        email: str | None = None,
    ) -> Page[CustomerResult]:
        """
        Fetch one page of active customers, optionally by exact email.

        Args:
            limit: Page size (1-100)
            starting_after: Id of the last customer of the previous page
            email: Only customers with this exact email
        """
        listing = self._call(
            "list_customers",
            stripe.Customer.list,
            log_context={"limit": limit, "starting_after": starting_after},
            **_without_none(limit=limit, starting_after=starting_after, email=email),
        )
        return _page(listing, CustomerResult.from_stripe)

    def update_customer(self, customer_id: str, **fields: Any) -> CustomerResult:
        """
        Update fields of a customer (email, metadata, source, coupon, ...).

        Raises:
            EntityNotFoundError: Customer id does not resolve
        """
        customer = self._call(
            "update_customer",
            stripe.Customer.modify,
            customer_id,
            log_context={"customer_id": customer_id, "fields": sorted(fields)},
            mutation=True,
            **fields,
        )
        return CustomerResult.from_stripe(customer)

    def delete_customer(self, customer_id: str) -> None:
        """
        Delete a customer.

        Stripe keeps deleted customers for history; they no longer appear
        in listings and cannot be used for new operations.
        """
        self._call(
            "delete_customer",
            stripe.Customer.delete,
            customer_id,
            log_context={"customer_id": customer_id},
            mutation=True,
        )

    # =========================================================================
    # Payment Sources
    # =========================================================================

    def list_card_sources_page(
        self,
        customer_id: str,
        limit: int = 100,
        starting_after: str | None = None,
    ) -> Page[PaymentSourceResult]:
        """Fetch one page of the card sources attached to a customer."""
        listing = self._call(
            "list_card_sources",
            stripe.Customer.list_sources,
            customer_id,
            log_context={"customer_id": customer_id, "limit": limit},
            **_without_none(object="card", limit=limit, starting_after=starting_after),
        )
        return _page(listing, PaymentSourceResult.from_stripe)

    def delete_source(self, customer_id: str, source_id: str) -> None:
        """Detach and delete one payment source from a customer."""
        self._call(
            "delete_source",
            stripe.Customer.delete_source,
            customer_id,
            source_id,
            log_context={"customer_id": customer_id, "source_id": source_id},
            mutation=True,
        )

    # =========================================================================
    # Plans and Coupons
    # =========================================================================

    def retrieve_plan(self, plan_id: str) -> PlanResult:
        """
        Retrieve a plan by id.

        Raises:
            EntityNotFoundError: Plan does not exist
        """
        plan = self._call(
            "retrieve_plan",
            stripe.Plan.retrieve,
            plan_id,
            log_context={"plan_id": plan_id},
        )
        return PlanResult.from_stripe(plan)

    def retrieve_coupon(self, coupon_id: str) -> CouponResult:
        """
        Retrieve a coupon by id.

        Raises:
            EntityNotFoundError: Coupon does not exist
        """
        coupon = self._call(
            "retrieve_coupon",
            stripe.Coupon.retrieve,
            coupon_id,
            log_context={"coupon_id": coupon_id},
        )
        return CouponResult.from_stripe(coupon)

    def list_coupons_page(
        self,
        limit: int = 100,
        starting_after: str | None = None,
    ) -> Page[CouponResult]:
        """Fetch one page of coupons."""
        listing = self._call(
            "list_coupons",
            stripe.Coupon.list,
            log_context={"limit": limit, "starting_after": starting_after},
            **_without_none(limit=limit, starting_after=starting_after),
        )
        return _page(listing, CouponResult.from_stripe)

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def create_subscription(self, customer_id: str, plan_id: str) -> SubscriptionResult:
        """
        Subscribe a customer to a plan, charging automatically.

        Stripe creates and attempts to pay the first invoice right away
        using the customer's default source.
        """
        subscription = self._call(
            "create_subscription",
            stripe.Subscription.create,
            log_context={"customer_id": customer_id, "plan_id": plan_id},
            mutation=True,
            customer=customer_id,
            items=[{"plan": plan_id}],
            collection_method=COLLECTION_METHOD,
        )
        return SubscriptionResult.from_stripe(subscription)

    def list_subscriptions(
        self,
        customer_id: str,
        plan_id: str | None = None,
        limit: int = 100,
    ) -> list[SubscriptionResult]:
        """
        List the non-canceled subscriptions of a customer.

        Args:
            customer_id: Customer whose subscriptions to list
            plan_id: Only subscriptions to this plan
            limit: Maximum number returned
        """
        listing = self._call(
            "list_subscriptions",
            stripe.Subscription.list,
            log_context={"customer_id": customer_id, "plan_id": plan_id},
            **_without_none(customer=customer_id, plan=plan_id, limit=limit),
        )
        return _page(listing, SubscriptionResult.from_stripe).items

    def cancel_subscription(self, subscription_id: str) -> SubscriptionResult:
        """Cancel a subscription immediately."""
        subscription = self._call(
            "cancel_subscription",
            stripe.Subscription.cancel,
            subscription_id,
            log_context={"subscription_id": subscription_id},
            mutation=True,
        )
        return SubscriptionResult.from_stripe(subscription)

    # =========================================================================
    # Invoices and Charges
    # =========================================================================

    def list_invoices_page(
        self,
        limit: int = 100,
        starting_after: str | None = None,
        subscription_id: str | None = None,
    ) -> Page[InvoiceResult]:
        """Fetch one page of invoices, optionally for one subscription."""
        listing = self._call(
            "list_invoices",
            stripe.Invoice.list,
            log_context={"limit": limit, "subscription_id": subscription_id},
            **_without_none(
                limit=limit,
                starting_after=starting_after,
                subscription=subscription_id,
            ),
        )
        return _page(listing, InvoiceResult.from_stripe)

    def retrieve_charge(self, charge_id: str) -> ChargeResult:
        """
        Retrieve a charge by id.

        Raises:
            EntityNotFoundError: Charge does not exist
        """
        charge = self._call(
            "retrieve_charge",
            stripe.Charge.retrieve,
            charge_id,
            log_context={"charge_id": charge_id},
        )
        return ChargeResult.from_stripe(charge)

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to gateway exceptions.

        The Stripe exception is chained as ``__cause__``.

        Raises:
            EntityNotFoundError: Referenced id does not exist
            GatewayCardDeclinedError: Card was declined
            GatewayInvalidRequestError: Invalid request parameters
            GatewayAuthenticationError: Invalid API key or permissions
            GatewayRateLimitError: Rate limited
            GatewayUnavailableError: Network, server or unexpected error
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}
        stripe_code = getattr(error, "code", None)
        http_status = getattr(error, "http_status", None)

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "decline_code": decline_code},
            )
            raise GatewayCardDeclinedError(
                str(getattr(error, "user_message", None) or error),
                stripe_code=stripe_code,
                decline_code=decline_code,
                http_status=http_status,
            ) from error

        elif isinstance(error, stripe.InvalidRequestError):
            if stripe_code == RESOURCE_MISSING or http_status == 404:
                logger.debug(
                    "Stripe resource not found",
                    extra={**log_context, "stripe_code": stripe_code},
                )
                raise EntityNotFoundError(
                    str(getattr(error, "user_message", None) or error),
                    details={
                        "operation": log_context.get("operation"),
                        "stripe_code": stripe_code,
                    },
                ) from error

            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": stripe_code},
            )
            raise GatewayInvalidRequestError(
                str(error),
                stripe_code=stripe_code,
                http_status=http_status,
            ) from error

        elif isinstance(error, (stripe.AuthenticationError, stripe.PermissionError)):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise GatewayAuthenticationError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
                http_status=http_status,
            ) from error

        elif isinstance(error, stripe.RateLimitError):
            logger.warning(
                "Rate limited by Stripe",
                extra=log_context,
            )
            raise GatewayRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
                http_status=http_status,
            ) from error

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            ) from error

        elif isinstance(error, stripe.APIError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code="api_error",
                http_status=http_status,
            ) from error

        elif isinstance(error, stripe.StripeError):
            logger.error(
                f"Stripe error: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayError(
                str(error),
                stripe_code=stripe_code,
                http_status=http_status,
            ) from error

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayUnavailableError(
                f"Unexpected Stripe error: {error}",
                stripe_code="unknown_error",
            ) from error
