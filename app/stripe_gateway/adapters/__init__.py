"""
Gateway adapters for external services.

All Stripe API calls made by the gateway client go through
StripeGatewayAdapter to get consistent error handling, per-request
credentials, and observability.

Usage:
    from stripe_gateway.adapters import StripeGatewayAdapter

    adapter = StripeGatewayAdapter(api_key="sk_test_...")
    customer = adapter.retrieve_customer("cus_123")
"""

from stripe_gateway.adapters.stripe_adapter import (
    STRIPE_API_VERSION,
    StripeGatewayAdapter,
    backoff_delay,
    is_retryable_gateway_error,
)

__all__ = [
    "STRIPE_API_VERSION",
    "StripeGatewayAdapter",
    "backoff_delay",
    "is_retryable_gateway_error",
]
