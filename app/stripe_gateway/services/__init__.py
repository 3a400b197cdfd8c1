"""
Business rule services of the gateway client.

This module provides:
- CustomerService: Customer CRUD, email uniqueness, category listings
- PaymentSourceService: Default payment source replacement and removal
- SubscriptionService: One-subscription-per-customer lifecycle
- BillingService: Coupons, invoices and charges

Services raise StripeGatewayError subclasses; StripeGatewayClient turns
them into ServiceResult values for callers.
"""

from stripe_gateway.services.billing_service import BillingService
from stripe_gateway.services.customer_service import CustomerService
from stripe_gateway.services.payment_source_service import PaymentSourceService
from stripe_gateway.services.subscription_service import SubscriptionService

__all__ = [
    "BillingService",
    "CustomerService",
    "PaymentSourceService",
    "SubscriptionService",
]
