"""
Gateway client facade.

StripeGatewayClient is the single entry point callers use. It wires the
adapter and the business rule services together and is the result
boundary: every operation returns a ServiceResult instead of raising.

Failure results carry:
- ``error``: human readable message
- ``error_code``: one of stripe_gateway.exceptions.ErrorCode
- ``exception``: the StripeGatewayError raised inside, with the remote
  Stripe error chained as ``__cause__``

Business rule violations are logged at WARNING; remote failures at ERROR
with the traceback.

Usage:
    from stripe_gateway.client import StripeGatewayClient

    client = StripeGatewayClient.from_api_key("sk_test_...")

    result = client.create_customer("ada@example.com", "Ada Lovelace")
    if not result:
        if result.error_code == ErrorCode.DUPLICATE_EMAIL:
            ...
    customer_id = result.data
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings

from core.decorators import returns_service_result
from core.services import ServiceResult

from stripe_gateway.adapters import STRIPE_API_VERSION, StripeGatewayAdapter
from stripe_gateway.exceptions import GatewayError, StripeGatewayError
from stripe_gateway.pagination import MAX_PAGE_SIZE
from stripe_gateway.services import (
    BillingService,
    CustomerService,
    PaymentSourceService,
    SubscriptionService,
)

if TYPE_CHECKING:
    from stripe_gateway.types import (
        ChargeResult,
        CouponResult,
        CustomerResult,
        CustomerSummary,
        InvoiceResult,
        PaymentSourceResult,
        SubscriptionResult,
    )


def _log_level_for(exc: Exception) -> int:
    if isinstance(exc, GatewayError):
        return logging.ERROR
    return logging.WARNING


gateway_result = returns_service_result(
    catch=(StripeGatewayError,),
    log_level_for=_log_level_for,
)


class StripeGatewayClient:
    """
    Facade over the customer, payment source, subscription and billing
    services.

    The client keeps no mutable state beyond its collaborators and may be
    shared; it does not serialise concurrent calls for the same customer.
    """

    def __init__(self, adapter: StripeGatewayAdapter, page_size: int = MAX_PAGE_SIZE):
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        self.adapter = adapter
        self.page_size = page_size
        self.customers = CustomerService(adapter, page_size=page_size)
        self.payment_sources = PaymentSourceService(adapter, self.customers, page_size=page_size)
        self.billing = BillingService(adapter, self.customers, page_size=page_size)
        self.subscriptions = SubscriptionService(adapter, self.customers, self.billing)

    @classmethod
    def from_api_key(
        cls,
        api_key: str,
        timeout_seconds: int = 10,
        max_retries: int = 0,
        page_size: int = MAX_PAGE_SIZE,
        api_version: str = STRIPE_API_VERSION,
    ) -> StripeGatewayClient:
        """
        Build a client for one Stripe secret key.

        Raises:
            ValueError: Empty key or invalid transport settings
        """
        adapter = StripeGatewayAdapter(
            api_key=api_key,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
            api_version=api_version,
        )
        return cls(adapter, page_size=page_size)

    @classmethod
    def from_settings(cls) -> StripeGatewayClient:
        """Build a client from the STRIPE_* Django settings."""
        return cls(
            StripeGatewayAdapter.from_settings(),
            page_size=getattr(settings, "STRIPE_PAGE_SIZE", MAX_PAGE_SIZE),
        )

    def __repr__(self) -> str:
        return f"<StripeGatewayClient adapter={self.adapter!r} page_size={self.page_size}>"

    # =========================================================================
    # Customers
    # =========================================================================

    @gateway_result
    def create_customer(
        self,
        email: str,
        description: str,
        category: str | None = None,
    ) -> ServiceResult[str]:
        """Create a customer with a unique email; data is the new id."""
        return self.customers.create_customer(email, description, category=category)

    @gateway_result
    def retrieve_customer_by_id(self, customer_id: str) -> ServiceResult[CustomerResult | None]:
        """Data is the customer, or None if the id does not resolve."""
        return self.customers.retrieve_customer_by_id(customer_id)

    @gateway_result
    def retrieve_customer_by_email(self, email: str) -> ServiceResult[CustomerResult | None]:
        """Data is the customer with this email, or None."""
        return self.customers.retrieve_customer_by_email(email)

    @gateway_result
    def list_all_customers(self) -> ServiceResult[list[CustomerSummary]]:
        return self.customers.list_all_customers()

    @gateway_result
    def list_all_customers_by_category(self, category: str) -> ServiceResult[list[CustomerSummary]]:
        return self.customers.list_all_customers_by_category(category)

    @gateway_result
    def update_customer_category(self, customer_id: str, category: str) -> ServiceResult[None]:
        return self.customers.update_customer_category(customer_id, category)

    @gateway_result
    def change_customer_email(self, customer_id: str, new_email: str) -> ServiceResult[None]:
        return self.customers.change_customer_email(customer_id, new_email)

    @gateway_result
    def delete_customer(self, customer_id: str) -> ServiceResult[None]:
        return self.customers.delete_customer(customer_id)

    @gateway_result
    def delete_all_customers(self) -> ServiceResult[int]:
        """Delete every active customer; data is the number deleted."""
        return self.customers.delete_all_customers()

    @gateway_result
    def is_customer_delinquent(self, customer_id: str) -> ServiceResult[bool]:
        return self.customers.is_customer_delinquent(customer_id)

    @gateway_result
    def does_customer_have_active_payment_source(self, customer_id: str) -> ServiceResult[bool]:
        return self.customers.does_customer_have_active_payment_source(customer_id)

    # =========================================================================
    # Payment Sources
    # =========================================================================

    @gateway_result
    def replace_payment_source_for_customer(self, customer_id: str, token: str) -> ServiceResult[None]:
        return self.payment_sources.replace_payment_source_for_customer(customer_id, token)

    @gateway_result
    def list_payment_sources_for_customer(
        self, customer_id: str
    ) -> ServiceResult[list[PaymentSourceResult]]:
        return self.payment_sources.list_payment_sources_for_customer(customer_id)

    @gateway_result
    def remove_payment_source_from_customer(self, customer_id: str) -> ServiceResult[int]:
        """Delete every card of the customer; data is the number deleted."""
        return self.payment_sources.remove_payment_source_from_customer(customer_id)

    # =========================================================================
    # Subscriptions
    # =========================================================================

    @gateway_result
    def is_plan_valid(self, plan_id: str) -> ServiceResult[bool]:
        return self.subscriptions.is_plan_valid(plan_id)

    @gateway_result
    def create_subscription_and_charge(self, customer_id: str, plan_id: str) -> ServiceResult[str]:
        """
        Replace the customer's subscription with one to ``plan_id``.

        Data is the new subscription id. Failure codes: INVALID_ARGUMENT,
        INVALID_PLAN, NOT_FOUND, NO_PAYMENT_SOURCE, AMBIGUOUS_RESULT,
        INTERNAL_INCONSISTENCY, GATEWAY_ERROR.
        """
        return self.subscriptions.create_subscription_and_charge(customer_id, plan_id)

    @gateway_result
    def create_subscription_for_customer_and_charge(
        self, email: str, plan_id: str
    ) -> ServiceResult[str]:
        return self.subscriptions.create_subscription_for_customer_and_charge(email, plan_id)

    @gateway_result
    def cancel_all_existing_subscriptions_for_customer(self, customer_id: str) -> ServiceResult[int]:
        return self.subscriptions.cancel_all_existing_subscriptions_for_customer(customer_id)

    @gateway_result
    def get_subscription_by_customer_and_plan(
        self, customer_id: str, plan_id: str
    ) -> ServiceResult[SubscriptionResult | None]:
        return self.subscriptions.get_subscription_by_customer_and_plan(customer_id, plan_id)

    @gateway_result
    def get_all_subscriptions_by_customer(
        self, customer_id: str
    ) -> ServiceResult[list[SubscriptionResult]]:
        return self.subscriptions.get_all_subscriptions_by_customer(customer_id)

    # =========================================================================
    # Coupons, Invoices and Charges
    # =========================================================================

    @gateway_result
    def apply_coupon_to_customer(self, customer_id: str, coupon_id: str) -> ServiceResult[None]:
        return self.billing.apply_coupon_to_customer(customer_id, coupon_id)

    @gateway_result
    def list_all_coupons(self) -> ServiceResult[list[CouponResult]]:
        return self.billing.list_all_coupons()

    @gateway_result
    def list_all_invoices(self) -> ServiceResult[list[InvoiceResult]]:
        return self.billing.list_all_invoices()

    @gateway_result
    def get_latest_invoice_for_subscription(
        self, subscription_id: str
    ) -> ServiceResult[InvoiceResult | None]:
        return self.billing.get_latest_invoice_for_subscription(subscription_id)

    @gateway_result
    def get_charge(self, charge_id: str) -> ServiceResult[ChargeResult]:
        return self.billing.get_charge(charge_id)


def get_gateway_client() -> StripeGatewayClient:
    """
    Return the client built when the stripe_gateway app became ready.

    Raises:
        ImproperlyConfigured: STRIPE_ENABLED is off
    """
    from stripe_gateway.apps import StripeGatewayConfig

    return StripeGatewayConfig.get_client()
