"""
Billing service for coupons, invoices and charges.

Coupons are defined on the Stripe dashboard and applied to customers by
reference; Stripe applies them when computing later invoices. Invoices
and charges are read-only here.

Usage:
    from stripe_gateway.services import BillingService

    billing = BillingService(adapter, customers)
    billing.apply_coupon_to_customer("cus_123", "TEN_PERCENT_OFF")

    invoice = billing.get_latest_invoice_for_subscription("sub_123")
    if invoice is not None:
        charge = billing.get_charge(invoice.charge_id)
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from core.services import BaseService

from stripe_gateway.exceptions import (
    InvalidArgumentError,
    InvalidCouponError,
    StripeGatewayError,
)
from stripe_gateway.pagination import MAX_PAGE_SIZE, collect_all

if TYPE_CHECKING:
    from stripe_gateway.adapters import StripeGatewayAdapter
    from stripe_gateway.services.customer_service import CustomerService
    from stripe_gateway.types import ChargeResult, CouponResult, InvoiceResult


def _created_timestamp(invoice: InvoiceResult) -> float:
    return invoice.created.timestamp() if invoice.created else 0.0


class BillingService(BaseService):
    """Service for coupon, invoice and charge operations."""

    def __init__(
        self,
        adapter: StripeGatewayAdapter,
        customers: CustomerService,
        page_size: int = MAX_PAGE_SIZE,
    ):
        self.adapter = adapter
        self.customers = customers
        self.page_size = page_size

    # =========================================================================
    # Coupons
    # =========================================================================

    def apply_coupon_to_customer(self, customer_id: str, coupon_id: str) -> None:
        """
        Apply a dashboard-defined coupon to a customer.

        Raises:
            InvalidArgumentError: Coupon id missing
            InvalidCouponError: Coupon does not exist
            EntityNotFoundError: Customer does not resolve
        """
        if self.missing_required(coupon_id=coupon_id):
            raise InvalidArgumentError(
                "CouponId to apply not specified!",
                details={"customer_id": customer_id, "fields": ["coupon_id"]},
            )

        try:
            self.adapter.retrieve_coupon(coupon_id)
        except StripeGatewayError as e:
            raise InvalidCouponError(
                f"This coupon {coupon_id} does not exist!",
                details={"coupon_id": coupon_id},
            ) from e

        customer = self.customers.require_customer(customer_id)
        self.adapter.update_customer(customer.id, coupon=coupon_id)
        self.get_logger().debug("Added coupon for customer with Id %s", customer.id)

    def list_all_coupons(self) -> list[CouponResult]:
        """Return every coupon."""
        return collect_all(self.adapter.list_coupons_page, page_size=self.page_size)

    # =========================================================================
    # Invoices and Charges
    # =========================================================================

    def list_all_invoices(self) -> list[InvoiceResult]:
        """Return every invoice."""
        return collect_all(self.adapter.list_invoices_page, page_size=self.page_size)

    def get_latest_invoice_for_subscription(self, subscription_id: str) -> InvoiceResult | None:
        """
        Return the most recently created invoice of a subscription.

        Returns:
            The invoice with the greatest creation time, or None if the
            subscription has no invoice yet
        """
        invoices = collect_all(
            partial(self.adapter.list_invoices_page, subscription_id=subscription_id),
            page_size=self.page_size,
        )
        if not invoices:
            return None
        invoices.sort(key=_created_timestamp, reverse=True)
        return invoices[0]

    def get_charge(self, charge_id: str) -> ChargeResult:
        """
        Return the charge with this id.

        Raises:
            InvalidArgumentError: Charge id missing
            EntityNotFoundError: Charge does not exist
        """
        if self.missing_required(charge_id=charge_id):
            raise InvalidArgumentError(
                "Charge id not specified!",
                details={"fields": ["charge_id"]},
            )
        return self.adapter.retrieve_charge(charge_id)
