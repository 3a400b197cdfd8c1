"""
Payment source service for the tokenized cards of a customer.

A customer holds at most one default payment source. Replacing it
overwrites the previous default; removing deletes every card attached to
the customer.

Usage:
    from stripe_gateway.services import PaymentSourceService

    sources = PaymentSourceService(adapter, customers)
    sources.replace_payment_source_for_customer("cus_123", "tok_visa")
    sources.remove_payment_source_from_customer("cus_123")
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from core.services import BaseService

from stripe_gateway.exceptions import EntityNotFoundError, GatewayError, InvalidArgumentError
from stripe_gateway.pagination import MAX_PAGE_SIZE, collect_all

if TYPE_CHECKING:
    from stripe_gateway.adapters import StripeGatewayAdapter
    from stripe_gateway.services.customer_service import CustomerService
    from stripe_gateway.types import PaymentSourceResult


class PaymentSourceService(BaseService):
    """Service for attaching and removing customer payment sources."""

    def __init__(
        self,
        adapter: StripeGatewayAdapter,
        customers: CustomerService,
        page_size: int = MAX_PAGE_SIZE,
    ):
        self.adapter = adapter
        self.customers = customers
        self.page_size = page_size

    def replace_payment_source_for_customer(self, customer_id: str, token: str) -> None:
        """
        Make ``token`` the customer's default payment source.

        Any previous default source is superseded.

        Raises:
            InvalidArgumentError: Token missing
            EntityNotFoundError: Customer does not resolve
        """
        if self.missing_required(token=token):
            raise InvalidArgumentError(
                "New token to apply not specified!",
                details={"customer_id": customer_id, "fields": ["token"]},
            )
        customer = self.customers.require_customer(customer_id)
        self.adapter.update_customer(customer.id, source=token)
        self.get_logger().debug("Added token for customer with Id %s", customer.id)

    def list_payment_sources_for_customer(self, customer_id: str) -> list[PaymentSourceResult]:
        """
        Return every card attached to the customer.

        Raises:
            EntityNotFoundError: Customer does not resolve
        """
        customer = self.customers.require_customer(customer_id)
        return collect_all(
            partial(self.adapter.list_card_sources_page, customer.id),
            page_size=self.page_size,
        )

    def remove_payment_source_from_customer(self, customer_id: str) -> int:
        """
        Delete every card attached to the customer.

        Cards are deleted one by one. A failing deletion raises and the
        remaining cards are left in place; cards already deleted stay
        deleted. A card that disappears between listing and deletion is a
        partial failure too and raises GatewayError, not NOT_FOUND.

        Returns:
            Number of cards deleted

        Raises:
            EntityNotFoundError: Customer does not resolve
            GatewayError: A deletion failed
        """
        sources = self.list_payment_sources_for_customer(customer_id)
        for deleted, source in enumerate(sources):
            try:
                self.adapter.delete_source(customer_id, source.id)
            except EntityNotFoundError as e:
                raise GatewayError(
                    f"Card {source.id} vanished while removing cards of customer {customer_id}",
                    details={
                        "customer_id": customer_id,
                        "source_id": source.id,
                        "deleted": deleted,
                    },
                ) from e
            self.get_logger().debug(
                "Deleted card Id %s of customer %s", source.id, customer_id
            )
        return len(sources)
