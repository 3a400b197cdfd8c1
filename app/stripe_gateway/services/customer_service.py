"""
Customer service enforcing the customer business rules.

This module provides the CustomerService class which sits between the
gateway client facade and the Stripe adapter. It enforces:
1. Email uniqueness among active customers (create and change email)
2. Required inputs before any remote call
3. "At most one customer per email" on lookups
4. Category filtering done one listing page at a time

Usage:
    from stripe_gateway.services import CustomerService

    customers = CustomerService(adapter)

    customer_id = customers.create_customer(
        "ada@example.com", "Ada Lovelace", category="gold"
    )
    gold = customers.list_all_customers_by_category("gold")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService

from stripe_gateway.exceptions import (
    AmbiguousResultError,
    DuplicateEmailError,
    EntityNotFoundError,
    InternalInconsistencyError,
    InvalidArgumentError,
)
from stripe_gateway.pagination import MAX_PAGE_SIZE, collect_all
from stripe_gateway.types import CATEGORY_METADATA_KEY, CustomerResult, CustomerSummary

if TYPE_CHECKING:
    from stripe_gateway.adapters import StripeGatewayAdapter

MIN_EMAIL_LOOKUP_SIZE = 2


class CustomerService(BaseService):
    """
    Service for customer operations.

    Customers are owned by Stripe; every read is a remote fetch. Deleted
    customers are kept by Stripe for history but treated here as absent.
    """

    def __init__(self, adapter: StripeGatewayAdapter, page_size: int = MAX_PAGE_SIZE):
        self.adapter = adapter
        self.page_size = page_size

    # =========================================================================
    # Lookups
    # =========================================================================

    def retrieve_customer_by_id(self, customer_id: str) -> CustomerResult | None:
        """
        Return the customer with this id, or None if it does not resolve.

        Raises:
            GatewayError: Any remote failure other than not-found
        """
        if not customer_id:
            return None
        return self.adapter.retrieve_customer(customer_id)

    def require_customer(self, customer_id: str) -> CustomerResult:
        """
        Return the customer with this id.

        Raises:
            EntityNotFoundError: The id does not resolve
        """
        customer = self.retrieve_customer_by_id(customer_id)
        if customer is None:
            raise EntityNotFoundError(
                f"Could not find customer with Id: {customer_id}",
                details={"customer_id": customer_id},
            )
        return customer

    def retrieve_customer_by_email(self, email: str) -> CustomerResult | None:
        """
        Return the single active customer with this exact email.

        Returns:
            The customer, or None when no customer has this email

        Raises:
            AmbiguousResultError: More than one customer has this email
        """
        if not email:
            return None
        # Two results are enough to tell a unique email from a shared one
        page = self.adapter.list_customers_page(
            limit=max(MIN_EMAIL_LOOKUP_SIZE, self.page_size), email=email
        )
        matches = [customer for customer in page.items if customer.email == email]

        self.get_logger().debug(
            "Retrieved %s customers with email %s", len(matches), email
        )
        if len(matches) > 1 or (matches and page.has_more):
            raise AmbiguousResultError(
                f"More than one customer with the same email address ({email}) found!",
                details={"email": email, "count": len(matches)},
            )
        return matches[0] if matches else None

    # =========================================================================
    # Create / Update / Delete
    # =========================================================================

    def create_customer(
        self,
        email: str,
        description: str,
        category: str | None = None,
    ) -> str:
        """
        Create a customer with a unique email.

        Args:
            email: Required, must not belong to an active customer
            description: Required
            category: Optional, stored as the ``category`` metadata value

        Returns:
            The id of the created customer

        Raises:
            InvalidArgumentError: Email or description missing
            DuplicateEmailError: Email already in use
        """
        missing = self.missing_required(email=email, description=description)
        if missing:
            raise InvalidArgumentError(
                "Email and description are required to create a customer",
                details={"fields": missing},
            )

        if self.retrieve_customer_by_email(email) is not None:
            raise DuplicateEmailError(
                "A customer with this email address already exists. "
                "Delete that customer (its history is retained) to reuse the email address",
                details={"email": email},
            )

        metadata = {CATEGORY_METADATA_KEY: category} if category else None
        self.adapter.create_customer(email=email, description=description, metadata=metadata)

        created = self.retrieve_customer_by_email(email)
        if created is None:
            raise InternalInconsistencyError(
                f"Could not retrieve just created customer with email {email}",
                details={"email": email},
            )
        self.get_logger().info("Created customer with Id %s", created.id)
        return created.id

    def update_customer_category(self, customer_id: str, category: str) -> None:
        """
        Replace the category of a customer.

        Raises:
            InvalidArgumentError: Category missing
            EntityNotFoundError: Customer does not resolve
        """
        if self.missing_required(category=category):
            raise InvalidArgumentError(
                f"Customer category needed to update for customerId: {customer_id}",
                details={"customer_id": customer_id, "fields": ["category"]},
            )
        customer = self.require_customer(customer_id)
        self.adapter.update_customer(
            customer.id, metadata={CATEGORY_METADATA_KEY: category}
        )
        self.get_logger().debug(
            "Updated customer with Id %s with category %s", customer.id, category
        )

    def change_customer_email(self, customer_id: str, new_email: str) -> None:
        """
        Change the email of a customer.

        Raises:
            InvalidArgumentError: New email missing
            DuplicateEmailError: Another customer already uses it
            EntityNotFoundError: Customer does not resolve
        """
        if self.missing_required(new_email=new_email):
            raise InvalidArgumentError(
                "New email to apply not specified!",
                details={"customer_id": customer_id, "fields": ["new_email"]},
            )

        existing = self.retrieve_customer_by_email(new_email)
        if existing is not None and existing.id != customer_id:
            raise DuplicateEmailError(
                f"Cannot change to email {new_email} because a customer "
                "already exists with that email address!",
                details={"email": new_email, "customer_id": existing.id},
            )

        customer = self.require_customer(customer_id)
        if existing is not None:
            return
        self.adapter.update_customer(customer.id, email=new_email)
        self.get_logger().debug("Updated email for customer with Id %s", customer.id)

    def delete_customer(self, customer_id: str) -> None:
        """
        Delete a customer; Stripe retains its history.

        Raises:
            EntityNotFoundError: Customer does not resolve
        """
        customer = self.require_customer(customer_id)
        self.adapter.delete_customer(customer.id)
        self.get_logger().info("Deleted customer with Id %s", customer.id)

    def delete_all_customers(self) -> int:
        """
        Delete every active customer, one call per customer.

        Deletions are independent: a failure stops the loop but earlier
        deletions stay in effect.

        Returns:
            Number of customers deleted
        """
        customers = self.list_all_customers()
        for summary in customers:
            self.adapter.delete_customer(summary.id)
        self.get_logger().debug("Deleted %s customers.", len(customers))
        return len(customers)

    # =========================================================================
    # Listings
    # =========================================================================

    def list_all_customers(self) -> list[CustomerSummary]:
        """Return a summary of every active customer."""
        return collect_all(
            self.adapter.list_customers_page,
            page_size=self.page_size,
            transform=CustomerSummary.from_customer,
        )

    def list_all_customers_by_category(self, category: str) -> list[CustomerSummary]:
        """
        Return a summary of every active customer in ``category``.

        Non-matching customers are dropped page by page instead of
        listing everything first.
        """
        return collect_all(
            self.adapter.list_customers_page,
            page_size=self.page_size,
            predicate=lambda customer: customer.category == category,
            transform=CustomerSummary.from_customer,
        )

    # =========================================================================
    # Flags
    # =========================================================================

    def is_customer_delinquent(self, customer_id: str) -> bool:
        """
        Return the delinquency flag reported by Stripe.

        A customer is delinquent when the latest automatic charge of its
        latest invoice failed.

        Raises:
            EntityNotFoundError: Customer does not resolve
        """
        return self.require_customer(customer_id).delinquent

    def does_customer_have_active_payment_source(self, customer_id: str) -> bool:
        """Return True if the customer resolves and has a default source."""
        customer = self.retrieve_customer_by_id(customer_id)
        return customer is not None and customer.has_payment_source
