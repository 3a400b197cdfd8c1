"""
Subscription service: one subscription per customer, charged on creation.

Per-customer state machine:

    NoSubscription --subscribe(plan)--> Subscribed(plan)
    Subscribed(old) --subscribe(new)--> cancel all --> NoSubscription
                                        --> Subscribed(new)

Creating a subscription:
1. Validates the plan exists (retrieval attempt)
2. Validates the customer exists and has a default payment source
3. Cancels every existing subscription of the customer
4. Creates the new subscription, charging automatically
5. Re-resolves it by (customer, plan) to get its id
6. Fetches the latest invoice for logging only

The sequence is not atomic: a failure after step 3 leaves the customer
without a subscription. Concurrent subscribe calls for one customer race;
callers needing exclusion serialise them.

Usage:
    from stripe_gateway.services import SubscriptionService

    subscriptions = SubscriptionService(adapter, customers, billing)
    subscription_id = subscriptions.create_subscription_and_charge(
        "cus_123", "monthly-plan"
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.services import BaseService

from stripe_gateway.exceptions import (
    AmbiguousResultError,
    EntityNotFoundError,
    InternalInconsistencyError,
    InvalidArgumentError,
    InvalidPlanError,
    NoPaymentSourceError,
    StripeGatewayError,
)

if TYPE_CHECKING:
    from stripe_gateway.adapters import StripeGatewayAdapter
    from stripe_gateway.services.billing_service import BillingService
    from stripe_gateway.services.customer_service import CustomerService
    from stripe_gateway.types import SubscriptionResult


class SubscriptionService(BaseService):
    """
    Service for the customer-to-plan subscription lifecycle.

    Invariant: at most one live subscription per customer. Lookups that
    find more than one raise AmbiguousResultError instead of silently
    returning a collection.
    """

    def __init__(
        self,
        adapter: StripeGatewayAdapter,
        customers: CustomerService,
        billing: BillingService,
    ):
        self.adapter = adapter
        self.customers = customers
        self.billing = billing

    # =========================================================================
    # Validation
    # =========================================================================

    def is_plan_valid(self, plan_id: str) -> bool:
        """
        Return True if the plan exists on the gateway.

        Any retrieval failure (not found, network, ...) counts as invalid.
        """
        if not plan_id:
            return False
        try:
            self.adapter.retrieve_plan(plan_id)
        except StripeGatewayError as e:
            self.get_logger().debug(
                "Plan %s is not valid: %s", plan_id, e.message
            )
            return False
        return True

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_subscription_by_customer_and_plan(
        self,
        customer_id: str,
        plan_id: str,
    ) -> SubscriptionResult | None:
        """
        Return the customer's subscription to ``plan_id``, if any.

        Raises:
            AmbiguousResultError: More than one such subscription exists
        """
        subscriptions = self.adapter.list_subscriptions(customer_id, plan_id=plan_id)
        self.get_logger().debug(
            "Found %s subscriptions for customerId %s and planId %s",
            len(subscriptions),
            customer_id,
            plan_id,
        )
        if len(subscriptions) > 1:
            raise AmbiguousResultError(
                f"There are more than one subscriptions for this customerId "
                f"({customer_id}) with this planId ({plan_id}).",
                details={
                    "customer_id": customer_id,
                    "plan_id": plan_id,
                    "count": len(subscriptions),
                },
            )
        return subscriptions[0] if subscriptions else None

    def get_all_subscriptions_by_customer(self, customer_id: str) -> list[SubscriptionResult]:
        """
        Return the customer's subscriptions (zero or one).

        Raises:
            AmbiguousResultError: More than one subscription exists
        """
        subscriptions = self.adapter.list_subscriptions(customer_id)
        self.get_logger().debug(
            "Found %s subscriptions for customerId %s.", len(subscriptions), customer_id
        )
        if len(subscriptions) > 1:
            raise AmbiguousResultError(
                f"There are more than one subscriptions for this customerId ({customer_id}).",
                details={"customer_id": customer_id, "count": len(subscriptions)},
            )
        return subscriptions

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def cancel_all_existing_subscriptions_for_customer(self, customer_id: str) -> int:
        """
        Cancel every subscription of the customer.

        Returns:
            Number of subscriptions canceled (0 when there were none)

        Raises:
            AmbiguousResultError: The customer has more than one subscription
        """
        subscriptions = self.get_all_subscriptions_by_customer(customer_id)
        for subscription in subscriptions:
            self.adapter.cancel_subscription(subscription.id)
            self.get_logger().debug(
                "Canceled subscription with SubscriptionId: %s for customerId %s",
                subscription.id,
                customer_id,
            )
        return len(subscriptions)

    def create_subscription_and_charge(self, customer_id: str, plan_id: str) -> str:
        """
        Subscribe a customer to a plan and charge it right away.

        Existing subscriptions of the customer are canceled first. The
        charge amount is the plan amount after any coupon applied to the
        customer.

        Returns:
            Id of the created subscription

        Raises:
            InvalidArgumentError: Customer or plan id missing
            InvalidPlanError: Plan does not exist
            EntityNotFoundError: Customer does not resolve
            NoPaymentSourceError: Customer has no default payment source
            AmbiguousResultError: More than one matching subscription
            InternalInconsistencyError: Created subscription not found
        """
        missing = self.missing_required(customer_id=customer_id, plan_id=plan_id)
        if missing:
            raise InvalidArgumentError(
                "Customer and plan are required to create a subscription",
                details={"fields": missing},
            )

        if not self.is_plan_valid(plan_id):
            raise InvalidPlanError(
                f"PlanId {plan_id} is invalid. Create a valid plan using the "
                "Stripe Dashboard and specify its planId in this call",
                details={"plan_id": plan_id},
            )

        customer = self.customers.require_customer(customer_id)
        if not customer.has_payment_source:
            raise NoPaymentSourceError(
                f"There is no payment source for customerId {customer_id}",
                details={"customer_id": customer_id},
            )

        self.cancel_all_existing_subscriptions_for_customer(customer.id)

        self.get_logger().debug(
            "No subscription for this customer and plan found, creating a new subscription."
        )
        self.adapter.create_subscription(customer.id, plan_id)

        created = self.get_subscription_by_customer_and_plan(customer.id, plan_id)
        if created is None:
            raise InternalInconsistencyError(
                "Could not retrieve just created Subscription!",
                details={"customer_id": customer.id, "plan_id": plan_id},
            )
        self.get_logger().debug("Created new subscription with Id %s.", created.id)

        self._log_charge(created)
        return created.id

    def create_subscription_for_customer_and_charge(self, email: str, plan_id: str) -> str:
        """
        Subscribe the customer with this email to a plan and charge it.

        Raises:
            EntityNotFoundError: No customer has this email
            (plus everything create_subscription_and_charge raises)
        """
        customer = self.customers.retrieve_customer_by_email(email)
        if customer is None:
            raise EntityNotFoundError(
                f"Could not find customer with email: {email}",
                details={"email": email},
            )
        return self.create_subscription_and_charge(customer.id, plan_id)

    def _log_charge(self, subscription: SubscriptionResult) -> None:
        """Log the amount charged for a new subscription; never raises."""
        try:
            invoice = self.billing.get_latest_invoice_for_subscription(subscription.id)
        except StripeGatewayError as e:
            self.get_logger().warning(
                "Could not fetch latest invoice for subscription %s: %s",
                subscription.id,
                e.message,
            )
            return
        amount = invoice.amount_paid if invoice is not None else "0.00"
        self.get_logger().info(
            "Created Subscription and charged $%s as per associated plan",
            amount,
            extra={"subscription_id": subscription.id},
        )
