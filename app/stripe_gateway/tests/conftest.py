"""
Pytest fixtures for gateway service and client tests.

Sections:
    - Fake Gateway Fixtures
    - Service Fixtures
    - Seeded Data Fixtures
"""

import pytest

from stripe_gateway.client import StripeGatewayClient
from stripe_gateway.services import (
    BillingService,
    CustomerService,
    PaymentSourceService,
    SubscriptionService,
)
from stripe_gateway.tests.fakes import InMemoryGatewayAdapter

PLAN_ID = "gold-monthly"
PLAN_AMOUNT_CENTS = 10000
COUPON_ID = "TEN_PERCENT_OFF"


# =============================================================================
# Fake Gateway Fixtures
# =============================================================================


@pytest.fixture
def gateway():
    """Empty in-memory Stripe account with one plan and one coupon."""
    fake = InMemoryGatewayAdapter()
    fake.add_plan(PLAN_ID, PLAN_AMOUNT_CENTS)
    fake.add_coupon(COUPON_ID, percent_off=10)
    return fake


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def customer_service(gateway):
    return CustomerService(gateway)


@pytest.fixture
def payment_source_service(gateway, customer_service):
    return PaymentSourceService(gateway, customer_service)


@pytest.fixture
def billing_service(gateway, customer_service):
    return BillingService(gateway, customer_service)


@pytest.fixture
def subscription_service(gateway, customer_service, billing_service):
    return SubscriptionService(gateway, customer_service, billing_service)


@pytest.fixture
def client(gateway):
    """Facade wired to the in-memory account."""
    return StripeGatewayClient(gateway)


# =============================================================================
# Seeded Data Fixtures
# =============================================================================


@pytest.fixture
def customer_id(customer_service):
    """An active customer without payment source."""
    return customer_service.create_customer("ada@example.com", "Ada Lovelace")


@pytest.fixture
def paying_customer_id(gateway, customer_service):
    """An active customer with a default card."""
    customer_id = customer_service.create_customer(
        "grace@example.com", "Grace Hopper", category="gold"
    )
    gateway.update_customer(customer_id, source="tok_visa")
    return customer_id
