"""
Pytest fixtures for Stripe adapter tests.

This module provides fixtures for testing the Stripe adapter, including
mock Stripe API responses, error conditions, and test data.

Sections:
    - Adapter Fixtures
    - Mock Stripe Response Fixtures
    - Mock Stripe Error Fixtures
    - Mock Stripe Client Fixtures
"""

from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest
import stripe

from stripe_gateway.adapters import STRIPE_API_VERSION, StripeGatewayAdapter

TEST_API_KEY = "sk_test_gateway123"

# Options the default test adapter sends with every Stripe call
REQUEST_OPTIONS = {
    "api_key": TEST_API_KEY,
    "stripe_version": STRIPE_API_VERSION,
    "max_network_retries": 0,
}


# =============================================================================
# Adapter Fixtures
# =============================================================================


@pytest.fixture
def mock_stripe_http_client():
    """Mock the Stripe HTTP client and restore the SDK transport settings."""
    with patch("stripe.RequestsClient") as mock, patch.object(
        stripe, "default_http_client", None
    ), patch.object(stripe, "max_network_retries", stripe.max_network_retries):
        yield mock


@pytest.fixture
def adapter(mock_stripe_http_client):
    """Adapter bound to a test API key."""
    return StripeGatewayAdapter(api_key=TEST_API_KEY)


# =============================================================================
# Mock Stripe Response Fixtures
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with to_dict support."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)

    def to_dict(self) -> dict[str, Any]:
        return self.data


@dataclass
class MockStripeList:
    """Mock Stripe list response with data attribute."""

    items: list[MockStripeObject]
    has_more: bool = False

    @property
    def data(self) -> list[MockStripeObject]:
        return self.items


@pytest.fixture
def mock_customer():
    """Create a mock Customer response."""

    def _create(
        id: str = "cus_test123",
        email: str = "ada@example.com",
        description: str = "Ada Lovelace",
        metadata: dict | None = None,
        default_source: str | None = None,
        delinquent: bool = False,
        discount: dict | None = None,
        deleted: bool | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "customer",
                "email": email,
                "description": description,
                "metadata": metadata or {},
                "default_source": default_source,
                "delinquent": delinquent,
                "discount": discount,
                "deleted": deleted,
            }
        )

    return _create


@pytest.fixture
def mock_subscription():
    """Create a mock Subscription response."""

    def _create(
        id: str = "sub_test123",
        customer: str = "cus_test123",
        plan_id: str = "gold-monthly",
        status: str = "active",
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "subscription",
                "customer": customer,
                "plan": {"id": plan_id, "object": "plan"},
                "status": status,
                "collection_method": "charge_automatically",
            }
        )

    return _create


@pytest.fixture
def mock_invoice():
    """Create a mock Invoice response."""

    def _create(
        id: str = "in_test123",
        subscription: str = "sub_test123",
        amount_paid: int = 9000,
        created: int = 1_700_000_000,
        charge: str | None = "ch_test123",
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "invoice",
                "customer": "cus_test123",
                "subscription": subscription,
                "amount_paid": amount_paid,
                "amount_due": amount_paid,
                "charge": charge,
                "status": "paid",
                "created": created,
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
    ) -> stripe.CardError:
        error = stripe.CardError(message=message, param=None, code=code)
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such customer: 'cus_missing'",
        param: str | None = "id",
        code: str | None = "resource_missing",
        http_status: int | None = 404,
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(
            message=message,
            param=param,
            code=code,
            http_status=http_status,
        )

    return _create


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError(message="Too many requests hit the API too quickly.")


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError."""
    return stripe.APIConnectionError(message="Could not connect to Stripe.")


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError(message="Something went wrong on Stripe's end.")


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError(message="Invalid API Key provided.")


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture
def mock_stripe_customer(mock_customer):
    """Mock stripe.Customer API."""
    with patch("stripe.Customer") as mock:
        mock.create.return_value = mock_customer()
        mock.retrieve.return_value = mock_customer()
        mock.modify.return_value = mock_customer()
        mock.list.return_value = MockStripeList(items=[], has_more=False)
        mock.list_sources.return_value = MockStripeList(items=[], has_more=False)
        yield mock


@pytest.fixture
def mock_stripe_subscription(mock_subscription):
    """Mock stripe.Subscription API."""
    with patch("stripe.Subscription") as mock:
        mock.create.return_value = mock_subscription()
        mock.cancel.return_value = mock_subscription(status="canceled")
        mock.list.return_value = MockStripeList(items=[mock_subscription()])
        yield mock


@pytest.fixture
def mock_stripe_plan():
    """Mock stripe.Plan API."""
    with patch("stripe.Plan") as mock:
        mock.retrieve.return_value = MockStripeObject(
            {
                "id": "gold-monthly",
                "object": "plan",
                "amount": 10000,
                "currency": "usd",
                "interval": "month",
                "active": True,
            }
        )
        yield mock


@pytest.fixture
def mock_stripe_coupon():
    """Mock stripe.Coupon API."""
    with patch("stripe.Coupon") as mock:
        mock.retrieve.return_value = MockStripeObject(
            {"id": "TEN_PERCENT_OFF", "object": "coupon", "percent_off": 10.0}
        )
        mock.list.return_value = MockStripeList(items=[], has_more=False)
        yield mock


@pytest.fixture
def mock_stripe_invoice(mock_invoice):
    """Mock stripe.Invoice API."""
    with patch("stripe.Invoice") as mock:
        mock.list.return_value = MockStripeList(items=[mock_invoice()], has_more=False)
        yield mock


@pytest.fixture
def mock_stripe_charge():
    """Mock stripe.Charge API."""
    with patch("stripe.Charge") as mock:
        mock.retrieve.return_value = MockStripeObject(
            {
                "id": "ch_test123",
                "object": "charge",
                "amount": 9000,
                "currency": "usd",
                "status": "succeeded",
                "paid": True,
            }
        )
        yield mock
