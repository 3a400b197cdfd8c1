"""
Data types for gateway operations.

This module defines the dataclasses returned by the gateway adapter.
Each one is built from a Stripe object through ``from_stripe`` and keeps
the full Stripe payload in ``raw_response`` for debugging.

Types:
    CustomerResult: Full customer view
    CustomerSummary: Reduced customer projection for bulk listings
    SubscriptionResult: Customer-to-plan link
    PlanResult: Billing template defined on the dashboard
    CouponResult: Discount definition
    InvoiceResult: Invoice generated for a subscription
    ChargeResult: Completed payment attempt
    PaymentSourceResult: Tokenized card attached to a customer
    Page: One page of a listing endpoint

Usage:
    from stripe_gateway.types import CustomerSummary

    summary = CustomerSummary.from_customer(customer)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

# Metadata key holding the free-form customer category
CATEGORY_METADATA_KEY = "category"

T = TypeVar("T")


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a Stripe object, a plain dict, or None."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _as_dict(value: Any) -> dict[str, Any]:
    if not value:
        return {}
    if hasattr(value, "to_dict"):
        return dict(value.to_dict())
    return dict(value)


def _ref_id(value: Any) -> str | None:
    """Id of a reference that may be a bare id or an expanded object."""
    if value is None or isinstance(value, str):
        return value
    return _field(value, "id")


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


# =============================================================================
# Customers
# =============================================================================


@dataclass
class CustomerResult:
    """
    Result from Stripe Customer operations.

    Attributes:
        id: Customer ID (cus_xxx)
        email: Customer email, unique among active customers
        description: Free-text description
        category: Value of the ``category`` metadata key, if set
        delinquent: Whether the latest automatic charge failed
        default_source: Id of the default payment source, if any
        coupon_id: Coupon applied through the customer's discount, if any
        metadata: All metadata key-value pairs
        deleted: Whether the customer has been deleted
        raw_response: Full Stripe response dict
    """

    id: str
    email: str | None = None
    description: str | None = None
    category: str | None = None
    delinquent: bool = False
    default_source: str | None = None
    coupon_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    deleted: bool = False
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def has_payment_source(self) -> bool:
        return bool(self.default_source)

    @classmethod
    def from_stripe(cls, customer: Any) -> CustomerResult:
        metadata = _as_dict(_field(customer, "metadata"))
        discount = _field(customer, "discount")
        return cls(
            id=_field(customer, "id"),
            email=_field(customer, "email"),
            description=_field(customer, "description"),
            category=metadata.get(CATEGORY_METADATA_KEY),
            delinquent=bool(_field(customer, "delinquent", False)),
            default_source=_ref_id(_field(customer, "default_source")),
            coupon_id=_ref_id(_field(discount, "coupon")),
            metadata=metadata,
            deleted=bool(_field(customer, "deleted", False)),
            raw_response=_as_dict(customer),
        )


@dataclass(frozen=True)
class CustomerSummary:
    """
    'Lite' projection of a customer used for bulk listings.

    Use the id to fetch the full customer when needed.
    """

    id: str
    email: str | None
    description: str | None
    delinquent: bool = False

    @classmethod
    def from_customer(cls, customer: CustomerResult) -> CustomerSummary:
        return cls(
            id=customer.id,
            email=customer.email,
            description=customer.description,
            delinquent=customer.delinquent,
        )


# =============================================================================
# Subscriptions and Plans
# =============================================================================


def _subscription_plan_id(subscription: Any) -> str | None:
    plan_id = _ref_id(_field(subscription, "plan"))
    if plan_id:
        return plan_id
    items = _field(_field(subscription, "items"), "data") or []
    if not items:
        return None
    first = items[0]
    return _ref_id(_field(first, "plan")) or _ref_id(_field(first, "price"))


@dataclass
class SubscriptionResult:
    """
    Result from Stripe Subscription operations.

    Attributes:
        id: Subscription ID (sub_xxx)
        customer_id: Subscribed customer
        plan_id: Plan of the (single) subscription item
        status: active, past_due, canceled, incomplete, ...
        collection_method: charge_automatically or send_invoice
        raw_response: Full Stripe response dict
    """

    id: str
    customer_id: str | None
    plan_id: str | None
    status: str | None = None
    collection_method: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_stripe(cls, subscription: Any) -> SubscriptionResult:
        return cls(
            id=_field(subscription, "id"),
            customer_id=_ref_id(_field(subscription, "customer")),
            plan_id=_subscription_plan_id(subscription),
            status=_field(subscription, "status"),
            collection_method=_field(subscription, "collection_method"),
            raw_response=_as_dict(subscription),
        )


@dataclass
class PlanResult:
    """Result from Stripe Plan retrieval."""

    id: str
    amount_cents: int | None = None
    currency: str | None = None
    interval: str | None = None
    active: bool = True
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_stripe(cls, plan: Any) -> PlanResult:
        return cls(
            id=_field(plan, "id"),
            amount_cents=_field(plan, "amount"),
            currency=_field(plan, "currency"),
            interval=_field(plan, "interval"),
            active=bool(_field(plan, "active", True)),
            raw_response=_as_dict(plan),
        )


# =============================================================================
# Coupons, Invoices, Charges
# =============================================================================


@dataclass
class CouponResult:
    """
    Result from Stripe Coupon operations.

    Attributes:
        id: Coupon ID as defined on the dashboard
        percent_off: Percentage discount (e.g. 10.0), if percentage based
        amount_off_cents: Fixed discount in cents, if amount based
        currency: Currency of amount_off
        duration: once, repeating or forever
        valid: Whether the coupon can still be applied
    """

    id: str
    percent_off: float | None = None
    amount_off_cents: int | None = None
    currency: str | None = None
    duration: str | None = None
    valid: bool = True
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_stripe(cls, coupon: Any) -> CouponResult:
        return cls(
            id=_field(coupon, "id"),
            percent_off=_field(coupon, "percent_off"),
            amount_off_cents=_field(coupon, "amount_off"),
            currency=_field(coupon, "currency"),
            duration=_field(coupon, "duration"),
            valid=bool(_field(coupon, "valid", True)),
            raw_response=_as_dict(coupon),
        )


def _invoice_subscription_id(invoice: Any) -> str | None:
    subscription_id = _ref_id(_field(invoice, "subscription"))
    if subscription_id:
        return subscription_id
    # Newer API versions nest the reference under parent.subscription_details
    details = _field(_field(invoice, "parent"), "subscription_details")
    return _ref_id(_field(details, "subscription"))


@dataclass
class InvoiceResult:
    """
    Result from Stripe Invoice operations.

    Attributes:
        id: Invoice ID (in_xxx)
        customer_id: Billed customer
        subscription_id: Subscription that generated the invoice
        amount_paid_cents: Amount actually paid, in cents
        amount_due_cents: Amount due, in cents
        charge_id: Charge that paid the invoice, if any
        status: draft, open, paid, uncollectible, void
        created: Creation time (UTC)
    """

    id: str
    customer_id: str | None = None
    subscription_id: str | None = None
    amount_paid_cents: int = 0
    amount_due_cents: int = 0
    charge_id: str | None = None
    status: str | None = None
    created: datetime | None = None
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def amount_paid(self) -> str:
        """Amount paid formatted in currency units with two decimals."""
        return f"{(self.amount_paid_cents or 0) / 100:.2f}"

    @classmethod
    def from_stripe(cls, invoice: Any) -> InvoiceResult:
        return cls(
            id=_field(invoice, "id"),
            customer_id=_ref_id(_field(invoice, "customer")),
            subscription_id=_invoice_subscription_id(invoice),
            amount_paid_cents=_field(invoice, "amount_paid") or 0,
            amount_due_cents=_field(invoice, "amount_due") or 0,
            charge_id=_ref_id(_field(invoice, "charge")),
            status=_field(invoice, "status"),
            created=_timestamp(_field(invoice, "created")),
            raw_response=_as_dict(invoice),
        )


@dataclass
class ChargeResult:
    """Result from Stripe Charge retrieval."""

    id: str
    amount_cents: int = 0
    currency: str | None = None
    status: str | None = None
    paid: bool = False
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_stripe(cls, charge: Any) -> ChargeResult:
        return cls(
            id=_field(charge, "id"),
            amount_cents=_field(charge, "amount") or 0,
            currency=_field(charge, "currency"),
            status=_field(charge, "status"),
            paid=bool(_field(charge, "paid", False)),
            raw_response=_as_dict(charge),
        )


@dataclass
class PaymentSourceResult:
    """
    A payment source (tokenized card) attached to a customer.

    Attributes:
        id: Source ID (card_xxx / src_xxx)
        object: Stripe object type, ``card`` for cards
        brand: Card brand (Visa, American Express, ...)
        last4: Last four digits of the card number
    """

    id: str
    object: str | None = None
    brand: str | None = None
    last4: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_stripe(cls, source: Any) -> PaymentSourceResult:
        return cls(
            id=_field(source, "id"),
            object=_field(source, "object"),
            brand=_field(source, "brand"),
            last4=_field(source, "last4"),
            raw_response=_as_dict(source),
        )


# =============================================================================
# Listing
# =============================================================================


@dataclass
class Page(Generic[T]):
    """
    One page returned by a listing endpoint.

    Attributes:
        items: Converted items, in gateway order
        has_more: Whether the gateway reported further pages
            (None when the endpoint did not say)
    """

    items: list[T] = field(default_factory=list)
    has_more: bool | None = None

    def __len__(self) -> int:
        return len(self.items)
