"""
Tests for CustomerService.

Tests cover:
1. Creation with unique email and optional category
2. Lookups by id and email, including deleted customers
3. Category listings filtered page by page
4. Category and email updates
5. Deletion and bulk deletion
6. Delinquency and payment source flags

All tests run against the in-memory gateway.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from stripe_gateway.exceptions import (
    AmbiguousResultError,
    DuplicateEmailError,
    EntityNotFoundError,
    ErrorCode,
    InternalInconsistencyError,
    InvalidArgumentError,
)
from stripe_gateway.services import CustomerService
from stripe_gateway.types import CustomerSummary, Page


# =============================================================================
# Creation
# =============================================================================


class TestCreateCustomer:
    """Tests for create_customer."""

    def test_returns_id_of_created_customer(self, customer_service, gateway):
        """Should create the customer and return its id."""
        customer_id = customer_service.create_customer("ada@example.com", "Ada Lovelace")

        customer = gateway.retrieve_customer(customer_id)
        assert customer.email == "ada@example.com"
        assert customer.description == "Ada Lovelace"
        assert customer.category is None

    def test_stores_category_in_metadata(self, customer_service, gateway):
        """Should store the category under the category metadata key."""
        customer_id = customer_service.create_customer(
            "ada@example.com", "Ada Lovelace", category="gold"
        )

        assert gateway.customers[customer_id]["metadata"] == {"category": "gold"}

    @pytest.mark.parametrize(
        "email,description,missing",
        [
            ("", "Ada", ["email"]),
            ("ada@example.com", "  ", ["description"]),
            (None, None, ["email", "description"]),
        ],
    )
    def test_missing_fields_make_no_remote_call(
        self, customer_service, gateway, email, description, missing
    ):
        """Should reject missing inputs before calling the gateway."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            customer_service.create_customer(email, description)

        assert exc_info.value.details["fields"] == missing
        assert gateway.calls == []

    def test_duplicate_email_rejected(self, customer_service, customer_id, gateway):
        """Should refuse a second customer with the same email."""
        with pytest.raises(DuplicateEmailError) as exc_info:
            customer_service.create_customer("ada@example.com", "Another Ada")

        assert exc_info.value.error_code == ErrorCode.DUPLICATE_EMAIL
        assert len(gateway.customers) == 1

    def test_email_of_deleted_customer_can_be_reused(self, customer_service, customer_id):
        """Should allow the email once the holder has been deleted."""
        customer_service.delete_customer(customer_id)

        new_id = customer_service.create_customer("ada@example.com", "Ada again")

        assert new_id != customer_id

    def test_created_customer_not_found_afterwards(self, gateway):
        """Should report an inconsistency if the new customer cannot be found."""
        service = CustomerService(gateway)
        empty_page = Page(items=[], has_more=False)

        with patch.object(gateway, "list_customers_page", return_value=empty_page):
            with pytest.raises(InternalInconsistencyError):
                service.create_customer("ada@example.com", "Ada Lovelace")

        assert "create_customer" in gateway.calls


# =============================================================================
# Lookups
# =============================================================================


class TestRetrieveCustomer:
    """Tests for lookups by id and email."""

    def test_by_id(self, customer_service, customer_id):
        """Should return the customer for a known id."""
        assert customer_service.retrieve_customer_by_id(customer_id).id == customer_id

    @pytest.mark.parametrize("unknown", ["cus_unknown", "", None])
    def test_by_unknown_id_is_none(self, customer_service, unknown):
        """Should return None for an id that does not resolve."""
        assert customer_service.retrieve_customer_by_id(unknown) is None

    def test_deleted_customer_is_none(self, customer_service, customer_id):
        """Should treat a deleted customer as absent."""
        customer_service.delete_customer(customer_id)

        assert customer_service.retrieve_customer_by_id(customer_id) is None

    def test_by_email(self, customer_service, customer_id):
        """Should return the customer holding the email."""
        assert customer_service.retrieve_customer_by_email("ada@example.com").id == customer_id

    def test_by_unknown_email_is_none(self, customer_service, customer_id):
        """Should return None when nobody holds the email."""
        assert customer_service.retrieve_customer_by_email("nobody@example.com") is None

    def test_by_email_ambiguous(self, customer_service, gateway):
        """Should raise when two active customers share an email."""
        gateway.add_raw_customer("twin@example.com")
        gateway.add_raw_customer("twin@example.com")

        with pytest.raises(AmbiguousResultError) as exc_info:
            customer_service.retrieve_customer_by_email("twin@example.com")

        assert exc_info.value.details["count"] == 2

    def test_by_email_ambiguous_with_single_item_pages(self, gateway):
        """Should still see both customers when the page size is one."""
        service = CustomerService(gateway, page_size=1)
        gateway.add_raw_customer("twin@example.com")
        gateway.add_raw_customer("twin@example.com")

        with pytest.raises(AmbiguousResultError) as exc_info:
            service.retrieve_customer_by_email("twin@example.com")

        assert exc_info.value.details["count"] == 2

    def test_by_email_with_more_pages_is_ambiguous(self, customer_service, gateway):
        """Should treat a further page of matches as ambiguous."""
        only = gateway.retrieve_customer(gateway.add_raw_customer("twin@example.com"))

        with patch.object(
            gateway, "list_customers_page", return_value=Page(items=[only], has_more=True)
        ) as list_page:
            with pytest.raises(AmbiguousResultError):
                customer_service.retrieve_customer_by_email("twin@example.com")

        list_page.assert_called_once_with(limit=100, email="twin@example.com")

    def test_duplicate_email_detected_with_single_item_pages(self, gateway):
        """Should refuse to create a third customer on a shared email."""
        service = CustomerService(gateway, page_size=1)
        gateway.add_raw_customer("twin@example.com")
        gateway.add_raw_customer("twin@example.com")

        with pytest.raises(AmbiguousResultError):
            service.create_customer("twin@example.com", "Third twin")

        assert len(gateway.customers) == 2

    def test_require_customer_raises_not_found(self, customer_service):
        """Should raise EntityNotFoundError for unknown ids."""
        with pytest.raises(EntityNotFoundError) as exc_info:
            customer_service.require_customer("cus_unknown")

        assert exc_info.value.error_code == ErrorCode.NOT_FOUND


# =============================================================================
# Listings
# =============================================================================


class TestListCustomers:
    """Tests for bulk listings."""

    def test_list_all_customers_across_pages(self, gateway):
        """Should list every customer as a summary, across pages."""
        service = CustomerService(gateway, page_size=2)
        ids = [gateway.add_raw_customer(f"user{i}@example.com") for i in range(5)]

        summaries = service.list_all_customers()

        assert [s.id for s in summaries] == ids
        assert all(isinstance(s, CustomerSummary) for s in summaries)

    def test_list_all_customers_empty(self, customer_service):
        """Should return an empty list when there are no customers."""
        assert customer_service.list_all_customers() == []

    def test_list_by_category(self, gateway):
        """Should keep only customers of the category."""
        service = CustomerService(gateway, page_size=2)
        gold = [
            service.create_customer("g1@example.com", "Gold 1", category="gold"),
            service.create_customer("g2@example.com", "Gold 2", category="gold"),
        ]
        service.create_customer("s1@example.com", "Silver 1", category="silver")
        service.create_customer("n1@example.com", "No category")

        summaries = service.list_all_customers_by_category("gold")

        assert [s.id for s in summaries] == gold
        assert summaries[0].email == "g1@example.com"

    def test_list_by_unknown_category(self, customer_service, customer_id):
        """Should return an empty list for an unused category."""
        assert customer_service.list_all_customers_by_category("platinum") == []


# =============================================================================
# Updates
# =============================================================================


class TestUpdateCustomer:
    """Tests for category and email changes."""

    def test_update_category(self, customer_service):
        """Should move the customer from the old category listing to the new one."""
        customer_id = customer_service.create_customer(
            "ada@example.com", "Ada Lovelace", category="gold"
        )

        customer_service.update_customer_category(customer_id, "silver")

        gold = customer_service.list_all_customers_by_category("gold")
        silver = customer_service.list_all_customers_by_category("silver")
        assert customer_id not in [summary.id for summary in gold]
        assert [summary.id for summary in silver] == [customer_id]
        assert customer_service.retrieve_customer_by_id(customer_id).category == "silver"

    def test_update_category_requires_value(self, customer_service, customer_id, gateway):
        """Should reject an empty category without calling the gateway."""
        gateway.calls.clear()

        with pytest.raises(InvalidArgumentError):
            customer_service.update_customer_category(customer_id, "")

        assert gateway.calls == []

    def test_update_category_unknown_customer(self, customer_service):
        """Should raise NOT_FOUND for an unknown customer."""
        with pytest.raises(EntityNotFoundError):
            customer_service.update_customer_category("cus_unknown", "gold")

    def test_change_email(self, customer_service, customer_id):
        """Should change the email so lookups follow it."""
        customer_service.change_customer_email(customer_id, "countess@example.com")

        assert customer_service.retrieve_customer_by_email("ada@example.com") is None
        assert (
            customer_service.retrieve_customer_by_email("countess@example.com").id
            == customer_id
        )

    def test_change_email_to_taken_address(self, customer_service, customer_id):
        """Should refuse an email held by another customer."""
        customer_service.create_customer("grace@example.com", "Grace Hopper")

        with pytest.raises(DuplicateEmailError):
            customer_service.change_customer_email(customer_id, "grace@example.com")

    def test_change_email_to_own_address_is_noop(self, customer_service, customer_id, gateway):
        """Should accept the customer's current email without updating."""
        gateway.calls.clear()

        customer_service.change_customer_email(customer_id, "ada@example.com")

        assert "update_customer" not in gateway.calls

    def test_change_email_requires_value(self, customer_service, customer_id):
        """Should reject an empty email."""
        with pytest.raises(InvalidArgumentError):
            customer_service.change_customer_email(customer_id, "")

    def test_change_email_unknown_customer(self, customer_service):
        """Should raise NOT_FOUND for an unknown customer."""
        with pytest.raises(EntityNotFoundError):
            customer_service.change_customer_email("cus_unknown", "new@example.com")


# =============================================================================
# Deletion
# =============================================================================


class TestDeleteCustomer:
    """Tests for deletion."""

    def test_delete_customer(self, customer_service, customer_id, gateway):
        """Should delete while the gateway keeps the record."""
        customer_service.delete_customer(customer_id)

        assert gateway.customers[customer_id]["deleted"] is True

    def test_delete_unknown_customer(self, customer_service):
        """Should raise NOT_FOUND for an unknown id."""
        with pytest.raises(EntityNotFoundError):
            customer_service.delete_customer("cus_unknown")

    def test_delete_all_customers(self, gateway):
        """Should delete every active customer and report the count."""
        service = CustomerService(gateway, page_size=2)
        for i in range(5):
            gateway.add_raw_customer(f"user{i}@example.com")

        assert service.delete_all_customers() == 5
        assert service.list_all_customers() == []

    def test_delete_all_customers_when_none(self, customer_service):
        """Should report zero deletions for an empty account."""
        assert customer_service.delete_all_customers() == 0


# =============================================================================
# Flags
# =============================================================================


class TestCustomerFlags:
    """Tests for delinquency and payment source flags."""

    def test_not_delinquent_by_default(self, customer_service, customer_id):
        """Should report a new customer as not delinquent."""
        assert customer_service.is_customer_delinquent(customer_id) is False

    def test_delinquent(self, customer_service, customer_id, gateway):
        """Should report the gateway's delinquency flag."""
        gateway.set_delinquent(customer_id)

        assert customer_service.is_customer_delinquent(customer_id) is True

    def test_delinquent_unknown_customer(self, customer_service):
        """Should raise NOT_FOUND for an unknown id."""
        with pytest.raises(EntityNotFoundError):
            customer_service.is_customer_delinquent("cus_unknown")

    def test_payment_source_flag(self, customer_service, customer_id, paying_customer_id):
        """Should be true only for customers with a default source."""
        assert customer_service.does_customer_have_active_payment_source(customer_id) is False
        assert (
            customer_service.does_customer_have_active_payment_source(paying_customer_id)
            is True
        )

    def test_payment_source_flag_unknown_customer(self, customer_service):
        """Should be false for an unknown customer."""
        assert customer_service.does_customer_have_active_payment_source("cus_unknown") is False
