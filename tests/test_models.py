"""
Tests for cart, catalog and wire models.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from checkout_server.catalog import PRODUCTS, SUBSCRIPTIONS, cart_for_flow, load_cart
from checkout_server.flows import flow_by_name
from checkout_server.models import (
    Cart,
    FlowMode,
    Item,
    SubmissionError,
    SubmissionItem,
    SubmissionRequest,
    SubmissionResult,
    SubscriptionRecord,
)


def make_item(item_id, price, quantity=1):
    return Item(id=item_id, name=item_id.title(), price=Decimal(price), quantity=quantity)


class TestCartTotal:
    """Test cart totals."""

    def test_total_sums_price_times_quantity(self):
        cart = Cart(items=[make_item("a", "2.50", 2), make_item("b", "10"), make_item("c", "0.99", 3)])
        assert cart.total() == Decimal("17.97")

    def test_empty_cart_total_is_zero(self):
        assert Cart().total() == Decimal("0")

    def test_override_replaces_item_sum(self):
        cart = load_cart(PRODUCTS, FlowMode.SUBSCRIPTION, total_override=Decimal("4.99"))
        assert cart.total() == Decimal("4.99")

    def test_catalog_cart_total(self):
        cart = load_cart(PRODUCTS, FlowMode.CHECKOUT)
        assert cart.total() == Decimal("30")

    def test_total_is_pure(self):
        cart = load_cart(PRODUCTS, FlowMode.CHECKOUT)
        assert cart.total() == cart.total()
        assert [item.id for item in cart.items] == ["shoe", "slippers"]


class TestCartInvariants:
    """Test cart construction rules."""

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError):
            Cart(items=[make_item("a", "1"), make_item("a", "2")])

    def test_load_keeps_catalog_order(self):
        cart = load_cart(list(reversed(PRODUCTS)), FlowMode.CHECKOUT)
        assert [item.id for item in cart.items] == ["slippers", "shoe"]

    def test_items_are_immutable(self):
        with pytest.raises(ValidationError):
            PRODUCTS[0].price = Decimal("1")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Item(id="x", name="X", price=Decimal("-1"))

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Item(id="x", name="X", price=Decimal("1"), quantity=0)

    def test_subscription_flow_uses_plan_price(self):
        cart = cart_for_flow(flow_by_name("new_subscription"))
        assert cart.mode is FlowMode.SUBSCRIPTION
        assert cart.items == list(SUBSCRIPTIONS)
        assert cart.total() == Decimal("4.99")


class TestSubmissionRequest:
    """Test the wire form of the submission body."""

    def test_wire_keys_are_camel_case(self):
        request = SubmissionRequest(
            items=[SubmissionItem(name="Puma Shoes", id="shoe")],
            customer_name="Ada",
            customer_email="ada@example.com",
        )
        assert request.to_wire() == {
            "items": [{"name": "Puma Shoes", "id": "shoe"}],
            "customerName": "Ada",
            "customerEmail": "ada@example.com",
            "invoiceNeeded": True,
        }

    def test_order_id_included_when_set(self):
        request = SubmissionRequest(items=[], customer_name="", customer_email="", order_id="42")
        assert request.to_wire()["orderId"] == "42"


class TestSubmissionResult:
    """Test the result type."""

    def test_error_result_is_not_ok(self):
        result = SubmissionResult(error=SubmissionError(kind="transport", message="down"))
        assert result.ok is False

    def test_secret_result_is_ok(self):
        assert SubmissionResult(client_secret="pi_secret").ok is True

    def test_requires_exactly_one_branch(self):
        with pytest.raises(ValidationError):
            SubmissionResult()
        with pytest.raises(ValidationError):
            SubmissionResult(
                client_secret="pi_secret",
                error=SubmissionError(kind="transport", message="down"),
            )


class TestAccountRecords:
    """Test parsing of backend account records."""

    def test_subscription_record_from_backend_keys(self):
        record = SubscriptionRecord.model_validate(
            {
                "appProductId": "shoe",
                "subscriptionId": "sub_123",
                "subscribedOn": "01/02/2024",
                "nextPaymentDate": "01/03/2024",
                "price": "499",
            }
        )
        assert record.subscription_id == "sub_123"
        assert record.price == Decimal("499")
        assert record.trial_ends_on is None
