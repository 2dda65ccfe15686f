"""Tests for Order placement validation and totals."""

from decimal import Decimal

import pytest
from ordering.order.order import (
    MAX_LINE_QUANTITY,
    Order,
    OrderStatus,
    shipping_address_errors,
    validate_placement,
)
from shared.exceptions import ValidationError

ADDRESS = "221B Baker Street, London"


def _lines():
    return [
        {"product_id": "prod-001", "name": "Mug", "quantity": 2, "price": Decimal("8.00")},
        {"product_id": "prod-002", "name": "Plate", "quantity": 1, "price": "4.25"},
    ]


class TestOrderPlacement:
    def test_place_builds_items_in_order(self):
        order = Order.place(customer_id="cust-001", lines=_lines(), shipping_address=ADDRESS)
        assert [i.product_id for i in order.items] == ["prod-001", "prod-002"]
        assert [i.position for i in order.items] == [0, 1]

    def test_total_is_sum_of_line_subtotals(self):
        order = Order.place(customer_id="cust-001", lines=_lines(), shipping_address=ADDRESS)
        assert order.total == Decimal("20.25")

    def test_placed_orders_are_confirmed(self):
        order = Order.place(customer_id="cust-001", lines=_lines(), shipping_address=ADDRESS)
        assert order.status == OrderStatus.CONFIRMED.value

    def test_prices_used_as_given(self):
        lines = [{"product_id": "prod-001", "name": "Mug", "quantity": 3, "price": "0.10"}]
        order = Order.place(customer_id="cust-001", lines=lines, shipping_address=ADDRESS)
        assert order.items[0].price == Decimal("0.10")
        assert order.total == Decimal("0.30")

    def test_sub_cent_prices_rounded_to_cents(self):
        lines = [{"product_id": "prod-001", "name": "Mug", "quantity": 3, "price": "0.333"}]
        order = Order.place(customer_id="cust-001", lines=lines, shipping_address=ADDRESS)
        assert order.items[0].price == Decimal("0.33")
        assert order.total == Decimal("0.99")

    def test_half_cent_rounds_up(self):
        lines = [{"product_id": "prod-001", "name": "Mug", "quantity": 1, "price": 2.675}]
        order = Order.place(customer_id="cust-001", lines=lines, shipping_address=ADDRESS)
        assert order.items[0].price == Decimal("2.68")

    def test_ownership(self):
        order = Order.place(customer_id="cust-001", lines=_lines(), shipping_address=ADDRESS)
        assert order.is_owned_by("cust-001")
        assert not order.is_owned_by("cust-002")


class TestPlacementValidation:
    def test_short_address(self):
        with pytest.raises(ValidationError) as exc:
            Order.place(customer_id="cust-001", lines=_lines(), shipping_address="abc")
        assert "shippingAddress" in exc.value.messages

    def test_address_of_minimum_length_accepted(self):
        assert shipping_address_errors("12345") == {}

    def test_missing_address(self):
        assert "shippingAddress" in shipping_address_errors(None)

    def test_empty_lines(self):
        with pytest.raises(ValidationError) as exc:
            validate_placement([], ADDRESS)
        assert "items" in exc.value.messages

    def test_reports_every_bad_line(self):
        lines = [
            {"product_id": "prod-001", "name": "Mug", "quantity": 0, "price": "8.00"},
            {"product_id": "prod-002", "name": "Plate", "quantity": 1, "price": "-1"},
        ]
        with pytest.raises(ValidationError) as exc:
            validate_placement(lines, "abc")
        assert set(exc.value.messages) == {"shippingAddress", "items.0.qty", "items.1.price"}

    def test_quantity_limit(self):
        at_limit = [{"product_id": "prod-001", "name": "Mug", "quantity": MAX_LINE_QUANTITY, "price": "1"}]
        validate_placement(at_limit, ADDRESS)

        over = [{"product_id": "prod-001", "name": "Mug", "quantity": 10**20, "price": "1"}]
        with pytest.raises(ValidationError) as exc:
            validate_placement(over, ADDRESS)
        assert exc.value.messages == {"items.0.qty": [f"Quantity must be at most {MAX_LINE_QUANTITY}"]}
