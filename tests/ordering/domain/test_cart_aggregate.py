"""Tests for ShoppingCart totals, snapshots and clearing."""

from decimal import Decimal

from ordering.cart.cart import ShoppingCart


def _cart_with_items():
    cart = ShoppingCart.create(customer_id="cust-001")
    cart.add_item("prod-001", "Mug", Decimal("8.00"), 2)
    cart.add_item("prod-002", "Plate", Decimal("4.25"), 1)
    return cart


class TestCartCreation:
    def test_new_cart_is_empty(self):
        cart = ShoppingCart.create(customer_id="cust-001")
        assert cart.customer_id == "cust-001"
        assert cart.is_empty
        assert cart.total == Decimal("0")


class TestCartTotal:
    def test_total_sums_snapshot_subtotals(self):
        cart = _cart_with_items()
        assert cart.total == Decimal("20.25")

    def test_total_follows_quantity_changes(self):
        cart = _cart_with_items()
        cart.update_item_quantity("prod-002", 3)
        assert cart.total == Decimal("28.75")


class TestSnapshotLines:
    def test_lines_carry_snapshots_in_cart_order(self):
        cart = _cart_with_items()
        assert cart.snapshot_lines() == [
            {"product_id": "prod-001", "name": "Mug", "quantity": 2, "price": Decimal("8.00")},
            {"product_id": "prod-002", "name": "Plate", "quantity": 1, "price": Decimal("4.25")},
        ]


class TestClear:
    def test_clear_empties_cart(self):
        cart = _cart_with_items()
        cart.clear()
        assert cart.is_empty
        assert cart.total == Decimal("0")
