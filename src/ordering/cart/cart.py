"""Shopping Cart aggregate — a customer's mutable selection before checkout.

There is exactly one cart per customer, created lazily the first time it is
looked at. Each line keeps a snapshot of the product's name and price taken
when the line was last added to; viewing the cart does not refresh them, so
a cart may show stale prices until its next mutation. Checkout clears the
lines but keeps the cart itself.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ordering.order.order import MAX_LINE_QUANTITY
from shared.database import Base
from shared.exceptions import ObjectNotFoundError, ValidationError


def _now():
    return datetime.now(UTC)


def _check_quantity(quantity):
    if quantity < 1:
        raise ValidationError({"qty": ["Quantity must be at least 1"]})
    if quantity > MAX_LINE_QUANTITY:
        raise ValidationError({"qty": [f"Quantity must be at most {MAX_LINE_QUANTITY}"]})


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("cart_id", "product_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    cart_id: Mapped[str] = mapped_column(ForeignKey("carts.id", ondelete="CASCADE"))
    product_id: Mapped[str] = mapped_column(String(36))
    quantity: Mapped[int] = mapped_column(Integer)
    price_snapshot: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    name_snapshot: Mapped[str] = mapped_column(String(255))
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    @property
    def subtotal(self) -> Decimal:
        return self.price_snapshot * self.quantity


class ShoppingCart(Base):
    __tablename__ = "carts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    customer_id: Mapped[str] = mapped_column(String(36), unique=True)
    items: Mapped[list[CartItem]] = relationship(
        cascade="all, delete-orphan",
        order_by=CartItem.added_at,
        lazy="selectin",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = _now()
        return cls(
            id=str(uuid4()),
            customer_id=str(customer_id),
            items=[],
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def total(self) -> Decimal:
        """Sum of snapshot price times quantity, computed on every read."""
        return sum((item.subtotal for item in self.items), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.items

    def _find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def _get_item(self, product_id):
        item = self._find_item(product_id)
        if item is None:
            raise ObjectNotFoundError({"item": ["Item not in cart"]})
        return item

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, name, price, quantity=1):
        """Add ``quantity`` of a product, or top up the existing line.

        Either way the line's name and price snapshots are replaced with the
        values passed in, which callers take from the live catalogue. A top-up
        may not take the line past ``MAX_LINE_QUANTITY``.
        """
        _check_quantity(quantity)

        now = _now()
        existing = self._find_item(product_id)
        if existing:
            _check_quantity(existing.quantity + quantity)
            existing.quantity += quantity
            existing.price_snapshot = price
            existing.name_snapshot = name
        else:
            self.items.append(
                CartItem(
                    product_id=str(product_id),
                    quantity=quantity,
                    price_snapshot=price,
                    name_snapshot=name,
                    added_at=now,
                )
            )
        self.updated_at = now

    def update_item_quantity(self, product_id, new_quantity):
        """Set a line's quantity. Snapshots are left as they are."""
        _check_quantity(new_quantity)

        item = self._get_item(product_id)
        item.quantity = new_quantity
        self.updated_at = _now()

    def remove_item(self, product_id):
        item = self._get_item(product_id)
        self.items.remove(item)
        self.updated_at = _now()

    def snapshot_lines(self):
        """Materialize the lines an order is built from, in cart order."""
        return [
            {
                "product_id": str(item.product_id),
                "name": item.name_snapshot,
                "quantity": item.quantity,
                "price": item.price_snapshot,
            }
            for item in self.items
        ]

    def clear(self):
        """Empty the cart after a successful checkout."""
        self.items.clear()
        self.updated_at = _now()
