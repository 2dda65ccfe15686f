"""Order aggregate — the immutable result of a checkout.

An order is written exactly once, by the placement engine, from the line
snapshots it was given. Its total is fixed at that moment and never
recomputed; later catalogue price changes do not touch it. The only thing
that changes afterwards is ``status``, which an admin may set to any of
PENDING, CONFIRMED, SHIPPED or DELIVERED, including back to an earlier one
to correct a mistake. Checkout has no payment step, so placed orders start
out CONFIRMED.

Line prices are kept in whole cents, the precision they are stored at, so
the total computed here is the total read back later.
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database import Base
from shared.exceptions import ValidationError

MIN_SHIPPING_ADDRESS_LENGTH = 5
# Largest quantity a single cart or order line may carry
MAX_LINE_QUANTITY = 10_000
CENT = Decimal("0.01")


def _now():
    return datetime.now(UTC)


def to_cents(amount) -> Decimal:
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
class OrderItem(Base):
    """A line of an order: product reference plus the name and price it was sold at."""

    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"))
    position: Mapped[int] = mapped_column(Integer)
    product_id: Mapped[str] = mapped_column(String(36))
    name: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[int] = mapped_column(Integer)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_customer_created", "customer_id", "created_at"),
        Index("ix_orders_status_created", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    customer_id: Mapped[str] = mapped_column(String(36))
    items: Mapped[list[OrderItem]] = relationship(
        cascade="all, delete-orphan",
        order_by=OrderItem.position,
        lazy="selectin",
    )
    shipping_address: Mapped[str] = mapped_column(Text)
    total: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    status: Mapped[str] = mapped_column(String(20), default=OrderStatus.PENDING.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, lines, shipping_address, status=OrderStatus.CONFIRMED):
        """Build an order from checkout line snapshots.

        Args:
            customer_id: The customer placing the order.
            lines: List of dicts with product_id, name, quantity, price.
                Prices are used as given, rounded to cents; they are not
                looked up again.
            shipping_address: Free-form delivery address.
            status: Initial status; checkout places orders as CONFIRMED.
        """
        validate_placement(lines, shipping_address)

        now = _now()
        items = [
            OrderItem(
                id=str(uuid4()),
                position=position,
                product_id=str(line["product_id"]),
                name=line["name"],
                quantity=line["quantity"],
                price=to_cents(line["price"]),
            )
            for position, line in enumerate(lines)
        ]

        return cls(
            id=str(uuid4()),
            customer_id=str(customer_id),
            items=items,
            shipping_address=shipping_address,
            total=sum((item.subtotal for item in items), Decimal("0")),
            status=OrderStatus(status).value,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------
    def transition_to(self, status):
        try:
            target = OrderStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError({"status": [f"Invalid status '{status}'; expected one of: {allowed}"]}) from None

        self.status = target.value
        self.updated_at = _now()

    def is_owned_by(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)


def shipping_address_errors(shipping_address) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if not isinstance(shipping_address, str) or len(shipping_address) < MIN_SHIPPING_ADDRESS_LENGTH:
        errors.setdefault("shippingAddress", []).append(
            f"Shipping address must be at least {MIN_SHIPPING_ADDRESS_LENGTH} characters"
        )
    return errors


def validate_placement(lines, shipping_address):
    """Check order preconditions before any storage is touched.

    Raises:
        ValidationError: listing every offending field.
    """
    errors = shipping_address_errors(shipping_address)

    if not lines:
        errors.setdefault("items", []).append("Order must contain at least one item")

    for index, line in enumerate(lines or []):
        if not isinstance(line.get("quantity"), int) or line["quantity"] < 1:
            errors.setdefault(f"items.{index}.qty", []).append("Quantity must be a positive integer")
        elif line["quantity"] > MAX_LINE_QUANTITY:
            errors.setdefault(f"items.{index}.qty", []).append(f"Quantity must be at most {MAX_LINE_QUANTITY}")
        if line.get("price") is None or Decimal(str(line["price"])) < 0:
            errors.setdefault(f"items.{index}.price", []).append("Price must be non-negative")

    if errors:
        raise ValidationError(errors)
