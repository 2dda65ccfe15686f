"""Product aggregate — the catalogue record whose ``stock`` counter is contended.

Only the fields the checkout flow relies on live here. ``stock`` is never
written blindly while orders are being placed: reservations go through
:func:`catalogue.product.stock.reserve`, which decrements conditionally in
a single statement. ORM-level writes (restocking, repricing) are guarded by
``version`` through SQLAlchemy's ``version_id_col``, so two admins editing
the same product cannot silently overwrite each other.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from shared.database import Base
from shared.exceptions import ValidationError


def _now():
    return datetime.now(UTC)


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="stock_non_negative"),
        CheckConstraint("price >= 0", name="price_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    stock: Mapped[int] = mapped_column(Integer, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    __mapper_args__ = {"version_id_col": version}

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, stock=0, product_id=None):
        price = Decimal(str(price))
        if price < 0:
            raise ValidationError({"price": ["Price must be non-negative"]})
        if stock < 0:
            raise ValidationError({"stock": ["Stock must be non-negative"]})

        return cls(
            id=product_id or str(uuid4()),
            name=name,
            price=price,
            stock=stock,
        )

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        new_price = Decimal(str(new_price))
        if new_price < 0:
            raise ValidationError({"price": ["Price must be non-negative"]})
        self.price = new_price

    def restock(self, quantity):
        """Receive ``quantity`` more units into stock."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.stock += quantity

    def __repr__(self):
        return f"<Product {self.id} stock={self.stock}>"
