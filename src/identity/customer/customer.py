"""Customer record — the identity collaborator's view of a user.

Registration, profiles and passwords belong to the identity service; the
checkout flow only needs to know a user's role and where to email them.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.database import Base


class CustomerRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email: Mapped[str] = mapped_column(String(254), unique=True)
    name: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20), default=CustomerRole.CUSTOMER.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))

    @classmethod
    def register(cls, email, name=None, role=CustomerRole.CUSTOMER, customer_id=None):
        return cls(
            id=customer_id or str(uuid4()),
            email=email.strip().lower(),
            name=name,
            role=CustomerRole(role).value,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == CustomerRole.ADMIN.value


def find_customer_email(session: Session, customer_id: str) -> str | None:
    """Return the customer's email, or None when the identity is unknown."""
    return session.scalar(select(Customer.email).where(Customer.id == str(customer_id)))
