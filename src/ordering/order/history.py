"""Order lookups — single order access control and paginated listings."""

import math
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ordering.order.order import Order, OrderStatus
from shared.exceptions import ForbiddenError, ObjectNotFoundError, ValidationError


@dataclass
class OrderPage:
    page: int
    limit: int
    total: int
    orders: list[Order]

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def get_order(session: Session, order_id: str) -> Order:
    order = session.get(Order, str(order_id))
    if order is None:
        raise ObjectNotFoundError({"order": ["Order not found"]})
    return order


def get_order_for(session: Session, order_id: str, user_id: str, is_admin: bool = False) -> Order:
    """Fetch an order the caller may see: their own, or any order for admins."""
    order = get_order(session, order_id)
    if not (is_admin or order.is_owned_by(user_id)):
        raise ForbiddenError({"order": ["Forbidden"]})
    return order


def clamp_paging(page, limit, max_limit) -> tuple[int, int]:
    """Normalize page/limit the way listing endpoints accept them."""
    return max(1, page), min(max_limit, max(1, limit))


def _paginate(session: Session, query, page: int, limit: int) -> OrderPage:
    total = session.scalar(select(func.count()).select_from(query.subquery()))
    orders = session.scalars(
        query.order_by(Order.created_at.desc(), Order.id).offset((page - 1) * limit).limit(limit)
    ).all()
    return OrderPage(page=page, limit=limit, total=total, orders=list(orders))


def list_customer_orders(session: Session, customer_id: str, page: int = 1, limit: int = 10) -> OrderPage:
    page, limit = clamp_paging(page, limit, max_limit=50)
    query = select(Order).where(Order.customer_id == str(customer_id))
    return _paginate(session, query, page, limit)


def list_all_orders(session: Session, status: str | None = None, page: int = 1, limit: int = 20) -> OrderPage:
    page, limit = clamp_paging(page, limit, max_limit=100)
    query = select(Order)
    if status:
        try:
            query = query.where(Order.status == OrderStatus(status).value)
        except ValueError:
            raise ValidationError({"status": [f"Unknown status '{status}'"]}) from None
    return _paginate(session, query, page, limit)
