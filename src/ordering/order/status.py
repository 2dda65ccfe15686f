"""Order status changes — command and handler (admin only)."""

from dataclasses import dataclass

import structlog
from sqlalchemy.orm import Session, sessionmaker

from ordering.order.history import get_order
from ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

# Statuses the customer is told about by email
_NOTIFIED_STATUSES = {OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value}


@dataclass(frozen=True)
class UpdateOrderStatus:
    order_id: str
    status: str


class UpdateOrderStatusHandler:
    def __init__(self, session_factory: sessionmaker[Session], notifier=None):
        self.session_factory = session_factory
        self.notifier = notifier

    def update_order_status(self, command: UpdateOrderStatus) -> Order:
        with self.session_factory.begin() as session:
            order = get_order(session, command.order_id)
            previous = order.status
            order.transition_to(command.status)

        logger.info(
            "Order status changed",
            order_id=order.id,
            previous_status=previous,
            new_status=order.status,
        )

        changed = order.status != previous
        if self.notifier is not None and changed and order.status in _NOTIFIED_STATUSES:
            try:
                self.notifier.status_changed(order)
            except Exception:
                logger.exception("Order status notification failed", order_id=order.id)

        return order
