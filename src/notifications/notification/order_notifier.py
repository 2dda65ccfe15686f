"""Order notifier — emails customers about their orders after the fact.

Runs after the order transaction has committed. It looks the customer's
email up through the identity collaborator, renders a template and hands the
message to the email channel. Nothing here is allowed to fail the order:
unknown customers are skipped and delivery problems are logged.

With an ``executor`` the lookup and delivery run on its worker threads, so a
slow mail relay never holds up the HTTP response. The message context is
taken from the order before handing off; workers never touch the ORM object.
"""

from concurrent.futures import Executor

import structlog
from sqlalchemy.orm import Session, sessionmaker

from identity.customer.customer import find_customer_email
from notifications.channel.email_port import EmailPort
from notifications.templates import get_template
from ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

_STATUS_TEMPLATES = {
    OrderStatus.SHIPPED.value: "order_shipped",
    OrderStatus.DELIVERED.value: "order_delivered",
}


class OrderNotifier:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        email: EmailPort,
        executor: Executor | None = None,
    ):
        self.session_factory = session_factory
        self.email = email
        self.executor = executor

    def order_placed(self, order: Order) -> None:
        self._dispatch(
            order,
            "order_confirmation",
            {
                "order_id": order.id,
                "items": [{"name": i.name, "quantity": i.quantity, "price": i.price} for i in order.items],
                "total": order.total,
                "shipping_address": order.shipping_address,
            },
        )

    def status_changed(self, order: Order) -> None:
        template_name = _STATUS_TEMPLATES.get(order.status)
        if template_name is None:
            return
        self._dispatch(order, template_name, {"order_id": order.id, "status": order.status})

    def _dispatch(self, order: Order, template_name: str, context: dict) -> None:
        args = (str(order.id), str(order.customer_id), template_name, context)
        if self.executor is None:
            self._send(*args)
            return
        try:
            self.executor.submit(self._send, *args)
        except RuntimeError:
            # Executor already shut down
            logger.warning("Notification dropped", order_id=order.id, template=template_name)

    def _send(self, order_id: str, customer_id: str, template_name: str, context: dict) -> None:
        try:
            with self.session_factory() as session:
                email = find_customer_email(session, customer_id)
        except Exception:
            logger.exception("Customer email lookup failed", order_id=order_id)
            return

        if not email:
            logger.info(
                "No email on file, skipping notification",
                order_id=order_id,
                customer_id=customer_id,
            )
            return

        try:
            message = get_template(template_name).render(context)
            result = self.email.send(
                to=email,
                subject=message["subject"],
                body=message["body"],
                html_body=message.get("html_body"),
            )
        except Exception:
            logger.exception("Notification dispatch failed", order_id=order_id, template=template_name)
            return

        if result.get("status") == "sent":
            logger.info(
                "Notification sent",
                order_id=order_id,
                template=template_name,
                message_id=result.get("message_id"),
            )
        else:
            logger.warning(
                "Notification not delivered",
                order_id=order_id,
                template=template_name,
                error=result.get("error", "Unknown dispatch error"),
            )
