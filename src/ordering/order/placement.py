"""Order placement — turns a cart, or an explicit list of lines, into an Order.

Both call sites run the same all-or-nothing transaction:

    1. Reserve stock for every line with a conditional decrement
       (see ``catalogue.product.stock``). The first shortfall aborts.
    2. Write the Order, status CONFIRMED, total computed from the line
       snapshots handed in (never re-priced from the catalogue).
    3. On the cart path, clear the cart in the same transaction.
    4. Commit.

Any failure inside the transaction rolls all of it back: no stock is
decremented without a matching order, and no order exists without its stock.
Callers see ``InsufficientStockError`` or ``ValidationError`` for business
failures and ``TransactionFailedError`` for anything else. Transient lock
conflicts are retried up to ``max_attempts`` times first.

Only after commit is the customer notified, and a failed notification
never affects the order.
"""

from collections.abc import Callable

import structlog
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from catalogue.product import stock
from ordering.cart import repository as carts
from ordering.order.order import Order, shipping_address_errors, validate_placement
from shared.exceptions import DomainError, TransactionFailedError, ValidationError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class OrderPlacementService:
    """Runs the checkout transaction.

    Args:
        session_factory: Produces sessions bound to the shared database.
        notifier: Post-commit hook with an ``order_placed(order)`` method,
            or None to skip notifications.
        max_attempts: How many times a transaction that hit a transient
            storage conflict is run before giving up.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        notifier=None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.session_factory = session_factory
        self.notifier = notifier
        self.max_attempts = max(1, max_attempts)

    # -------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------
    def place_from_cart(self, customer_id, shipping_address) -> Order:
        """Check out the customer's persisted cart and empty it."""
        errors = shipping_address_errors(shipping_address)
        if errors:
            raise ValidationError(errors)

        def build(session: Session) -> Order:
            cart = carts.find_by_customer(session, customer_id)
            if cart is None or cart.is_empty:
                raise ValidationError({"cart": ["Cart is empty"]})

            order = self._reserve_and_create(session, customer_id, cart.snapshot_lines(), shipping_address)
            cart.clear()
            return order

        return self._execute(customer_id, build, source="cart")

    def place_from_items(self, customer_id, shipping_address, lines) -> Order:
        """Place an order for client-supplied lines.

        Args:
            lines: List of dicts with product_id, name, quantity, price.
        """
        validate_placement(lines, shipping_address)

        def build(session: Session) -> Order:
            return self._reserve_and_create(session, customer_id, lines, shipping_address)

        return self._execute(customer_id, build, source="items")

    # -------------------------------------------------------------------
    # Transaction
    # -------------------------------------------------------------------
    def _reserve_and_create(self, session: Session, customer_id, lines, shipping_address) -> Order:
        stock.reserve(session, [(line["product_id"], line["quantity"]) for line in lines])

        order = Order.place(
            customer_id=customer_id,
            lines=lines,
            shipping_address=shipping_address,
        )
        session.add(order)
        session.flush()
        return order

    def _execute(self, customer_id, build: Callable[[Session], Order], source: str) -> Order:
        log = logger.bind(customer_id=str(customer_id), source=source)

        for attempt in range(1, self.max_attempts + 1):
            try:
                with self.session_factory.begin() as session:
                    order = build(session)
                break
            except DomainError as exc:
                log.info("Order placement rejected", error=type(exc).__name__, messages=exc.messages)
                raise
            except OperationalError as exc:
                if attempt < self.max_attempts:
                    log.warning("Order placement conflicted, retrying", attempt=attempt, error=str(exc))
                    continue
                log.error("Order placement failed after retries", attempts=attempt, exc_info=True)
                raise TransactionFailedError("Order placement failed") from exc
            except Exception as exc:
                log.error("Order placement transaction error", exc_info=True)
                raise TransactionFailedError("Order placement failed") from exc

        log.info(
            "Order placed",
            order_id=order.id,
            total=str(order.total),
            item_count=len(order.items),
        )
        self._notify(order)
        return order

    def _notify(self, order: Order) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.order_placed(order)
        except Exception:
            # Committed orders stand regardless of delivery problems
            logger.exception("Order notification failed", order_id=order.id)
