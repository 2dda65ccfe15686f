"""Stock reservation primitive.

A reservation is one conditional statement per product::

    UPDATE products
       SET stock = stock - :qty, version = version + 1
     WHERE id = :id AND stock >= :qty

The predicate and the decrement are evaluated by the database as a single
atomic step, so two transactions can never both observe "enough stock" for
the last units. A read-then-write in Python would lose updates under
concurrency and must not be used here.

The functions take the caller's ``Session`` and never commit: they are meant
to run inside the checkout transaction, which rolls every decrement back if
any later step fails.
"""

from collections.abc import Iterable

import structlog
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from catalogue.product.product import Product
from shared.exceptions import InsufficientStockError, ObjectNotFoundError

logger = structlog.get_logger(__name__)


def find_product(session: Session, product_id: str) -> Product:
    """Load a product or raise ``ObjectNotFoundError``."""
    product = session.get(Product, str(product_id))
    if product is None:
        raise ObjectNotFoundError({"product": [f"Product {product_id} not found"]})
    return product


def current_stock(session: Session, product_id: str) -> int | None:
    """Units on hand for a product, or None when it does not exist.

    Read-only lookup for other contexts (and tests) that need the live count
    without loading the whole aggregate.
    """
    return session.scalar(select(Product.stock).where(Product.id == str(product_id)))


def conditional_decrement(session: Session, product_id: str, quantity: int) -> bool:
    """Decrement stock by ``quantity`` only if at least that much is available.

    Returns True when exactly one row was modified. False means the product
    is missing or has fewer than ``quantity`` units left.
    """
    result = session.execute(
        update(Product)
        .where(Product.id == str(product_id), Product.stock >= quantity)
        .values(stock=Product.stock - quantity, version=Product.version + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def reserve(session: Session, lines: Iterable[tuple[str, int]]) -> None:
    """Reserve every ``(product_id, quantity)`` line or raise on the first shortfall.

    Lines are reserved in product-id order, whatever order the caller listed
    them in. Two checkouts touching the same products then take row locks in
    the same sequence and cannot deadlock each other.

    Raises:
        InsufficientStockError: for the first product that cannot be covered.
            Decrements already applied stay pending in the caller's
            transaction, which is expected to roll back.
    """
    for product_id, quantity in sorted(lines, key=lambda line: str(line[0])):
        if not conditional_decrement(session, product_id, quantity):
            logger.info(
                "Stock reservation rejected",
                product_id=str(product_id),
                requested=quantity,
            )
            raise InsufficientStockError(product_id)
