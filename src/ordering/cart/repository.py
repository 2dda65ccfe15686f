"""Repository queries for the ShoppingCart aggregate."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ordering.cart.cart import ShoppingCart
from shared.exceptions import ObjectNotFoundError


def find_by_customer(session: Session, customer_id: str) -> ShoppingCart | None:
    return session.scalar(select(ShoppingCart).where(ShoppingCart.customer_id == str(customer_id)))


def get_by_customer(session: Session, customer_id: str) -> ShoppingCart:
    """Return the customer's cart or raise ``ObjectNotFoundError``."""
    cart = find_by_customer(session, customer_id)
    if cart is None:
        raise ObjectNotFoundError({"cart": ["Cart not found"]})
    return cart


def get_or_create(session: Session, customer_id: str) -> ShoppingCart:
    """Return the customer's cart, creating an empty one on first access.

    Two first requests from the same customer can race to insert; the loser's
    insert is rolled back to a savepoint and it reads the winner's cart.
    """
    cart = find_by_customer(session, customer_id)
    if cart is not None:
        return cart

    cart = ShoppingCart.create(customer_id=customer_id)
    try:
        with session.begin_nested():
            session.add(cart)
    except IntegrityError:
        return get_by_customer(session, customer_id)
    return cart
