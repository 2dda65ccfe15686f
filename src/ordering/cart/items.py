"""Cart item management — commands and handler."""

from dataclasses import dataclass

import structlog
from sqlalchemy.orm import Session, sessionmaker

from catalogue.product.stock import find_product
from ordering.cart import repository
from ordering.cart.cart import ShoppingCart

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AddToCart:
    customer_id: str
    product_id: str
    quantity: int = 1


@dataclass(frozen=True)
class UpdateCartQuantity:
    customer_id: str
    product_id: str
    new_quantity: int


@dataclass(frozen=True)
class RemoveFromCart:
    customer_id: str
    product_id: str


class ManageCartItemsHandler:
    """Applies cart commands, each in its own short transaction."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def get_cart(self, customer_id) -> ShoppingCart:
        with self.session_factory.begin() as session:
            return repository.get_or_create(session, customer_id)

    def add_to_cart(self, command: AddToCart) -> ShoppingCart:
        with self.session_factory.begin() as session:
            product = find_product(session, command.product_id)
            cart = repository.get_or_create(session, command.customer_id)
            cart.add_item(
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=command.quantity,
            )

        logger.debug(
            "Item added to cart",
            cart_id=cart.id,
            product_id=command.product_id,
            quantity=command.quantity,
        )
        return cart

    def update_cart_quantity(self, command: UpdateCartQuantity) -> ShoppingCart:
        with self.session_factory.begin() as session:
            cart = repository.get_by_customer(session, command.customer_id)
            cart.update_item_quantity(
                product_id=command.product_id,
                new_quantity=command.new_quantity,
            )
        return cart

    def remove_from_cart(self, command: RemoveFromCart) -> ShoppingCart:
        with self.session_factory.begin() as session:
            cart = repository.get_by_customer(session, command.customer_id)
            cart.remove_item(product_id=command.product_id)
        return cart
