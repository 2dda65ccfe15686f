"""FastAPI dependencies resolving the collaborators built by the app factory."""

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from ordering.cart.items import ManageCartItemsHandler
from ordering.order.placement import OrderPlacementService
from ordering.order.status import UpdateOrderStatusHandler


def get_session(request: Request) -> Iterator[Session]:
    with request.app.state.session_factory() as session:
        yield session


def get_cart_handler(request: Request) -> ManageCartItemsHandler:
    return request.app.state.cart_handler


def get_placement_service(request: Request) -> OrderPlacementService:
    return request.app.state.placement_service


def get_status_handler(request: Request) -> UpdateOrderStatusHandler:
    return request.app.state.status_handler
