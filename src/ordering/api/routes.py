"""FastAPI routes for the Ordering domain — the customer's cart and orders."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from identity.auth import AuthenticatedUser, current_user, require_admin
from ordering.api.dependencies import (
    get_cart_handler,
    get_placement_service,
    get_session,
    get_status_handler,
)
from ordering.api.schemas import (
    AddToCartRequest,
    CartEnvelope,
    CheckoutRequest,
    CreateOrderRequest,
    OrderEnvelope,
    OrderListResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.items import (
    AddToCart,
    ManageCartItemsHandler,
    RemoveFromCart,
    UpdateCartQuantity,
)
from ordering.order.history import get_order_for, list_all_orders, list_customer_orders
from ordering.order.placement import OrderPlacementService
from ordering.order.status import UpdateOrderStatus, UpdateOrderStatusHandler

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartEnvelope)
def get_my_cart(
    user: AuthenticatedUser = Depends(current_user),
    handler: ManageCartItemsHandler = Depends(get_cart_handler),
) -> CartEnvelope:
    return CartEnvelope.from_cart(handler.get_cart(user.user_id))


@cart_router.post("/items", response_model=CartEnvelope)
def add_cart_item(
    body: AddToCartRequest,
    user: AuthenticatedUser = Depends(current_user),
    handler: ManageCartItemsHandler = Depends(get_cart_handler),
) -> CartEnvelope:
    command = AddToCart(
        customer_id=user.user_id,
        product_id=body.product_id,
        quantity=body.qty,
    )
    return CartEnvelope.from_cart(handler.add_to_cart(command))


@cart_router.patch("/items/{product_id}", response_model=CartEnvelope)
def update_cart_item(
    product_id: str,
    body: UpdateCartItemRequest,
    user: AuthenticatedUser = Depends(current_user),
    handler: ManageCartItemsHandler = Depends(get_cart_handler),
) -> CartEnvelope:
    command = UpdateCartQuantity(
        customer_id=user.user_id,
        product_id=product_id,
        new_quantity=body.qty,
    )
    return CartEnvelope.from_cart(handler.update_cart_quantity(command))


@cart_router.delete("/items/{product_id}", response_model=CartEnvelope)
def remove_cart_item(
    product_id: str,
    user: AuthenticatedUser = Depends(current_user),
    handler: ManageCartItemsHandler = Depends(get_cart_handler),
) -> CartEnvelope:
    command = RemoveFromCart(customer_id=user.user_id, product_id=product_id)
    return CartEnvelope.from_cart(handler.remove_from_cart(command))


@cart_router.post("/checkout", status_code=201, response_model=OrderEnvelope)
def checkout_cart(
    body: CheckoutRequest,
    user: AuthenticatedUser = Depends(current_user),
    placement: OrderPlacementService = Depends(get_placement_service),
) -> OrderEnvelope:
    """Convert the caller's cart into a confirmed order and empty the cart."""
    order = placement.place_from_cart(
        customer_id=user.user_id,
        shipping_address=body.shipping_address,
    )
    return OrderEnvelope.from_order(order)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderEnvelope)
def create_order(
    body: CreateOrderRequest,
    user: AuthenticatedUser = Depends(current_user),
    placement: OrderPlacementService = Depends(get_placement_service),
) -> OrderEnvelope:
    """Place an order for an explicit list of lines, priced as submitted."""
    order = placement.place_from_items(
        customer_id=user.user_id,
        shipping_address=body.shipping_address,
        lines=body.lines(),
    )
    return OrderEnvelope.from_order(order)


@order_router.get("", response_model=OrderListResponse)
def list_my_orders(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    user: AuthenticatedUser = Depends(current_user),
    session: Session = Depends(get_session),
) -> OrderListResponse:
    return OrderListResponse.from_page(list_customer_orders(session, user.user_id, page=page, limit=limit))


@order_router.get("/admin/list", response_model=OrderListResponse)
def list_orders_admin(
    page: int = Query(default=1),
    limit: int = Query(default=20),
    status: str | None = Query(default=None),
    _admin: AuthenticatedUser = Depends(require_admin),
    session: Session = Depends(get_session),
) -> OrderListResponse:
    return OrderListResponse.from_page(list_all_orders(session, status=status, page=page, limit=limit))


@order_router.get("/{order_id}", response_model=OrderEnvelope)
def get_order(
    order_id: str,
    user: AuthenticatedUser = Depends(current_user),
    session: Session = Depends(get_session),
) -> OrderEnvelope:
    order = get_order_for(session, order_id, user_id=user.user_id, is_admin=user.is_admin)
    return OrderEnvelope.from_order(order)


@order_router.patch("/{order_id}/status", response_model=OrderEnvelope)
def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    _admin: AuthenticatedUser = Depends(require_admin),
    handler: UpdateOrderStatusHandler = Depends(get_status_handler),
) -> OrderEnvelope:
    order = handler.update_order_status(UpdateOrderStatus(order_id=order_id, status=body.status))
    return OrderEnvelope.from_order(order)
