"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from the
ORM aggregates. Keys on the wire are camelCase.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ordering.cart.cart import ShoppingCart
from ordering.order.history import OrderPage
from ordering.order.order import MAX_LINE_QUANTITY, Order


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(CamelModel):
    product_id: str = Field(min_length=1)
    qty: int = Field(default=1, ge=1, le=MAX_LINE_QUANTITY)


class UpdateCartItemRequest(CamelModel):
    qty: int = Field(ge=1, le=MAX_LINE_QUANTITY)


class CheckoutRequest(CamelModel):
    shipping_address: str = Field(min_length=5)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"shippingAddress": "221B Baker Street, London"}]},
    )


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class OrderItemSchema(CamelModel):
    product: str = Field(min_length=1)
    name: str = Field(min_length=1)
    qty: int = Field(ge=1, le=MAX_LINE_QUANTITY)
    price: Decimal = Field(ge=0)


class CreateOrderRequest(CamelModel):
    shipping_address: str = Field(min_length=5)
    items: list[OrderItemSchema] = Field(min_length=1)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "shippingAddress": "221B Baker Street, London",
                    "items": [
                        {"product": "prod-001", "name": "Black T-Shirt", "qty": 2, "price": 19.99},
                    ],
                }
            ]
        },
    )

    def lines(self) -> list[dict]:
        return [
            {"product_id": item.product, "name": item.name, "quantity": item.qty, "price": item.price}
            for item in self.items
        ]


class UpdateOrderStatusRequest(CamelModel):
    status: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartItemResponse(CamelModel):
    product: str
    qty: int
    name_snapshot: str
    price_snapshot: float


class CartResponse(CamelModel):
    id: str
    user: str
    items: list[CartItemResponse]
    updated_at: datetime | None = None


class CartEnvelope(CamelModel):
    cart: CartResponse
    total: float

    @classmethod
    def from_cart(cls, cart: ShoppingCart) -> "CartEnvelope":
        return cls(
            cart=CartResponse(
                id=cart.id,
                user=cart.customer_id,
                items=[
                    CartItemResponse(
                        product=item.product_id,
                        qty=item.quantity,
                        name_snapshot=item.name_snapshot,
                        price_snapshot=float(item.price_snapshot),
                    )
                    for item in cart.items
                ],
                updated_at=cart.updated_at,
            ),
            total=float(cart.total),
        )


class OrderItemResponse(CamelModel):
    product: str
    name: str
    qty: int
    price: float


class OrderResponse(CamelModel):
    id: str
    user: str
    items: list[OrderItemResponse]
    shipping_address: str
    total: float
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            user=order.customer_id,
            items=[
                OrderItemResponse(product=i.product_id, name=i.name, qty=i.quantity, price=float(i.price))
                for i in order.items
            ],
            shipping_address=order.shipping_address,
            total=float(order.total),
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderEnvelope(CamelModel):
    order: OrderResponse

    @classmethod
    def from_order(cls, order: Order) -> "OrderEnvelope":
        return cls(order=OrderResponse.from_order(order))


class OrderListResponse(CamelModel):
    page: int
    limit: int
    total: int
    pages: int
    orders: list[OrderResponse]

    @classmethod
    def from_page(cls, page: OrderPage) -> "OrderListResponse":
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            pages=page.pages,
            orders=[OrderResponse.from_order(order) for order in page.orders],
        )
