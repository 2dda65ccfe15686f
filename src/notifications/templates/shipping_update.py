"""Shipping update template — sent when an order is marked shipped."""


class ShippingUpdateTemplate:
    name = "order_shipped"

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": "Your order has shipped",
            "body": (
                f"Great news! Your order #{order_id} has shipped.\n\n"
                "We'll let you know once it has been delivered."
            ),
            "html_body": f"<p>Order <strong>{order_id}</strong> status: shipped</p>",
        }
