"""Order confirmation template — sent when an order is placed."""

from decimal import Decimal
from html import escape


class OrderConfirmationTemplate:
    name = "order_confirmation"

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        items = context.get("items", [])
        total = Decimal(str(context.get("total", "0")))
        shipping_address = context.get("shipping_address", "")

        lines = [f"- {item['name']} x {item['quantity']} @ ${Decimal(str(item['price'])):.2f}" for item in items]
        html_lines = "".join(
            f"<li>{escape(item['name'])} &times; {item['quantity']} &mdash; ${Decimal(str(item['price'])):.2f}</li>"
            for item in items
        )

        return {
            "subject": "Order Confirmation",
            "body": (
                f"Your order #{order_id} has been confirmed.\n\n"
                + "\n".join(lines)
                + f"\n\nTotal: ${total:.2f}\n"
                f"Shipping Address: {shipping_address}\n\n"
                "Thank you for shopping with us!"
            ),
            "html_body": (
                "<h2>Order Confirmation</h2>"
                f"<ul>{html_lines}</ul>"
                f"<p><strong>Total:</strong> ${total:.2f}</p>"
                f"<p><strong>Shipping Address:</strong> {escape(shipping_address)}</p>"
            ),
        }
