"""Delivery confirmation template — sent when an order is marked delivered."""


class DeliveryConfirmationTemplate:
    name = "order_delivered"

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": "Your order was delivered",
            "body": (
                f"Your order #{order_id} has been delivered.\n\n"
                "We hope you enjoy your purchase! If you have any issues, "
                "please don't hesitate to reach out to our support team."
            ),
            "html_body": f"<p>Order <strong>{order_id}</strong> status: delivered</p>",
        }
