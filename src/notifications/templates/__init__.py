"""Template registry — maps template names to template classes.

Each template renders ``subject``, ``body`` and ``html_body`` from a context
dict.
"""

from notifications.templates.delivery_confirmation import DeliveryConfirmationTemplate
from notifications.templates.order_confirmation import OrderConfirmationTemplate
from notifications.templates.shipping_update import ShippingUpdateTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    OrderConfirmationTemplate.name: OrderConfirmationTemplate,
    ShippingUpdateTemplate.name: ShippingUpdateTemplate,
    DeliveryConfirmationTemplate.name: DeliveryConfirmationTemplate,
}


def get_template(name: str):
    """Look up a template class by name."""
    template_cls = TEMPLATE_REGISTRY.get(name)
    if template_cls is None:
        raise ValueError(f"No template registered for: {name}")
    return template_cls
