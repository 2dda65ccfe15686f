"""Domain exceptions shared by every bounded context.

Errors carry a ``messages`` dict mapping a field (or a pseudo-field such as
``cart``) to a list of human-readable messages, the same shape request
validation errors are reported in.
"""


class DomainError(Exception):
    """Base class for expected, business-level failures."""

    def __init__(self, messages: dict[str, list[str]] | None = None):
        self.messages = messages or {}
        super().__init__(self.messages)


class ValidationError(DomainError):
    """Malformed input or a violated business precondition."""


class ObjectNotFoundError(DomainError):
    """A referenced cart, cart item, order or product does not exist."""


class ForbiddenError(DomainError):
    """The caller is authenticated but not allowed to touch the resource."""


class InsufficientStockError(DomainError):
    """A product could not be reserved in the requested quantity."""

    def __init__(self, product_id: str):
        self.product_id = str(product_id)
        super().__init__({"stock": [f"Insufficient stock for product {self.product_id}"]})


class TransactionFailedError(Exception):
    """The checkout transaction failed for a reason other than a business rule.

    The transaction was rolled back in full, so retrying the whole checkout is
    safe.
    """
