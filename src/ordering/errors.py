"""Error taxonomy for checkout and the order lifecycle.

Validation failures build on Protean's ValidationError, so they carry the
usual ``{field: [messages]}`` payload and surface as 400 responses. A missing
order builds on ObjectNotFoundError and surfaces as a 404.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class CartEmpty(ValidationError):
    """Checkout was attempted with no cart, or a cart without items."""

    def __init__(self, customer_id):
        self.customer_id = customer_id
        self.messages = {"cart": ["Cart is empty. Cannot create order."]}
        super().__init__(self.messages)


class ProductUnavailable(ValidationError):
    """A cart entry references a product that was deleted or deactivated."""

    def __init__(self, product_id, product_name=None):
        self.product_id = product_id
        self.product_name = product_name
        self.messages = {"product": [f"Product {product_name or product_id} is no longer available"]}
        super().__init__(self.messages)


class InsufficientStock(ValidationError):
    """Requested quantity exceeds the product's current stock."""

    def __init__(self, product_id, product_name, available, requested):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        self.messages = {
            "stock": [f"Insufficient stock for {product_name}. Available: {available}, Requested: {requested}"]
        }
        super().__init__(self.messages)


class InvalidTransition(ValidationError):
    """Requested status is not reachable from the order's current status."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        self.messages = {"status": [f"Cannot change status from {current} to {requested}"]}
        super().__init__(self.messages)


class CheckoutFailed(ValidationError):
    """Unexpected downstream failure while placing an order."""

    def __init__(self, reason):
        self.reason = reason
        self.messages = {"checkout": [f"Failed to create order: {reason}"]}
        super().__init__(self.messages)


class OrderNotFound(ObjectNotFoundError):
    """No order with the id exists, or it belongs to another customer."""

    def __init__(self, order_id):
        self.order_id = order_id
        self.messages = {"order": ["Order not found"]}
        super().__init__(self.messages)
