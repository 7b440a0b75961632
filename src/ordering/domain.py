"""Ordering bounded context — catalogue stock, shopping carts and orders.

Handles the checkout flow that converts a customer's cart into an order,
the order status lifecycle, and the read models used for order history
and admin reporting.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
