"""Ordering domain API package."""

from ordering.api.errors import register_error_handlers
from ordering.api.routes import admin_order_router, cart_router, order_router, product_router
from ordering.api.websocket import ws_router

__all__ = [
    "product_router",
    "cart_router",
    "order_router",
    "admin_order_router",
    "ws_router",
    "register_error_handlers",
]
