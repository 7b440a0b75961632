"""Order notifications — pushes order lifecycle events to connected clients.

Admins hear about every new order; the customer who owns an order hears
about each status change. Delivery is fire-and-forget: the order change has
already been committed, so a failed push is logged and never raised.
"""

import structlog
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.notify import get_notifier
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order

logger = structlog.get_logger(__name__)

STATUS_MESSAGES = {
    "pending": "Your order has been received and is being processed.",
    "confirmed": "Your order has been confirmed and is being prepared.",
    "processing": "Your order is being processed.",
    "shipped": "Your order has been shipped and is on its way!",
    "delivered": "Your order has been delivered successfully.",
    "cancelled": "Your order has been cancelled.",
}


def status_message(status):
    return STATUS_MESSAGES.get(status, f"Your order status: {status}")


@ordering.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Notifies admins and customers about order changes."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        payload = {
            "type": "NEW_ORDER",
            "title": "New Order Received",
            "message": f"New order from {event.customer_name} - ${event.total:.2f}",
            "order_id": str(event.order_id),
            "order_number": event.order_number,
            "user_id": str(event.customer_id),
            "customer_name": event.customer_name,
            "total_amount": event.total,
            "item_count": event.item_count,
            "status": event.status,
        }
        self._deliver(lambda n: n.send_to_admins("new_order_notification", payload), event.order_id)

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        payload = {
            "type": "ORDER_UPDATE",
            "title": "Order Status Update",
            "message": status_message(event.new_status),
            "order_id": str(event.order_id),
            "order_number": event.order_number,
            "status": event.new_status,
            "tracking_number": event.tracking_number,
        }
        self._deliver(
            lambda n: n.send_to_user(str(event.customer_id), "order_status_update", payload),
            event.order_id,
        )

    def _deliver(self, send, order_id) -> None:
        try:
            result = send(get_notifier())
        except Exception as e:
            logger.error(
                "Order notification dispatch failed",
                order_id=str(order_id),
                error=str(e),
            )
            return

        if result.get("status") != "sent":
            logger.warning(
                "Order notification not delivered",
                order_id=str(order_id),
                error=result.get("error", "Unknown dispatch error"),
            )
