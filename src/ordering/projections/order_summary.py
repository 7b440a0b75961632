"""Order summary — lightweight listing/history view."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order

PREVIEW_ITEM_COUNT = 3


@ordering.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    customer_name = String(max_length=255)
    shipping_name = String(max_length=255)
    status = String(required=True)
    total = Float()
    item_count = Integer(default=0)
    preview_items = Text()  # JSON: first few items for list previews
    tracking_number = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    def to_listing(self):
        return {
            "id": str(self.order_id),
            "order_number": self.order_number,
            "customer_id": str(self.customer_id),
            "customer_name": self.customer_name,
            "shipping_name": self.shipping_name,
            "status": self.status,
            "total": self.total,
            "item_count": self.item_count,
            "items": json.loads(self.preview_items) if self.preview_items else [],
            "created_at": self.created_at,
        }


@ordering.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        preview = [
            {
                "product_id": item["product_id"],
                "product_name": item["product_name"],
                "product_image": item.get("product_image"),
                "price": item["price"],
                "quantity": item["quantity"],
            }
            for item in items[:PREVIEW_ITEM_COUNT]
        ]
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                customer_id=event.customer_id,
                order_number=event.order_number,
                customer_name=event.customer_name,
                shipping_name=event.shipping_name,
                status=event.status,
                total=event.total,
                item_count=event.item_count,
                preview_items=json.dumps(preview),
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.new_status
        if event.tracking_number:
            summary.tracking_number = event.tracking_number
        summary.updated_at = event.changed_at
        repo.add(summary)
