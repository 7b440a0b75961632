"""Order statistics projection — counters for the admin dashboard.

A single record keyed ``all`` holds the number of orders in each status and
the revenue over delivered orders.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order, OrderStatus

STATS_KEY = "all"


@ordering.projection
class OrderStats:
    key = String(identifier=True, required=True, max_length=10)
    total_orders = Integer(default=0)
    pending_orders = Integer(default=0)
    confirmed_orders = Integer(default=0)
    processing_orders = Integer(default=0)
    shipped_orders = Integer(default=0)
    delivered_orders = Integer(default=0)
    cancelled_orders = Integer(default=0)
    delivered_revenue = Float(default=0.0)


def _counter(status):
    return f"{OrderStatus(status).value}_orders"


def _get_or_create():
    repo = current_domain.repository_for(OrderStats)
    try:
        return repo.get(STATS_KEY)
    except ObjectNotFoundError:
        return OrderStats(
            key=STATS_KEY,
            total_orders=0,
            pending_orders=0,
            confirmed_orders=0,
            processing_orders=0,
            shipped_orders=0,
            delivered_orders=0,
            cancelled_orders=0,
            delivered_revenue=0.0,
        )


def _bump(record, status, delta):
    field = _counter(status)
    setattr(record, field, max((getattr(record, field) or 0) + delta, 0))


@ordering.projector(projector_for=OrderStats, aggregates=[Order])
class OrderStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create()
        record.total_orders = (record.total_orders or 0) + 1
        _bump(record, event.status, 1)
        current_domain.repository_for(OrderStats).add(record)

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        record = _get_or_create()
        _bump(record, event.previous_status, -1)
        _bump(record, event.new_status, 1)
        if event.new_status == OrderStatus.DELIVERED.value:
            record.delivered_revenue = round((record.delivered_revenue or 0.0) + (event.total or 0.0), 2)
        current_domain.repository_for(OrderStats).add(record)
