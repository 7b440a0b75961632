"""Domain events for the Order aggregate.

Events are raised inside the unit of work that changes the order and are
dispatched once it commits, so projections and notifications never observe
a change that was rolled back.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer's cart was converted into a new pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    shipping_name = String()
    items = Text(required=True)  # JSON: list of item snapshots
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    tax = Float(required=True)
    total = Float(required=True)
    status = String(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """An order moved along its lifecycle, e.g. pending to confirmed."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    tracking_number = String()
    note = Text()
    total = Float()
    changed_at = DateTime(required=True)
