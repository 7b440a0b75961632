"""Order aggregate (CQRS) — the record produced by checkout.

Items, prices and totals are frozen when the order is placed. Afterwards only
the status, tracking number and notes change, and the status only moves along
the lifecycle below:

    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    PENDING / CONFIRMED / PROCESSING → CANCELLED

DELIVERED and CANCELLED are terminal.
"""

import json
import random
import time
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.checkout.pricing import compute_totals
from ordering.domain import ordering
from ordering.errors import InvalidTransition
from ordering.order.events import OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

STATUS_DESCRIPTIONS = {
    OrderStatus.PENDING: "Order placed, awaiting confirmation",
    OrderStatus.CONFIRMED: "Order confirmed, preparing for processing",
    OrderStatus.PROCESSING: "Order is being processed",
    OrderStatus.SHIPPED: "Order has been shipped",
    OrderStatus.DELIVERED: "Order delivered successfully",
    OrderStatus.CANCELLED: "Order cancelled",
}


def allowed_transitions(status):
    """Statuses reachable in one step from ``status``."""
    return {s.value for s in _VALID_TRANSITIONS[OrderStatus(status)]}


def parse_status(value):
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Invalid status '{value}'. Expected one of: {valid}"]})


def generate_order_number():
    """``ORD-<epoch millis>-<three random digits>``."""
    return f"ORD-{int(time.time() * 1000)}-{random.randint(0, 999):03d}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships to, captured at checkout time and never changed."""

    full_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=50)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """Snapshot of one cart entry at checkout.

    ``price`` is the unit price after sale-price resolution, so later price
    changes on the product do not affect the order.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    product_image = String(max_length=1024)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)
    color = String(max_length=50)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    order_number = String(required=True, unique=True, max_length=50)
    items = HasMany(OrderItem)
    subtotal = Float(required=True, min_value=0.0)
    tax = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    shipping_address = ValueObject(ShippingAddress)
    tracking_number = String(max_length=255)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @invariant.post
    def total_must_be_subtotal_plus_tax(self):
        if abs((self.subtotal + self.tax) - self.total) > 0.005:
            raise ValidationError({"total": ["Order total must equal subtotal plus tax"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, order_number, lines, shipping_address, customer_name=None, notes=None):
        """Create a pending order from priced cart lines.

        Args:
            customer_id: The customer placing the order.
            order_number: A number not used by any existing order.
            lines: List of dicts with product_id, product_name, product_image,
                   price, quantity, size, color.
            shipping_address: Dict with full_name, phone, street, city,
                              state, postal_code, country.
        """
        totals = compute_totals([(line["price"], line["quantity"]) for line in lines])
        now = datetime.now(UTC)

        order = cls(
            customer_id=customer_id,
            customer_name=customer_name,
            order_number=order_number,
            items=[OrderItem(**line) for line in lines],
            subtotal=totals["subtotal"],
            tax=totals["tax"],
            total=totals["total"],
            status=OrderStatus.PENDING.value,
            shipping_address=ShippingAddress(**shipping_address),
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                customer_name=customer_name,
                shipping_name=shipping_address.get("full_name"),
                items=json.dumps(lines),
                item_count=len(lines),
                subtotal=order.subtotal,
                tax=order.tax,
                total=order.total,
                status=order.status,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(current.value, target_status.value)

    def change_status(self, new_status, tracking_number=None, note=None):
        """Move the order to ``new_status``, recording tracking and note if given."""
        target = parse_status(new_status)
        self._assert_can_transition(target)

        previous_status = self.status
        now = datetime.now(UTC)

        self.status = target.value
        if tracking_number:
            self.tracking_number = tracking_number
        if note:
            entry = f"[{now.isoformat()}] Status changed to {target.value}: {note}"
            self.notes = f"{self.notes}\n{entry}" if self.notes else entry
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                previous_status=previous_status,
                new_status=target.value,
                tracking_number=self.tracking_number,
                note=note,
                total=self.total,
                changed_at=now,
            )
        )

    def is_owned_by(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    def to_detail(self):
        """Full order representation returned by the query surface."""
        address = self.shipping_address
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "customer_id": str(self.customer_id),
            "customer_name": self.customer_name,
            "status": self.status,
            "items": [
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "product_name": item.product_name,
                    "product_image": item.product_image,
                    "price": item.price,
                    "quantity": item.quantity,
                    "size": item.size,
                    "color": item.color,
                }
                for item in self.items
            ],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "shipping_address": {
                "full_name": address.full_name,
                "phone": address.phone,
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "postal_code": address.postal_code,
                "country": address.country,
            }
            if address
            else None,
            "tracking_number": self.tracking_number,
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
