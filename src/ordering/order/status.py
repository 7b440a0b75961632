"""Order status management — single and bulk status updates for admins.

A bulk update is best-effort: each order is processed as its own
UpdateOrderStatus command in its own unit of work, so one order rejecting
the transition does not roll back the others.
"""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import OrderNotFound
from ordering.order.order import Order, parse_status

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    tracking_number = String(max_length=255)
    note = Text()


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            raise OrderNotFound(str(command.order_id))

        previous_status = order.status
        order.change_status(
            command.status,
            tracking_number=command.tracking_number,
            note=command.note,
        )
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous_status,
            new_status=order.status,
        )
        return {
            "order_id": str(order.id),
            "order_number": order.order_number,
            "status": order.status,
            "updated_at": order.updated_at,
        }


def bulk_update_order_status(order_ids, status, tracking_number=None, note=None):
    """Apply one status change to several orders, best-effort.

    Each order is dispatched as its own UpdateOrderStatus command, so each
    commits (and notifies its owner) in its own unit of work. Must be called
    outside any active unit of work.

    Returns ``{"updated": [ids], "rejected": [{"order_id", "reason"}]}``.
    """
    if not order_ids:
        raise ValidationError({"order_ids": ["At least one order id is required"]})

    # An unknown status rejects the whole batch
    parse_status(status)

    updated = []
    rejected = []
    for order_id in order_ids:
        try:
            current_domain.process(
                UpdateOrderStatus(
                    order_id=str(order_id),
                    status=status,
                    tracking_number=tracking_number,
                    note=note,
                ),
                asynchronous=False,
            )
            updated.append(str(order_id))
        except (ValidationError, ObjectNotFoundError, InvalidOperationError) as exc:
            reason = exc.messages if hasattr(exc, "messages") else str(exc)
            logger.warning(
                "Failed to update order status",
                order_id=str(order_id),
                status=status,
                error=str(exc),
            )
            rejected.append({"order_id": str(order_id), "reason": reason})

    logger.info(
        "Bulk order status update complete",
        status=status,
        updated_count=len(updated),
        rejected_count=len(rejected),
    )
    return {"updated": updated, "rejected": rejected}
