"""Read side of the ordering context — customer history, admin listing and stats.

Full order detail is read from the Order aggregate. Listings and counts are
served from the OrderSummary and OrderStats projections.
"""

import math
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from ordering.errors import OrderNotFound
from ordering.order.order import STATUS_DESCRIPTIONS, Order, OrderStatus, parse_status
from ordering.projections.order_stats import STATS_KEY, OrderStats
from ordering.projections.order_summary import OrderSummary

SORTABLE_FIELDS = ("created_at", "total", "order_number", "status")
RECENT_ORDER_COUNT = 5
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _as_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def get_order(order_id):
    """Full order by id, without an ownership check."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(str(order_id))
    return order.to_detail()


def get_customer_order(customer_id, order_id):
    """Full order by id, visible only to the customer who placed it."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(str(order_id))
    if not order.is_owned_by(customer_id):
        raise OrderNotFound(str(order_id))
    return order.to_detail()


def list_orders(
    customer_id=None,
    status=None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    min_total: float | None = None,
    max_total: float | None = None,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
):
    """One page of order summaries matching every given filter.

    Returns ``{"orders": [...], "pagination": {...}}``.
    """
    if sort_by not in SORTABLE_FIELDS:
        raise ValidationError({"sort_by": [f"Cannot sort by '{sort_by}'. Expected one of: {', '.join(SORTABLE_FIELDS)}"]})
    if sort_order not in ("asc", "desc"):
        raise ValidationError({"sort_order": ["Sort order must be 'asc' or 'desc'"]})
    if page < 1:
        raise ValidationError({"page": ["Page must be at least 1"]})
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError({"limit": [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]})

    filters = {}
    if customer_id is not None:
        filters["customer_id"] = str(customer_id)
    if status:
        filters["status"] = parse_status(status).value
    if date_from is not None:
        filters["created_at__gte"] = _as_utc(date_from)
    if date_to is not None:
        filters["created_at__lte"] = _as_utc(date_to)
    if min_total is not None:
        filters["total__gte"] = min_total
    if max_total is not None:
        filters["total__lte"] = max_total

    query = current_domain.repository_for(OrderSummary)._dao.query.filter(**filters)
    if search:
        query = query.filter(
            Q(order_number__icontains=search)
            | Q(customer_name__icontains=search)
            | Q(shipping_name__icontains=search)
        )

    ordering_key = sort_by if sort_order == "asc" else f"-{sort_by}"
    results = query.order_by(ordering_key).offset((page - 1) * limit).limit(limit).all()

    total_orders = results.total
    total_pages = math.ceil(total_orders / limit) if total_orders else 0
    return {
        "orders": [summary.to_listing() for summary in results.items],
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "total_orders": total_orders,
            "has_next_page": page < total_pages,
            "has_previous_page": page > 1,
        },
    }


def order_statistics():
    """Order counts per status, delivered revenue and the most recent orders."""
    try:
        stats = current_domain.repository_for(OrderStats).get(STATS_KEY)
    except ObjectNotFoundError:
        stats = None

    recent = (
        current_domain.repository_for(OrderSummary)
        ._dao.query.order_by("-created_at")
        .limit(RECENT_ORDER_COUNT)
        .all()
        .items
    )

    counts = {f"{s.value}_orders": (getattr(stats, f"{s.value}_orders") or 0) if stats else 0 for s in OrderStatus}
    return {
        "total_orders": (stats.total_orders or 0) if stats else 0,
        **counts,
        "total_revenue": round((stats.delivered_revenue or 0.0) if stats else 0.0, 2),
        "recent_orders": [
            {
                "id": str(summary.order_id),
                "order_number": summary.order_number,
                "customer_id": str(summary.customer_id),
                "customer_name": summary.customer_name,
                "status": summary.status,
                "total": summary.total,
                "created_at": summary.created_at,
            }
            for summary in recent
        ],
    }


def status_options():
    """Every order status with its human-readable description."""
    return [{"value": status.value, "description": STATUS_DESCRIPTIONS[status]} for status in OrderStatus]
