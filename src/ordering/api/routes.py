"""FastAPI routes for the Ordering domain — products, carts and orders.

Customer routes identify the caller through the ``X-Customer-Id`` header,
which the authentication layer in front of this service sets.
"""

import json
from datetime import datetime

from fastapi import APIRouter, Header, Query
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    BulkStatusUpdateResponse,
    BulkUpdateOrderStatusRequest,
    CartItemIdResponse,
    CheckoutRequest,
    CheckoutResponse,
    OrderStatusUpdateResponse,
    ProductIdResponse,
    PutProductOnSaleRequest,
    RestockProductRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from ordering.cart.management import ClearCart
from ordering.cart.view import cart_view
from ordering.checkout.placement import PlaceOrder, estimated_delivery, place_order
from ordering.order.queries import (
    get_customer_order,
    get_order,
    list_orders,
    order_statistics,
    status_options,
)
from ordering.order.status import UpdateOrderStatus, bulk_update_order_status
from ordering.product.management import (
    AddProduct,
    DeactivateProduct,
    EndProductSale,
    PutProductOnSale,
    RestockProduct,
)

# ---------------------------------------------------------------------------
# Product Router (admin)
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        description=body.description,
        images=json.dumps(body.images),
        price=body.price,
        stock=body.stock,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}/restock", response_model=StatusResponse)
async def restock_product(product_id: str, body: RestockProductRequest) -> StatusResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/sale", response_model=StatusResponse)
async def put_product_on_sale(product_id: str, body: PutProductOnSaleRequest) -> StatusResponse:
    current_domain.process(PutProductOnSale(product_id=product_id, sale_price=body.sale_price), asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}/sale", response_model=StatusResponse)
async def end_product_sale(product_id: str) -> StatusResponse:
    current_domain.process(EndProductSale(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{customer_id}")
async def view_cart(customer_id: str):
    return cart_view(customer_id)


@cart_router.post("/{customer_id}/items", response_model=CartItemIdResponse)
async def add_cart_item(customer_id: str, body: AddToCartRequest) -> CartItemIdResponse:
    command = AddToCart(
        customer_id=customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
        color=body.color,
    )
    item_id = current_domain.process(command, asynchronous=False)
    return CartItemIdResponse(item_id=item_id)


@cart_router.put("/{customer_id}/items/{item_id}", response_model=StatusResponse)
async def update_cart_item_quantity(
    customer_id: str, item_id: str, body: UpdateCartQuantityRequest
) -> StatusResponse:
    command = UpdateCartQuantity(
        customer_id=customer_id,
        item_id=item_id,
        new_quantity=body.new_quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{customer_id}/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(customer_id: str, item_id: str) -> StatusResponse:
    current_domain.process(RemoveFromCart(customer_id=customer_id, item_id=item_id), asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{customer_id}", response_model=StatusResponse)
async def clear_cart(customer_id: str) -> StatusResponse:
    current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Customer Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/checkout", status_code=201, response_model=CheckoutResponse)
async def checkout(body: CheckoutRequest, x_customer_id: str = Header()) -> CheckoutResponse:
    command = PlaceOrder(
        customer_id=x_customer_id,
        customer_name=body.customer_name,
        shipping_address=json.dumps(body.shipping_address.model_dump()) if body.shipping_address else None,
        order_notes=body.order_notes,
    )
    order_id = place_order(command)
    order = get_order(order_id)
    return CheckoutResponse(
        order=order,
        order_number=order["order_number"],
        total=order["total"],
        estimated_delivery=estimated_delivery(order["created_at"]),
    )


@order_router.get("/my-orders")
async def my_orders(
    x_customer_id: str = Header(),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
):
    return list_orders(
        customer_id=x_customer_id,
        status=status,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@order_router.get("/my-orders/{order_id}")
async def my_order(order_id: str, x_customer_id: str = Header()):
    return get_customer_order(x_customer_id, order_id)


@order_router.get("/status-options")
async def order_status_options():
    return {"statuses": status_options()}


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_order_router.get("")
async def admin_list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str | None = None,
    customer_id: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    min_total: float | None = Query(None, ge=0),
    max_total: float | None = Query(None, ge=0),
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
):
    return list_orders(
        customer_id=customer_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        min_total=min_total,
        max_total=max_total,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@admin_order_router.get("/statistics")
async def admin_order_statistics():
    return order_statistics()


@admin_order_router.put("/bulk-status", response_model=BulkStatusUpdateResponse)
async def admin_bulk_update_status(body: BulkUpdateOrderStatusRequest) -> BulkStatusUpdateResponse:
    result = bulk_update_order_status(
        body.order_ids,
        body.status,
        tracking_number=body.tracking_number,
        note=body.note,
    )
    return BulkStatusUpdateResponse(**result)


@admin_order_router.get("/{order_id}")
async def admin_get_order(order_id: str):
    return get_order(order_id)


@admin_order_router.put("/{order_id}/status", response_model=OrderStatusUpdateResponse)
async def admin_update_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderStatusUpdateResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        note=body.note,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderStatusUpdateResponse(**result)
