"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str
    phone: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    description: str | None = None
    images: list[str] = Field(default_factory=list)
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Classic Tee",
                    "description": "100% cotton",
                    "images": ["https://cdn.example.com/tee.jpg"],
                    "price": 25.0,
                    "stock": 40,
                }
            ]
        }
    }


class RestockProductRequest(BaseModel):
    quantity: int = Field(ge=1)


class PutProductOnSaleRequest(BaseModel):
    sale_price: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    size: str | None = None
    color: str | None = None


class UpdateCartQuantityRequest(BaseModel):
    new_quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    customer_name: str | None = None
    shipping_address: ShippingAddressSchema | None = None
    order_notes: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    tracking_number: str | None = None
    note: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "shipped",
                    "tracking_number": "1Z999AA10123456784",
                    "note": "Handed to carrier",
                }
            ]
        }
    }


class BulkUpdateOrderStatusRequest(BaseModel):
    order_ids: list[str]
    status: str
    tracking_number: str | None = None
    note: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class ProductIdResponse(BaseModel):
    product_id: str


class CartItemIdResponse(BaseModel):
    item_id: str


class CheckoutResponse(BaseModel):
    order: dict
    order_number: str
    total: float
    estimated_delivery: datetime
    message: str = "Order created successfully"


class OrderStatusUpdateResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    updated_at: datetime


class BulkRejection(BaseModel):
    order_id: str
    reason: dict | str


class BulkStatusUpdateResponse(BaseModel):
    updated: list[str]
    rejected: list[BulkRejection]
