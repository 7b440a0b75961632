"""Product aggregate (CQRS) — the stock and price source read at checkout.

Only the attributes the ordering flow depends on live here: display name and
images for order snapshots, base and sale price, the active flag, and the
stock level that checkout decrements.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from ordering.domain import ordering
from ordering.errors import InsufficientStock


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    images = Text()  # JSON: list of image URLs
    price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    is_on_sale = Boolean(default=False)
    stock = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def sale_price_required_when_on_sale(self):
        if self.is_on_sale and self.sale_price is None:
            raise ValidationError({"sale_price": ["A product on sale must have a sale price"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, stock=0, description=None, images=None):
        now = datetime.now(UTC)
        return cls(
            name=name,
            price=price,
            stock=stock,
            description=description,
            images=json.dumps(images or []),
            is_on_sale=False,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def current_price(self):
        """Sale price while the product is on sale, base price otherwise."""
        if self.is_on_sale and self.sale_price is not None:
            return self.sale_price
        return self.price

    def primary_image(self):
        images = json.loads(self.images) if self.images else []
        return images[0] if images else ""

    def put_on_sale(self, sale_price):
        if sale_price >= self.price:
            raise ValidationError({"sale_price": ["Sale price must be lower than the base price"]})

        self.sale_price = sale_price
        self.is_on_sale = True
        self.updated_at = datetime.now(UTC)

    def end_sale(self):
        self.is_on_sale = False
        self.sale_price = None
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def deduct_stock(self, quantity):
        """Decrement stock by ``quantity`` only if enough stock remains."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.stock < quantity:
            raise InsufficientStock(str(self.id), self.name, self.stock, quantity)

        self.stock -= quantity
        self.updated_at = datetime.now(UTC)

    def restock(self, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        self.stock += quantity
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})

        self.is_active = False
        self.updated_at = datetime.now(UTC)
