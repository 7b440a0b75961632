"""Shopping Cart aggregate (CQRS) — one cart per customer, drained at checkout.

A cart holds the products a customer has selected, each with an optional
size and color. Adding a product that is already in the cart with the same
size and color merges into the existing entry, so a (product, size, color)
combination appears at most once.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from ordering.domain import ordering


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)
    color = String(max_length=50)
    added_at = DateTime()

    def matches(self, product_id, size=None, color=None):
        return (
            str(self.product_id) == str(product_id)
            and (self.size or None) == (size or None)
            and (self.color or None) == (color or None)
        )


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_empty(self):
        return not self.items

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, size=None, color=None):
        """Add a product to the cart, merging with a matching entry if present."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = next((i for i in self.items if i.matches(product_id, size, color)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            item_id = str(existing.id)
        else:
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                size=size,
                color=color,
                added_at=now,
            )
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now
        return item_id

    def update_item_quantity(self, item_id, new_quantity):
        if new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

    def remove_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def clear(self):
        """Remove every entry. Called when the cart is converted into an order."""
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def quantities_by_product(self):
        """Total requested quantity per product, across sizes and colors."""
        totals = {}
        for item in self.items:
            key = str(item.product_id)
            totals[key] = totals.get(key, 0) + item.quantity
        return totals


@ordering.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_customer(self, customer_id) -> ShoppingCart | None:
        """The customer's cart, or None when they have never added anything."""
        return self._dao.query.filter(customer_id=str(customer_id)).all().first
