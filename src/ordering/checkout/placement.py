"""Checkout — converting a customer's cart into a pending order.

Placement runs in two phases inside the handler's unit of work:

    1. Validation: the cart has entries, every product exists and is active,
       and each product's stock covers the quantity requested across all of
       the cart's entries for it. Nothing is written if any check fails.
    2. Mutation: the order is stored, each product's stock is decremented
       and the cart is cleared. An error here rolls back every write.

The resulting OrderPlaced event is dispatched after commit and drives the
admin notification and the order read models.
"""

import json
import os
from datetime import timedelta

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering
from ordering.errors import CartEmpty, CheckoutFailed, InsufficientStock, ProductUnavailable
from ordering.order.order import Order, generate_order_number
from ordering.product.product import Product

logger = structlog.get_logger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5
ESTIMATED_DELIVERY_DAYS = 5

PLACEHOLDER_SHIPPING_ADDRESS = {
    "full_name": "Demo User",
    "phone": "+1-555-0123",
    "street": "123 Main Street",
    "city": "New York",
    "state": "NY",
    "postal_code": "10001",
    "country": "US",
}


def estimated_delivery(placed_at):
    return placed_at + timedelta(days=ESTIMATED_DELIVERY_DAYS)


def shipping_address_required():
    return os.getenv("ORDERING_REQUIRE_SHIPPING_ADDRESS", "false").lower() in ("1", "true", "yes")


@ordering.command(part_of="Order")
class PlaceOrder:
    """Place an order from everything in the customer's cart."""

    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    shipping_address = Text()  # JSON: address dict, optional
    order_notes = Text()


def _resolve_shipping_address(raw, customer_id):
    address = json.loads(raw) if isinstance(raw, str) else raw
    if address:
        return address

    if shipping_address_required():
        raise ValidationError({"shipping_address": ["A shipping address is required"]})

    logger.warning("No shipping address given, using placeholder address", customer_id=str(customer_id))
    return dict(PLACEHOLDER_SHIPPING_ADDRESS)


def _unique_order_number(repo):
    for _ in range(MAX_ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        if not repo.number_in_use(candidate):
            return candidate
    raise CheckoutFailed("could not allocate a unique order number")


def _load_products(cart):
    """Fetch each distinct product in the cart once, rejecting unavailable ones."""
    repo = current_domain.repository_for(Product)
    products = {}
    for item in cart.items:
        product_id = str(item.product_id)
        if product_id in products:
            continue
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            raise ProductUnavailable(product_id)
        if not product.is_active:
            raise ProductUnavailable(product_id, product.name)
        products[product_id] = product
    return products


@ordering.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.for_customer(command.customer_id)
        if cart is None or cart.is_empty:
            logger.info("Checkout rejected: cart is empty", customer_id=str(command.customer_id))
            raise CartEmpty(str(command.customer_id))

        products = _load_products(cart)
        requested = cart.quantities_by_product()
        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.stock < quantity:
                logger.info(
                    "Checkout rejected: insufficient stock",
                    customer_id=str(command.customer_id),
                    product_id=product_id,
                    available=product.stock,
                    requested=quantity,
                )
                raise InsufficientStock(product_id, product.name, product.stock, quantity)

        address = _resolve_shipping_address(command.shipping_address, command.customer_id)

        lines = []
        for item in cart.items:
            product = products[str(item.product_id)]
            lines.append(
                {
                    "product_id": str(product.id),
                    "product_name": product.name,
                    "product_image": product.primary_image(),
                    "price": product.current_price(),
                    "quantity": item.quantity,
                    "size": item.size,
                    "color": item.color,
                }
            )

        try:
            order_repo = current_domain.repository_for(Order)
            order = Order.place(
                customer_id=command.customer_id,
                customer_name=command.customer_name or address.get("full_name"),
                order_number=_unique_order_number(order_repo),
                lines=lines,
                shipping_address=address,
                notes=command.order_notes,
            )
            order_repo.add(order)

            product_repo = current_domain.repository_for(Product)
            for product_id, quantity in requested.items():
                product = products[product_id]
                product.deduct_stock(quantity)
                product_repo.add(product)

            cart.clear()
            cart_repo.add(cart)
        except (ValidationError, ObjectNotFoundError):
            raise
        except Exception as exc:
            logger.error(
                "Checkout failed while placing order",
                customer_id=str(command.customer_id),
                error=str(exc),
            )
            raise CheckoutFailed(str(exc)) from exc

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total=order.total,
            item_count=len(lines),
        )
        return str(order.id)


def place_order(command: PlaceOrder) -> str:
    """Process ``command`` and return the new order's id.

    The handler wraps failures raised while it runs. A failure while its unit
    of work commits, such as a version conflict with a concurrent checkout of
    the same product, happens after the handler returns, so it is wrapped here.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except (ExpectedVersionError, TransactionError) as exc:
        logger.error(
            "Checkout failed while committing order",
            customer_id=str(command.customer_id),
            error=str(exc),
        )
        raise CheckoutFailed(str(exc)) from exc
