"""Priced view of a customer's cart."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.checkout.pricing import compute_totals, line_total
from ordering.product.product import Product


def cart_view(customer_id):
    """The cart with every entry priced at the product's current price.

    Entries whose product has since been removed are listed with a zero price
    and ``available`` set to False; checkout will reject them.
    """
    cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
    if cart is None:
        return {
            "cart_id": None,
            "items": [],
            "item_count": 0,
            **compute_totals([]),
        }

    product_repo = current_domain.repository_for(Product)
    items = []
    for item in cart.items:
        try:
            product = product_repo.get(item.product_id)
        except ObjectNotFoundError:
            product = None

        price = product.current_price() if product else 0.0
        items.append(
            {
                "item_id": str(item.id),
                "product_id": str(item.product_id),
                "product_name": product.name if product else None,
                "product_image": product.primary_image() if product else None,
                "price": price,
                "quantity": item.quantity,
                "size": item.size,
                "color": item.color,
                "item_total": round(line_total(price, item.quantity), 2),
                "available": bool(product and product.is_active),
                "added_at": item.added_at,
            }
        )

    return {
        "cart_id": str(cart.id),
        "items": items,
        "item_count": sum(i["quantity"] for i in items),
        **compute_totals([(i["price"], i["quantity"]) for i in items]),
    }
