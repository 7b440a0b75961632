"""Application tests for cart commands and the priced cart view."""

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.items import RemoveFromCart, UpdateCartQuantity
from ordering.cart.management import ClearCart
from ordering.cart.view import cart_view
from ordering.errors import InsufficientStock, ProductUnavailable
from ordering.product.management import DeactivateProduct, PutProductOnSale
from protean import current_domain
from protean.exceptions import ValidationError


def _cart(customer_id="cust-001"):
    return current_domain.repository_for(ShoppingCart).for_customer(customer_id)


class TestAddToCartCommand:
    def test_first_add_creates_cart(self, add_product, add_to_cart):
        add_to_cart("cust-001", add_product(), 2)

        cart = _cart()
        assert cart is not None
        assert cart.items[0].quantity == 2

    def test_adds_merge_into_one_cart(self, add_product, add_to_cart):
        product_id = add_product()
        add_to_cart("cust-001", product_id, 1, size="M")
        add_to_cart("cust-001", product_id, 2, size="M")
        add_to_cart("cust-001", add_product(name="Cap"), 1)

        cart = _cart()
        assert len(cart.items) == 2
        assert current_domain.repository_for(ShoppingCart)._dao.query.all().total == 1

    def test_unknown_product(self, add_to_cart):
        with pytest.raises(ProductUnavailable):
            add_to_cart("cust-001", "no-such-product", 1)

    def test_inactive_product(self, add_product, add_to_cart):
        product_id = add_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        with pytest.raises(ProductUnavailable):
            add_to_cart("cust-001", product_id, 1)

    def test_quantity_above_stock(self, add_product, add_to_cart):
        product_id = add_product(stock=2)
        with pytest.raises(InsufficientStock):
            add_to_cart("cust-001", product_id, 3)
        assert _cart() is None


class TestCartItemCommands:
    def test_update_quantity(self, add_product, add_to_cart):
        item_id = add_to_cart("cust-001", add_product(), 1)
        current_domain.process(
            UpdateCartQuantity(customer_id="cust-001", item_id=item_id, new_quantity=4),
            asynchronous=False,
        )
        assert _cart().items[0].quantity == 4

    def test_remove_item(self, add_product, add_to_cart):
        item_id = add_to_cart("cust-001", add_product(), 1)
        current_domain.process(RemoveFromCart(customer_id="cust-001", item_id=item_id), asynchronous=False)
        assert _cart().is_empty

    def test_update_without_cart(self):
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateCartQuantity(customer_id="cust-001", item_id="item-1", new_quantity=4),
                asynchronous=False,
            )

    def test_clear(self, add_product, add_to_cart):
        add_to_cart("cust-001", add_product(), 1)
        add_to_cart("cust-001", add_product(name="Cap"), 1)
        current_domain.process(ClearCart(customer_id="cust-001"), asynchronous=False)
        assert _cart().is_empty

    def test_clear_without_cart_is_noop(self):
        current_domain.process(ClearCart(customer_id="cust-001"), asynchronous=False)
        assert _cart() is None


class TestCartView:
    def test_no_cart(self):
        view = cart_view("cust-001")
        assert view["items"] == []
        assert view["total"] == 0.0

    def test_priced_view(self, add_product, add_to_cart):
        add_to_cart("cust-001", add_product(price=25.0), 2)
        add_to_cart("cust-001", add_product(name="Cap", price=10.0), 1)

        view = cart_view("cust-001")

        assert view["item_count"] == 3
        assert view["subtotal"] == 60.0
        assert view["tax"] == 6.0
        assert view["total"] == 66.0
        assert {i["product_name"] for i in view["items"]} == {"Classic Tee", "Cap"}

    def test_sale_price_applied(self, add_product, add_to_cart):
        product_id = add_product(price=25.0)
        current_domain.process(PutProductOnSale(product_id=product_id, sale_price=15.0), asynchronous=False)
        add_to_cart("cust-001", product_id, 2)

        view = cart_view("cust-001")

        assert view["items"][0]["price"] == 15.0
        assert view["items"][0]["item_total"] == 30.0
        assert view["total"] == 33.0

    def test_deactivated_product_flagged(self, add_product, add_to_cart):
        product_id = add_product()
        add_to_cart("cust-001", product_id, 1)
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)

        assert cart_view("cust-001")["items"][0]["available"] is False
