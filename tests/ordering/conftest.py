import json

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture()
def notifier():
    """The fake notifier that order event handlers deliver to."""
    from ordering.notify import get_notifier

    return get_notifier()


@pytest.fixture()
def add_product():
    """Factory: create a product through the AddProduct command and return its id."""
    from ordering.product.management import AddProduct
    from protean import current_domain

    def _add(name="Classic Tee", price=25.0, stock=10, images=None):
        return current_domain.process(
            AddProduct(
                name=name,
                price=price,
                stock=stock,
                images=json.dumps(images if images is not None else [f"https://cdn.example.com/{name}.jpg"]),
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def add_to_cart():
    """Factory: add a product to a customer's cart and return the cart item id."""
    from ordering.cart.items import AddToCart
    from protean import current_domain

    def _add(customer_id, product_id, quantity=1, size=None, color=None):
        return current_domain.process(
            AddToCart(
                customer_id=customer_id,
                product_id=product_id,
                quantity=quantity,
                size=size,
                color=color,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def place_order(add_product, add_to_cart):
    """Factory: stock a product, fill the customer's cart and check out. Returns the order id."""
    from ordering.checkout.placement import PlaceOrder
    from protean import current_domain

    def _place(customer_id="cust-001", price=25.0, quantity=2, customer_name=None):
        product_id = add_product(price=price, stock=quantity + 10)
        add_to_cart(customer_id, product_id, quantity)
        return current_domain.process(
            PlaceOrder(customer_id=customer_id, customer_name=customer_name),
            asynchronous=False,
        )

    return _place
