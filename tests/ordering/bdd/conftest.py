"""Shared BDD fixtures and step definitions for checkout and the order lifecycle."""

import pytest
from ordering.checkout.placement import PlaceOrder
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from ordering.product.management import PutProductOnSale
from ordering.product.product import Product
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def catalogue():
    """Product ids by name, filled by the Given steps."""
    return {}


@pytest.fixture()
def outcome():
    """Container for the order id and any captured validation error."""
    return {"order_id": None, "exc": None}


def _order(outcome):
    return current_domain.repository_for(Order).get(outcome["order_id"])


def _product(catalogue, name):
    return current_domain.repository_for(Product).get(catalogue[name])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced at {price:g} with {stock:d} in stock'))
def _(catalogue, add_product, name, price, stock):
    catalogue[name] = add_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the customer has {quantity:d} of "{name}" in their cart'))
def _(catalogue, add_to_cart, customer_id, quantity, name):
    add_to_cart(customer_id, catalogue[name], quantity)


@given(parsers.cfparse('"{name}" goes on sale for {sale_price:g}'))
def _(catalogue, name, sale_price):
    current_domain.process(
        PutProductOnSale(product_id=catalogue[name], sale_price=sale_price),
        asynchronous=False,
    )


@given(parsers.cfparse('another customer buys {quantity:d} of "{name}"'))
def _(catalogue, add_to_cart, quantity, name):
    add_to_cart("cust-999", catalogue[name], quantity)
    current_domain.process(PlaceOrder(customer_id="cust-999"), asynchronous=False)


@given("the customer has checked out")
def _(customer_id, outcome):
    outcome["order_id"] = current_domain.process(PlaceOrder(customer_id=customer_id), asynchronous=False)


@given(parsers.cfparse('the order was moved to "{status}"'))
def _(outcome, status):
    current_domain.process(UpdateOrderStatus(order_id=outcome["order_id"], status=status), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(outcome, status):
    assert _order(outcome).status == status


@then(parsers.cfparse("the order total is {total:g}"))
def _(outcome, total):
    assert _order(outcome).total == pytest.approx(total)


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(catalogue, name, stock):
    assert _product(catalogue, name).stock == stock
