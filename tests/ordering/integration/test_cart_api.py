"""Integration tests for the cart and product endpoints via TestClient."""

from ordering.cart.cart import ShoppingCart
from ordering.product.product import Product
from protean import current_domain


def _product(client, **overrides):
    body = {"name": "Classic Tee", "price": 25.0, "stock": 10}
    body.update(overrides)
    response = client.post("/products", json=body)
    assert response.status_code == 201
    return response.json()["product_id"]


class TestProductEndpoints:
    def test_add_product(self, client):
        product_id = _product(client, images=["tee.jpg"])
        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Classic Tee"
        assert product.primary_image() == "tee.jpg"

    def test_sale_lifecycle(self, client):
        product_id = _product(client)
        assert client.put(f"/products/{product_id}/sale", json={"sale_price": 20.0}).status_code == 200
        assert current_domain.repository_for(Product).get(product_id).current_price() == 20.0

        assert client.delete(f"/products/{product_id}/sale").status_code == 200
        assert current_domain.repository_for(Product).get(product_id).current_price() == 25.0

    def test_restock(self, client):
        product_id = _product(client, stock=1)
        client.put(f"/products/{product_id}/restock", json={"quantity": 4})
        assert current_domain.repository_for(Product).get(product_id).stock == 5

    def test_deactivate(self, client):
        product_id = _product(client)
        assert client.put(f"/products/{product_id}/deactivate").status_code == 200
        assert current_domain.repository_for(Product).get(product_id).is_active is False


class TestCartEndpoints:
    def test_add_and_view(self, client):
        product_id = _product(client)
        response = client.post("/carts/cust-001/items", json={"product_id": product_id, "quantity": 2, "size": "M"})
        assert response.status_code == 200
        assert response.json()["item_id"]

        view = client.get("/carts/cust-001").json()
        assert view["item_count"] == 2
        assert view["subtotal"] == 50.0
        assert view["tax"] == 5.0
        assert view["total"] == 55.0
        assert view["items"][0]["size"] == "M"

    def test_add_unavailable_product(self, client):
        response = client.post("/carts/cust-001/items", json={"product_id": "no-such-product", "quantity": 1})
        assert response.status_code == 400

    def test_update_and_remove(self, client):
        product_id = _product(client)
        item_id = client.post("/carts/cust-001/items", json={"product_id": product_id, "quantity": 1}).json()[
            "item_id"
        ]

        client.put(f"/carts/cust-001/items/{item_id}", json={"new_quantity": 3})
        assert client.get("/carts/cust-001").json()["item_count"] == 3

        client.delete(f"/carts/cust-001/items/{item_id}")
        assert client.get("/carts/cust-001").json()["items"] == []

    def test_clear(self, client):
        client.post("/carts/cust-001/items", json={"product_id": _product(client), "quantity": 1})
        assert client.delete("/carts/cust-001").status_code == 200
        assert current_domain.repository_for(ShoppingCart).for_customer("cust-001").is_empty
