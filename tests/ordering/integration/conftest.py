import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from ordering.api import (
    admin_order_router,
    cart_router,
    order_router,
    product_router,
    register_error_handlers,
    ws_router,
)
from ordering.domain import ordering
from ordering.notify import configure_notifier
from ordering.notify.websocket import ConnectionRegistry, WebSocketNotifier


def _build_app():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with ordering.domain_context():
            return await call_next(request)

    register_error_handlers(app)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(admin_order_router)
    app.include_router(ws_router)
    app.state.connections = ConnectionRegistry()
    return app


@pytest.fixture()
def app():
    return _build_app()


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def live_client(app):
    """Client whose notifications go out over the app's WebSocket registry."""
    configure_notifier(WebSocketNotifier(app.state.connections))
    return TestClient(app)


@pytest.fixture()
def seed_order(client):
    """Factory: create a product, fill the customer's cart over HTTP and check out."""

    def _seed(customer_id="cust-001", price=25.0, quantity=2, name="Classic Tee"):
        product = client.post("/products", json={"name": name, "price": price, "stock": quantity + 5})
        assert product.status_code == 201
        added = client.post(
            f"/carts/{customer_id}/items",
            json={"product_id": product.json()["product_id"], "quantity": quantity},
        )
        assert added.status_code == 200
        response = client.post("/orders/checkout", json={}, headers={"X-Customer-Id": customer_id})
        assert response.status_code == 201
        return response.json()

    return _seed
