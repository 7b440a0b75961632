"""Storefront FastAPI application.

Single-domain web server that processes commands synchronously via HTTP and
pushes order notifications to WebSocket clients.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

import uuid
from contextlib import asynccontextmanager

# ---------------------------------------------------------------------------
# Logging and domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordering.domain import ordering
from ordering.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()
ordering.init()

from ordering.api import (  # noqa: E402
    admin_order_router,
    cart_router,
    order_router,
    product_router,
    register_error_handlers,
    ws_router,
)
from ordering.notify import configure_notifier, reset_notifier  # noqa: E402
from ordering.notify.websocket import ConnectionRegistry, WebSocketNotifier  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Install the WebSocket notifier for the lifetime of the server."""
    registry = ConnectionRegistry()
    app.state.connections = registry
    configure_notifier(WebSocketNotifier(registry))
    yield
    registry.close()
    reset_notifier()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce ordering — carts, checkout and order lifecycle",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Ordering domain context and bind request log context."""
    clear_request_context()
    bind_request_context(
        request_id=request.headers.get("x-request-id", uuid.uuid4().hex),
        path=request.url.path,
        method=request.method,
    )
    with ordering.domain_context():
        response = await call_next(request)
    return response


register_error_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(admin_order_router)
app.include_router(ws_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": ordering.name,
            "connections": app.state.connections.connection_count,
        }
    )
