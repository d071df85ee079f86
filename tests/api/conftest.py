"""TestClient wired with every marketplace router and the error envelope."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import (
    cart_router,
    delivery_router,
    logistics_router,
    notification_router,
    order_router,
    payment_router,
    store_order_router,
)
from marketplace.api.errors import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (
        order_router,
        delivery_router,
        logistics_router,
        store_order_router,
        cart_router,
        notification_router,
        payment_router,
    ):
        app.include_router(router)
    register_exception_handlers(app)
    return TestClient(app, raise_server_exceptions=False)

