"""Marketplace HTTP API package."""

import importlib

# Routers are resolved lazily: the domain's module traversal may load a
# router module before this package, and eager imports here would then
# re-enter that half-initialised module.
_ROUTERS = {
    "cart_router": "marketplace.api.cart",
    "delivery_router": "marketplace.api.delivery",
    "logistics_router": "marketplace.api.logistics",
    "notification_router": "marketplace.api.notifications",
    "order_router": "marketplace.api.orders",
    "payment_router": "marketplace.api.payments",
    "store_order_router": "marketplace.api.store_orders",
}

__all__ = [
    "cart_router",
    "delivery_router",
    "logistics_router",
    "notification_router",
    "order_router",
    "payment_router",
    "store_order_router",
]


def __getattr__(name):
    if name in _ROUTERS:
        return getattr(importlib.import_module(_ROUTERS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
