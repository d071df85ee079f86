"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (PAYMENT_GATEWAY=fake, the default)
- SignedGateway for production (PAYMENT_GATEWAY=signed, PAYMENT_WEBHOOK_SECRET)
"""

import os

from marketplace.payments.gateway.fake_adapter import FakeGateway
from marketplace.payments.gateway.port import PaymentGateway
from marketplace.payments.gateway.signed_adapter import SignedGateway

_current_gateway: PaymentGateway | None = None


def _from_environment() -> PaymentGateway:
    kind = os.environ.get("PAYMENT_GATEWAY", "fake").lower()
    if kind == "signed":
        return SignedGateway(os.environ.get("PAYMENT_WEBHOOK_SECRET", ""))
    if kind != "fake":
        raise ValueError(f"Unknown PAYMENT_GATEWAY '{kind}'")
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, built from the environment on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _from_environment()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
