"""Fake payment gateway for development and testing.

Accepts the fixed signature ``test-signature`` and records every
verification attempt so tests can assert on them.
"""

from marketplace.payments.gateway.port import PaymentGateway

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    name = "fake"

    def __init__(self) -> None:
        self.calls: list[dict] = []

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        self.calls.append({"method": "verify_webhook_signature", "payload": payload, "signature": signature})
        return signature == TEST_SIGNATURE
