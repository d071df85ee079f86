"""HMAC-SHA256 signed callbacks, the scheme used by the mobile-money operators."""

import hashlib
import hmac

from marketplace.payments.gateway.port import PaymentGateway


class SignedGateway(PaymentGateway):
    name = "signed"

    def __init__(self, webhook_secret: str) -> None:
        if not webhook_secret:
            raise ValueError("PAYMENT_WEBHOOK_SECRET must be set for the signed gateway")
        self.webhook_secret = webhook_secret

    def sign(self, payload: str) -> str:
        return hmac.new(self.webhook_secret.encode(), payload.encode(), hashlib.sha256).hexdigest()

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        if not signature:
            return False
        return hmac.compare_digest(self.sign(payload), signature)
