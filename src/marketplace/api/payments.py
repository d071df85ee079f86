"""FastAPI routes for payment gateway callbacks."""

import json

from fastapi import APIRouter, Header
from protean.utils.globals import current_domain

from marketplace.api.errors import ok
from marketplace.api.schemas import PaymentCallbackRequest
from marketplace.errors import NotAuthenticated
from marketplace.payments.gateway import get_gateway
from marketplace.payments.status import ConfirmPaymentFromGateway

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/callback")
async def gateway_callback(
    body: PaymentCallbackRequest,
    x_gateway_signature: str = Header(default=""),
) -> dict:
    """Apply a payment outcome reported by the mobile-money gateway."""
    gateway = get_gateway()
    if not gateway.verify_webhook_signature(json.dumps(body.model_dump(by_alias=True)), x_gateway_signature):
        raise NotAuthenticated("Invalid webhook signature")

    command = ConfirmPaymentFromGateway(
        order_id=body.order_id,
        gateway_status=body.gateway_status,
        transaction_id=body.transaction_id,
        failure_reason=body.failure_reason,
    )
    payment_id = current_domain.process(command, asynchronous=False)
    return ok({"paymentId": payment_id, "status": "processed"})
