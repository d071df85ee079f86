"""FastAPI routes for orders."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.caller import command_caller, current_caller
from marketplace.api.errors import ok
from marketplace.api.params import query_of
from marketplace.api.schemas import (
    CreateOrderRequest,
    OrderResponse,
    OrderSearchQuery,
    PageResponse,
    UpdatePaymentRequest,
    UpdateStatusRequest,
)
from marketplace.identity.access import Caller
from marketplace.ordering.cancellation import CancelOrder
from marketplace.ordering.creation import CreateOrder
from marketplace.ordering.queries import get_order, search_orders
from marketplace.ordering.status import UpdateOrderStatus
from marketplace.payments.status import UpdatePaymentStatus

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _order_payload(caller: Caller, order_id: str) -> dict:
    details = get_order(caller, order_id)
    return ok(OrderResponse.of(details.order, details.store_orders, details.payment, details.timeline))


@order_router.post("", status_code=201)
async def create_order(body: CreateOrderRequest, caller: Caller = Depends(current_caller)) -> dict:
    order_data = body.order_data
    command = CreateOrder(
        **command_caller(caller),
        buyer_id=order_data.buyer_id,
        destination_address_id=order_data.destination_address_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        delivery_type=order_data.delivery_type,
        vehicle_type=order_data.vehicle_type,
        payment_method=order_data.payment_method,
        delivery_notes=order_data.delivery_notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_payload(caller, order_id)


@order_router.get("")
async def list_orders(
    caller: Caller = Depends(current_caller),
    query: OrderSearchQuery = Depends(query_of(OrderSearchQuery)),
) -> dict:
    result = search_orders(caller, **query.model_dump())
    return ok(PageResponse.of(result, OrderResponse))


@order_router.get("/{order_id}")
async def read_order(order_id: str, caller: Caller = Depends(current_caller)) -> dict:
    return _order_payload(caller, order_id)


@order_router.delete("/{order_id}")
async def cancel_order(order_id: str, reason: str | None = None, caller: Caller = Depends(current_caller)) -> dict:
    current_domain.process(CancelOrder(order_id=order_id, reason=reason, **command_caller(caller)), asynchronous=False)
    return _order_payload(caller, order_id)


@order_router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str, body: UpdateStatusRequest, caller: Caller = Depends(current_caller)
) -> dict:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, reason=body.reason, **command_caller(caller))
    current_domain.process(command, asynchronous=False)
    return _order_payload(caller, order_id)


@order_router.patch("/{order_id}/payment")
async def update_payment_status(
    order_id: str, body: UpdatePaymentRequest, caller: Caller = Depends(current_caller)
) -> dict:
    command = UpdatePaymentStatus(
        order_id=order_id,
        status=body.status,
        transaction_id=body.transaction_id,
        **command_caller(caller),
    )
    current_domain.process(command, asynchronous=False)
    return _order_payload(caller, order_id)
