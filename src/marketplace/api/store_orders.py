"""FastAPI routes for a store's view of its sub-orders."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.caller import command_caller, current_caller
from marketplace.api.errors import ok
from marketplace.api.params import query_of
from marketplace.api.schemas import (
    OverviewResponse,
    PageResponse,
    StoreOrderResponse,
    StoreOrderSearchQuery,
    UpdateStatusRequest,
)
from marketplace.identity.access import Caller
from marketplace.ordering.order import StoreOrder
from marketplace.ordering.queries import search_store_orders
from marketplace.ordering.status import UpdateStoreOrderStatus
from marketplace.reporting.overview import platform_overview, store_overview

store_order_router = APIRouter(prefix="/store-orders", tags=["store-orders"])


@store_order_router.get("/search")
async def search(
    caller: Caller = Depends(current_caller),
    query: StoreOrderSearchQuery = Depends(query_of(StoreOrderSearchQuery)),
) -> dict:
    return ok(PageResponse.of(search_store_orders(caller, **query.model_dump()), StoreOrderResponse))


@store_order_router.get("/overview")
async def overview(store_id: str | None = Query(default=None, alias="storeId"), caller: Caller = Depends(current_caller)) -> dict:
    if caller.is_staff and not store_id:
        result = platform_overview(caller)
    else:
        result = store_overview(caller, store_id)
    return ok(
        OverviewResponse(
            counts=result.counts,
            total=result.total,
            revenue=result.revenue,
            commission=result.commission,
            currency=result.currency,
            store_ids=result.store_ids,
        )
    )


@store_order_router.patch("/{store_order_id}/status")
async def update_status(
    store_order_id: str, body: UpdateStatusRequest, caller: Caller = Depends(current_caller)
) -> dict:
    command = UpdateStoreOrderStatus(
        store_order_id=store_order_id,
        status=body.status,
        reason=body.reason,
        **command_caller(caller),
    )
    current_domain.process(command, asynchronous=False)
    return ok(StoreOrderResponse.model_validate(current_domain.repository_for(StoreOrder).get(store_order_id)))
