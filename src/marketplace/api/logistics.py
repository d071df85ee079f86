"""FastAPI routes for shipments, driver assignment and tracking."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.caller import command_caller, current_caller
from marketplace.api.errors import ok
from marketplace.api.params import query_of
from marketplace.api.schemas import (
    AssignDriverRequest,
    CreateShipmentRequest,
    PageResponse,
    ShipmentResponse,
    ShipmentSearchQuery,
    TrackingRequest,
    TrackingResponse,
    UpdateShipmentRequest,
)
from marketplace.identity.access import Caller
from marketplace.logistics.assignment import AssignDriver
from marketplace.logistics.creation import CreateShipment
from marketplace.logistics.queries import list_tracking, search_shipments
from marketplace.logistics.shipment import Shipment
from marketplace.logistics.tracking import AddTracking, TrackingPing
from marketplace.logistics.update import UpdateShipment

logistics_router = APIRouter(prefix="/logistics", tags=["logistics"])


def _shipment(shipment_id: str) -> dict:
    return ok(ShipmentResponse.model_validate(current_domain.repository_for(Shipment).get(shipment_id)))


@logistics_router.post("/shipments", status_code=201)
async def create_shipment(body: CreateShipmentRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = CreateShipment(
        order_id=body.order_id,
        **body.shipment_data.model_dump(exclude_none=True),
        **command_caller(caller),
    )
    return _shipment(current_domain.process(command, asynchronous=False))


@logistics_router.patch("/shipments/asign-driver")
@logistics_router.patch("/shipments/assign-driver")
async def assign_driver(body: AssignDriverRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = AssignDriver(shipment_id=body.shipment_id, driver_id=body.driver_id, **command_caller(caller))
    return _shipment(current_domain.process(command, asynchronous=False))


@logistics_router.put("/shipments/update")
async def update_shipment(body: UpdateShipmentRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = UpdateShipment(**body.shipment_data.model_dump(exclude_none=True), **command_caller(caller))
    return _shipment(current_domain.process(command, asynchronous=False))


@logistics_router.post("/tracking", status_code=201)
async def add_tracking(body: TrackingRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = AddTracking(**body.tracking_data.model_dump(), **command_caller(caller))
    ping_id = current_domain.process(command, asynchronous=False)
    return ok(TrackingResponse.model_validate(current_domain.repository_for(TrackingPing).get(ping_id)))


@logistics_router.get("/tracking/list")
async def tracking_list(
    shipment_id: str = Query(alias="shipmentId"),
    caller: Caller = Depends(current_caller),
) -> dict:
    return ok([TrackingResponse.model_validate(ping) for ping in list_tracking(caller, shipment_id)])


@logistics_router.get("/search")
async def search(
    caller: Caller = Depends(current_caller),
    query: ShipmentSearchQuery = Depends(query_of(ShipmentSearchQuery)),
) -> dict:
    return ok(PageResponse.of(search_shipments(caller, **query.model_dump()), ShipmentResponse))
