"""Closing shipments when their store order is settled from the outside."""

from protean.utils.globals import current_domain

from marketplace.logistics.driver import Driver
from marketplace.logistics.shipment import Shipment, ShipmentStatus
from marketplace.shared.lookup import find_all


def active_shipments_for(store_order_id) -> list[Shipment]:
    return [s for s in find_all(Shipment, store_order_id=str(store_order_id)) if s.is_active]


def release_driver_of(shipment: Shipment) -> None:
    if shipment.driver_id:
        current_domain.repository_for(Driver).release(shipment.driver_id, shipment.id)


def fail_active_shipments(store_order_id, reason: str) -> None:
    repo = current_domain.repository_for(Shipment)
    for shipment in active_shipments_for(store_order_id):
        shipment.transition_to(ShipmentStatus.FAILED, reason=reason)
        repo.add(shipment)
        release_driver_of(shipment)


def finish_active_shipments(store_order_id, reason: str) -> None:
    """Deliver shipments already on the road; fail the ones never dispatched."""
    repo = current_domain.repository_for(Shipment)
    for shipment in active_shipments_for(store_order_id):
        if ShipmentStatus(shipment.status) == ShipmentStatus.IN_PROGRESS:
            shipment.transition_to(ShipmentStatus.DELIVERED)
        else:
            shipment.transition_to(ShipmentStatus.FAILED, reason=reason)
        repo.add(shipment)
        release_driver_of(shipment)
