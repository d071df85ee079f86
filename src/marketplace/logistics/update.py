"""Shipment updates — command and handler.

Field updates (driver, priority, notes) are applied first, then the status
change. Delivering a shipment delivers its store order and re-derives the
order status; failing it leaves the store order in progress so it can be
shipped again.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.access import Caller, Role
from marketplace.logistics.assignment import attach_driver
from marketplace.logistics.closing import release_driver_of
from marketplace.logistics.permissions import authorize_store_manager
from marketplace.logistics.shipment import PriorityLevel, Shipment, ShipmentStatus
from marketplace.ordering.order import OrderStatus, StoreOrder
from marketplace.ordering.progress import deliver_store_order, sync_order
from marketplace.shared.lookup import load

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Shipment")
class UpdateShipment:
    shipment_id = Identifier(required=True)
    status = String(choices=ShipmentStatus)
    driver_id = Identifier()
    priority_level = String(choices=PriorityLevel)
    delivery_notes = Text()
    failure_reason = String(max_length=500)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command_handler(part_of=Shipment)
class UpdateShipmentHandler:
    @handle(UpdateShipment)
    def update_shipment(self, command):
        caller = Caller.from_command(command)
        shipment = load(Shipment, command.shipment_id, "Shipment")
        authorize_store_manager(caller, shipment.store_id)

        original_status = shipment.status
        if command.priority_level is not None or command.delivery_notes is not None:
            shipment.update_details(command.priority_level, command.delivery_notes)
        if command.driver_id:
            attach_driver(shipment, command.driver_id, caller)

        # Assigning a driver may already have started the shipment
        reached_by_assignment = command.status == shipment.status != original_status
        if command.status and not reached_by_assignment:
            target = ShipmentStatus(command.status)
            shipment.transition_to(target, reason=command.failure_reason)
            release_driver_of(shipment)

            if target == ShipmentStatus.DELIVERED:
                store_order = load(StoreOrder, shipment.store_order_id, "Store order")
                if OrderStatus(store_order.status) == OrderStatus.PENDING:
                    store_order.start()
                if not store_order.is_terminal:
                    deliver_store_order(store_order)
                    sync_order(store_order.order_id, updated=[store_order])

        current_domain.repository_for(Shipment).add(shipment)
        logger.info("Shipment updated", shipment_id=str(shipment.id), status=shipment.status)
        return str(shipment.id)
