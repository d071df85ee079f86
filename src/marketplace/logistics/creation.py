"""Shipment creation — command and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import IllegalStateTransition, ShipmentAlreadyActive, ValidationFailed
from marketplace.identity.access import Caller, Role
from marketplace.logistics.assignment import attach_driver
from marketplace.logistics.closing import active_shipments_for
from marketplace.logistics.permissions import authorize_store_manager
from marketplace.logistics.shipment import PriorityLevel, Shipment
from marketplace.ordering.order import OrderStatus, StoreOrder
from marketplace.ordering.progress import sync_order
from marketplace.shared.lookup import load

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Shipment")
class CreateShipment:
    store_order_id = Identifier(required=True)
    order_id = Identifier()  # optional cross-check
    driver_id = Identifier()
    priority_level = String(choices=PriorityLevel, default=PriorityLevel.NORMAL.value)
    delivery_notes = Text()
    is_managed_by_store = Boolean(default=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        caller = Caller.from_command(command)
        store_order = load(StoreOrder, command.store_order_id, "Store order")
        if command.order_id and str(command.order_id) != str(store_order.order_id):
            raise ValidationFailed(
                "Store order does not belong to this order",
                {"order_id": str(command.order_id), "store_order_id": str(store_order.id)},
            )
        authorize_store_manager(caller, store_order.store_id)

        if store_order.is_terminal:
            raise IllegalStateTransition(
                "store order",
                store_order.status,
                OrderStatus.IN_PROGRESS.value,
                message=f"Cannot ship a {store_order.status} store order",
            )
        active = active_shipments_for(store_order.id)
        if active:
            raise ShipmentAlreadyActive(
                "Store order already has an active shipment",
                {"store_order_id": str(store_order.id), "shipment_id": str(active[0].id)},
            )

        shipment = Shipment.create(
            store_order,
            priority_level=command.priority_level,
            delivery_notes=command.delivery_notes,
            is_managed_by_store=command.is_managed_by_store if command.is_managed_by_store is not None else True,
        )
        if command.driver_id:
            attach_driver(shipment, command.driver_id, caller)
        current_domain.repository_for(Shipment).add(shipment)

        store_order.start()
        current_domain.repository_for(StoreOrder).add(store_order)
        sync_order(store_order.order_id, updated=[store_order])

        logger.info(
            "Shipment created",
            shipment_id=str(shipment.id),
            store_order_id=str(store_order.id),
            driver_id=command.driver_id,
            status=shipment.status,
        )
        return str(shipment.id)
