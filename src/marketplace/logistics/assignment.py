"""Driver assignment — command, handler and the shared assignment step."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import IllegalStateTransition
from marketplace.identity.access import Caller, Role, ensure
from marketplace.logistics.driver import Driver
from marketplace.logistics.permissions import authorize_store_manager
from marketplace.logistics.shipment import Shipment, ShipmentStatus
from marketplace.shared.lookup import load

logger = structlog.get_logger(__name__)


def attach_driver(shipment: Shipment, driver_id, caller: Caller) -> None:
    """Claim ``driver_id`` for ``shipment`` and free the driver it replaces."""
    if not shipment.is_active:
        raise IllegalStateTransition("shipment", shipment.status, ShipmentStatus.IN_PROGRESS.value)

    driver = load(Driver, driver_id, "Driver")
    if not caller.is_staff:
        ensure(driver.works_for(shipment.store_id), "Driver is not attached to this store")

    if shipment.driver_id and str(shipment.driver_id) == str(driver_id):
        return

    drivers = current_domain.repository_for(Driver)
    drivers.claim(driver.id, shipment.id)
    previous = shipment.assign_driver(str(driver.id))
    if previous:
        drivers.release(previous, shipment.id)
    logger.info("Driver assigned", shipment_id=str(shipment.id), driver_id=str(driver.id), replaced=previous)


@marketplace.command(part_of="Shipment")
class AssignDriver:
    shipment_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command_handler(part_of=Shipment)
class AssignDriverHandler:
    @handle(AssignDriver)
    def assign_driver(self, command):
        caller = Caller.from_command(command)
        shipment = load(Shipment, command.shipment_id, "Shipment")
        authorize_store_manager(caller, shipment.store_id)

        attach_driver(shipment, command.driver_id, caller)
        current_domain.repository_for(Shipment).add(shipment)
        return str(shipment.id)
