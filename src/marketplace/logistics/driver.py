"""Driver aggregate and its repository.

A driver serves one shipment at a time. ``DriverRepository.claim`` re-reads
the driver row right before flipping ``is_available``, so a caller holding a
stale copy cannot double-book a driver: the losing claim fails with
``DriverUnavailable``.
"""

from datetime import UTC, datetime

import structlog
from protean.fields import Boolean, DateTime, Identifier, String

from marketplace.delivery.fee_rule import VehicleType
from marketplace.domain import marketplace
from marketplace.errors import DriverUnavailable
from marketplace.shared.lookup import every

logger = structlog.get_logger(__name__)


@marketplace.aggregate
class Driver:
    user_id = Identifier(required=True)
    store_id = Identifier()  # None for platform drivers
    name = String(max_length=255)
    vehicle_type = String(choices=VehicleType)
    license_number = String(max_length=50)
    is_available = Boolean(default=True)
    current_shipment_id = Identifier()
    updated_at = DateTime()

    def works_for(self, store_id) -> bool:
        return self.store_id is not None and str(self.store_id) == str(store_id)

    def occupy(self, shipment_id) -> None:
        if not self.is_available:
            raise DriverUnavailable(
                f"Driver {self.id} is not available",
                {"driver_id": str(self.id), "current_shipment_id": self.current_shipment_id},
            )
        self.is_available = False
        self.current_shipment_id = shipment_id
        self.updated_at = datetime.now(UTC)

    def free(self) -> None:
        self.is_available = True
        self.current_shipment_id = None
        self.updated_at = datetime.now(UTC)


@marketplace.repository(part_of=Driver)
class DriverRepository:
    def claim(self, driver_id, shipment_id) -> Driver:
        """Mark the driver busy with ``shipment_id``, re-validating availability first."""
        driver = self._dao.get(driver_id)
        driver.occupy(shipment_id)
        self.add(driver)
        logger.info("Driver claimed", driver_id=str(driver_id), shipment_id=str(shipment_id))
        return driver

    def release(self, driver_id, shipment_id=None) -> None:
        """Free the driver, unless it has already moved on to another shipment."""
        driver = self._dao.get(driver_id)
        if shipment_id and driver.current_shipment_id and str(driver.current_shipment_id) != str(shipment_id):
            return
        driver.free()
        self.add(driver)
        logger.info("Driver released", driver_id=str(driver_id), shipment_id=str(shipment_id))

    def for_user(self, user_id) -> list[Driver]:
        return every(self._dao.query.filter(user_id=user_id))
