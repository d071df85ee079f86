"""Shipment aggregate (CQRS) — physical fulfillment of one store order.

State Machine:
    PENDING → IN_PROGRESS → DELIVERED
    {PENDING, IN_PROGRESS} → FAILED

A shipment is *active* until it is delivered or failed; a store order has at
most one active shipment at a time.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.errors import IllegalStateTransition
from marketplace.logistics.events import DriverAssigned, ShipmentCreated, ShipmentDelivered, ShipmentFailed
from marketplace.shared.transitions import assert_transition


class ShipmentStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    FAILED = "failed"


class PriorityLevel(Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


SHIPMENT_TRANSITIONS = {
    ShipmentStatus.PENDING: {ShipmentStatus.IN_PROGRESS, ShipmentStatus.FAILED},
    ShipmentStatus.IN_PROGRESS: {ShipmentStatus.DELIVERED, ShipmentStatus.FAILED},
    ShipmentStatus.DELIVERED: set(),  # terminal
    ShipmentStatus.FAILED: set(),  # terminal
}

ACTIVE_SHIPMENT_STATUSES = {ShipmentStatus.PENDING, ShipmentStatus.IN_PROGRESS}


@marketplace.aggregate
class Shipment:
    store_order_id = Identifier(required=True)
    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    driver_id = Identifier()
    status = String(choices=ShipmentStatus, default=ShipmentStatus.PENDING.value)
    priority_level = String(choices=PriorityLevel, default=PriorityLevel.NORMAL.value)
    is_managed_by_store = Boolean(default=True)
    delivery_notes = Text()
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    delivered_at = DateTime()

    @classmethod
    def create(
        cls,
        store_order,
        priority_level: str | None = None,
        delivery_notes: str | None = None,
        is_managed_by_store: bool = True,
    ):
        now = datetime.now(UTC)
        shipment = cls(
            store_order_id=str(store_order.id),
            order_id=str(store_order.order_id),
            store_id=str(store_order.store_id),
            buyer_id=str(store_order.buyer_id),
            status=ShipmentStatus.PENDING.value,
            priority_level=priority_level or PriorityLevel.NORMAL.value,
            is_managed_by_store=is_managed_by_store,
            delivery_notes=delivery_notes,
            created_at=now,
            updated_at=now,
        )
        shipment.raise_(
            ShipmentCreated(
                shipment_id=str(shipment.id),
                store_order_id=shipment.store_order_id,
                order_id=shipment.order_id,
                store_id=shipment.store_id,
                buyer_id=shipment.buyer_id,
                priority_level=shipment.priority_level,
                created_at=now,
            )
        )
        return shipment

    @property
    def is_active(self) -> bool:
        return ShipmentStatus(self.status) in ACTIVE_SHIPMENT_STATUSES

    def _assert_editable(self, requested: str) -> None:
        if not self.is_active:
            raise IllegalStateTransition("shipment", self.status, requested)

    def assign_driver(self, driver_id: str) -> str | None:
        """Attach ``driver_id`` and start the shipment. Returns the replaced driver id."""
        self._assert_editable(ShipmentStatus.IN_PROGRESS.value)
        previous = str(self.driver_id) if self.driver_id else None
        now = datetime.now(UTC)
        self.driver_id = driver_id
        if ShipmentStatus(self.status) == ShipmentStatus.PENDING:
            self.status = ShipmentStatus.IN_PROGRESS.value
        self.updated_at = now
        self.raise_(
            DriverAssigned(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                buyer_id=str(self.buyer_id),
                driver_id=str(driver_id),
                previous_driver_id=previous,
                assigned_at=now,
            )
        )
        return previous

    def update_details(self, priority_level: str | None = None, delivery_notes: str | None = None) -> None:
        self._assert_editable(self.status)
        if priority_level is not None:
            self.priority_level = PriorityLevel(priority_level).value
        if delivery_notes is not None:
            self.delivery_notes = delivery_notes
        self.updated_at = datetime.now(UTC)

    def transition_to(self, target: ShipmentStatus, reason: str | None = None) -> None:
        assert_transition(SHIPMENT_TRANSITIONS, "shipment", self.status, target)
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        if target == ShipmentStatus.DELIVERED:
            self.delivered_at = now
            self.raise_(
                ShipmentDelivered(
                    shipment_id=str(self.id),
                    store_order_id=str(self.store_order_id),
                    order_id=str(self.order_id),
                    buyer_id=str(self.buyer_id),
                    delivered_at=now,
                )
            )
        elif target == ShipmentStatus.FAILED:
            self.failure_reason = reason
            self.raise_(
                ShipmentFailed(
                    shipment_id=str(self.id),
                    store_order_id=str(self.store_order_id),
                    order_id=str(self.order_id),
                    buyer_id=str(self.buyer_id),
                    reason=reason,
                    failed_at=now,
                )
            )
