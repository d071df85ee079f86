"""Order timeline: append-only trail of everything that happened to an order."""

import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.config import CURRENCY
from marketplace.domain import marketplace
from marketplace.logistics.events import DriverAssigned, ShipmentCreated, ShipmentDelivered, ShipmentFailed
from marketplace.logistics.shipment import Shipment
from marketplace.ordering.events import (
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    StoreOrderStatusChanged,
)
from marketplace.ordering.order import Order, StoreOrder
from marketplace.payments.events import PaymentStatusChanged
from marketplace.payments.payment import Payment
from marketplace.shared.lookup import every


@marketplace.projection
class OrderTimeline:
    entry_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    event_type = String(required=True, max_length=50)
    description = String(required=True, max_length=500)
    occurred_at = DateTime(required=True)
    store_order_id = Identifier()
    shipment_id = Identifier()


def _add_entry(order_id, event_type, description, occurred_at, **refs):
    current_domain.repository_for(OrderTimeline).add(
        OrderTimeline(
            entry_id=str(uuid.uuid4()),
            order_id=str(order_id),
            event_type=event_type,
            description=description,
            occurred_at=occurred_at,
            **refs,
        )
    )


def timeline_for(order_id) -> list[OrderTimeline]:
    """Entries for ``order_id``, oldest first."""
    queryset = current_domain.repository_for(OrderTimeline)._dao.query.filter(order_id=str(order_id))
    return every(queryset.order_by("occurred_at"))


@marketplace.projector(projector_for=OrderTimeline, aggregates=[Order, StoreOrder, Shipment, Payment])
class OrderTimelineProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        _add_entry(event.order_id, "OrderPlaced", f"Order placed for {event.grand_total} {CURRENCY}", event.placed_at)

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        _add_entry(
            event.order_id,
            "OrderStatusChanged",
            f"Order moved from {event.previous_status} to {event.new_status}",
            event.changed_at,
        )

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        reason = f": {event.reason}" if event.reason else ""
        _add_entry(event.order_id, "OrderCancelled", f"Cancelled by {event.cancelled_by}{reason}", event.cancelled_at)

    @on(StoreOrderStatusChanged)
    def on_store_order_status_changed(self, event):
        _add_entry(
            event.order_id,
            "StoreOrderStatusChanged",
            f"Store order moved from {event.previous_status} to {event.new_status}",
            event.changed_at,
            store_order_id=event.store_order_id,
        )

    @on(ShipmentCreated)
    def on_shipment_created(self, event):
        _add_entry(
            event.order_id,
            "ShipmentCreated",
            f"Shipment created ({event.priority_level} priority)",
            event.created_at,
            store_order_id=event.store_order_id,
            shipment_id=event.shipment_id,
        )

    @on(DriverAssigned)
    def on_driver_assigned(self, event):
        _add_entry(
            event.order_id, "DriverAssigned", "Driver assigned", event.assigned_at, shipment_id=event.shipment_id
        )

    @on(ShipmentDelivered)
    def on_shipment_delivered(self, event):
        _add_entry(
            event.order_id,
            "ShipmentDelivered",
            "Shipment delivered",
            event.delivered_at,
            store_order_id=event.store_order_id,
            shipment_id=event.shipment_id,
        )

    @on(ShipmentFailed)
    def on_shipment_failed(self, event):
        reason = f": {event.reason}" if event.reason else ""
        _add_entry(
            event.order_id,
            "ShipmentFailed",
            f"Delivery failed{reason}",
            event.failed_at,
            store_order_id=event.store_order_id,
            shipment_id=event.shipment_id,
        )

    @on(PaymentStatusChanged)
    def on_payment_status_changed(self, event):
        _add_entry(
            event.order_id,
            "PaymentStatusChanged",
            f"Payment moved from {event.previous_status} to {event.new_status}",
            event.changed_at,
        )
