"""Domain events raised by the Shipment aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Shipment")
class ShipmentCreated:
    __version__ = 1

    shipment_id = Identifier(required=True)
    store_order_id = Identifier(required=True)
    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    priority_level = String(required=True)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Shipment")
class DriverAssigned:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    previous_driver_id = Identifier()
    assigned_at = DateTime(required=True)


@marketplace.event(part_of="Shipment")
class ShipmentDelivered:
    __version__ = 1

    shipment_id = Identifier(required=True)
    store_order_id = Identifier(required=True)
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@marketplace.event(part_of="Shipment")
class ShipmentFailed:
    __version__ = 1

    shipment_id = Identifier(required=True)
    store_order_id = Identifier(required=True)
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    reason = String(max_length=500)
    failed_at = DateTime(required=True)
