"""Notifications react to Shipment events; all are addressed to the buyer."""

from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.logistics.events import DriverAssigned, ShipmentDelivered, ShipmentFailed
from marketplace.notifications.helpers import record_notification
from marketplace.notifications.notification import Notification, NotificationType


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::shipment")
class ShipmentEventsHandler:
    @handle(DriverAssigned)
    def on_driver_assigned(self, event: DriverAssigned) -> None:
        record_notification(
            event.buyer_id,
            NotificationType.DRIVER_ASSIGNED,
            "Livreur assigné",
            "Un livreur a été assigné à votre commande",
            order_id=event.order_id,
            shipment_id=event.shipment_id,
        )

    @handle(ShipmentDelivered)
    def on_shipment_delivered(self, event: ShipmentDelivered) -> None:
        record_notification(
            event.buyer_id,
            NotificationType.SHIPMENT_DELIVERED,
            "Colis livré",
            "Votre colis a été livré",
            order_id=event.order_id,
            shipment_id=event.shipment_id,
        )

    @handle(ShipmentFailed)
    def on_shipment_failed(self, event: ShipmentFailed) -> None:
        reason = f": {event.reason}" if event.reason else ""
        record_notification(
            event.buyer_id,
            NotificationType.SHIPMENT_FAILED,
            "Échec de livraison",
            f"La livraison de votre colis a échoué{reason}",
            order_id=event.order_id,
            shipment_id=event.shipment_id,
        )
