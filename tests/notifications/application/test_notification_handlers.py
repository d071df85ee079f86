"""Application tests for notification event handlers.

Handlers are invoked directly with hand-built events, the way the event
store would deliver them.
"""

from datetime import UTC, datetime

from marketplace.logistics.events import DriverAssigned, ShipmentDelivered, ShipmentFailed
from marketplace.notifications.logistics_events import ShipmentEventsHandler
from marketplace.notifications.notification import Notification, NotificationType
from marketplace.notifications.ordering_events import OrderEventsHandler, StoreOrderEventsHandler
from marketplace.notifications.payment_events import PaymentEventsHandler
from marketplace.ordering.events import OrderCancelled, StoreOrderPlaced
from marketplace.payments.events import PaymentStatusChanged
from marketplace.shared.lookup import find_all

NOW = datetime.now(UTC)


def _notifications(recipient_id):
    return find_all(Notification, recipient_id=recipient_id)


class TestStoreOrderPlaced:
    def test_notifies_store_owner(self, world):
        StoreOrderEventsHandler().on_store_order_placed(
            StoreOrderPlaced(
                store_order_id="so-1",
                order_id="ord-1",
                store_id=str(world.store_a.id),
                buyer_id="buyer-1",
                item_count=2,
                subtotal=100000,
                delivery_fee=8000,
                placed_at=NOW,
            )
        )

        [notification] = _notifications("owner-1")
        assert notification.notification_type == NotificationType.NEW_ORDER.value
        assert notification.title == "Nouvelle commande reçue"
        assert "100000 GNF" in notification.message
        assert notification.order_id == "ord-1"
        assert notification.is_read is False

    def test_unknown_store_is_skipped(self, world):
        StoreOrderEventsHandler().on_store_order_placed(
            StoreOrderPlaced(
                store_order_id="so-1",
                order_id="ord-1",
                store_id="no-such-store",
                buyer_id="buyer-1",
                item_count=1,
                subtotal=1,
                delivery_fee=1,
                placed_at=NOW,
            )
        )
        assert find_all(Notification) == []


class TestOrderCancelled:
    def test_notifies_buyer_with_reason(self):
        OrderEventsHandler().on_order_cancelled(
            OrderCancelled(order_id="ord-1", buyer_id="buyer-1", reason="Rupture", cancelled_by="store", cancelled_at=NOW)
        )
        [notification] = _notifications("buyer-1")
        assert notification.notification_type == NotificationType.ORDER_CANCELLED.value
        assert "(Rupture)" in notification.message


class TestShipmentEvents:
    def test_driver_assigned(self):
        ShipmentEventsHandler().on_driver_assigned(
            DriverAssigned(shipment_id="shp-1", order_id="ord-1", buyer_id="buyer-1", driver_id="drv-1", assigned_at=NOW)
        )
        [notification] = _notifications("buyer-1")
        assert notification.notification_type == NotificationType.DRIVER_ASSIGNED.value
        assert notification.shipment_id == "shp-1"

    def test_delivered(self):
        ShipmentEventsHandler().on_shipment_delivered(
            ShipmentDelivered(
                shipment_id="shp-1", store_order_id="so-1", order_id="ord-1", buyer_id="buyer-1", delivered_at=NOW
            )
        )
        assert _notifications("buyer-1")[0].notification_type == NotificationType.SHIPMENT_DELIVERED.value

    def test_failed_includes_reason(self):
        ShipmentEventsHandler().on_shipment_failed(
            ShipmentFailed(
                shipment_id="shp-1",
                store_order_id="so-1",
                order_id="ord-1",
                buyer_id="buyer-1",
                reason="Client absent",
                failed_at=NOW,
            )
        )
        [notification] = _notifications("buyer-1")
        assert notification.notification_type == NotificationType.SHIPMENT_FAILED.value
        assert notification.message.endswith(": Client absent")


class TestPaymentEvents:
    def _event(self, new_status, **fields):
        return PaymentStatusChanged(
            payment_id="pay-1",
            order_id="ord-1",
            buyer_id="buyer-1",
            previous_status="pending",
            new_status=new_status,
            changed_by="gateway",
            changed_at=NOW,
            **fields,
        )

    def test_paid(self):
        PaymentEventsHandler().on_payment_status_changed(self._event("paid", transaction_id="OM-1"))
        [notification] = _notifications("buyer-1")
        assert notification.notification_type == NotificationType.PAYMENT_CONFIRMED.value
        assert "OM-1" in notification.message

    def test_failed(self):
        PaymentEventsHandler().on_payment_status_changed(self._event("failed", reason="Solde insuffisant"))
        assert _notifications("buyer-1")[0].notification_type == NotificationType.PAYMENT_FAILED.value

    def test_other_statuses_are_not_notified(self):
        PaymentEventsHandler().on_payment_status_changed(self._event("pending"))
        assert find_all(Notification) == []
