"""Notification aggregate — an in-app message recorded for one user.

Notifications are created reactively from order, shipment and payment
events. They are only recorded; delivery over SMS or push is out of scope.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from marketplace.domain import marketplace


class NotificationType(Enum):
    NEW_ORDER = "new_order"
    ORDER_CANCELLED = "order_cancelled"
    DRIVER_ASSIGNED = "driver_assigned"
    SHIPMENT_DELIVERED = "shipment_delivered"
    SHIPMENT_FAILED = "shipment_failed"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PAYMENT_FAILED = "payment_failed"


@marketplace.aggregate
class Notification:
    recipient_id: Identifier(required=True)
    notification_type: String(required=True, choices=NotificationType)
    title: String(required=True, max_length=200)
    message: Text(required=True)
    order_id: Identifier()
    shipment_id: Identifier()
    is_read: Boolean(default=False)
    created_at: DateTime()
    read_at: DateTime()

    @classmethod
    def create(cls, recipient_id, notification_type: NotificationType, title, message, order_id=None, shipment_id=None):
        return cls(
            recipient_id=str(recipient_id),
            notification_type=notification_type.value,
            title=title,
            message=message,
            order_id=str(order_id) if order_id else None,
            shipment_id=str(shipment_id) if shipment_id else None,
            created_at=datetime.now(UTC),
        )

    def mark_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = datetime.now(UTC)
