"""Shared helper for notification event handlers."""

import structlog
from protean.utils.globals import current_domain

from marketplace.notifications.notification import Notification, NotificationType

logger = structlog.get_logger(__name__)


def record_notification(
    recipient_id: str | None,
    notification_type: NotificationType,
    title: str,
    message: str,
    order_id=None,
    shipment_id=None,
) -> Notification | None:
    """Record one notification, skipping it when there is nobody to address."""
    if not recipient_id:
        logger.warning(
            "Notification recipient missing, skipping",
            notification_type=notification_type.value,
            order_id=str(order_id) if order_id else None,
        )
        return None

    notification = Notification.create(
        recipient_id,
        notification_type,
        title,
        message,
        order_id=order_id,
        shipment_id=shipment_id,
    )
    current_domain.repository_for(Notification).add(notification)
    logger.info(
        "Notification recorded",
        notification_id=str(notification.id),
        recipient_id=str(recipient_id),
        notification_type=notification_type.value,
    )
    return notification
