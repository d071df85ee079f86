"""Notifications react to payment status changes."""

import structlog
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notifications.helpers import record_notification
from marketplace.notifications.notification import Notification, NotificationType
from marketplace.payments.events import PaymentStatusChanged

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::payment")
class PaymentEventsHandler:
    @handle(PaymentStatusChanged)
    def on_payment_status_changed(self, event: PaymentStatusChanged) -> None:
        if event.new_status == "paid":
            record_notification(
                event.buyer_id,
                NotificationType.PAYMENT_CONFIRMED,
                "Paiement confirmé",
                f"Paiement reçu (transaction {event.transaction_id})",
                order_id=event.order_id,
            )
        elif event.new_status == "failed":
            reason = f": {event.reason}" if event.reason else ""
            record_notification(
                event.buyer_id,
                NotificationType.PAYMENT_FAILED,
                "Échec du paiement",
                f"Le paiement de votre commande a échoué{reason}",
                order_id=event.order_id,
            )
        else:
            logger.debug("Payment status not notified", status=event.new_status, order_id=str(event.order_id))
