"""Notifications react to Order and StoreOrder events.

StoreOrderPlaced tells the store owner a new order arrived; OrderCancelled
tells the buyer.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.catalogue.store import Store
from marketplace.domain import marketplace
from marketplace.notifications.helpers import record_notification
from marketplace.notifications.notification import Notification, NotificationType
from marketplace.ordering.events import OrderCancelled, StoreOrderPlaced

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::store_order")
class StoreOrderEventsHandler:
    @handle(StoreOrderPlaced)
    def on_store_order_placed(self, event: StoreOrderPlaced) -> None:
        try:
            store = current_domain.repository_for(Store).get(event.store_id)
        except ObjectNotFoundError:
            logger.warning("Store not found for new order notification", store_id=str(event.store_id))
            return

        record_notification(
            store.owner_id,
            NotificationType.NEW_ORDER,
            "Nouvelle commande reçue",
            f"{store.name}: {event.item_count} article(s), sous-total {event.subtotal} GNF",
            order_id=event.order_id,
        )


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::order")
class OrderEventsHandler:
    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        reason = f" ({event.reason})" if event.reason else ""
        record_notification(
            event.buyer_id,
            NotificationType.ORDER_CANCELLED,
            "Commande annulée",
            f"Votre commande a été annulée{reason}",
            order_id=event.order_id,
        )
