"""Side effects of settling a store order, and deriving the order status.

These run inside the calling command handler's unit of work.
"""

import structlog
from protean.utils.globals import current_domain

from marketplace.logistics.closing import fail_active_shipments
from marketplace.ordering.order import Order, OrderStatus, PaymentStatus, StoreOrder
from marketplace.ordering.stock import commit_stock, release_stock
from marketplace.payments.payment import Payment
from marketplace.shared.lookup import find_all

logger = structlog.get_logger(__name__)


def deliver_store_order(store_order: StoreOrder) -> None:
    store_order.transition_to(OrderStatus.DELIVERED)
    commit_stock(store_order)
    current_domain.repository_for(StoreOrder).add(store_order)


def cancel_store_order(store_order: StoreOrder, reason: str) -> None:
    store_order.transition_to(OrderStatus.CANCELLED)
    release_stock(store_order)
    fail_active_shipments(store_order.id, reason)
    current_domain.repository_for(StoreOrder).add(store_order)


def store_orders_of(order_id, updated: list[StoreOrder] | None = None) -> list[StoreOrder]:
    """All store orders of an order, preferring the in-memory copies in ``updated``."""
    fresh = {str(so.id): so for so in (updated or [])}
    loaded = find_all(StoreOrder, order_id=str(order_id))
    merged = [fresh.pop(str(so.id), so) for so in loaded]
    return merged + list(fresh.values())


def void_pending_payment(order_id, reason: str, changed_by: str) -> bool:
    """Fail the order's pending payment, if any. Returns whether one was voided."""
    repo = current_domain.repository_for(Payment)
    voided = False
    for payment in find_all(Payment, order_id=str(order_id)):
        if payment.is_pending:
            payment.mark_failed(reason, changed_by)
            repo.add(payment)
            voided = True
    return voided


def sync_order(order_id, updated: list[StoreOrder] | None = None) -> Order:
    """Re-derive the order status after one of its store orders moved."""
    repo = current_domain.repository_for(Order)
    order = repo.get(order_id)
    previous = order.status
    order.reconcile(store_orders_of(order_id, updated))

    if order.status != previous:
        logger.info("Order status derived", order_id=str(order_id), previous=previous, status=order.status)
        if OrderStatus(order.status) == OrderStatus.CANCELLED and void_pending_payment(
            order_id, order.cancellation_reason or "Order cancelled", "system"
        ):
            order.mark_payment(PaymentStatus.FAILED)
        repo.add(order)
    return order
