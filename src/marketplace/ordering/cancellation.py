"""Order cancellation — command, handler and the cancellation cascade.

Cancelling an order releases every reserved unit, cancels every open store
order, fails every active shipment (freeing its driver) and voids a pending
payment. All of it happens in one unit of work.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import IllegalStateTransition
from marketplace.identity.access import Caller, Capability, Role, ensure
from marketplace.ordering.order import ORDER_TRANSITIONS, Order, OrderStatus, PaymentStatus, StoreOrder
from marketplace.ordering.progress import cancel_store_order, store_orders_of, void_pending_payment
from marketplace.shared.lookup import load
from marketplace.shared.transitions import assert_transition

logger = structlog.get_logger(__name__)


def cancel_order(order: Order, reason: str, cancelled_by: str) -> None:
    """Cancel ``order`` and everything hanging off it."""
    assert_transition(ORDER_TRANSITIONS, "order", order.status, OrderStatus.CANCELLED)

    store_orders = store_orders_of(order.id)
    delivered = [str(so.id) for so in store_orders if OrderStatus(so.status) == OrderStatus.DELIVERED]
    if delivered:
        raise IllegalStateTransition(
            "order",
            order.status,
            OrderStatus.CANCELLED.value,
            message="Cannot cancel an order with delivered store orders",
            delivered_store_order_ids=delivered,
        )

    payment_voided = void_pending_payment(order.id, reason, cancelled_by)
    for store_order in store_orders:
        if payment_voided:
            store_order.mark_payment(PaymentStatus.FAILED)
        if not store_order.is_terminal:
            cancel_store_order(store_order, reason)
        elif payment_voided:
            current_domain.repository_for(StoreOrder).add(store_order)

    if payment_voided:
        order.mark_payment(PaymentStatus.FAILED)
    order.transition_to(OrderStatus.CANCELLED, reason=reason, changed_by=cancelled_by)
    current_domain.repository_for(Order).add(order)
    logger.info("Order cancelled", order_id=str(order.id), cancelled_by=cancelled_by, reason=reason)


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        caller = Caller.from_command(command)
        order = load(Order, command.order_id, "Order")
        ensure(
            order.is_owned_by(caller.user_id) or caller.can(Capability.CANCEL_ANY_ORDER),
            "Only the buyer or an admin/manager may cancel this order",
        )
        reason = command.reason or f"Cancelled by {caller.role.value}"
        cancel_order(order, reason, cancelled_by=caller.role.value)
        return str(order.id)
