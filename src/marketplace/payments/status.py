"""Payment status changes — admin updates and gateway callbacks.

    paid   → order and store orders marked paid; a pending order starts
    failed → the order is cancelled with the full cascade (stock released,
             shipments failed); an order that already has deliveries only
             records the failed payment
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import NotFound, ValidationFailed
from marketplace.identity.access import Caller, Capability, Role, require
from marketplace.ordering.cancellation import cancel_order
from marketplace.ordering.order import Order, OrderStatus, PaymentStatus, StoreOrder
from marketplace.payments.payment import PAYMENT_TRANSITIONS, Payment
from marketplace.shared.lookup import find_all, load
from marketplace.shared.transitions import assert_transition

logger = structlog.get_logger(__name__)

GATEWAY_OUTCOMES = {"succeeded": PaymentStatus.PAID, "failed": PaymentStatus.FAILED}


def payment_for(order_id) -> Payment:
    payments = find_all(Payment, order_id=str(order_id))
    if not payments:
        raise NotFound(f"No payment recorded for order {order_id}", {"order_id": str(order_id)})
    return payments[0]


def _mark_order_payment(order: Order, status: PaymentStatus) -> None:
    order.mark_payment(status)
    repo = current_domain.repository_for(StoreOrder)
    for store_order in find_all(StoreOrder, order_id=str(order.id)):
        store_order.mark_payment(status)
        repo.add(store_order)


def apply_payment_outcome(
    order_id,
    status: str,
    changed_by: str,
    transaction_id: str | None = None,
    reason: str | None = None,
) -> Payment:
    order = load(Order, order_id, "Order")
    payment = payment_for(order.id)
    target = PaymentStatus(status)
    orders = current_domain.repository_for(Order)
    payments = current_domain.repository_for(Payment)

    if target == PaymentStatus.PAID:
        payment.mark_paid(transaction_id, changed_by)
        payments.add(payment)
        _mark_order_payment(order, PaymentStatus.PAID)
        if OrderStatus(order.status) == OrderStatus.PENDING:
            order.transition_to(OrderStatus.IN_PROGRESS, changed_by=changed_by)
        orders.add(order)
    elif target == PaymentStatus.FAILED:
        assert_transition(PAYMENT_TRANSITIONS, "payment", payment.status, target)
        reason = reason or "Payment failed"
        delivered = any(
            OrderStatus(so.status) == OrderStatus.DELIVERED for so in find_all(StoreOrder, order_id=str(order.id))
        )
        if not order.is_terminal and not delivered:
            # Cancelling voids the pending payment and marks every store order failed
            cancel_order(order, reason, cancelled_by=changed_by)
        else:
            payment.mark_failed(reason, changed_by)
            payments.add(payment)
            _mark_order_payment(order, PaymentStatus.FAILED)
            orders.add(order)
    else:
        assert_transition(PAYMENT_TRANSITIONS, "payment", payment.status, target)

    logger.info("Payment status updated", order_id=str(order.id), status=target.value, by=changed_by)
    return payment


@marketplace.command(part_of="Payment")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=PaymentStatus)
    transaction_id = String(max_length=255)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command(part_of="Payment")
class ConfirmPaymentFromGateway:
    """Apply a verified payment-gateway callback."""

    order_id = Identifier(required=True)
    gateway_status = String(required=True, max_length=50)  # succeeded, failed
    transaction_id = String(max_length=255)
    failure_reason = String(max_length=500)


@marketplace.command_handler(part_of=Payment)
class PaymentStatusHandler:
    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        caller = Caller.from_command(command)
        require(caller, Capability.UPDATE_PAYMENT_STATUS)
        payment = apply_payment_outcome(
            command.order_id,
            command.status,
            changed_by=caller.role.value,
            transaction_id=command.transaction_id,
        )
        return str(payment.id)

    @handle(ConfirmPaymentFromGateway)
    def confirm_from_gateway(self, command):
        status = GATEWAY_OUTCOMES.get(command.gateway_status)
        if status is None:
            raise ValidationFailed(
                f"Unknown gateway status '{command.gateway_status}'", {"field": "gateway_status"}
            )
        payment = apply_payment_outcome(
            command.order_id,
            status.value,
            changed_by="gateway",
            transaction_id=command.transaction_id,
            reason=command.failure_reason,
        )
        return str(payment.id)
