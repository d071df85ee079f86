"""Payment aggregate (CQRS).

One payment per order, created ``pending`` at checkout for the order's
grand total. It only moves forward:

    PENDING → PAID    (requires a transaction id)
    PENDING → FAILED
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.config import CURRENCY
from marketplace.domain import marketplace
from marketplace.errors import ValidationFailed
from marketplace.ordering.order import PaymentMethod, PaymentStatus
from marketplace.payments.events import PaymentStatusChanged
from marketplace.shared.transitions import assert_transition

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: set(),  # terminal
    PaymentStatus.FAILED: set(),  # terminal
}


@marketplace.aggregate
class Payment:
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    amount = Integer(required=True, min_value=0)
    currency = String(max_length=3, default=CURRENCY)
    method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=255)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()

    @classmethod
    def create(cls, order_id: str, buyer_id: str, amount: int, method: str):
        now = datetime.now(UTC)
        return cls(
            order_id=order_id,
            buyer_id=buyer_id,
            amount=amount,
            method=method,
            status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_pending(self) -> bool:
        return PaymentStatus(self.status) == PaymentStatus.PENDING

    def _move_to(self, target: PaymentStatus, changed_by: str, reason: str | None = None) -> None:
        assert_transition(PAYMENT_TRANSITIONS, "payment", self.status, target)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            PaymentStatusChanged(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                buyer_id=str(self.buyer_id),
                previous_status=previous,
                new_status=target.value,
                transaction_id=self.transaction_id,
                reason=reason,
                changed_by=changed_by,
                changed_at=now,
            )
        )

    def mark_paid(self, transaction_id: str | None, changed_by: str) -> None:
        if not transaction_id or not transaction_id.strip():
            raise ValidationFailed(
                "A transaction id is required to mark a payment as paid",
                {"field": "transaction_id"},
            )
        assert_transition(PAYMENT_TRANSITIONS, "payment", self.status, PaymentStatus.PAID)
        self.transaction_id = transaction_id.strip()
        self._move_to(PaymentStatus.PAID, changed_by)
        self.paid_at = self.updated_at

    def mark_failed(self, reason: str | None, changed_by: str) -> None:
        assert_transition(PAYMENT_TRANSITIONS, "payment", self.status, PaymentStatus.FAILED)
        self.failure_reason = reason
        self._move_to(PaymentStatus.FAILED, changed_by, reason=reason)
