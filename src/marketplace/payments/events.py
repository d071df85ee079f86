"""Domain events raised by the Payment aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Payment")
class PaymentStatusChanged:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    transaction_id = String(max_length=255)
    reason = String(max_length=500)
    changed_by = String(required=True)
    changed_at = DateTime(required=True)
