"""Order and StoreOrder aggregates (CQRS).

An Order is a buyer's checkout; it is split into one StoreOrder per store
present in the cart. Each StoreOrder owns its line items, delivery fee and
fulfillment status. The Order's status is driven by explicit staff action,
by cancellation, or derived from its StoreOrders (see ``Order.reconcile``).

State Machine (Order and StoreOrder):
    PENDING → IN_PROGRESS → DELIVERED
    {PENDING, IN_PROGRESS} → CANCELLED
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from marketplace.delivery.geo import round_half_up
from marketplace.domain import marketplace
from marketplace.ordering.events import (
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    StoreOrderPlaced,
    StoreOrderStatusChanged,
)
from marketplace.shared.transitions import assert_transition


class OrderStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(Enum):
    ORANGE_MONEY = "orange_money"
    MOBILE_MONEY = "mobile_money"
    CASH_ON_DELIVERY = "cash_on_delivery"


ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED},
    OrderStatus.IN_PROGRESS: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

TERMINAL_ORDER_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


# ---------------------------------------------------------------------------
# StoreOrder
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="StoreOrder")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Integer(required=True, min_value=0)  # frozen at checkout
    line_total = Integer(required=True, min_value=0)


@marketplace.aggregate
class StoreOrder:
    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    items = HasMany(OrderItem)
    subtotal = Integer(default=0, min_value=0)
    delivery_fee = Integer(default=0, min_value=0)
    total = Integer(default=0, min_value=0)
    commission = Integer(default=0, min_value=0)
    delivery_rule_id = Identifier()
    delivery_type = String(max_length=20)
    vehicle_type = String(max_length=20)
    distance_km = Float()
    weight_grams = Integer()
    estimated_delivery_days = Integer()
    delivery_notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        order_id: str,
        buyer_id: str,
        quote,
        lines: list[dict],
        payment_method: str,
        commission_rate: Decimal,
        delivery_notes: str | None = None,
    ):
        """Open a sub-order for one store.

        ``quote`` is the store's ``DeliveryQuote``; ``lines`` carry the
        product, quantity and the unit price frozen from the catalogue.
        """
        now = datetime.now(UTC)
        store_order = cls(
            order_id=order_id,
            store_id=quote.store_id,
            buyer_id=buyer_id,
            payment_method=payment_method,
            delivery_fee=quote.fee,
            delivery_rule_id=quote.rule_id,
            delivery_type=quote.delivery_type,
            vehicle_type=quote.vehicle_type,
            distance_km=round(quote.distance_km, 3),
            weight_grams=quote.weight_grams,
            estimated_delivery_days=quote.estimated_delivery_days,
            delivery_notes=delivery_notes,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            store_order.add_items(
                OrderItem(
                    product_id=line["product_id"],
                    variant_id=line.get("variant_id"),
                    product_name=line.get("product_name"),
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    line_total=line["unit_price"] * line["quantity"],
                )
            )

        store_order.subtotal = sum(item.line_total for item in store_order.items)
        store_order.total = store_order.subtotal + store_order.delivery_fee
        store_order.commission = round_half_up(Decimal(store_order.subtotal) * commission_rate)

        store_order.raise_(
            StoreOrderPlaced(
                store_order_id=str(store_order.id),
                order_id=str(order_id),
                store_id=str(quote.store_id),
                buyer_id=str(buyer_id),
                item_count=len(store_order.items),
                subtotal=store_order.subtotal,
                delivery_fee=store_order.delivery_fee,
                placed_at=now,
            )
        )
        return store_order

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_ORDER_STATUSES

    def transition_to(self, target: OrderStatus) -> None:
        assert_transition(ORDER_TRANSITIONS, "store order", self.status, target)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            StoreOrderStatusChanged(
                store_order_id=str(self.id),
                order_id=str(self.order_id),
                store_id=str(self.store_id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def start(self) -> None:
        """Move to IN_PROGRESS unless fulfillment is already under way."""
        if OrderStatus(self.status) == OrderStatus.PENDING:
            self.transition_to(OrderStatus.IN_PROGRESS)

    def mark_payment(self, status: PaymentStatus) -> None:
        self.payment_status = status.value
        self.updated_at = datetime.now(UTC)


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    buyer_id = Identifier(required=True)
    destination_address_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    delivery_type = String(max_length=20)
    items_total = Integer(default=0, min_value=0)
    total_delivery_fee = Integer(default=0, min_value=0)
    platform_fee = Integer(default=0, min_value=0)
    grand_total = Integer(default=0, min_value=0)
    estimated_delivery_days = Integer()
    store_order_ids = Text()  # JSON list
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, buyer_id: str, destination_address_id: str, payment_method: str, delivery_type: str):
        now = datetime.now(UTC)
        return cls(
            buyer_id=buyer_id,
            destination_address_id=destination_address_id,
            payment_method=payment_method,
            delivery_type=delivery_type,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    def place(self, store_orders: list[StoreOrder], platform_fee_rate: Decimal) -> None:
        """Settle totals from the sub-orders and announce the order."""
        now = datetime.now(UTC)
        self.items_total = sum(so.subtotal for so in store_orders)
        self.total_delivery_fee = sum(so.delivery_fee for so in store_orders)
        self.platform_fee = round_half_up(Decimal(self.items_total) * platform_fee_rate)
        self.grand_total = self.items_total + self.total_delivery_fee + self.platform_fee
        self.estimated_delivery_days = max((so.estimated_delivery_days or 0 for so in store_orders), default=None)
        ids = [str(so.id) for so in store_orders]
        self.store_order_ids = json.dumps(ids)
        self.updated_at = now

        self.raise_(
            OrderPlaced(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                store_order_ids=self.store_order_ids,
                items_total=self.items_total,
                total_delivery_fee=self.total_delivery_fee,
                grand_total=self.grand_total,
                placed_at=now,
            )
        )

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_ORDER_STATUSES

    def is_owned_by(self, user_id) -> bool:
        return str(self.buyer_id) == str(user_id)

    def transition_to(self, target: OrderStatus, reason: str | None = None, changed_by: str = "system") -> None:
        assert_transition(ORDER_TRANSITIONS, "order", self.status, target)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if target == OrderStatus.CANCELLED:
            self.cancellation_reason = reason
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    buyer_id=str(self.buyer_id),
                    reason=reason,
                    cancelled_by=changed_by,
                    cancelled_at=now,
                )
            )
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def reconcile(self, store_orders: list[StoreOrder]) -> None:
        """Derive the aggregate status from the sub-orders' statuses.

        Walks only legal transitions, so a PENDING order whose sub-orders
        are all delivered passes through IN_PROGRESS first.
        """
        if self.is_terminal or not store_orders:
            return

        statuses = {OrderStatus(so.status) for so in store_orders}
        current = OrderStatus(self.status)

        if statuses == {OrderStatus.CANCELLED}:
            self.transition_to(OrderStatus.CANCELLED, reason="All store orders were cancelled")
        elif statuses <= TERMINAL_ORDER_STATUSES:
            if current == OrderStatus.PENDING:
                self.transition_to(OrderStatus.IN_PROGRESS)
            self.transition_to(OrderStatus.DELIVERED)
        elif statuses & {OrderStatus.IN_PROGRESS, OrderStatus.DELIVERED} and current == OrderStatus.PENDING:
            self.transition_to(OrderStatus.IN_PROGRESS)

    def mark_payment(self, status: PaymentStatus) -> None:
        self.payment_status = status.value
        self.updated_at = datetime.now(UTC)
