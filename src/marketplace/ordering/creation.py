"""Order placement — command and handler.

Placement validates everything first (buyer, destination, products, stock,
delivery pricing for every store) and only then writes: stock reservations,
one StoreOrder per store, the Order and its pending Payment. The handler's
unit of work commits all of it or none of it.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.config import platform_fee_rate, store_commission_rate
from marketplace.delivery.estimation import check_delivery_type, check_vehicle_type, destination_for, quote_groups
from marketplace.delivery.fee_rule import DeliveryType
from marketplace.domain import marketplace
from marketplace.identity.access import Caller, Capability, Role, ensure, require
from marketplace.ordering.lines import check_stock, group_by_store, resolve_lines
from marketplace.ordering.order import Order, PaymentMethod, StoreOrder
from marketplace.payments.payment import Payment

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CreateOrder:
    """Place an order for a buyer from a list of items."""

    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)
    buyer_id = Identifier()  # defaults to the caller
    destination_address_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {product_id, quantity, variant_id?}
    delivery_type = String(choices=DeliveryType, default=DeliveryType.STANDARD.value)
    vehicle_type = String(max_length=20)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    delivery_notes = Text()


@marketplace.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        caller = Caller.from_command(command)
        buyer_id = str(command.buyer_id or caller.user_id)
        require(caller, Capability.PLACE_ORDER)
        ensure(buyer_id == caller.user_id or caller.is_staff, "Orders can only be placed for yourself")

        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        delivery_type = check_delivery_type(command.delivery_type)
        vehicle_type = check_vehicle_type(command.vehicle_type)

        # Validate everything before the first write
        lines = resolve_lines(items)
        destination = destination_for(caller, command.destination_address_id, buyer_id=buyer_id)
        check_stock(lines)
        groups = group_by_store(lines)
        quotes = quote_groups(groups, destination, delivery_type, vehicle_type)

        # Reserve stock, one save per product
        product_repo = current_domain.repository_for(Product)
        reserved = {}
        for line in lines:
            line.product.reserve(line.quantity, line.variant_id)
            reserved[str(line.product.id)] = line.product
        for product in reserved.values():
            product_repo.add(product)

        payment_method = command.payment_method or PaymentMethod.CASH_ON_DELIVERY.value
        order = Order.create(
            buyer_id=buyer_id,
            destination_address_id=str(command.destination_address_id),
            payment_method=payment_method,
            delivery_type=delivery_type,
        )

        store_order_repo = current_domain.repository_for(StoreOrder)
        store_orders = []
        for store_id, store_lines in groups.items():
            store_order = StoreOrder.create(
                order_id=str(order.id),
                buyer_id=buyer_id,
                quote=quotes[store_id],
                lines=[line.as_order_line() for line in store_lines],
                payment_method=payment_method,
                commission_rate=store_commission_rate(),
                delivery_notes=command.delivery_notes,
            )
            store_order_repo.add(store_order)
            store_orders.append(store_order)

        order.place(store_orders, platform_fee_rate())
        current_domain.repository_for(Order).add(order)

        payment = Payment.create(
            order_id=str(order.id),
            buyer_id=buyer_id,
            amount=order.grand_total,
            method=payment_method,
        )
        current_domain.repository_for(Payment).add(payment)

        logger.info(
            "Order created",
            order_id=str(order.id),
            buyer_id=buyer_id,
            stores=len(store_orders),
            total_delivery_fee=order.total_delivery_fee,
            grand_total=order.grand_total,
        )
        return str(order.id)
