"""Explicit status updates for orders and store orders."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.store import Store
from marketplace.domain import marketplace
from marketplace.identity.access import Caller, Capability, Role, ensure, require
from marketplace.logistics.closing import finish_active_shipments
from marketplace.ordering.cancellation import cancel_order
from marketplace.ordering.order import ORDER_TRANSITIONS, Order, OrderStatus, StoreOrder
from marketplace.ordering.progress import cancel_store_order, deliver_store_order, store_orders_of, sync_order
from marketplace.shared.lookup import load
from marketplace.shared.transitions import assert_transition

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)
    reason = String(max_length=500)


@marketplace.command(part_of="StoreOrder")
class UpdateStoreOrderStatus:
    store_order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        caller = Caller.from_command(command)
        require(caller, Capability.UPDATE_ORDER_STATUS)

        order = load(Order, command.order_id, "Order")
        target = OrderStatus(command.status)

        if target == OrderStatus.CANCELLED:
            cancel_order(order, command.reason or f"Cancelled by {caller.role.value}", cancelled_by=caller.role.value)
            return str(order.id)

        assert_transition(ORDER_TRANSITIONS, "order", order.status, target)

        if target == OrderStatus.DELIVERED:
            for store_order in store_orders_of(order.id):
                if store_order.is_terminal:
                    continue
                finish_active_shipments(store_order.id, "Order closed as delivered")
                if OrderStatus(store_order.status) == OrderStatus.PENDING:
                    store_order.start()
                deliver_store_order(store_order)

        order.transition_to(target, changed_by=caller.role.value)
        current_domain.repository_for(Order).add(order)
        logger.info("Order status updated", order_id=str(order.id), status=target.value, by=caller.role.value)
        return str(order.id)


@marketplace.command_handler(part_of=StoreOrder)
class UpdateStoreOrderStatusHandler:
    @handle(UpdateStoreOrderStatus)
    def update_store_order_status(self, command):
        caller = Caller.from_command(command)
        require(caller, Capability.MANAGE_STORE_ORDERS)

        store_order = load(StoreOrder, command.store_order_id, "Store order")
        store = load(Store, store_order.store_id, "Store")
        ensure(store.is_owned_by(caller.user_id) or caller.is_staff, "Only the store owner may update this order")

        target = OrderStatus(command.status)
        assert_transition(ORDER_TRANSITIONS, "store order", store_order.status, target)
        if target == OrderStatus.DELIVERED:
            finish_active_shipments(store_order.id, "Store order closed as delivered")
            deliver_store_order(store_order)
        elif target == OrderStatus.CANCELLED:
            cancel_store_order(store_order, command.reason or f"Cancelled by {caller.role.value}")
        else:
            store_order.transition_to(target)
            current_domain.repository_for(StoreOrder).add(store_order)

        sync_order(store_order.order_id, updated=[store_order])
        logger.info(
            "Store order status updated",
            store_order_id=str(store_order.id),
            status=target.value,
            by=caller.role.value,
        )
        return str(store_order.id)
