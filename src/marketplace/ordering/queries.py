"""Read side for orders and store orders.

Visibility follows the caller's role: buyers see their own orders, stores
see orders containing their store orders, drivers see orders they deliver,
admins and managers see everything.
"""

from dataclasses import dataclass
from datetime import datetime

from protean.utils.globals import current_domain

from marketplace.catalogue.store import stores_owned_by
from marketplace.errors import ValidationFailed
from marketplace.identity.access import Caller, Capability, Role, ensure, require
from marketplace.logistics.driver import Driver
from marketplace.logistics.shipment import Shipment, ShipmentStatus
from marketplace.ordering.order import Order, OrderStatus, PaymentMethod, PaymentStatus, StoreOrder
from marketplace.ordering.timeline import OrderTimeline, timeline_for
from marketplace.payments.payment import Payment
from marketplace.shared.lookup import find_all, load
from marketplace.shared.pagination import Page, paginate


@dataclass
class OrderDetails:
    order: Order
    store_orders: list[StoreOrder]
    payment: Payment | None
    timeline: list[OrderTimeline]


def _check_choice(enum_cls, value, field: str) -> None:
    if value is not None and value not in {member.value for member in enum_cls}:
        raise ValidationFailed(f"Invalid {field} '{value}'", {"field": field})


def _range(criteria: dict, field: str, low, high) -> None:
    if low is not None:
        criteria[f"{field}__gte"] = low
    if high is not None:
        criteria[f"{field}__lte"] = high
    if low is not None and high is not None and low > high:
        raise ValidationFailed(f"Invalid {field} range", {"field": field})


def _store_ids(caller: Caller) -> list[str]:
    return [str(store.id) for store in stores_owned_by(caller.user_id)]


def _visible_order_ids(caller: Caller) -> list[str] | None:
    """Order ids the caller may see, or None when unrestricted."""
    if caller.can(Capability.VIEW_ANY_ORDER):
        return None
    if caller.role == Role.STORE:
        store_ids = _store_ids(caller)
        if not store_ids:
            return []
        return sorted({str(so.order_id) for so in find_all(StoreOrder, store_id__in=store_ids)})
    if caller.role == Role.DRIVER:
        driver_ids = [str(d.id) for d in current_domain.repository_for(Driver).for_user(caller.user_id)]
        if not driver_ids:
            return []
        return sorted({str(s.order_id) for s in find_all(Shipment, driver_id__in=driver_ids)})
    return None


def search_orders(
    caller: Caller,
    status: str | None = None,
    payment_status: str | None = None,
    date_start: datetime | None = None,
    date_end: datetime | None = None,
    min_amount: int | None = None,
    max_amount: int | None = None,
    page: int | None = 1,
    per_page: int | None = 20,
) -> Page:
    require(caller, Capability.VIEW_ORDERS)
    _check_choice(OrderStatus, status, "status")
    _check_choice(PaymentStatus, payment_status, "payment_status")

    criteria = {}
    if caller.role == Role.BUYER:
        criteria["buyer_id"] = caller.user_id
    else:
        visible = _visible_order_ids(caller)
        if visible is not None:
            if not visible:
                return Page(page=page or 1, per_page=per_page or 20)
            criteria["id__in"] = visible

    if status:
        criteria["status"] = status
    if payment_status:
        criteria["payment_status"] = payment_status
    _range(criteria, "created_at", date_start, date_end)
    _range(criteria, "grand_total", min_amount, max_amount)

    queryset = current_domain.repository_for(Order)._dao.query.filter(**criteria)
    return paginate(queryset, page, per_page)


def get_order(caller: Caller, order_id) -> OrderDetails:
    order = load(Order, order_id, "Order")
    store_orders = find_all(StoreOrder, order_id=str(order.id))

    allowed = order.is_owned_by(caller.user_id) or caller.can(Capability.VIEW_ANY_ORDER)
    if not allowed and caller.role == Role.STORE:
        store_ids = set(_store_ids(caller))
        allowed = any(str(so.store_id) in store_ids for so in store_orders)
    ensure(allowed, "You may not view this order")

    payments = find_all(Payment, order_id=str(order.id))
    return OrderDetails(
        order=order,
        store_orders=store_orders,
        payment=payments[0] if payments else None,
        timeline=timeline_for(order.id),
    )


def search_store_orders(
    caller: Caller,
    status: str | None = None,
    payment_status: str | None = None,
    payment_method: str | None = None,
    shipment_status: str | None = None,
    date_start: datetime | None = None,
    date_end: datetime | None = None,
    min_amount: int | None = None,
    max_amount: int | None = None,
    page: int | None = 1,
    per_page: int | None = 20,
) -> Page:
    """Search the caller's own store orders."""
    require(caller, Capability.SEARCH_STORE_ORDERS)
    _check_choice(OrderStatus, status, "status")
    _check_choice(PaymentStatus, payment_status, "payment_status")
    _check_choice(PaymentMethod, payment_method, "payment_method")
    _check_choice(ShipmentStatus, shipment_status, "shipment_status")

    store_ids = _store_ids(caller)
    if not store_ids:
        return Page(page=page or 1, per_page=per_page or 20)

    criteria = {"store_id__in": store_ids}
    if status:
        criteria["status"] = status
    if payment_status:
        criteria["payment_status"] = payment_status
    if payment_method:
        criteria["payment_method"] = payment_method
    if shipment_status:
        shipped = sorted(
            {str(s.store_order_id) for s in find_all(Shipment, store_id__in=store_ids, status=shipment_status)}
        )
        if not shipped:
            return Page(page=page or 1, per_page=per_page or 20)
        criteria["id__in"] = shipped
    _range(criteria, "created_at", date_start, date_end)
    _range(criteria, "total", min_amount, max_amount)

    queryset = current_domain.repository_for(StoreOrder)._dao.query.filter(**criteria)
    return paginate(queryset, page, per_page)
