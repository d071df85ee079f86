"""Dashboard figures for stores and for the platform.

Revenue is money actually received: a delivered store order counts for its
store once its payment is ``paid``; the platform counts paid payment
amounts of delivered orders.
"""

from collections import Counter
from dataclasses import dataclass, field

from marketplace.catalogue.store import Store, stores_owned_by
from marketplace.config import CURRENCY
from marketplace.identity.access import Caller, Capability, ensure, require
from marketplace.ordering.order import Order, OrderStatus, PaymentStatus, StoreOrder
from marketplace.payments.payment import Payment
from marketplace.shared.lookup import find_all, load


@dataclass
class Overview:
    counts: dict[str, int] = field(default_factory=dict)
    revenue: int = 0
    commission: int = 0
    currency: str = CURRENCY
    store_ids: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())


def _status_counts(records) -> dict[str, int]:
    counts = Counter(record.status for record in records)
    return {status.value: counts.get(status.value, 0) for status in OrderStatus}


def store_overview(caller: Caller, store_id=None) -> Overview:
    """Sub-order counts and revenue for one store, or for all of a store owner's stores."""
    require(caller, Capability.MANAGE_STORE_ORDERS)
    if store_id:
        store = load(Store, store_id, "Store")
        ensure(caller.is_staff or store.is_owned_by(caller.user_id), "You may only view your own store")
        store_ids = [str(store.id)]
    else:
        ensure(not caller.is_staff, "A store id is required")
        store_ids = [str(s.id) for s in stores_owned_by(caller.user_id)]

    store_orders = [so for sid in store_ids for so in find_all(StoreOrder, store_id=sid)]
    settled = [
        so
        for so in store_orders
        if OrderStatus(so.status) == OrderStatus.DELIVERED and PaymentStatus(so.payment_status) == PaymentStatus.PAID
    ]
    return Overview(
        counts=_status_counts(store_orders),
        revenue=sum(so.total for so in settled),
        commission=sum(so.commission or 0 for so in settled),
        store_ids=store_ids,
    )


def platform_overview(caller: Caller) -> Overview:
    require(caller, Capability.VIEW_PLATFORM_OVERVIEW)
    orders = find_all(Order)
    delivered = {str(o.id) for o in orders if OrderStatus(o.status) == OrderStatus.DELIVERED}
    paid = [
        p
        for p in find_all(Payment, status=PaymentStatus.PAID.value)
        if str(p.order_id) in delivered
    ]
    return Overview(counts=_status_counts(orders), revenue=sum(p.amount for p in paid))
