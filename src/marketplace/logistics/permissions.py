"""Who may act on a shipment."""

from marketplace.catalogue.store import Store
from marketplace.identity.access import Caller, Capability, ensure, require
from marketplace.shared.lookup import load


def authorize_store_manager(caller: Caller, store_id) -> None:
    """Caller must own ``store_id``, unless they may manage any shipment."""
    require(caller, Capability.MANAGE_SHIPMENTS)
    if caller.can(Capability.MANAGE_ANY_SHIPMENT):
        return
    store = load(Store, store_id, "Store")
    ensure(store.is_owned_by(caller.user_id), "Only the owning store may manage this shipment")


def authorize_tracking(caller: Caller, shipment) -> None:
    """Store callers may only track shipments their own store manages."""
    require(caller, Capability.RECORD_TRACKING)
    if caller.is_staff:
        return
    store = load(Store, shipment.store_id, "Store")
    ensure(
        bool(shipment.is_managed_by_store) and store.is_owned_by(caller.user_id),
        "Only the managing store may record tracking for this shipment",
    )
