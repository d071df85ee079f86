"""Read side for shipments and tracking."""

from datetime import datetime

from protean.utils.globals import current_domain

from marketplace.catalogue.store import stores_owned_by
from marketplace.errors import ValidationFailed
from marketplace.identity.access import Caller, Capability, Role, ensure, require
from marketplace.logistics.driver import Driver
from marketplace.logistics.permissions import authorize_tracking
from marketplace.logistics.shipment import PriorityLevel, Shipment, ShipmentStatus
from marketplace.logistics.tracking import TrackingPing
from marketplace.shared.lookup import every, load
from marketplace.shared.pagination import Page, paginate


def _driver_ids(caller: Caller) -> list[str]:
    return [str(d.id) for d in current_domain.repository_for(Driver).for_user(caller.user_id)]


def search_shipments(
    caller: Caller,
    status: str | None = None,
    driver_id: str | None = None,
    priority_level: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    store_id: str | None = None,
    page: int | None = 1,
    per_page: int | None = 20,
) -> Page:
    require(caller, Capability.SEARCH_SHIPMENTS)
    if status and status not in {s.value for s in ShipmentStatus}:
        raise ValidationFailed(f"Invalid status '{status}'", {"field": "status"})
    if priority_level and priority_level not in {p.value for p in PriorityLevel}:
        raise ValidationFailed(f"Invalid priority level '{priority_level}'", {"field": "priority_level"})

    criteria = {}
    empty = Page(page=page or 1, per_page=per_page or 20)

    if caller.role == Role.STORE:
        own = [str(s.id) for s in stores_owned_by(caller.user_id)]
        if store_id:
            ensure(str(store_id) in own, "You may only search your own store's shipments")
            own = [str(store_id)]
        if not own:
            return empty
        criteria["store_id__in"] = own
    elif store_id:
        criteria["store_id"] = str(store_id)

    if caller.role == Role.DRIVER:
        own_drivers = _driver_ids(caller)
        if driver_id:
            ensure(str(driver_id) in own_drivers, "You may only search your own shipments")
            own_drivers = [str(driver_id)]
        if not own_drivers:
            return empty
        criteria["driver_id__in"] = own_drivers
    elif driver_id:
        criteria["driver_id"] = str(driver_id)

    if status:
        criteria["status"] = status
    if priority_level:
        criteria["priority_level"] = priority_level
    if start_date is not None:
        criteria["created_at__gte"] = start_date
    if end_date is not None:
        criteria["created_at__lte"] = end_date

    queryset = current_domain.repository_for(Shipment)._dao.query.filter(**criteria)
    return paginate(queryset, page, per_page)


def list_tracking(caller: Caller, shipment_id) -> list[TrackingPing]:
    """Pings for a shipment, oldest first."""
    require(caller, Capability.SEARCH_SHIPMENTS)
    shipment = load(Shipment, shipment_id, "Shipment")
    if caller.role == Role.STORE:
        authorize_tracking(caller, shipment)
    elif caller.role == Role.DRIVER:
        ensure(str(shipment.driver_id) in _driver_ids(caller), "You may only follow your own shipments")

    return every(
        current_domain.repository_for(TrackingPing)._dao.query.filter(shipment_id=str(shipment.id)).order_by("recorded_at")
    )
