"""Application tests for shipment search."""

import pytest
from marketplace.errors import NotAuthorized, ValidationFailed
from marketplace.logistics.queries import search_shipments
from marketplace.ordering.order import StoreOrder
from marketplace.shared.lookup import find_all


@pytest.fixture
def shipments(world, place_order, create_shipment, other_store_owner):
    """One shipment per store; store A's is on the road with driver A1."""
    on_the_road = create_shipment(driver_id=str(world.driver_a1.id), priority_level="high")
    [rice_order] = find_all(StoreOrder, order_id=place_order(items=[{"product_id": str(world.rice.id), "quantity": 1}]))
    waiting = create_shipment(store_order_id=str(rice_order.id), caller=other_store_owner)
    return {"a": on_the_road, "b": waiting}


def _ids(page):
    return {str(s.id) for s in page.items}


def test_store_sees_own_shipments(shipments, store_owner, other_store_owner):
    assert _ids(search_shipments(store_owner)) == {shipments["a"]}
    assert _ids(search_shipments(other_store_owner)) == {shipments["b"]}


def test_store_may_not_search_another_store(world, shipments, store_owner):
    with pytest.raises(NotAuthorized):
        search_shipments(store_owner, store_id=str(world.store_b.id))


def test_driver_sees_assigned_shipments(shipments, driver_caller):
    assert _ids(search_shipments(driver_caller)) == {shipments["a"]}


def test_staff_filters(world, shipments, manager):
    assert search_shipments(manager).total == 2
    assert _ids(search_shipments(manager, status="pending")) == {shipments["b"]}
    assert _ids(search_shipments(manager, priority_level="high")) == {shipments["a"]}
    assert _ids(search_shipments(manager, driver_id=str(world.driver_a1.id))) == {shipments["a"]}
    assert _ids(search_shipments(manager, store_id=str(world.store_b.id))) == {shipments["b"]}


def test_invalid_filters(shipments, manager):
    with pytest.raises(ValidationFailed):
        search_shipments(manager, status="lost")
    with pytest.raises(ValidationFailed):
        search_shipments(manager, priority_level="urgent")


def test_buyers_may_not_search(shipments, buyer):
    with pytest.raises(NotAuthorized):
        search_shipments(buyer)
