"""Shared fixtures for logistics tests: a placed order and shipment commands."""

import pytest
from marketplace.logistics.assignment import AssignDriver
from marketplace.logistics.creation import CreateShipment
from marketplace.logistics.update import UpdateShipment
from marketplace.ordering.order import StoreOrder
from marketplace.shared.lookup import find_all
from protean import current_domain


def _as(caller):
    return {"caller_id": caller.user_id, "caller_role": caller.role.value}


@pytest.fixture
def store_order(place_order):
    """Store A's sub-order of a two-shirt order."""
    [store_order] = find_all(StoreOrder, order_id=place_order())
    return store_order


@pytest.fixture
def create_shipment(store_order, store_owner):
    def _create(caller=None, **fields):
        fields.setdefault("store_order_id", str(store_order.id))
        command = CreateShipment(**fields, **_as(caller or store_owner))
        return current_domain.process(command, asynchronous=False)

    return _create


@pytest.fixture
def assign_driver(store_owner):
    def _assign(shipment_id, driver_id, caller=None):
        command = AssignDriver(shipment_id=shipment_id, driver_id=str(driver_id), **_as(caller or store_owner))
        return current_domain.process(command, asynchronous=False)

    return _assign


@pytest.fixture
def update_shipment(store_owner):
    def _update(shipment_id, caller=None, **fields):
        command = UpdateShipment(shipment_id=shipment_id, **fields, **_as(caller or store_owner))
        return current_domain.process(command, asynchronous=False)

    return _update
