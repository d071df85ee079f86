"""BDD tests for shipment delivery and driver availability."""

import pytest
from marketplace.errors import ServiceError
from marketplace.logistics.driver import Driver
from marketplace.logistics.shipment import Shipment
from marketplace.ordering.order import Order, StoreOrder
from marketplace.shared.lookup import load
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/shipment_delivery.feature")


@pytest.fixture()
def error():
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("store A has a pending store order")
def _(store_order):
    assert store_order.status == "pending"


@given("a shipment was created for it", target_fixture="shipment_id")
def _(create_shipment):
    return create_shipment()


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the store assigns driver "{driver}"'))
def _(world, assign_driver, shipment_id, driver):
    assign_driver(shipment_id, getattr(world, driver).id)


@when(parsers.cfparse('the store tries to assign driver "{driver}"'))
def _(world, assign_driver, shipment_id, error, driver):
    try:
        assign_driver(shipment_id, getattr(world, driver).id)
    except ServiceError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the shipment is marked "{status}"'))
def _(update_shipment, shipment_id, status):
    fields = {"status": status}
    if status == "failed":
        fields["failure_reason"] = "Client absent"
    update_shipment(shipment_id, **fields)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the shipment is "{status}"'))
def _(shipment_id, status):
    assert load(Shipment, shipment_id, "Shipment").status == status


@then(parsers.cfparse('the store order is "{status}"'))
def _(store_order, status):
    assert load(StoreOrder, store_order.id, "Store order").status == status


@then(parsers.cfparse('the order is "{status}"'))
def _(store_order, status):
    assert load(Order, store_order.order_id, "Order").status == status


@then(parsers.cfparse('driver "{driver}" is busy'))
def _(world, driver):
    assert load(Driver, getattr(world, driver).id, "Driver").is_available is False


@then(parsers.cfparse('driver "{driver}" is free'))
def _(world, driver):
    assert load(Driver, getattr(world, driver).id, "Driver").is_available is True


@then(parsers.cfparse('the assignment is refused with "{code}"'))
def _(error, code):
    assert error["exc"].code == code
