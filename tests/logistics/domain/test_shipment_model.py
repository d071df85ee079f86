from types import SimpleNamespace

import pytest
from marketplace.errors import IllegalStateTransition
from marketplace.logistics.events import DriverAssigned, ShipmentCreated, ShipmentDelivered, ShipmentFailed
from marketplace.logistics.shipment import Shipment, ShipmentStatus


def _shipment(**kwargs):
    store_order = SimpleNamespace(id="so-1", order_id="ord-1", store_id="store-1", buyer_id="buyer-1")
    return Shipment.create(store_order, **kwargs)


class TestCreate:
    def test_copies_store_order_references(self):
        shipment = _shipment()
        assert (shipment.store_order_id, shipment.order_id, shipment.store_id, shipment.buyer_id) == (
            "so-1",
            "ord-1",
            "store-1",
            "buyer-1",
        )
        assert shipment.status == ShipmentStatus.PENDING.value
        assert shipment.priority_level == "normal"
        assert shipment.is_active

    def test_raises_created_event(self):
        shipment = _shipment(priority_level="high")
        [event] = shipment._events
        assert isinstance(event, ShipmentCreated)
        assert event.priority_level == "high"


class TestDriverAssignment:
    def test_assignment_starts_pending_shipment(self):
        shipment = _shipment()
        assert shipment.assign_driver("drv-1") is None
        assert shipment.status == ShipmentStatus.IN_PROGRESS.value
        assert isinstance(shipment._events[-1], DriverAssigned)

    def test_reassignment_returns_previous_driver(self):
        shipment = _shipment()
        shipment.assign_driver("drv-1")
        assert shipment.assign_driver("drv-2") == "drv-1"
        assert shipment._events[-1].previous_driver_id == "drv-1"

    def test_closed_shipment_cannot_take_a_driver(self):
        shipment = _shipment()
        shipment.transition_to(ShipmentStatus.FAILED, reason="Adresse introuvable")
        with pytest.raises(IllegalStateTransition):
            shipment.assign_driver("drv-1")


class TestTransitions:
    def test_delivery_stamps_time(self):
        shipment = _shipment()
        shipment.transition_to(ShipmentStatus.IN_PROGRESS)
        shipment.transition_to(ShipmentStatus.DELIVERED)
        assert shipment.delivered_at is not None
        assert not shipment.is_active
        assert isinstance(shipment._events[-1], ShipmentDelivered)

    def test_pending_cannot_be_delivered(self):
        with pytest.raises(IllegalStateTransition):
            _shipment().transition_to(ShipmentStatus.DELIVERED)

    def test_failure_records_reason(self):
        shipment = _shipment()
        shipment.transition_to(ShipmentStatus.FAILED, reason="Client absent")
        assert shipment.failure_reason == "Client absent"
        assert shipment._events[-1].reason == "Client absent"
        assert isinstance(shipment._events[-1], ShipmentFailed)

    @pytest.mark.parametrize("terminal", [ShipmentStatus.DELIVERED, ShipmentStatus.FAILED])
    def test_terminal_states_reject_everything(self, terminal):
        shipment = _shipment()
        shipment.transition_to(ShipmentStatus.IN_PROGRESS)
        shipment.transition_to(terminal)
        for target in ShipmentStatus:
            with pytest.raises(IllegalStateTransition):
                shipment.transition_to(target)

    def test_details_locked_once_closed(self):
        shipment = _shipment()
        shipment.update_details(priority_level="high", delivery_notes="Portail bleu")
        assert (shipment.priority_level, shipment.delivery_notes) == ("high", "Portail bleu")

        shipment.transition_to(ShipmentStatus.FAILED)
        with pytest.raises(IllegalStateTransition):
            shipment.update_details(delivery_notes="trop tard")
