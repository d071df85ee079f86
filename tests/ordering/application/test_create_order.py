"""Application tests for order placement via domain.process()."""

import json

import pytest
from marketplace.catalogue.product import Product
from marketplace.errors import EmptyOrder, InsufficientStock, NotAuthorized, ProductNotFound, ValidationFailed
from marketplace.ordering.order import Order, OrderStatus, PaymentStatus, StoreOrder
from marketplace.payments.payment import Payment
from marketplace.shared.lookup import find_all
from protean import current_domain


def _order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


def _product(product) -> Product:
    return current_domain.repository_for(Product).get(product.id)


class TestSingleStoreOrder:
    def test_totals(self, place_order):
        order = _order(place_order())

        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.items_total == 100000
        assert order.total_delivery_fee == 8000
        assert order.platform_fee == 5000
        assert order.grand_total == 113000
        assert order.estimated_delivery_days == 2

    def test_store_order_snapshot(self, world, place_order):
        order_id = place_order(delivery_notes="Sonner deux fois")
        [store_order] = find_all(StoreOrder, order_id=order_id)

        assert json.loads(_order(order_id).store_order_ids) == [str(store_order.id)]
        assert store_order.store_id == str(world.store_a.id)
        assert store_order.subtotal == 100000
        assert store_order.delivery_fee == 8000
        assert store_order.total == 108000
        assert store_order.commission == 10000
        assert store_order.delivery_rule_id == str(world.standard_light_rule.id)
        assert store_order.weight_grams == 1000
        assert store_order.delivery_notes == "Sonner deux fois"
        assert store_order.items[0].unit_price == 50000
        assert store_order.items[0].product_name == "Chemise bazin"

    def test_pending_payment_for_grand_total(self, place_order):
        order_id = place_order()
        [payment] = find_all(Payment, order_id=order_id)
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.amount == 113000
        assert payment.method == "orange_money"
        assert payment.currency == "GNF"

    def test_stock_is_reserved(self, world, place_order):
        place_order()
        shirt = _product(world.shirt)
        assert (shirt.available_stock, shirt.reserved_stock) == (8, 2)

    def test_unit_price_is_frozen(self, world, place_order):
        order_id = place_order()
        shirt = _product(world.shirt)
        shirt.price = 99000
        current_domain.repository_for(Product).add(shirt)

        [store_order] = find_all(StoreOrder, order_id=order_id)
        assert store_order.items[0].unit_price == 50000

    def test_variant_line(self, world, place_order):
        order_id = place_order(
            items=[{"product_id": str(world.sandals.id), "variant_id": str(world.sandals_42.id), "quantity": 2}]
        )
        [store_order] = find_all(StoreOrder, order_id=order_id)
        assert store_order.subtotal == 34000

        variant = _product(world.sandals).variant(world.sandals_42.id)
        assert (variant.available_stock, variant.reserved_stock) == (1, 2)


class TestMultiStoreOrder:
    def test_one_store_order_per_store(self, world, place_order):
        order_id = place_order(
            items=[
                {"product_id": str(world.shirt.id), "quantity": 1},
                {"product_id": str(world.rice.id), "quantity": 2},
            ]
        )
        store_orders = {so.store_id: so for so in find_all(StoreOrder, order_id=order_id)}
        assert set(store_orders) == {str(world.store_a.id), str(world.store_b.id)}

        order = _order(order_id)
        assert order.items_total == 90000
        assert order.total_delivery_fee == sum(so.delivery_fee for so in store_orders.values())
        assert order.grand_total == order.items_total + order.total_delivery_fee + order.platform_fee
        assert order.estimated_delivery_days == max(so.estimated_delivery_days for so in store_orders.values())


class TestRejectedOrders:
    def test_insufficient_stock_writes_nothing(self, world, place_order):
        with pytest.raises(InsufficientStock) as exc:
            place_order(
                items=[
                    {"product_id": str(world.shirt.id), "quantity": 2},
                    {"product_id": str(world.rice.id), "quantity": 6},
                ]
            )

        assert exc.value.details["items"][0]["product_id"] == str(world.rice.id)
        assert _product(world.shirt).available_stock == 10
        assert find_all(Order) == []
        assert find_all(StoreOrder) == []
        assert find_all(Payment) == []

    def test_quantities_are_summed_per_product(self, world, place_order):
        with pytest.raises(InsufficientStock):
            place_order(
                items=[
                    {"product_id": str(world.shirt.id), "quantity": 6},
                    {"product_id": str(world.shirt.id), "quantity": 5},
                ]
            )

    def test_empty_order(self, place_order):
        with pytest.raises(EmptyOrder):
            place_order(items=[])

    @pytest.mark.parametrize("quantity", [True, 0, -1, 1.5, "2"])
    def test_quantity_must_be_a_positive_integer(self, world, place_order, quantity):
        with pytest.raises(ValidationFailed):
            place_order(items=[{"product_id": str(world.shirt.id), "quantity": quantity}])

        assert _product(world.shirt).available_stock == 10

    def test_unknown_product(self, place_order):
        with pytest.raises(ProductNotFound):
            place_order(items=[{"product_id": "no-such-product", "quantity": 1}])

    def test_drivers_may_not_order(self, place_order, driver_caller):
        with pytest.raises(NotAuthorized):
            place_order(caller=driver_caller)

    def test_buyer_may_not_order_for_someone_else(self, place_order):
        with pytest.raises(NotAuthorized):
            place_order(buyer_id="buyer-2")

    def test_staff_may_order_for_a_buyer(self, place_order, admin):
        order_id = place_order(caller=admin, buyer_id="buyer-1")
        assert _order(order_id).buyer_id == "buyer-1"
