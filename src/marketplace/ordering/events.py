"""Domain events raised by the Order and StoreOrder aggregates."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    store_order_ids = Text(required=True)  # JSON list
    items_total = Integer(required=True)
    total_delivery_fee = Integer(required=True)
    grand_total = Integer(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@marketplace.event(part_of="StoreOrder")
class StoreOrderPlaced:
    __version__ = 1

    store_order_id = Identifier(required=True)
    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal = Integer(required=True)
    delivery_fee = Integer(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="StoreOrder")
class StoreOrderStatusChanged:
    __version__ = 1

    store_order_id = Identifier(required=True)
    order_id = Identifier(required=True)
    store_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
