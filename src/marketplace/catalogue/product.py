"""Product aggregate with stock bookkeeping.

Stock moves between three buckets:
    available --reserve--> reserved --commit--> sold
    reserved  --release--> available

When a variant is ordered, its own counters are used instead of the
product-level ones.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.errors import InsufficientStock, ProductNotFound


@marketplace.entity(part_of="Product")
class ProductVariant:
    name = String(required=True, max_length=100)
    value = String(max_length=100)
    price_adjustment = Integer(default=0)
    available_stock = Integer(default=0, min_value=0)
    reserved_stock = Integer(default=0, min_value=0)
    sold_stock = Integer(default=0, min_value=0)


@marketplace.aggregate
class Product:
    store_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text()
    price = Integer(required=True, min_value=0)
    weight = Integer(default=0, min_value=0)  # grams
    available_stock = Integer(default=0, min_value=0)
    reserved_stock = Integer(default=0, min_value=0)
    sold_stock = Integer(default=0, min_value=0)
    variants = HasMany(ProductVariant)
    created_at = DateTime(default=lambda: datetime.now(UTC))

    def variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def _stock_holder(self, variant_id=None):
        if not variant_id:
            return self
        variant = self.variant(variant_id)
        if variant is None:
            raise ProductNotFound(
                f"Variant {variant_id} not found for product {self.id}",
                {"product_id": str(self.id), "variant_id": str(variant_id)},
            )
        return variant

    def unit_price(self, variant_id=None) -> int:
        holder = self._stock_holder(variant_id)
        if holder is self:
            return self.price
        return self.price + (holder.price_adjustment or 0)

    def available_for(self, variant_id=None) -> int:
        return self._stock_holder(variant_id).available_stock

    def reserve(self, quantity: int, variant_id=None) -> None:
        holder = self._stock_holder(variant_id)
        if holder.available_stock < quantity:
            raise InsufficientStock(
                f"Only {holder.available_stock} unit(s) of '{self.name}' available",
                {
                    "product_id": str(self.id),
                    "variant_id": str(variant_id) if variant_id else None,
                    "requested": quantity,
                    "available": holder.available_stock,
                },
            )
        holder.available_stock -= quantity
        holder.reserved_stock += quantity

    def release(self, quantity: int, variant_id=None) -> None:
        holder = self._stock_holder(variant_id)
        released = min(quantity, holder.reserved_stock)
        holder.reserved_stock -= released
        holder.available_stock += released

    def commit(self, quantity: int, variant_id=None) -> None:
        holder = self._stock_holder(variant_id)
        committed = min(quantity, holder.reserved_stock)
        holder.reserved_stock -= committed
        holder.sold_stock += committed
