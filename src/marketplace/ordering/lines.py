"""Requested order lines, resolved against the catalogue."""

from collections import defaultdict
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.errors import EmptyOrder, InsufficientStock, ProductNotFound, ValidationFailed


@dataclass
class Line:
    product: Product
    quantity: int
    variant_id: str | None = None

    @property
    def store_id(self) -> str:
        return str(self.product.store_id)

    @property
    def unit_price(self) -> int:
        return self.product.unit_price(self.variant_id)

    @property
    def weight_grams(self) -> int:
        return (self.product.weight or 0) * self.quantity

    def as_order_line(self) -> dict:
        return {
            "product_id": str(self.product.id),
            "variant_id": self.variant_id,
            "product_name": self.product.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
        }


def resolve_lines(items: list[dict]) -> list[Line]:
    """Turn ``[{product_id, quantity, variant_id?}]`` into catalogue-backed lines.

    Every product is loaded once, even when several lines reference it.
    """
    if not items:
        raise EmptyOrder("An order needs at least one item")

    products: dict[str, Product] = {}
    repo = current_domain.repository_for(Product)
    lines = []
    for index, item in enumerate(items):
        product_id = str(item.get("product_id") or "")
        quantity = item.get("quantity")
        variant_id = item.get("variant_id") or None
        if not product_id:
            raise ValidationFailed("Each item needs a product id", {"item": index})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationFailed("Quantity must be a positive integer", {"item": index, "quantity": quantity})

        if product_id not in products:
            try:
                products[product_id] = repo.get(product_id)
            except ObjectNotFoundError:
                raise ProductNotFound(f"Product {product_id} not found", {"product_id": product_id}) from None

        variant_id = str(variant_id) if variant_id else None
        products[product_id].available_for(variant_id)  # unknown variant raises ProductNotFound
        lines.append(Line(product=products[product_id], quantity=quantity, variant_id=variant_id))
    return lines


def check_stock(lines: list[Line]) -> None:
    """Fail if the summed quantity of any product (or variant) exceeds what is available."""
    requested = defaultdict(int)
    by_key = {}
    for line in lines:
        key = (str(line.product.id), line.variant_id)
        requested[key] += line.quantity
        by_key[key] = line

    shortages = []
    for key, quantity in requested.items():
        line = by_key[key]
        available = line.product.available_for(line.variant_id)
        if quantity > available:
            shortages.append(
                {
                    "product_id": key[0],
                    "variant_id": key[1],
                    "requested": quantity,
                    "available": available,
                }
            )
    if shortages:
        raise InsufficientStock("Insufficient stock for one or more items", {"items": shortages})


def group_by_store(lines: list[Line]) -> dict[str, list[Line]]:
    groups: dict[str, list[Line]] = defaultdict(list)
    for line in lines:
        groups[line.store_id].append(line)
    return dict(groups)
