"""Stock movements for a store order's line items.

Each product is loaded once and saved once per call, so several lines for
the same product (e.g. different variants) update a single copy.
"""

from collections import defaultdict

from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product


def _apply(items, operation: str) -> None:
    by_product = defaultdict(list)
    for item in items:
        by_product[str(item.product_id)].append(item)

    repo = current_domain.repository_for(Product)
    for product_id, product_items in by_product.items():
        product = repo.get(product_id)
        for item in product_items:
            getattr(product, operation)(item.quantity, item.variant_id)
        repo.add(product)


def release_stock(store_order) -> None:
    """Return reserved units to available stock."""
    _apply(store_order.items, "release")


def commit_stock(store_order) -> None:
    """Turn reserved units into sold units once delivered."""
    _apply(store_order.items, "commit")
