"""Cart aggregate, one per buyer, with its commands and handler."""

from datetime import UTC, datetime

from protean import handle
from protean.fields import DateTime, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.errors import ValidationFailed
from marketplace.identity.access import Role
from marketplace.shared.lookup import find_all, load


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@marketplace.aggregate
class Cart:
    buyer_id = Identifier(required=True)
    items = HasMany(CartItem)
    updated_at = DateTime()

    def _find(self, product_id, variant_id=None):
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id) and str(i.variant_id or "") == str(variant_id or "")
            ),
            None,
        )

    def add_item(self, product_id, quantity: int, variant_id=None) -> None:
        existing = self._find(product_id, variant_id)
        now = datetime.now(UTC)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=product_id, variant_id=variant_id, quantity=quantity, added_at=now))
        self.updated_at = now

    def set_quantity(self, product_id, quantity: int, variant_id=None) -> None:
        """Set a line's quantity; zero removes the line."""
        existing = self._find(product_id, variant_id)
        if existing is None:
            raise ValidationFailed("Item is not in the cart", {"product_id": str(product_id)})
        if quantity == 0:
            self.remove_items(existing)
        else:
            existing.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def clear(self) -> None:
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def as_items(self) -> list[dict]:
        return [
            {"product_id": str(i.product_id), "variant_id": i.variant_id, "quantity": i.quantity} for i in self.items
        ]


def cart_for(buyer_id) -> Cart | None:
    carts = find_all(Cart, buyer_id=str(buyer_id))
    return carts[0] if carts else None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@marketplace.command(part_of="Cart")
class AddToCart:
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class UpdateCartQuantity:
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=0)


@marketplace.command(part_of="Cart")
class ClearCart:
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command_handler(part_of=Cart)
class CartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = load(Product, command.product_id, "Product")
        product.available_for(command.variant_id)  # unknown variant raises ProductNotFound

        repo = current_domain.repository_for(Cart)
        cart = cart_for(command.caller_id) or Cart(buyer_id=command.caller_id)
        cart.add_item(command.product_id, command.quantity, command.variant_id)
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_quantity(self, command):
        cart = cart_for(command.caller_id)
        if cart is None:
            raise ValidationFailed("Cart is empty")
        cart.set_quantity(command.product_id, command.quantity, command.variant_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = cart_for(command.caller_id)
        if cart is not None:
            cart.clear()
            current_domain.repository_for(Cart).add(cart)
