"""FastAPI routes for the buyer's cart."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.caller import command_caller, current_caller
from marketplace.api.errors import ok
from marketplace.api.schemas import CartItemRequest, CartQuantityRequest, CartResponse
from marketplace.identity.access import Caller
from marketplace.ordering.cart import AddToCart, ClearCart, UpdateCartQuantity, cart_for

cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart(caller: Caller) -> dict:
    cart = cart_for(caller.user_id)
    if cart is None:
        return ok(CartResponse(buyer_id=caller.user_id))
    return ok(CartResponse.model_validate(cart))


@cart_router.get("")
async def read_cart(caller: Caller = Depends(current_caller)) -> dict:
    return _cart(caller)


@cart_router.post("", status_code=201)
async def add_to_cart(body: CartItemRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = AddToCart(
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        **command_caller(caller),
    )
    current_domain.process(command, asynchronous=False)
    return _cart(caller)


@cart_router.patch("/update-quantity")
async def update_quantity(body: CartQuantityRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = UpdateCartQuantity(
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        **command_caller(caller),
    )
    current_domain.process(command, asynchronous=False)
    return _cart(caller)


@cart_router.delete("/clear")
async def clear_cart(caller: Caller = Depends(current_caller)) -> dict:
    current_domain.process(ClearCart(**command_caller(caller)), asynchronous=False)
    return _cart(caller)
