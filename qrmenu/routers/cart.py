from fastapi import APIRouter, Depends

from qrmenu.deps import require_cart
from qrmenu.schemas.cart import CartLineIn, CartOut, CartQuantityIn
from qrmenu.services.cart import SessionCartStore

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(cart: SessionCartStore = Depends(require_cart)):
    """Lines of the caller's session plus derived totals; the session cookie is set on first use."""
    return cart.snapshot()


@router.post("/lines", response_model=CartOut)
def add_line(body: CartLineIn, cart: SessionCartStore = Depends(require_cart)):
    cart.add(body.product_id, body.quantity, body.special_instructions)
    return cart.snapshot()


@router.patch("/lines/{line_id}", response_model=CartOut)
def set_line_quantity(line_id: str, body: CartQuantityIn, cart: SessionCartStore = Depends(require_cart)):
    """
    quantity <= 0 answers 409 confirmation_required unless ``confirm`` is
    true, exactly like DELETE without ``confirm``.
    """
    cart.set_quantity(line_id, body.quantity, confirmed=body.confirm)
    return cart.snapshot()


@router.delete("/lines/{line_id}", response_model=CartOut)
def remove_line(line_id: str, confirm: bool = False, cart: SessionCartStore = Depends(require_cart)):
    cart.remove(line_id, confirmed=confirm)
    return cart.snapshot()


@router.delete("", response_model=CartOut)
def clear_cart(cart: SessionCartStore = Depends(require_cart)):
    cart.clear()
    return cart.snapshot()
