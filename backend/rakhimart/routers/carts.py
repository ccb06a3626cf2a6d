"""
rakhimart/routers/carts.py
Cart endpoints (any signed-in principal, guests included). One cart per uid, stored in
Firestore `carts/{uid}` and driven through the Cart Store, so the HTTP cart follows exactly
the same stock / quantity rules as an in-process one.

Behavior
- Add reads the product from the catalog once and snapshots name, price and first image.
- Quantities above the known stock answer 409 and change nothing.
- GET /cart returns the line items plus totals priced against the current site settings.
- POST /cart/checkout validates the customer form, hands the order to WhatsApp (returns the link),
  records the order and empties the cart.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from rakhimart.config import get_db, settings
from rakhimart.core.diagnostics import Diagnostics
from rakhimart.core.errors import CartOutcome, CheckoutOutcome
from rakhimart.core.security import get_principal
from rakhimart.repositories.cart_persistence import FirestoreCartPersistence
from rakhimart.repositories.catalog import ProductRepository
from rakhimart.repositories.orders import OrderRepository
from rakhimart.repositories.site_settings import SiteSettingsRepository
from rakhimart.schemas.cart import CartTotals, CustomerDetails, OrderSummary
from rakhimart.schemas.principal import Principal
from rakhimart.services.cart_store import CartStore
from rakhimart.services.checkout import CheckoutFlow
from rakhimart.services.pricing import compute_totals

logger = logging.getLogger("rakhimart.routers.cart")

router = APIRouter(prefix="/cart", tags=["Cart"])

_diagnostics = Diagnostics()


# ---------- models ----------
class AddItemBody(BaseModel):
    product_id: str = Field(..., min_length=1, description="Catalog product id")
    quantity: int = Field(1, description="Units to add (>=1)")


class SetQuantityBody(BaseModel):
    quantity: int = Field(..., description="New quantity; 0 removes the line")


class CartLine(BaseModel):
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    thumbnail: str
    line_total: Decimal


class CartView(BaseModel):
    items: List[CartLine]
    totals: CartTotals


class CheckoutOut(BaseModel):
    handoff_uri: str
    text: str
    order_id: Optional[str] = None
    summary: OrderSummary


_OUTCOME_ERRORS = {
    CartOutcome.STOCK_UNAVAILABLE: (status.HTTP_409_CONFLICT, "Product is out of stock"),
    CartOutcome.STOCK_LIMIT_EXCEEDED: (status.HTTP_409_CONFLICT, "Requested quantity exceeds available stock"),
    CartOutcome.INVALID_QUANTITY: (status.HTTP_400_BAD_REQUEST, "Invalid quantity"),
    CartOutcome.NOT_IN_CART: (status.HTTP_404_NOT_FOUND, "Item not found in cart."),
}


# ---------- dependencies ----------
def get_cart_store(principal: Principal = Depends(get_principal), db=Depends(get_db)) -> CartStore:
    persistence = FirestoreCartPersistence(db, principal.uid, settings.collection("carts"))
    return CartStore(persistence, _diagnostics, placeholder_image=settings.placeholder_image)


def _view(cart: CartStore, pricing: SiteSettingsRepository) -> CartView:
    snapshot = cart.snapshot()
    return CartView(
        items=[CartLine(**item.model_dump(), line_total=item.line_total) for item in snapshot],
        totals=compute_totals(snapshot, pricing.pricing_config()),
    )


def _raise_for(outcome: CartOutcome) -> None:
    if outcome.ok:
        return
    code, detail = _OUTCOME_ERRORS[outcome]
    raise HTTPException(status_code=code, detail={"code": outcome.value, "message": detail})


# ---------- routes ----------
@router.get("/", response_model=CartView)
def get_cart(cart: CartStore = Depends(get_cart_store), db=Depends(get_db)):
    return _view(cart, SiteSettingsRepository(db))


@router.post("/items", response_model=CartView)
def add_to_cart(body: AddItemBody, cart: CartStore = Depends(get_cart_store), db=Depends(get_db)):
    product = ProductRepository(db).get(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    _raise_for(cart.add_item(product, body.quantity))
    return _view(cart, SiteSettingsRepository(db))


@router.put("/items/{product_id}", response_model=CartView)
def set_quantity(product_id: str, body: SetQuantityBody,
                 cart: CartStore = Depends(get_cart_store), db=Depends(get_db)):
    _raise_for(cart.set_quantity(product_id, body.quantity))
    return _view(cart, SiteSettingsRepository(db))


@router.delete("/items/{product_id}", response_model=CartView)
def remove_cart_item(product_id: str, cart: CartStore = Depends(get_cart_store), db=Depends(get_db)):
    cart.remove_item(product_id)
    return _view(cart, SiteSettingsRepository(db))


@router.delete("/", status_code=204)
def clear_cart(cart: CartStore = Depends(get_cart_store)):
    cart.clear()


@router.post("/checkout", response_model=CheckoutOut)
def checkout(customer: CustomerDetails, principal: Principal = Depends(get_principal),
             cart: CartStore = Depends(get_cart_store), db=Depends(get_db)):
    """Server-side checkout has no countdown: the client shows its own confirmation before calling this."""
    handed_off: List[str] = []
    flow = CheckoutFlow(
        cart,
        SiteSettingsRepository(db),
        handed_off.append,
        phone_number=settings.whatsapp_number,
        base_url=settings.whatsapp_base_url,
        currency_symbol=settings.currency_symbol,
        diagnostics=_diagnostics,
    )
    result = flow.submit(customer)

    if result.outcome is CheckoutOutcome.MISSING_FIELD:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": result.outcome.value, "field": result.missing.name,
                    "message": f"Please fill in the required field: {result.missing.name}"},
        )
    if result.outcome is CheckoutOutcome.EMPTY_CART:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": result.outcome.value, "message": "Please add items to your cart before placing an order"},
        )
    if result.outcome is not CheckoutOutcome.HANDED_OFF:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Checkout failed")

    order_id = None
    try:
        order_id = OrderRepository(db).record(principal.uid, result.summary, result.handoff_uri)
    except Exception:
        # Order already handed off; recording it is best effort.
        logger.exception("failed to record order for %s", principal.uid)

    return CheckoutOut(handoff_uri=result.handoff_uri, text=result.text, order_id=order_id, summary=result.summary)
