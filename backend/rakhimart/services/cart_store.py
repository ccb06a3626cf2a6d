"""
rakhimart/services/cart_store.py - The Cart Store.

Sole owner of a cart's line items. Every mutation:
1. runs the stock guard when the quantity goes up,
2. applies the change in memory,
3. persists the whole cart (best effort: a failed save is reported, the mutation stands).

Rejected mutations return a `CartOutcome` and leave the cart untouched; nothing here raises
for business-rule violations. One store per cart owner, passed explicitly to whoever needs it.
"""
import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError

from rakhimart.core.diagnostics import Diagnostics
from rakhimart.core.errors import CartOutcome, PersistenceUnavailable, StockCheck
from rakhimart.schemas.cart import CartState, LineItem
from rakhimart.schemas.product import ProductOut
from rakhimart.services.stock_guard import can_increase

logger = logging.getLogger("rakhimart.cart")

DEFAULT_PLACEHOLDER = "/placeholder.svg"

_REJECTIONS = {
    StockCheck.STOCK_UNAVAILABLE: CartOutcome.STOCK_UNAVAILABLE,
    StockCheck.STOCK_LIMIT_EXCEEDED: CartOutcome.STOCK_LIMIT_EXCEEDED,
}


class CartStore:
    def __init__(self, persistence, diagnostics: Optional[Diagnostics] = None,
                 placeholder_image: str = DEFAULT_PLACEHOLDER):
        self._persistence = persistence
        self._diagnostics = diagnostics or Diagnostics()
        self._placeholder = placeholder_image
        self._items: List[LineItem] = []
        self.load()

    # ---------- lifecycle ----------
    def load(self) -> None:
        """(Re)hydrate from persistence. Missing or malformed records give an empty cart."""
        try:
            record = self._persistence.load()
        except PersistenceUnavailable as exc:
            self._diagnostics.report("cart.load_failed", error=str(exc))
            self._items = []
            return
        except ValueError as exc:
            self._diagnostics.report("cart.record_malformed", error=str(exc))
            self._items = []
            return

        if record is None:
            self._items = []
            return

        try:
            state = CartState.model_validate(record)
        except ValidationError as exc:
            self._diagnostics.report("cart.record_malformed", error=str(exc))
            self._items = []
            return

        # Older / hand-edited records may repeat a product; merge them so ids stay unique.
        merged: dict = {}
        for item in state.items:
            if item.product_id in merged:
                prev = merged[item.product_id]
                merged[item.product_id] = prev.model_copy(update={"quantity": prev.quantity + item.quantity})
            else:
                merged[item.product_id] = item
        self._items = list(merged.values())

    def _persist(self) -> None:
        record = CartState(items=self._items).model_dump(mode="json")
        try:
            self._persistence.save(record)
        except PersistenceUnavailable as exc:
            self._diagnostics.report("cart.save_failed", error=str(exc))

    def _reject(self, outcome: CartOutcome, product_id: str, **fields) -> CartOutcome:
        self._diagnostics.report("cart.mutation_rejected", outcome=outcome.value, product_id=product_id, **fields)
        return outcome

    def _index(self, product_id: str) -> Optional[int]:
        for i, item in enumerate(self._items):
            if item.product_id == product_id:
                return i
        return None

    # ---------- mutations ----------
    def add_item(self, product: ProductOut, quantity_delta: int = 1) -> CartOutcome:
        """Add `quantity_delta` units of a catalog product, merging with an existing line."""
        if quantity_delta < 1:
            return self._reject(CartOutcome.INVALID_QUANTITY, product.id, delta=quantity_delta)

        idx = self._index(product.id)
        current = self._items[idx].quantity if idx is not None else 0

        check = can_increase(current, quantity_delta, product.stock, product.is_out_of_stock)
        if check is not StockCheck.ALLOWED:
            return self._reject(_REJECTIONS[check], product.id, current=current,
                                delta=quantity_delta, stock=product.stock)

        if idx is None:
            self._items.append(LineItem(
                product_id=product.id,
                name=product.name,
                unit_price=str(product.price),
                quantity=quantity_delta,
                thumbnail=product.images[0] if product.images else self._placeholder,
                stock_ceiling=product.stock,
            ))
        else:
            # Name / price / thumbnail stay as first added; the stock ceiling follows the catalog.
            self._items[idx] = self._items[idx].model_copy(
                update={"quantity": current + quantity_delta, "stock_ceiling": product.stock}
            )
        self._persist()
        return CartOutcome.APPLIED

    def set_quantity(self, product_id: str, quantity: int) -> CartOutcome:
        if quantity < 0:
            return self._reject(CartOutcome.INVALID_QUANTITY, product_id, quantity=quantity)
        if quantity == 0:
            self.remove_item(product_id)
            return CartOutcome.APPLIED

        idx = self._index(product_id)
        if idx is None:
            return self._reject(CartOutcome.NOT_IN_CART, product_id, quantity=quantity)

        item = self._items[idx]
        if quantity > item.quantity:
            check = can_increase(item.quantity, quantity - item.quantity, item.stock_ceiling, False)
            if check is not StockCheck.ALLOWED:
                return self._reject(_REJECTIONS[check], product_id, current=item.quantity,
                                    quantity=quantity, stock=item.stock_ceiling)

        self._items[idx] = item.model_copy(update={"quantity": quantity})
        self._persist()
        return CartOutcome.APPLIED

    def remove_item(self, product_id: str) -> None:
        self._items = [item for item in self._items if item.product_id != product_id]
        self._persist()

    def clear(self) -> None:
        self._items = []
        self._persist()

    # ---------- reads ----------
    def snapshot(self) -> Tuple[LineItem, ...]:
        # LineItem is frozen, so a tuple of copies can't reach back into the store.
        return tuple(item.model_copy() for item in self._items)

    def get(self, product_id: str) -> Optional[LineItem]:
        idx = self._index(product_id)
        return self._items[idx].model_copy() if idx is not None else None

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)
