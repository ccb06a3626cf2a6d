"""
rakhimart/services/pricing.py - Order totals.

subtotal        = sum(unit_price * quantity), Decimal, rounded half-up to whole units
delivery_charge = 0 if subtotal >= free_delivery_threshold else delivery_fee
total           = subtotal + delivery_charge

The threshold comparison uses the rounded subtotal, i.e. the amount the customer sees.
An empty cart has nothing to deliver and is charged nothing.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from rakhimart.schemas.cart import CartTotals, LineItem, PricingConfig

_WHOLE = Decimal("1")
_ZERO = Decimal("0")


def to_whole_units(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(_WHOLE, rounding=ROUND_HALF_UP)


def compute_totals(line_items: Iterable[LineItem], config: PricingConfig) -> CartTotals:
    items = list(line_items)
    if not items:
        return CartTotals(subtotal=_ZERO, delivery_charge=_ZERO, total=_ZERO, item_count=0)

    exact = sum((item.unit_price * item.quantity for item in items), _ZERO)
    subtotal = to_whole_units(exact)
    threshold = config.free_delivery_threshold

    if subtotal >= threshold:
        delivery = _ZERO
        shortfall = _ZERO
    else:
        delivery = to_whole_units(config.delivery_fee)
        shortfall = to_whole_units(threshold - subtotal)

    return CartTotals(
        subtotal=subtotal,
        delivery_charge=delivery,
        total=subtotal + delivery,
        item_count=sum(item.quantity for item in items),
        amount_to_free_delivery=shortfall,
    )
