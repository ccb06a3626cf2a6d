"""
rakhimart/services/order_composer.py - Order text for the messaging handoff.

`compose` renders the summary a shop owner receives on WhatsApp:

    🛍️ *New Order from RakhiMart*

    *Customer Details:*
    Name: ...
    Phone: ...
    Email: ... | Not provided
    Address: ...

    *Order Items:*
    • Traditional Gold Rakhi x 2 = ₹598

    *Order Summary:*
    Subtotal: ₹598
    Delivery: FREE | ₹50
    *Total: ₹598*

    Please confirm this order. Thank you! 🙏

The composer never touches the cart.
"""
from decimal import Decimal
from typing import Iterable, Optional
from urllib.parse import quote

from rakhimart.core.errors import MissingField
from rakhimart.schemas.cart import CartTotals, CustomerDetails, LineItem, OrderSummary
from rakhimart.services.pricing import to_whole_units

REQUIRED_FIELDS = ("name", "phone", "address")
SHOP_NAME = "RakhiMart"


def validate_customer(details: CustomerDetails) -> Optional[MissingField]:
    """First empty required field (name, phone, address order), or None when the form is complete."""
    for field in REQUIRED_FIELDS:
        if not (getattr(details, field) or "").strip():
            return MissingField(field)
    return None


def _money(amount: Decimal, symbol: str) -> str:
    return f"{symbol}{to_whole_units(amount)}"


def compose(snapshot: Iterable[LineItem], totals: CartTotals, customer: CustomerDetails,
            currency_symbol: str = "₹") -> str:
    items = list(snapshot)
    lines = "\n".join(
        f"• {item.name} x {item.quantity} = {_money(item.line_total, currency_symbol)}" for item in items
    )
    delivery = "FREE" if totals.delivery_charge == 0 else _money(totals.delivery_charge, currency_symbol)
    email = (customer.email or "").strip() or "Not provided"

    return (
        f"🛍️ *New Order from {SHOP_NAME}*\n\n"
        "*Customer Details:*\n"
        f"Name: {customer.name.strip()}\n"
        f"Phone: {customer.phone.strip()}\n"
        f"Email: {email}\n"
        f"Address: {customer.address.strip()}\n\n"
        f"*Order Items:*\n{lines}\n\n"
        "*Order Summary:*\n"
        f"Subtotal: {_money(totals.subtotal, currency_symbol)}\n"
        f"Delivery: {delivery}\n"
        f"*Total: {_money(totals.total, currency_symbol)}*\n\n"
        "Please confirm this order. Thank you! 🙏"
    )


def build_handoff_uri(text: str, phone_number: str, base_url: str = "https://wa.me") -> str:
    """Chat link with the order text in the `text` query parameter (fully percent-encoded)."""
    digits = "".join(ch for ch in phone_number if ch.isdigit())
    return f"{base_url.rstrip('/')}/{digits}?text={quote(text, safe='')}"


def summarize(snapshot: Iterable[LineItem], totals: CartTotals, customer: CustomerDetails) -> OrderSummary:
    """Structured copy of the order (what gets recorded alongside the text)."""
    return OrderSummary(
        line_items=list(snapshot),
        subtotal=totals.subtotal,
        delivery_charge=totals.delivery_charge,
        total=totals.total,
        customer=customer,
    )
