"""
rakhimart/schemas/settings.py - Site-wide settings.

Delivery amounts are stored as strings (the admin form sends free text); they are parsed
into `Decimal` when a pricing config is built from them.
"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SITE_TITLE = "RakhiMart - Premium Rakhi Collection"
DEFAULT_SITE_DESCRIPTION = (
    "Celebrate Raksha Bandhan with our beautiful collection of traditional and designer rakhis"
)


def parse_amount(value, fallback: Decimal) -> Decimal:
    """Non-negative decimal from a stored settings value; falls back on junk."""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return fallback
    if not amount.is_finite() or amount < 0:
        return fallback
    return amount


class SiteSettings(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    delivery_charges: str = Field("50", description="Flat delivery fee below the free-delivery minimum")
    free_delivery_minimum: str = Field("200", description="Subtotal at which delivery becomes free")
    contact_phone: str = ""
    contact_email: str = ""
    site_title: str = DEFAULT_SITE_TITLE
    site_description: str = DEFAULT_SITE_DESCRIPTION
    updated_at: Optional[str] = None


class SiteSettingsUpdate(BaseModel):
    """Empty or missing fields keep their stored value."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    delivery_charges: Optional[str] = None
    free_delivery_minimum: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    site_title: Optional[str] = None
    site_description: Optional[str] = None

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump().items() if v}
