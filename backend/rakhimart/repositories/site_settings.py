"""
rakhimart/repositories/site_settings.py - Site settings document and the pricing config it feeds.

Single document `site_settings/main`. Reading it when it does not exist creates it with defaults.
`pricing_config()` re-reads the document on every call: the cart always prices against the
latest delivery fee / free-delivery minimum the admin saved.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal

from rakhimart.config import settings
from rakhimart.schemas.cart import PricingConfig
from rakhimart.schemas.settings import SiteSettings, SiteSettingsUpdate, parse_amount

logger = logging.getLogger("rakhimart.settings")

_DOC_ID = "main"


class SiteSettingsRepository:
    def __init__(self, db):
        self._doc = db.collection(settings.collection("site_settings")).document(_DOC_ID)

    def _defaults(self) -> SiteSettings:
        return SiteSettings(
            delivery_charges=settings.default_delivery_charges,
            free_delivery_minimum=settings.default_free_delivery_minimum,
        )

    def get(self) -> SiteSettings:
        snap = self._doc.get()
        if snap.exists:
            return SiteSettings(**(snap.to_dict() or {}))
        current = self._defaults()
        current.updated_at = datetime.now(timezone.utc).isoformat()
        self._doc.set(current.model_dump())
        logger.info("created default site settings")
        return current

    def update(self, patch: SiteSettingsUpdate) -> SiteSettings:
        current = self.get()
        merged = current.model_copy(update=patch.changes())
        merged.updated_at = datetime.now(timezone.utc).isoformat()
        self._doc.set(merged.model_dump())
        return merged

    # ---------- PricingConfig collaborator ----------
    def pricing_config(self) -> PricingConfig:
        current = self.get()
        fee_default = parse_amount(settings.default_delivery_charges, Decimal("0"))
        min_default = parse_amount(settings.default_free_delivery_minimum, Decimal("0"))
        return PricingConfig(
            delivery_fee=parse_amount(current.delivery_charges, fee_default),
            free_delivery_threshold=parse_amount(current.free_delivery_minimum, min_default),
        )

    def get_delivery_fee(self) -> Decimal:
        return self.pricing_config().delivery_fee

    def get_free_delivery_threshold(self) -> Decimal:
        return self.pricing_config().free_delivery_threshold


class StaticPricingConfig:
    """Fixed delivery fee / threshold (no settings document to read)."""

    def __init__(self, delivery_fee, free_delivery_threshold):
        self._config = PricingConfig(
            delivery_fee=Decimal(str(delivery_fee)),
            free_delivery_threshold=Decimal(str(free_delivery_threshold)),
        )

    def get_delivery_fee(self) -> Decimal:
        return self._config.delivery_fee

    def get_free_delivery_threshold(self) -> Decimal:
        return self._config.free_delivery_threshold

    def pricing_config(self) -> PricingConfig:
        return self._config
