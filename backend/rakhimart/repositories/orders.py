# rakhimart/repositories/orders.py
import logging
from datetime import datetime, timezone

from rakhimart.config import settings
from rakhimart.schemas.cart import OrderSummary

logger = logging.getLogger("rakhimart.orders")


class OrderRepository:
    """Record of orders handed off to WhatsApp (`orders/{auto-id}`), for the admin's bookkeeping."""

    def __init__(self, db):
        self._col = db.collection(settings.collection("orders"))

    def record(self, uid: str, summary: OrderSummary, handoff_uri: str) -> str:
        ref = self._col.document()
        data = summary.model_dump(mode="json")
        data.update(
            id=ref.id,
            user_id=uid,
            handoff_uri=handoff_uri,
            status="sent",
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        ref.set(data)
        logger.info("order %s recorded for %s (total %s)", ref.id, uid, summary.total)
        return ref.id
