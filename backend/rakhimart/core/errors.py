"""
rakhimart/core/errors.py - Result signals of the cart engine.

Cart mutations, stock checks and checkout never raise for business-rule violations;
they return one of the enums below and the HTTP layer maps it to a status code.
`PersistenceUnavailable` is the only exception here: storage collaborators raise it,
the Cart Store catches it.
"""
from dataclasses import dataclass
from enum import Enum


class StockCheck(str, Enum):
    ALLOWED = "allowed"
    STOCK_LIMIT_EXCEEDED = "stock_limit_exceeded"
    STOCK_UNAVAILABLE = "stock_unavailable"


class CartOutcome(str, Enum):
    APPLIED = "applied"
    STOCK_UNAVAILABLE = "stock_unavailable"
    STOCK_LIMIT_EXCEEDED = "stock_limit_exceeded"
    INVALID_QUANTITY = "invalid_quantity"
    NOT_IN_CART = "not_in_cart"

    @property
    def ok(self) -> bool:
        return self is CartOutcome.APPLIED


class CheckoutOutcome(str, Enum):
    CONFIRMING = "confirming"
    HANDED_OFF = "handed_off"
    MISSING_FIELD = "missing_field"
    EMPTY_CART = "empty_cart"
    BUSY = "busy"
    HANDOFF_FAILED = "handoff_failed"


@dataclass(frozen=True)
class MissingField:
    """First required checkout field that was left empty."""
    name: str


class PersistenceUnavailable(Exception):
    """Durable cart storage could not be read or written."""
