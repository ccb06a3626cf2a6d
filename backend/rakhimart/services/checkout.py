"""
# `rakhimart/services/checkout.py` - Checkout flow

## States
`IDLE → VALIDATING → CONFIRMING → HANDOFF → CLEARED`

- **IDLE**: customer is looking at the cart / form.
- **VALIDATING**: `submit()` checks the form (first missing field wins) and refuses an empty cart;
  any failure goes straight back to IDLE.
- **CONFIRMING**: optional countdown before the handoff, scheduled as a one-shot APScheduler
  `date` job. `cancel()` removes the job and returns to IDLE; the cart is untouched.
- **HANDOFF**: point of no return. Totals are re-read, the order text is composed and the
  messaging collaborator gets the URI.
- **CLEARED**: the cart is emptied, only after the handoff call returned.

Every scheduled countdown carries a token; a job whose token is stale (cancelled, superseded)
or that already fired does nothing.
"""
import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError

from rakhimart.core.diagnostics import Diagnostics
from rakhimart.core.errors import CheckoutOutcome, MissingField
from rakhimart.schemas.cart import CustomerDetails, OrderSummary
from rakhimart.services.cart_store import CartStore
from rakhimart.services.order_composer import build_handoff_uri, compose, summarize, validate_customer
from rakhimart.services.pricing import compute_totals

logger = logging.getLogger("rakhimart.checkout")

_job_ids = itertools.count(1)


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    CONFIRMING = "confirming"
    HANDOFF = "handoff"
    CLEARED = "cleared"


@dataclass(frozen=True)
class CheckoutResult:
    outcome: CheckoutOutcome
    missing: Optional[MissingField] = None
    handoff_uri: Optional[str] = None
    text: Optional[str] = None
    summary: Optional[OrderSummary] = None


class CheckoutFlow:
    def __init__(
        self,
        cart: CartStore,
        pricing,
        handoff: Callable[[str], None],
        *,
        phone_number: str,
        base_url: str = "https://wa.me",
        currency_symbol: str = "₹",
        countdown_seconds: float = 0,
        scheduler=None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        if countdown_seconds and scheduler is None:
            raise ValueError("a scheduler is required when countdown_seconds > 0")
        self._cart = cart
        self._pricing = pricing
        self._handoff = handoff
        self._phone = phone_number
        self._base_url = base_url
        self._currency = currency_symbol
        self._countdown = countdown_seconds
        self._scheduler = scheduler
        self._diagnostics = diagnostics or Diagnostics()

        self._lock = threading.RLock()
        self.state = CheckoutState.IDLE
        self._customer: Optional[CustomerDetails] = None
        self._job = None
        self._token: Optional[int] = None
        self._fired = False
        self.last_result: Optional[CheckoutResult] = None

    # ---------- transitions ----------
    def submit(self, customer: CustomerDetails) -> CheckoutResult:
        with self._lock:
            if self.state in (CheckoutState.CONFIRMING, CheckoutState.HANDOFF):
                return CheckoutResult(CheckoutOutcome.BUSY)

            self.state = CheckoutState.VALIDATING
            missing = validate_customer(customer)
            if missing is not None:
                self.state = CheckoutState.IDLE
                return CheckoutResult(CheckoutOutcome.MISSING_FIELD, missing=missing)
            if self._cart.is_empty():
                self.state = CheckoutState.IDLE
                return CheckoutResult(CheckoutOutcome.EMPTY_CART)

            self._customer = customer
            if not self._countdown:
                return self._run_handoff()

            token = next(_job_ids)
            self._token = token
            self._fired = False
            self._job = self._scheduler.add_job(
                self._fire,
                "date",
                run_date=datetime.now() + timedelta(seconds=self._countdown),
                args=[token],
                id=f"checkout-{token}",
            )
            self.state = CheckoutState.CONFIRMING
            logger.info("checkout countdown started (%ss)", self._countdown)
            return CheckoutResult(CheckoutOutcome.CONFIRMING)

    def cancel(self) -> bool:
        """Abort a pending countdown. Safe to call any number of times; True if something was cancelled."""
        with self._lock:
            if self.state is not CheckoutState.CONFIRMING:
                return False
            self._token = None
            job, self._job = self._job, None
            if job is not None:
                try:
                    job.remove()
                except JobLookupError:
                    pass  # already ran or was removed by the scheduler
            self._customer = None
            self.state = CheckoutState.IDLE
            logger.info("checkout countdown cancelled")
            return True

    def _fire(self, token: int) -> None:
        with self._lock:
            if self._fired or token != self._token or self.state is not CheckoutState.CONFIRMING:
                return
            self._fired = True
            self._job = None
            self._run_handoff()

    def _run_handoff(self) -> CheckoutResult:
        self.state = CheckoutState.HANDOFF
        snapshot = self._cart.snapshot()
        try:
            totals = compute_totals(snapshot, self._pricing.pricing_config())
            text = compose(snapshot, totals, self._customer, currency_symbol=self._currency)
            uri = build_handoff_uri(text, self._phone, self._base_url)
            self._handoff(uri)
        except Exception as exc:
            # Runs on the scheduler thread when a countdown fires; nothing may escape.
            logger.exception("messaging handoff failed")
            self._diagnostics.report("checkout.handoff_failed", error=str(exc))
            self.state = CheckoutState.IDLE
            result = CheckoutResult(CheckoutOutcome.HANDOFF_FAILED)
            self.last_result = result
            return result

        summary = summarize(snapshot, totals, self._customer)
        self._cart.clear()
        self._customer = None
        self.state = CheckoutState.CLEARED
        result = CheckoutResult(CheckoutOutcome.HANDED_OFF, handoff_uri=uri, text=text, summary=summary)
        self.last_result = result
        return result
