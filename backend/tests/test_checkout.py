import threading
import time

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from conftest import make_product
from rakhimart.core.diagnostics import RecordingDiagnostics
from rakhimart.core.errors import CheckoutOutcome, MissingField
from rakhimart.repositories.cart_persistence import InMemoryCartPersistence
from rakhimart.repositories.site_settings import StaticPricingConfig
from rakhimart.schemas.cart import CustomerDetails
from rakhimart.services.cart_store import CartStore
from rakhimart.services.checkout import CheckoutFlow, CheckoutState

CUSTOMER = CustomerDetails(name="Asha", phone="9876543210", address="12 MG Road")


@pytest.fixture
def cart():
    store = CartStore(InMemoryCartPersistence())
    store.add_item(make_product("p1", price=100), 2)
    return store


@pytest.fixture
def opened():
    return []


def flow_for(cart, opened, scheduler=None, countdown=0, **kw):
    return CheckoutFlow(
        cart,
        StaticPricingConfig(50, 200),
        opened.append,
        phone_number="917696400902",
        countdown_seconds=countdown,
        scheduler=scheduler,
        **kw,
    )


def test_immediate_handoff_opens_link_then_clears(cart, opened):
    flow = flow_for(cart, opened)
    result = flow.submit(CUSTOMER)

    assert result.outcome is CheckoutOutcome.HANDED_OFF
    assert opened == [result.handoff_uri]
    assert result.handoff_uri.startswith("https://wa.me/917696400902?text=")
    assert result.summary.total == 200
    assert cart.is_empty()
    assert flow.state is CheckoutState.CLEARED


def test_missing_name_stops_before_composition(cart, opened):
    flow = flow_for(cart, opened)
    result = flow.submit(CustomerDetails(name="", phone="555", address="X St"))

    assert result.outcome is CheckoutOutcome.MISSING_FIELD
    assert result.missing == MissingField("name")
    assert result.text is None
    assert opened == []
    assert cart.get("p1").quantity == 2
    assert flow.state is CheckoutState.IDLE


def test_empty_cart_is_refused(opened):
    flow = flow_for(CartStore(InMemoryCartPersistence()), opened)
    assert flow.submit(CUSTOMER).outcome is CheckoutOutcome.EMPTY_CART
    assert opened == []
    assert flow.state is CheckoutState.IDLE


def test_countdown_hands_off_when_it_fires(cart, opened, scheduler):
    flow = flow_for(cart, opened, scheduler, countdown=3)
    assert flow.submit(CUSTOMER).outcome is CheckoutOutcome.CONFIRMING
    assert flow.state is CheckoutState.CONFIRMING
    assert not cart.is_empty()
    assert opened == []

    scheduler.run_pending()

    assert len(opened) == 1
    assert cart.is_empty()
    assert flow.state is CheckoutState.CLEARED
    assert flow.last_result.outcome is CheckoutOutcome.HANDED_OFF


def test_cancel_during_countdown_keeps_cart_and_never_opens(cart, opened, scheduler):
    flow = flow_for(cart, opened, scheduler, countdown=3)
    flow.submit(CUSTOMER)

    assert flow.cancel() is True
    scheduler.run_pending()

    assert opened == []
    assert cart.get("p1").quantity == 2
    assert flow.state is CheckoutState.IDLE
    assert scheduler.jobs == {}


def test_cancel_is_idempotent(cart, opened, scheduler):
    flow = flow_for(cart, opened, scheduler, countdown=3)
    flow.submit(CUSTOMER)
    assert flow.cancel() is True
    assert flow.cancel() is False
    assert flow.state is CheckoutState.IDLE


def test_cancel_after_fire_is_a_noop(cart, opened, scheduler):
    flow = flow_for(cart, opened, scheduler, countdown=3)
    flow.submit(CUSTOMER)
    scheduler.run_pending()

    assert flow.cancel() is False
    assert flow.state is CheckoutState.CLEARED
    assert len(opened) == 1


def test_stale_job_cannot_fire_after_cancel(cart, opened, scheduler):
    flow = flow_for(cart, opened, scheduler, countdown=3)
    flow.submit(CUSTOMER)
    job = next(iter(scheduler.jobs.values()))
    flow.cancel()

    # a scheduler that already dequeued the job still calls it
    job.func(*job.args)

    assert opened == []
    assert not cart.is_empty()


def test_resubmit_after_cancel_uses_fresh_token(cart, opened, scheduler):
    flow = flow_for(cart, opened, scheduler, countdown=3)
    flow.submit(CUSTOMER)
    first = next(iter(scheduler.jobs.values()))
    flow.cancel()
    flow.submit(CUSTOMER)

    first.func(*first.args)
    assert opened == []

    scheduler.run_pending()
    assert len(opened) == 1


def test_submit_while_confirming_is_busy(cart, opened, scheduler):
    flow = flow_for(cart, opened, scheduler, countdown=3)
    flow.submit(CUSTOMER)
    assert flow.submit(CUSTOMER).outcome is CheckoutOutcome.BUSY
    assert len(scheduler.jobs) == 1


def test_failed_handoff_keeps_cart(cart):
    def broken(uri):
        raise OSError("no browser")

    diagnostics = RecordingDiagnostics()
    flow = CheckoutFlow(cart, StaticPricingConfig(50, 200), broken,
                        phone_number="1", diagnostics=diagnostics)
    result = flow.submit(CUSTOMER)

    assert result.outcome is CheckoutOutcome.HANDOFF_FAILED
    assert cart.get("p1").quantity == 2
    assert flow.state is CheckoutState.IDLE
    assert diagnostics.names() == ["checkout.handoff_failed"]


def test_countdown_requires_scheduler(cart, opened):
    with pytest.raises(ValueError):
        flow_for(cart, opened, countdown=5)


class BrokenPricing:
    def pricing_config(self):
        raise RuntimeError("settings read failed")


def test_pricing_failure_when_countdown_fires_returns_to_idle(cart, opened, scheduler):
    diagnostics = RecordingDiagnostics()
    flow = CheckoutFlow(cart, BrokenPricing(), opened.append, phone_number="1",
                        countdown_seconds=3, scheduler=scheduler, diagnostics=diagnostics)
    flow.submit(CUSTOMER)

    scheduler.run_pending()

    assert flow.state is CheckoutState.IDLE
    assert flow.last_result.outcome is CheckoutOutcome.HANDOFF_FAILED
    assert diagnostics.names() == ["checkout.handoff_failed"]
    assert opened == []
    assert cart.get("p1").quantity == 2
    assert flow.cancel() is False
    assert flow.submit(CUSTOMER).outcome is CheckoutOutcome.CONFIRMING


def test_pricing_failure_without_countdown(cart, opened):
    flow = CheckoutFlow(cart, BrokenPricing(), opened.append, phone_number="1")
    assert flow.submit(CUSTOMER).outcome is CheckoutOutcome.HANDOFF_FAILED
    assert flow.state is CheckoutState.IDLE
    assert not cart.is_empty()


@pytest.fixture
def background_scheduler():
    sched = BackgroundScheduler()
    sched.start()
    yield sched
    sched.shutdown(wait=False)


def test_apscheduler_countdown_fires(cart, background_scheduler):
    fired = threading.Event()
    flow = CheckoutFlow(cart, StaticPricingConfig(50, 200), lambda uri: fired.set(),
                        phone_number="1", countdown_seconds=0.2, scheduler=background_scheduler)
    assert flow.submit(CUSTOMER).outcome is CheckoutOutcome.CONFIRMING

    assert fired.wait(5)
    deadline = time.monotonic() + 5
    while flow.state is not CheckoutState.CLEARED and time.monotonic() < deadline:
        time.sleep(0.01)
    assert flow.state is CheckoutState.CLEARED
    assert cart.is_empty()
    assert flow.cancel() is False


def test_apscheduler_cancel_removes_the_job(cart, background_scheduler):
    fired = threading.Event()
    flow = CheckoutFlow(cart, StaticPricingConfig(50, 200), lambda uri: fired.set(),
                        phone_number="1", countdown_seconds=0.3, scheduler=background_scheduler)
    flow.submit(CUSTOMER)

    assert flow.cancel() is True
    assert background_scheduler.get_jobs() == []
    assert not fired.wait(0.6)
    assert cart.get("p1").quantity == 2
    assert flow.state is CheckoutState.IDLE
