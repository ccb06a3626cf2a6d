from decimal import Decimal

from rakhimart.schemas.cart import LineItem, PricingConfig
from rakhimart.services.pricing import compute_totals

CONFIG = PricingConfig(delivery_fee=Decimal("50"), free_delivery_threshold=Decimal("200"))


def item(pid, price, qty):
    return LineItem(product_id=pid, name=pid, unit_price=Decimal(str(price)), quantity=qty,
                    thumbnail="/x.jpg", stock_ceiling=99)


def test_at_threshold_delivery_is_free():
    totals = compute_totals([item("p1", 100, 2)], CONFIG)
    assert totals.subtotal == 200
    assert totals.delivery_charge == 0
    assert totals.total == 200
    assert totals.free_delivery
    assert totals.amount_to_free_delivery == 0


def test_below_threshold_charges_delivery():
    totals = compute_totals([item("p1", 99, 1)], CONFIG)
    assert (totals.subtotal, totals.delivery_charge, totals.total) == (99, 50, 149)
    assert totals.amount_to_free_delivery == 101


def test_same_input_same_output():
    items = [item("p1", "33.33", 3), item("p2", "0.5", 1)]
    assert compute_totals(items, CONFIG) == compute_totals(items, CONFIG)


def test_decimal_accumulation_has_no_float_drift():
    # 0.1 * 3 in floats is 0.30000000000000004; ten of them must still total exactly 3.
    items = [item(f"p{i}", "0.1", 3) for i in range(10)]
    totals = compute_totals(items, PricingConfig(delivery_fee=Decimal("0"), free_delivery_threshold=Decimal("0")))
    assert totals.subtotal == Decimal("3")


def test_rounds_half_up_to_whole_units():
    totals = compute_totals([item("p1", "149.5", 1)], CONFIG)
    assert totals.subtotal == Decimal("150")
    assert totals.total == Decimal("200")


def test_rounded_subtotal_decides_the_threshold():
    totals = compute_totals([item("p1", "199.5", 1)], CONFIG)
    assert totals.subtotal == 200
    assert totals.delivery_charge == 0


def test_empty_cart_charges_nothing():
    totals = compute_totals([], CONFIG)
    assert (totals.subtotal, totals.delivery_charge, totals.total, totals.item_count) == (0, 0, 0, 0)


def test_item_count_sums_quantities():
    assert compute_totals([item("a", 10, 2), item("b", 5, 3)], CONFIG).item_count == 5
