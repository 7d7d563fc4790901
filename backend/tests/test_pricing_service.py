"""
Pricing math and change classification tests.

Pure functions; no database needed.
"""

import pytest

from warehouse.services.pricing_service import (
    CHANGE_COST,
    CHANGE_DESCRIPTION,
    CHANGE_PRICE_DECREASE,
    CHANGE_PRICE_INCREASE,
    CHANGE_UPDATED,
    PriceSnapshot,
    classify_change,
    compute_floor_price_cents,
    compute_margin,
    compute_markup,
)


def test_margin_and_markup():
    # cost $10, retail $15: margin 33.33%, markup 50%
    assert compute_margin(1000, 1500) == pytest.approx(33.3333, rel=1e-4)
    assert compute_markup(1000, 1500) == pytest.approx(50.0)


def test_margin_with_zero_retail_is_zero():
    assert compute_margin(1000, 0) == 0.0


def test_markup_with_zero_cost_is_zero():
    assert compute_markup(0, 1500) == 0.0


def test_negative_margin_when_selling_below_cost():
    assert compute_margin(200, 100) == pytest.approx(-100.0)


def test_floor_price_is_cost_plus_fifteen_percent():
    assert compute_floor_price_cents(1000) == 1150
    assert compute_floor_price_cents(0) == 0


def test_floor_price_rounds_half_up_to_the_cent():
    # 333 * 1.15 = 382.95 -> 383
    assert compute_floor_price_cents(333) == 383
    # 10 * 1.15 = 11.5 -> 12
    assert compute_floor_price_cents(10) == 12


def test_floor_price_custom_markup():
    assert compute_floor_price_cents(1000, 2500) == 1250


class TestClassifyChange:
    def test_retail_increase_wins_over_cost_and_description(self):
        old = PriceSnapshot(cost=100, retail=150, description="a")
        new = PriceSnapshot(cost=120, retail=175, description="b")
        assert classify_change(old, new) == CHANGE_PRICE_INCREASE

    def test_retail_decrease(self):
        old = PriceSnapshot(cost=100, retail=150)
        new = PriceSnapshot(cost=90, retail=140)
        assert classify_change(old, new) == CHANGE_PRICE_DECREASE

    def test_cost_change_with_same_retail(self):
        old = PriceSnapshot(cost=100, retail=150, description="a")
        new = PriceSnapshot(cost=110, retail=150, description="b")
        assert classify_change(old, new) == CHANGE_COST

    def test_description_only(self):
        old = PriceSnapshot(cost=100, retail=150, description="Cola")
        new = PriceSnapshot(cost=100, retail=150, description="Cola, 12oz can")
        assert classify_change(old, new) == CHANGE_DESCRIPTION

    def test_empty_and_missing_description_are_equal(self):
        old = PriceSnapshot(cost=100, retail=150, description=None)
        new = PriceSnapshot(cost=100, retail=150, description="")
        assert classify_change(old, new) == CHANGE_UPDATED

    def test_nothing_changed(self):
        snap = PriceSnapshot(cost=100, retail=150, description="Cola")
        assert classify_change(snap, snap) == CHANGE_UPDATED
