# Overview: Pricing math: margin, markup, floor price and product change classification.

"""
Pricing / Margin Engine

All functions are pure and unit-agnostic (callers pass cents).

- margin  = (retail - cost) / retail * 100   (retail == 0 -> 0.0)
- markup  = (retail - cost) / cost * 100     (cost == 0 -> 0.0)
- floor   = cost * (1 + markup_bps / 10000), half-up to the cent

Change classification precedence (exactly one type per product update):
price_increase > price_decrease > cost_change > description_update > updated
"""

from __future__ import annotations

from dataclasses import dataclass


CHANGE_CREATED = "created"
CHANGE_PRICE_INCREASE = "price_increase"
CHANGE_PRICE_DECREASE = "price_decrease"
CHANGE_COST = "cost_change"
CHANGE_DESCRIPTION = "description_update"
CHANGE_UPDATED = "updated"

CHANGE_TYPES = {
    CHANGE_CREATED,
    CHANGE_PRICE_INCREASE,
    CHANGE_PRICE_DECREASE,
    CHANGE_COST,
    CHANGE_DESCRIPTION,
    CHANGE_UPDATED,
}

DEFAULT_FLOOR_MARKUP_BPS = 1500


@dataclass(frozen=True)
class PriceSnapshot:
    """The product fields that drive change classification."""
    cost: int
    retail: int
    description: str | None = None


def compute_margin(cost, retail) -> float:
    if retail == 0:
        return 0.0
    return (retail - cost) / retail * 100


def compute_markup(cost, retail) -> float:
    if cost == 0:
        return 0.0
    return (retail - cost) / cost * 100


def compute_floor_price_cents(cost_cents: int, markup_bps: int = DEFAULT_FLOOR_MARKUP_BPS) -> int:
    """Minimum sellable price: cost plus markup_bps, rounded half-up to the cent."""
    return (cost_cents * (10_000 + markup_bps) + 5_000) // 10_000


def _normalize_description(value: str | None) -> str | None:
    # "" and None both mean "no description"
    return value or None


def classify_change(old: PriceSnapshot, new: PriceSnapshot) -> str:
    if new.retail > old.retail:
        return CHANGE_PRICE_INCREASE
    if new.retail < old.retail:
        return CHANGE_PRICE_DECREASE
    if new.cost != old.cost:
        return CHANGE_COST
    if _normalize_description(new.description) != _normalize_description(old.description):
        return CHANGE_DESCRIPTION
    return CHANGE_UPDATED
