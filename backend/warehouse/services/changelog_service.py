# Overview: Append-only product change log; written in the same transaction as the product change.

from __future__ import annotations

from ..extensions import db
from ..models import Product, ProductChangeLog
from .pricing_service import (
    CHANGE_CREATED,
    PriceSnapshot,
    classify_change,
    compute_margin,
)
"""
Change log invariants:

- Append-only: rows are inserted, never updated or deleted by business flows.
- Exactly one row per product creation and one per product update call.
- Never consulted by business rules; display and reporting only.
- Functions flush but never commit; the caller owns the transaction.
"""


def snapshot(product: Product) -> PriceSnapshot:
    return PriceSnapshot(
        cost=product.cost_cents,
        retail=product.retail_price_cents,
        description=product.description,
    )


def record_creation(product: Product) -> ProductChangeLog:
    entry = ProductChangeLog(
        product_id=product.id,
        change_type=CHANGE_CREATED,
        new_cost_cents=product.cost_cents,
        new_retail_cents=product.retail_price_cents,
        new_margin=compute_margin(product.cost_cents, product.retail_price_cents),
        new_description=product.description,
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def record_update(product_id: int, old: PriceSnapshot, new: PriceSnapshot) -> ProductChangeLog:
    entry = ProductChangeLog(
        product_id=product_id,
        change_type=classify_change(old, new),
        old_cost_cents=old.cost,
        new_cost_cents=new.cost,
        old_retail_cents=old.retail,
        new_retail_cents=new.retail,
        old_margin=compute_margin(old.cost, old.retail),
        new_margin=compute_margin(new.cost, new.retail),
        old_description=old.description,
        new_description=new.description,
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def list_change_log(product_id: int, *, limit: int | None = None) -> list[ProductChangeLog]:
    """Change log for a product, newest first."""
    query = (
        db.session.query(ProductChangeLog)
        .filter(ProductChangeLog.product_id == product_id)
        .order_by(ProductChangeLog.changed_at.desc(), ProductChangeLog.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()
