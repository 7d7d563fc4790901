# Overview: Service-layer operations for the inventory ledger; encapsulates business logic and database work.

# backend/warehouse/services/inventory_service.py

from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy import update

from ..config import DEFAULT_REORDER_CLASS, REORDER_THRESHOLDS
from ..extensions import db
from ..models import Inventory, Product, PurchaseOrder, PurchaseOrderItem
from warehouse.time_utils import utcnow
from .concurrency import lock_for_update
"""
Inventory Ledger Invariants (authoritative)

Inventory model:
- One Inventory row per Product, created lazily on the first receipt.
- quantity_on_hand is a stored integer and is never negative.

Receipts:
- Existing row: quantity_on_hand += quantity, last_restocked = now.
- Missing row: created with quantity_on_hand = quantity and reorder
  thresholds looked up once from the category's reorder class. Later
  category changes never recompute them.

Decrements:
- Single conditional UPDATE ... WHERE quantity_on_hand >= quantity.
  Zero rows updated means insufficient stock; nothing is changed.
  The check and the write are one statement, so concurrent orders cannot
  jointly oversell.

Transactions:
- Functions here flush but never commit. Callers (receiving, sales
  fulfillment) wrap them in one atomic transaction.
"""


class InventoryError(Exception):
    """Raised for invalid inventory operations."""
    pass


class InsufficientStockError(InventoryError):
    """Raised when a decrement would take on-hand quantity below zero."""

    def __init__(self, product_id: int, requested: int, on_hand: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, on hand {on_hand}"
        )
        self.product_id = product_id
        self.requested = requested
        self.on_hand = on_hand


def _require_positive_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InventoryError("quantity must be a positive integer")


def _reload(product_id: int) -> Inventory | None:
    return (
        db.session.query(Inventory)
        .filter_by(product_id=product_id)
        .populate_existing()
        .first()
    )


def reorder_thresholds(reorder_class: str | None) -> dict:
    """
    Reorder level/quantity for a category reorder class.

    Unknown or missing classes fall back to the STANDARD thresholds.
    """
    table = current_app.config.get("REORDER_THRESHOLDS", REORDER_THRESHOLDS)
    key = (reorder_class or DEFAULT_REORDER_CLASS).strip().upper()
    return dict(table.get(key) or table[DEFAULT_REORDER_CLASS])


def get_inventory(product_id: int) -> Inventory | None:
    return db.session.query(Inventory).filter_by(product_id=product_id).first()


def get_quantity_on_hand(product_id: int) -> int:
    inv = get_inventory(product_id)
    return inv.quantity_on_hand if inv else 0


def apply_receipt(
    product_id: int,
    quantity: int,
    reorder_class: str | None = None,
    *,
    received_at: datetime | None = None,
) -> Inventory:
    """
    Credit received units to a product's inventory.

    Creates the inventory row on first receipt, deriving reorder thresholds
    from reorder_class. Does not commit.
    """
    _require_positive_quantity(quantity)
    now = received_at or utcnow()

    inv = lock_for_update(db.session.query(Inventory).filter_by(product_id=product_id)).first()
    if inv is None:
        thresholds = reorder_thresholds(reorder_class)
        inv = Inventory(
            product_id=product_id,
            quantity_on_hand=quantity,
            reorder_level=thresholds["reorder_level"],
            reorder_quantity=thresholds["reorder_quantity"],
            last_restocked=now,
        )
        db.session.add(inv)
        db.session.flush()
        return inv

    db.session.execute(
        update(Inventory)
        .where(Inventory.product_id == product_id)
        .values(
            quantity_on_hand=Inventory.quantity_on_hand + quantity,
            last_restocked=now,
        )
        .execution_options(synchronize_session=False)
    )
    db.session.flush()
    return _reload(product_id)


def apply_decrement(product_id: int, quantity: int) -> Inventory:
    """
    Remove units from stock, failing if fewer than quantity are on hand.

    Raises:
        InsufficientStockError: no inventory row, or on-hand < quantity
    """
    _require_positive_quantity(quantity)

    result = db.session.execute(
        update(Inventory)
        .where(
            Inventory.product_id == product_id,
            Inventory.quantity_on_hand >= quantity,
        )
        .values(quantity_on_hand=Inventory.quantity_on_hand - quantity)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        raise InsufficientStockError(product_id, quantity, get_quantity_on_hand(product_id))

    db.session.flush()
    return _reload(product_id)


def list_inventory(
    *,
    product_id: int | None = None,
    sku: str | None = None,
    low_stock_only: bool = False,
    limit: int = 100,
) -> list[Inventory]:
    """
    List inventory rows ordered by quantity on hand (lowest first).

    low_stock_only keeps rows at or below their reorder level.
    """
    query = db.session.query(Inventory).join(Product, Inventory.product_id == Product.id)

    if product_id:
        query = query.filter(Inventory.product_id == product_id)
    if sku:
        query = query.filter(Product.sku.ilike(f"%{sku.strip()}%"))
    if low_stock_only:
        query = query.filter(Inventory.quantity_on_hand <= Inventory.reorder_level)

    return (
        query.order_by(Inventory.quantity_on_hand.asc(), Inventory.id.asc())
        .limit(limit)
        .all()
    )


def get_recent_purchase_cost_cents(product_id: int) -> int | None:
    """
    Unit cost from the most recently received purchase order line.

    This is the "most recent purchase cost" heuristic used for valuation;
    there is no FIFO/LIFO layering.
    """
    item = (
        db.session.query(PurchaseOrderItem)
        .join(PurchaseOrder, PurchaseOrderItem.purchase_order_id == PurchaseOrder.id)
        .filter(
            PurchaseOrderItem.product_id == product_id,
            PurchaseOrder.status == "received",
        )
        .order_by(PurchaseOrder.received_date.desc(), PurchaseOrderItem.id.desc())
        .first()
    )
    return item.unit_cost_cents if item else None


def get_inventory_value() -> dict:
    """
    Value on-hand stock at the most recent purchase cost per product.

    Products never received through a purchase order fall back to
    Product.cost_cents.
    """
    rows = (
        db.session.query(Inventory)
        .filter(Inventory.quantity_on_hand > 0)
        .order_by(Inventory.product_id.asc())
        .all()
    )

    items = []
    total_value = 0
    total_units = 0
    for inv in rows:
        unit_cost = get_recent_purchase_cost_cents(inv.product_id)
        cost_source = "purchase_order"
        if unit_cost is None:
            unit_cost = inv.product.cost_cents
            cost_source = "product"

        value = unit_cost * inv.quantity_on_hand
        total_value += value
        total_units += inv.quantity_on_hand
        items.append({
            "product_id": inv.product_id,
            "sku": inv.product.sku,
            "name": inv.product.name,
            "quantity_on_hand": inv.quantity_on_hand,
            "unit_cost_cents": unit_cost,
            "cost_source": cost_source,
            "value_cents": value,
        })

    return {
        "items": items,
        "total_units": total_units,
        "total_value_cents": total_value,
    }
