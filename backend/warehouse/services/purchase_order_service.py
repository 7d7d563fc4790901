# Overview: Service-layer operations for purchase orders and receiving; encapsulates business logic.

"""
Purchase Order Service

LIFECYCLE:
1. pending: created, header and items editable
2. received: inventory credited; order and items are immutable
3. cancelled: closed without receiving

RECEIVING (receive_purchase_order):
- Idempotent by status: a second receive fails with
  PurchaseOrderAlreadyReceivedError and credits nothing.
- All-or-nothing: the status flip and every inventory update happen in one
  transaction. Any failure part-way leaves the order pending and no stock
  credited.
- First-ever stock for a product creates its inventory row, taking reorder
  thresholds from the product category's reorder class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Product, PurchaseOrder, PurchaseOrderItem, Vendor
from ..validation import ConflictError, ValidationError, validate_order_line
from . import inventory_service
from .concurrency import atomic_write, lock_for_update, run_with_retry
from .document_service import next_document_number
from warehouse.time_utils import coerce_datetime, utcnow


STATUS_PENDING = "pending"
STATUS_RECEIVED = "received"
STATUS_CANCELLED = "cancelled"

PO_STATUSES = {STATUS_PENDING, STATUS_RECEIVED, STATUS_CANCELLED}


class PurchaseOrderNotFoundError(Exception):
    """Raised when a purchase order is not found."""
    pass


class PurchaseOrderValidationError(Exception):
    """Raised when purchase order data fails validation."""
    pass


class PurchaseOrderStateError(Exception):
    """Raised when an operation is invalid for the current order status."""
    pass


class PurchaseOrderAlreadyReceivedError(PurchaseOrderStateError):
    """Raised when receiving an order that has already been received."""
    pass


@dataclass
class ReceiptSummary:
    purchase_order: PurchaseOrder
    received_at: datetime
    items_received: int = 0
    total_quantity: int = 0
    inventory: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": "Purchase Order received and inventory updated",
            "purchase_order": self.purchase_order.to_dict(expand=True),
            "items_received": self.items_received,
            "total_quantity": self.total_quantity,
            "inventory": [inv.to_dict() for inv in self.inventory],
        }


def _parse_date(value, label: str, *, default_now: bool = False) -> datetime | None:
    try:
        return coerce_datetime(value, default_now=default_now)
    except ValueError:
        raise PurchaseOrderValidationError(f"Invalid {label} format")


def _validate_vendor(vendor_id) -> None:
    if not vendor_id:
        raise PurchaseOrderValidationError("vendor_id is required")
    if not db.session.query(Vendor.id).filter_by(id=vendor_id).first():
        raise PurchaseOrderValidationError(f"Vendor {vendor_id} not found")


def _validate_items(items) -> list[dict]:
    """Normalize item payloads; every product must exist and appear once."""
    if not isinstance(items, list) or not items:
        raise PurchaseOrderValidationError("At least one item is required")

    cleaned = []
    seen = set()
    for raw in items:
        try:
            line = validate_order_line(raw, price_key="unit_cost_cents")
        except ValidationError as e:
            raise PurchaseOrderValidationError(str(e))

        product = db.session.query(Product).filter_by(id=line["product_id"]).first()
        if not product:
            raise PurchaseOrderValidationError(f"Product {line['product_id']} not found")
        if line["product_id"] in seen:
            raise PurchaseOrderValidationError(
                f"Product {product.sku} appears more than once. Combine the quantities into one line."
            )
        seen.add(line["product_id"])
        cleaned.append(line)
    return cleaned


def _ensure_unique_po_number(po_number: str, exclude_id: int | None = None) -> None:
    query = db.session.query(PurchaseOrder.id).filter(PurchaseOrder.po_number == po_number)
    if exclude_id is not None:
        query = query.filter(PurchaseOrder.id != exclude_id)
    if query.first():
        raise ConflictError(f"PO number '{po_number}' already exists")


def get_purchase_order(po_id: int) -> PurchaseOrder:
    po = db.session.query(PurchaseOrder).filter_by(id=po_id).first()
    if not po:
        raise PurchaseOrderNotFoundError(f"Purchase Order {po_id} not found")
    return po


def create_purchase_order(
    *,
    vendor_id: int,
    items: list[dict],
    po_number: str | None = None,
    order_date=None,
    expected_date=None,
    notes: str | None = None,
) -> PurchaseOrder:
    """
    Create a pending purchase order with its items.

    po_number is allocated as PO-0001, PO-0002, ... when not supplied.

    Raises:
        PurchaseOrderValidationError: bad vendor, items or dates
        ConflictError: supplied po_number already exists
    """
    _validate_vendor(vendor_id)
    lines = _validate_items(items)
    order_dt = _parse_date(order_date, "order_date", default_now=True)
    expected_dt = _parse_date(expected_date, "expected_date")
    if po_number is not None:
        po_number = po_number.strip()
        if not po_number:
            raise PurchaseOrderValidationError("po_number cannot be blank")

    def _op() -> int:
        with atomic_write():
            if po_number:
                _ensure_unique_po_number(po_number)
                number = po_number
            else:
                number = next_document_number(
                    document_type="PURCHASE_ORDER",
                    prefix="PO",
                    number_column=PurchaseOrder.po_number,
                )

            po = PurchaseOrder(
                po_number=number,
                vendor_id=vendor_id,
                order_date=order_dt,
                expected_date=expected_dt,
                status=STATUS_PENDING,
                notes=notes,
            )
            po.items = [PurchaseOrderItem(**line) for line in lines]
            db.session.add(po)
            db.session.flush()
            return po.id

    return get_purchase_order(run_with_retry(_op, retry_on=(IntegrityError,)))


def _lock_purchase_order(po_id: int) -> PurchaseOrder:
    """Load a purchase order for writing; call inside atomic_write()."""
    query = db.session.query(PurchaseOrder).filter_by(id=po_id).populate_existing()
    po = lock_for_update(query).first()
    if not po:
        raise PurchaseOrderNotFoundError(f"Purchase Order {po_id} not found")
    return po


def update_purchase_order(
    po_id: int,
    *,
    vendor_id: int | None = None,
    po_number: str | None = None,
    order_date=None,
    expected_date=None,
    notes: str | None = None,
    items: list[dict] | None = None,
) -> PurchaseOrder:
    """
    Update a pending purchase order; items, when given, replace all lines.

    The status check and the writes share one locked transaction, so an
    order received concurrently is never edited afterwards.

    Raises:
        PurchaseOrderNotFoundError: unknown order
        PurchaseOrderStateError: order is received or cancelled
    """
    def _op() -> None:
        with atomic_write():
            po = _lock_purchase_order(po_id)
            if po.status != STATUS_PENDING:
                raise PurchaseOrderStateError(
                    f"Cannot modify {po.status} purchase order. Only pending orders can be edited."
                )

            if vendor_id is not None:
                _validate_vendor(vendor_id)
                po.vendor_id = vendor_id
            if po_number is not None:
                number = po_number.strip()
                if not number:
                    raise PurchaseOrderValidationError("po_number cannot be blank")
                _ensure_unique_po_number(number, exclude_id=po_id)
                po.po_number = number
            if order_date is not None:
                po.order_date = _parse_date(order_date, "order_date")
            if expected_date is not None:
                po.expected_date = _parse_date(expected_date, "expected_date")
            if notes is not None:
                po.notes = notes
            if items is not None:
                lines = _validate_items(items)
                po.items = [PurchaseOrderItem(**line) for line in lines]
            db.session.flush()

    run_with_retry(_op, retry_on=(IntegrityError,))
    return get_purchase_order(po_id)


def cancel_purchase_order(po_id: int) -> PurchaseOrder:
    def _op() -> None:
        with atomic_write():
            po = _lock_purchase_order(po_id)
            if po.status == STATUS_RECEIVED:
                raise PurchaseOrderStateError("Cannot cancel a received purchase order")
            if po.status == STATUS_CANCELLED:
                raise PurchaseOrderStateError("Purchase order is already cancelled")
            po.status = STATUS_CANCELLED

    run_with_retry(_op)
    return get_purchase_order(po_id)


def delete_purchase_order(po_id: int) -> None:
    """Delete a purchase order and its items. Received orders are kept for history."""
    def _op() -> None:
        with atomic_write():
            po = _lock_purchase_order(po_id)
            if po.status == STATUS_RECEIVED:
                raise PurchaseOrderStateError("Cannot delete a received purchase order")
            db.session.delete(po)

    run_with_retry(_op)


def receive_purchase_order(po_id: int) -> ReceiptSummary:
    """
    Mark a purchase order received and credit every line to inventory.

    Raises:
        PurchaseOrderNotFoundError: unknown order
        PurchaseOrderAlreadyReceivedError: order was received before
        PurchaseOrderStateError: order is cancelled or has no items
    """
    def _op() -> ReceiptSummary:
        with atomic_write():
            po = _lock_purchase_order(po_id)
            if po.status == STATUS_RECEIVED:
                raise PurchaseOrderAlreadyReceivedError("Purchase Order already received")
            if po.status != STATUS_PENDING:
                raise PurchaseOrderStateError(f"Cannot receive {po.status} purchase order")
            if not po.items:
                raise PurchaseOrderStateError("Cannot receive a purchase order with no items")

            now = utcnow()
            po.status = STATUS_RECEIVED
            po.received_date = now

            summary = ReceiptSummary(purchase_order=po, received_at=now)
            for item in po.items:
                category = item.product.category
                inv = inventory_service.apply_receipt(
                    item.product_id,
                    item.quantity,
                    category.reorder_class if category else None,
                    received_at=now,
                )
                summary.items_received += 1
                summary.total_quantity += item.quantity
                summary.inventory.append(inv)

            db.session.flush()
        return summary

    return run_with_retry(_op, retry_on=(IntegrityError,))


def list_purchase_orders(
    *,
    status: str | None = None,
    vendor_id: int | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[PurchaseOrder], int]:
    """
    List purchase orders, newest order date first.

    Returns:
        Tuple of (list of purchase orders, total count)
    """
    query = db.session.query(PurchaseOrder)

    if status:
        query = query.filter(PurchaseOrder.status == status)
    if vendor_id:
        query = query.filter(PurchaseOrder.vendor_id == vendor_id)

    total = query.count()
    orders = (
        query.order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return orders, total
