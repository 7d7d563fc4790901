# Overview: Service-layer operations for sales orders; fulfillment, pricing checks and credit policy.

"""
Sales Fulfillment Service

A sales order is created already fulfilled. One call, one transaction:

1. Validate every line: product exists, enough stock on hand (lines for
   the same product are summed), unit price not below the floor price.
2. Apply the credit policy: with ENFORCE_CREDIT_LIMIT on, reject when
   current_balance + total > credit_limit (NULL limit = unlimited).
3. Allocate the next SO-%04d number, insert the order and its items,
   decrement inventory per item, raise the customer balance by the total.

Any failure rejects the whole order: no partial fulfillment, no stock
moved, balance untouched.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer, Inventory, Product, SalesOrder, SalesOrderItem
from ..validation import ValidationError, validate_order_line
from . import inventory_service
from .concurrency import atomic_write, lock_for_update, run_with_retry
from .customer_service import CustomerNotFoundError
from .document_service import next_document_number
from .inventory_service import InsufficientStockError
from .products_service import ProductNotFoundError
from warehouse.time_utils import utcnow


STATUS_FULFILLED = "fulfilled"


class SalesOrderError(Exception):
    """Raised for sales order operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class SalesOrderNotFoundError(SalesOrderError):
    pass


class InsufficientInventoryError(SalesOrderError):
    pass


class BelowFloorPriceError(SalesOrderError):
    pass


class CreditLimitExceededError(SalesOrderError):
    pass


def _validate_lines(items) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise SalesOrderError("At least one item is required")
    try:
        return [validate_order_line(raw, price_key="unit_price_cents") for raw in items]
    except ValidationError as e:
        raise SalesOrderError(str(e))


def _load_products(lines: list[dict]) -> dict[int, Product]:
    products: dict[int, Product] = {}
    for line in lines:
        product_id = line["product_id"]
        if product_id in products:
            continue
        product = db.session.query(Product).filter_by(id=product_id).first()
        if not product:
            raise ProductNotFoundError(product_id)
        products[product_id] = product
    return products


def _validate_on_hand(lines: list[dict], products: dict[int, Product]) -> None:
    """Reject the order if any product lacks the summed quantity requested."""
    product_totals: dict[int, int] = {}
    for line in lines:
        product_totals[line["product_id"]] = product_totals.get(line["product_id"], 0) + line["quantity"]

    insufficient = []
    for product_id, qty in product_totals.items():
        inv = lock_for_update(db.session.query(Inventory).filter_by(product_id=product_id)).first()
        on_hand = inv.quantity_on_hand if inv else 0
        if on_hand < qty:
            insufficient.append({
                "product_id": product_id,
                "name": products[product_id].name,
                "requested_quantity": qty,
                "on_hand": on_hand,
            })

    if insufficient:
        first = insufficient[0]
        raise InsufficientInventoryError(
            f"Insufficient inventory for {first['name']}. Available: {first['on_hand']}",
            details={"items": insufficient},
        )


def _validate_floor_prices(lines: list[dict], products: dict[int, Product]) -> None:
    below = []
    for line in lines:
        product = products[line["product_id"]]
        floor = product.floor_price_cents
        if floor is not None and line["unit_price_cents"] < floor:
            below.append({
                "product_id": product.id,
                "name": product.name,
                "unit_price_cents": line["unit_price_cents"],
                "floor_price_cents": floor,
            })

    if below:
        first = below[0]
        raise BelowFloorPriceError(
            f"Unit price for {first['name']} is below the floor price of {first['floor_price_cents']} cents",
            details={"items": below},
        )


def _check_credit(customer: Customer, total_cents: int) -> None:
    limit = customer.credit_limit_cents
    if limit is None:
        return
    new_balance = customer.current_balance_cents + total_cents
    if new_balance > limit:
        raise CreditLimitExceededError(
            f"Order total exceeds available credit for {customer.name}",
            details={
                "credit_limit_cents": limit,
                "current_balance_cents": customer.current_balance_cents,
                "order_total_cents": total_cents,
                "available_credit_cents": limit - customer.current_balance_cents,
            },
        )


def create_sales_order(
    *,
    customer_id: int,
    items: list[dict],
    notes: str | None = None,
    enforce_credit_limit: bool | None = None,
) -> SalesOrder:
    """
    Create and fulfill a sales order atomically.

    items: [{"product_id", "quantity", "unit_price_cents"}]
    enforce_credit_limit: overrides the ENFORCE_CREDIT_LIMIT setting

    Raises:
        CustomerNotFoundError, ProductNotFoundError
        InsufficientInventoryError, BelowFloorPriceError,
        CreditLimitExceededError, SalesOrderError (bad input)
    """
    lines = _validate_lines(items)
    if enforce_credit_limit is None:
        enforce_credit_limit = current_app.config.get("ENFORCE_CREDIT_LIMIT", True)

    def _op() -> int:
        with atomic_write():
            customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
            if not customer:
                raise CustomerNotFoundError(customer_id)
            if customer.status != "active":
                raise SalesOrderError(f"Customer {customer.name} is not active")

            products = _load_products(lines)
            _validate_on_hand(lines, products)
            _validate_floor_prices(lines, products)

            order_items = [
                SalesOrderItem(
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                    unit_price_cents=line["unit_price_cents"],
                    line_total_cents=line["quantity"] * line["unit_price_cents"],
                )
                for line in lines
            ]
            subtotal = sum(item.line_total_cents for item in order_items)
            total = subtotal

            if enforce_credit_limit:
                _check_credit(customer, total)

            so_number = next_document_number(
                document_type="SALES_ORDER",
                prefix="SO",
                number_column=SalesOrder.so_number,
            )

            order = SalesOrder(
                so_number=so_number,
                customer_id=customer.id,
                order_date=utcnow(),
                status=STATUS_FULFILLED,
                subtotal_cents=subtotal,
                total_cents=total,
                notes=notes,
            )
            order.items = order_items
            db.session.add(order)
            db.session.flush()

            for line in lines:
                try:
                    inventory_service.apply_decrement(line["product_id"], line["quantity"])
                except InsufficientStockError as e:
                    raise InsufficientInventoryError(
                        f"Insufficient inventory for {products[e.product_id].name}. Available: {e.on_hand}",
                        details={"items": [{
                            "product_id": e.product_id,
                            "requested_quantity": e.requested,
                            "on_hand": e.on_hand,
                        }]},
                    )

            customer.current_balance_cents = customer.current_balance_cents + total
            db.session.flush()
            return order.id

    order_id = run_with_retry(_op, retry_on=(IntegrityError,))
    return get_sales_order(order_id)


def get_sales_order(order_id: int) -> SalesOrder:
    order = db.session.query(SalesOrder).filter_by(id=order_id).first()
    if not order:
        raise SalesOrderNotFoundError("Sales order not found")
    return order


def list_sales_orders(
    *,
    customer_id: int | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[SalesOrder], int]:
    query = db.session.query(SalesOrder)
    if customer_id:
        query = query.filter(SalesOrder.customer_id == customer_id)

    total = query.count()
    orders = (
        query.order_by(SalesOrder.order_date.desc(), SalesOrder.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return orders, total
