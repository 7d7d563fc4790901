# Overview: Flask API routes for purchase orders and receiving; parses input and returns JSON responses.

"""
Purchase Order Routes

Lifecycle: pending -> received | cancelled.
Receiving credits every line to inventory in one transaction; a second
receive of the same order returns 400 and changes nothing.
"""

from flask import Blueprint, current_app, jsonify, request

from ..services import purchase_order_service
from ..services.purchase_order_service import (
    PurchaseOrderAlreadyReceivedError,
    PurchaseOrderNotFoundError,
    PurchaseOrderStateError,
    PurchaseOrderValidationError,
)
from ..validation import ConflictError, ValidationError, coerce_int


purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")


@purchase_orders_bp.get("")
def list_purchase_orders_route():
    """
    List purchase orders.

    Query parameters:
    - status: pending | received | cancelled
    - vendor_id: filter by vendor
    - limit: Maximum results (default: 100)
    - offset: Pagination offset (default: 0)

    Returns:
        {items: PurchaseOrder[], count: int, limit: int, offset: int}
    """
    status = request.args.get("status")
    if status and status not in purchase_order_service.PO_STATUSES:
        return jsonify({"error": "Invalid status filter"}), 400

    limit = request.args.get("limit", 100, type=int)
    offset = request.args.get("offset", 0, type=int)

    # Clamp limit
    if limit < 1:
        limit = 1
    if limit > 500:
        limit = 500
    if offset < 0:
        offset = 0

    orders, total = purchase_order_service.list_purchase_orders(
        status=status,
        vendor_id=request.args.get("vendor_id", type=int),
        limit=limit,
        offset=offset,
    )

    return jsonify({
        "items": [po.to_dict() for po in orders],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@purchase_orders_bp.post("")
def create_purchase_order_route():
    """
    Create a pending purchase order.

    Request body:
    {
        "vendor_id": 1,                 // required
        "po_number": "PO-0042",         // optional, allocated when omitted
        "order_date": "2024-01-15",     // optional, default now
        "expected_date": "2024-01-22",  // optional
        "notes": "...",                 // optional
        "items": [                      // required, one line per product
            {"product_id": 1, "quantity": 24, "unit_cost_cents": 150}
        ]
    }

    Returns:
        Created PurchaseOrder with vendor and items
    """
    data = request.get_json(silent=True) or {}

    try:
        po = purchase_order_service.create_purchase_order(
            vendor_id=data.get("vendor_id"),
            items=data.get("items"),
            po_number=data.get("po_number"),
            order_date=data.get("order_date"),
            expected_date=data.get("expected_date"),
            notes=data.get("notes"),
        )
    except PurchaseOrderValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create purchase order")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info("Purchase order %s created", po.po_number)
    return jsonify(po.to_dict(expand=True)), 201


@purchase_orders_bp.get("/<int:po_id>")
def get_purchase_order_route(po_id: int):
    try:
        po = purchase_order_service.get_purchase_order(po_id)
    except PurchaseOrderNotFoundError:
        return jsonify({"error": "Purchase Order not found"}), 404
    return jsonify(po.to_dict(expand=True))


@purchase_orders_bp.put("/<int:po_id>")
def update_purchase_order_route(po_id: int):
    """
    Update a pending purchase order. "items", when present, replaces every line.
    """
    data = request.get_json(silent=True) or {}

    try:
        po = purchase_order_service.update_purchase_order(
            po_id,
            vendor_id=data.get("vendor_id"),
            po_number=data.get("po_number"),
            order_date=data.get("order_date"),
            expected_date=data.get("expected_date"),
            notes=data.get("notes"),
            items=data.get("items"),
        )
    except PurchaseOrderNotFoundError:
        return jsonify({"error": "Purchase Order not found"}), 404
    except (PurchaseOrderStateError, PurchaseOrderValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(po.to_dict(expand=True))


@purchase_orders_bp.post("/<int:po_id>/cancel")
def cancel_purchase_order_route(po_id: int):
    try:
        po = purchase_order_service.cancel_purchase_order(po_id)
    except PurchaseOrderNotFoundError:
        return jsonify({"error": "Purchase Order not found"}), 404
    except PurchaseOrderStateError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(po.to_dict(expand=True))


@purchase_orders_bp.delete("/<int:po_id>")
def delete_purchase_order_route(po_id: int):
    try:
        purchase_order_service.delete_purchase_order(po_id)
    except PurchaseOrderNotFoundError:
        return jsonify({"error": "Purchase Order not found"}), 404
    except PurchaseOrderStateError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"ok": True})


def _receive(po_id: int):
    try:
        summary = purchase_order_service.receive_purchase_order(po_id)
    except PurchaseOrderNotFoundError:
        return jsonify({"error": "Purchase Order not found"}), 404
    except PurchaseOrderAlreadyReceivedError as e:
        return jsonify({"error": str(e)}), 400
    except PurchaseOrderStateError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to receive purchase order %s", po_id)
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Purchase order %s received: %s lines, %s units",
        summary.purchase_order.po_number,
        summary.items_received,
        summary.total_quantity,
    )
    return jsonify(summary.to_dict()), 200


@purchase_orders_bp.post("/<int:po_id>/receive")
def receive_purchase_order_route(po_id: int):
    """
    Receive a purchase order into inventory.

    Returns:
        {success, message, purchase_order, items_received, total_quantity, inventory}
    """
    return _receive(po_id)


@purchase_orders_bp.post("/receive")
def receive_purchase_order_by_body_route():
    """
    Receive a purchase order identified in the body.

    Request body:
    {
        "po_id": 1  // required
    }
    """
    data = request.get_json(silent=True) or {}

    if data.get("po_id") is None:
        return jsonify({"error": "Purchase Order ID is required"}), 400
    try:
        po_id = coerce_int("po_id", data["po_id"])
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return _receive(po_id)
