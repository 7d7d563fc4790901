# Overview: Flask API routes for sales orders; parses input and returns JSON responses.

"""
Sales Order Routes

POST creates and fulfills in one step (stock decremented, customer
balance raised). Rejections:
- 400 insufficient inventory, price below floor, credit limit exceeded,
  unknown product or customer, bad input. Body carries "details".
"""

from flask import Blueprint, current_app, jsonify, request

from ..services import sales_service
from ..services.customer_service import CustomerNotFoundError
from ..services.products_service import ProductNotFoundError
from ..services.sales_service import SalesOrderError, SalesOrderNotFoundError


sales_orders_bp = Blueprint("sales_orders", __name__, url_prefix="/api/sales-orders")


@sales_orders_bp.get("")
def list_sales_orders_route():
    """
    List sales orders, newest first.

    Query parameters:
    - customer_id: filter by customer
    - limit: Maximum results (default: 100)
    - offset: Pagination offset (default: 0)
    """
    limit = request.args.get("limit", 100, type=int)
    offset = request.args.get("offset", 0, type=int)
    limit = max(1, min(limit, 500))
    offset = max(0, offset)

    orders, total = sales_service.list_sales_orders(
        customer_id=request.args.get("customer_id", type=int),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [o.to_dict() for o in orders],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@sales_orders_bp.post("")
def create_sales_order_route():
    """
    Create and fulfill a sales order.

    Request body:
    {
        "customer_id": 1,   // required
        "notes": "...",     // optional
        "items": [          // required
            {"product_id": 1, "quantity": 10, "unit_price_cents": 199}
        ]
    }

    Returns:
        SalesOrder with customer and items (201)
    """
    data = request.get_json(silent=True) or {}

    if not data.get("customer_id"):
        return jsonify({"error": "customer_id is required"}), 400

    try:
        order = sales_service.create_sales_order(
            customer_id=data["customer_id"],
            items=data.get("items"),
            notes=data.get("notes"),
        )
    except (CustomerNotFoundError, ProductNotFoundError) as e:
        return jsonify({"error": str(e)}), 400
    except SalesOrderError as e:
        body = {"error": str(e)}
        if e.details:
            body["details"] = e.details
        return jsonify(body), 400
    except Exception:
        current_app.logger.exception("Failed to create sales order")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Sales order %s fulfilled for customer %s: %s cents",
        order.so_number,
        order.customer_id,
        order.total_cents,
    )
    return jsonify(order.to_dict(expand=True)), 201


@sales_orders_bp.get("/<int:order_id>")
def get_sales_order_route(order_id: int):
    try:
        order = sales_service.get_sales_order(order_id)
    except SalesOrderNotFoundError:
        return jsonify({"error": "Sales order not found"}), 404
    return jsonify(order.to_dict(expand=True))
