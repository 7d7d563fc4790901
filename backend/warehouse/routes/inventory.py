# Overview: Flask API routes for inventory reads and valuation; parses input and returns JSON responses.

# backend/warehouse/routes/inventory.py
"""
Inventory is written only by purchase order receiving and sales
fulfillment. These routes are read-only.
"""
from flask import Blueprint, jsonify, request

from ..services import inventory_service
from ..services.products_service import ProductNotFoundError, get_product

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


def _inventory_with_product(inv) -> dict:
    data = inv.to_dict()
    data["product"] = inv.product.to_dict() if inv.product else None
    return data


@inventory_bp.get("")
def list_inventory_route():
    """
    Query params:
    - product_id: int (optional)
    - sku: SKU substring (optional)
    - low_stock_only: true|false (quantity_on_hand <= reorder_level)
    - limit: int (default 100, max 500)
    """
    limit = request.args.get("limit", 100, type=int)
    limit = max(1, min(limit, 500))
    low_stock_only = request.args.get("low_stock_only", "false").lower() == "true"

    rows = inventory_service.list_inventory(
        product_id=request.args.get("product_id", type=int),
        sku=request.args.get("sku"),
        low_stock_only=low_stock_only,
        limit=limit,
    )
    return jsonify({
        "items": [_inventory_with_product(inv) for inv in rows],
        "count": len(rows),
        "limit": limit,
    })


@inventory_bp.get("/value")
def inventory_value_route():
    """On-hand stock valued at the most recent received purchase cost."""
    return jsonify(inventory_service.get_inventory_value())


@inventory_bp.get("/<int:product_id>")
def get_inventory_route(product_id: int):
    try:
        product = get_product(product_id)
    except ProductNotFoundError:
        return jsonify({"error": "Product not found"}), 404

    inv = inventory_service.get_inventory(product_id)
    if inv is None:
        # Never received: report zero stock rather than 404
        return jsonify({
            "product_id": product_id,
            "quantity_on_hand": 0,
            "reorder_level": None,
            "reorder_quantity": None,
            "last_restocked": None,
            "is_low_stock": None,
            "product": product.to_dict(),
        })
    return jsonify(_inventory_with_product(inv))
