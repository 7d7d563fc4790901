# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/warehouse/routes/products.py
"""
Product management routes.

Every create/update appends to the product change log (see
products_service). Money fields are integer cents.
"""
from flask import Blueprint, current_app, jsonify, request

from ..models import Product
from ..services import changelog_service, products_service
from ..services.products_service import ProductNotFoundError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    coerce_int,
    ValidationError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=set(products_service.PRODUCT_MUTABLE_FIELDS),
    required_on_create={"sku", "name", "category_id"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List products with optional filters and pagination.

    Query params:
    - category_id, brand_id: int (optional)
    - search: name or SKU substring (optional)
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - items per page (default 20, max 100)
    """
    return products_service.list_products(
        category_id=request.args.get("category_id", type=int),
        brand_id=request.args.get("brand_id", type=int),
        search=request.args.get("search"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@products_bp.post("")
def create_product_route():
    """
    Create a new product.

    floor_price_cents defaults to cost_cents plus FLOOR_PRICE_MARKUP_BPS
    when omitted.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = products_service.create_product(patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return created.to_dict(expand=True), 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = products_service.get_product(product_id)
    except ProductNotFoundError:
        return {"error": "Product not found"}, 404
    return product.to_dict(expand=True)


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """
    Update a product.

    Appends exactly one change-log entry classified from the cost, retail
    price and description before/after the update.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except ProductNotFoundError:
        return {"error": "Product not found"}, 404
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Internal server error"}, 500

    return updated.to_dict(expand=True), 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    """Delete a product together with its inventory row and change log."""
    try:
        products_service.delete_product(product_id=product_id)
    except ProductNotFoundError:
        return {"error": "Product not found"}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409

    return {"ok": True}, 200


@products_bp.get("/<int:product_id>/changelog")
def product_changelog_route(product_id: int):
    """
    Change log for a product, newest first.

    Query params:
    - limit: int (optional)
    """
    try:
        products_service.get_product(product_id)
    except ProductNotFoundError:
        return {"error": "Product not found"}, 404

    limit = request.args.get("limit", type=int)
    entries = changelog_service.list_change_log(product_id, limit=limit)
    return jsonify({
        "items": [e.to_dict() for e in entries],
        "count": len(entries),
    })


@products_bp.post("/floor-prices/recompute")
def recompute_floor_prices_route():
    """
    Reset floor prices from current cost and the configured markup.

    Request body (optional):
    {
        "product_ids": [1, 2, 3]  // omit to recompute every product
    }

    Returns:
        {updated, unchanged, above_retail: [product ids]}
    """
    data = request.get_json(silent=True) or {}
    raw_ids = data.get("product_ids")

    product_ids = None
    if raw_ids is not None:
        if not isinstance(raw_ids, list):
            return {"error": "product_ids must be a list"}, 400
        try:
            product_ids = [coerce_int("product_ids", v) for v in raw_ids]
        except ValidationError as e:
            return {"error": str(e)}, 400

    try:
        result = products_service.recompute_floor_prices(product_ids=product_ids)
    except Exception:
        current_app.logger.exception("Failed to recompute floor prices")
        return {"error": "Internal server error"}, 500

    current_app.logger.info(
        "Floor prices recomputed: %s updated, %s unchanged", result["updated"], result["unchanged"]
    )
    return result, 200
