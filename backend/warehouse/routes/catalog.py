# Overview: Flask API routes for categories, subcategories and brands; parses input and returns JSON responses.

"""
Catalog Routes

- /api/categories       reorder_class fixes first-stock reorder thresholds
- /api/subcategories    belong to one category
- /api/brands

Deleting an entry still referenced by products returns 409.
"""

from flask import Blueprint, jsonify, request

from ..services import catalog_service
from ..services.catalog_service import CatalogNotFoundError, CatalogValidationError
from ..validation import ConflictError


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


# =============================================================================
# Categories
# =============================================================================

@catalog_bp.get("/categories")
def list_categories_route():
    categories = catalog_service.list_categories()
    return jsonify({
        "items": [c.to_dict() for c in categories],
        "count": len(categories),
    })


@catalog_bp.post("/categories")
def create_category_route():
    """
    Create a category.

    Request body:
    {
        "name": "Beverages",        // required, unique
        "reorder_class": "BEVERAGE", // optional, default STANDARD
        "description": "..."        // optional
    }
    """
    data = request.get_json(silent=True) or {}

    try:
        category = catalog_service.create_category(
            name=data.get("name"),
            reorder_class=data.get("reorder_class"),
            description=data.get("description"),
        )
    except CatalogValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(category.to_dict()), 201


@catalog_bp.get("/categories/<int:category_id>")
def get_category_route(category_id: int):
    try:
        category = catalog_service.get_category(category_id)
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    data = category.to_dict()
    data["subcategories"] = [s.to_dict() for s in category.subcategories]
    return jsonify(data)


@catalog_bp.put("/categories/<int:category_id>")
def update_category_route(category_id: int):
    data = request.get_json(silent=True) or {}

    try:
        category = catalog_service.update_category(
            category_id,
            name=data.get("name"),
            reorder_class=data.get("reorder_class"),
            description=data.get("description"),
        )
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CatalogValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(category.to_dict())


@catalog_bp.delete("/categories/<int:category_id>")
def delete_category_route(category_id: int):
    try:
        catalog_service.delete_category(category_id)
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"ok": True})


# =============================================================================
# Subcategories
# =============================================================================

@catalog_bp.get("/subcategories")
def list_subcategories_route():
    """
    Query parameters:
    - category_id: only subcategories of this category
    """
    subcategories = catalog_service.list_subcategories(request.args.get("category_id", type=int))
    return jsonify({
        "items": [s.to_dict() for s in subcategories],
        "count": len(subcategories),
    })


@catalog_bp.post("/subcategories")
def create_subcategory_route():
    data = request.get_json(silent=True) or {}

    category_id = data.get("category_id")
    if not category_id:
        return jsonify({"error": "category_id is required"}), 400

    try:
        sub = catalog_service.create_subcategory(
            category_id=category_id,
            name=data.get("name"),
            description=data.get("description"),
        )
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 400
    except CatalogValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(sub.to_dict()), 201


@catalog_bp.get("/subcategories/<int:subcategory_id>")
def get_subcategory_route(subcategory_id: int):
    try:
        sub = catalog_service.get_subcategory(subcategory_id)
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(sub.to_dict())


@catalog_bp.put("/subcategories/<int:subcategory_id>")
def update_subcategory_route(subcategory_id: int):
    data = request.get_json(silent=True) or {}

    try:
        sub = catalog_service.update_subcategory(
            subcategory_id,
            name=data.get("name"),
            description=data.get("description"),
        )
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CatalogValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(sub.to_dict())


@catalog_bp.delete("/subcategories/<int:subcategory_id>")
def delete_subcategory_route(subcategory_id: int):
    try:
        catalog_service.delete_subcategory(subcategory_id)
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"ok": True})


# =============================================================================
# Brands
# =============================================================================

@catalog_bp.get("/brands")
def list_brands_route():
    brands = catalog_service.list_brands()
    return jsonify({
        "items": [b.to_dict() for b in brands],
        "count": len(brands),
    })


@catalog_bp.post("/brands")
def create_brand_route():
    data = request.get_json(silent=True) or {}

    try:
        brand = catalog_service.create_brand(name=data.get("name"), description=data.get("description"))
    except CatalogValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(brand.to_dict()), 201


@catalog_bp.get("/brands/<int:brand_id>")
def get_brand_route(brand_id: int):
    try:
        brand = catalog_service.get_brand(brand_id)
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(brand.to_dict())


@catalog_bp.put("/brands/<int:brand_id>")
def update_brand_route(brand_id: int):
    data = request.get_json(silent=True) or {}

    try:
        brand = catalog_service.update_brand(
            brand_id,
            name=data.get("name"),
            description=data.get("description"),
        )
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CatalogValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify(brand.to_dict())


@catalog_bp.delete("/brands/<int:brand_id>")
def delete_brand_route(brand_id: int):
    try:
        catalog_service.delete_brand(brand_id)
    except CatalogNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409

    return jsonify({"ok": True})
