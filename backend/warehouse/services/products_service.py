# backend/warehouse/services/products_service.py
"""
Products Service

Every product mutation appends to the product change log in the same
transaction:
- create_product -> one "created" row
- update_product -> exactly one classified row per call, even when nothing
  changed ("updated")

Floor price:
- Defaults to cost * (1 + FLOOR_PRICE_MARKUP_BPS) on create when not given.
- Never follows cost automatically unless AUTO_RECOMPUTE_FLOOR_PRICE is on;
  recompute_floor_prices() is the explicit bulk step.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import or_

from ..extensions import db
from ..models import Brand, Category, Product, PurchaseOrderItem, SalesOrderItem, Subcategory
from ..validation import ConflictError, ValidationError
from . import changelog_service
from .pricing_service import DEFAULT_FLOOR_MARKUP_BPS, compute_floor_price_cents

PRODUCT_MUTABLE_FIELDS = {
    "sku",
    "name",
    "description",
    "cost_cents",
    "retail_price_cents",
    "floor_price_cents",
    "category_id",
    "subcategory_id",
    "brand_id",
    "unit_of_measurement",
    "package_size",
    "case_pack_count",
    "storage_type",
}


class ProductNotFoundError(Exception):
    """Raised when a product is not found."""

    def __init__(self, product_id):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


def floor_markup_bps() -> int:
    return current_app.config.get("FLOOR_PRICE_MARKUP_BPS", DEFAULT_FLOOR_MARKUP_BPS)


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _validate_references(category_id, subcategory_id, brand_id) -> None:
    if category_id is None:
        raise ValidationError("category_id is required")
    if not db.session.query(Category.id).filter_by(id=category_id).first():
        raise ValidationError(f"Category {category_id} not found")

    if subcategory_id is not None:
        sub = db.session.query(Subcategory).filter_by(id=subcategory_id).first()
        if not sub:
            raise ValidationError(f"Subcategory {subcategory_id} not found")
        if sub.category_id != category_id:
            raise ValidationError("Subcategory does not belong to the product's category")

    if brand_id is not None:
        if not db.session.query(Brand.id).filter_by(id=brand_id).first():
            raise ValidationError(f"Brand {brand_id} not found")


def _ensure_unique_sku(sku: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError(f"SKU '{sku}' already exists")


def list_products(
    *,
    category_id: int | None = None,
    brand_id: int | None = None,
    search: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Product listing with optional filters and pagination.

    Returns:
        Dict with 'items', 'count', and pagination metadata if paginated.
    """
    base_query = db.session.query(Product)
    if category_id:
        base_query = base_query.filter(Product.category_id == category_id)
    if brand_id:
        base_query = base_query.filter(Product.brand_id == brand_id)
    if search:
        term = f"%{search.strip()}%"
        base_query = base_query.filter(or_(Product.name.ilike(term), Product.sku.ilike(term)))
    base_query = base_query.order_by(Product.name.asc(), Product.id.asc())

    if page is None:
        products = base_query.all()
        return {
            "items": [p.to_dict(expand=True) for p in products],
            "count": len(products),
        }

    per_page = min(per_page or 20, 100)  # Default 20, max 100
    page = max(page, 1)

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    products = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [p.to_dict(expand=True) for p in products],
        "count": len(products),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def get_product(product_id: int) -> Product:
    product = db.session.query(Product).filter_by(id=product_id).first()
    if not product:
        raise ProductNotFoundError(product_id)
    return product


def create_product(*, patch: dict) -> Product:
    """
    Create a product from a validated patch and log its creation.

    Raises:
        ValidationError: bad category/subcategory/brand reference
        ConflictError: SKU already exists
    """
    _validate_references(patch.get("category_id"), patch.get("subcategory_id"), patch.get("brand_id"))
    _ensure_unique_sku(patch["sku"])

    p = Product()
    apply_product_patch(p, patch)
    p.cost_cents = p.cost_cents or 0
    p.retail_price_cents = p.retail_price_cents or 0
    if p.floor_price_cents is None:
        p.floor_price_cents = compute_floor_price_cents(p.cost_cents, floor_markup_bps())

    try:
        db.session.add(p)
        db.session.flush()
        changelog_service.record_creation(p)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return p


def update_product(*, product_id: int, patch: dict) -> Product:
    """
    Apply a validated patch and append exactly one change-log row.

    Raises:
        ProductNotFoundError: unknown product
        ValidationError: bad category/subcategory/brand reference
        ConflictError: SKU already used by another product
    """
    p = get_product(product_id)

    category_id = patch.get("category_id", p.category_id)
    subcategory_id = patch.get("subcategory_id", p.subcategory_id)
    if "category_id" in patch and category_id != p.category_id and "subcategory_id" not in patch:
        # Moving category drops a subcategory that belonged to the old one
        subcategory_id = None
        patch = {**patch, "subcategory_id": None}
    _validate_references(category_id, subcategory_id, patch.get("brand_id", p.brand_id))

    if "sku" in patch:
        _ensure_unique_sku(patch["sku"], exclude_id=product_id)

    old = changelog_service.snapshot(p)
    apply_product_patch(p, patch)

    cost_changed = p.cost_cents != old.cost
    if (
        cost_changed
        and "floor_price_cents" not in patch
        and current_app.config.get("AUTO_RECOMPUTE_FLOOR_PRICE", False)
    ):
        p.floor_price_cents = compute_floor_price_cents(p.cost_cents, floor_markup_bps())

    try:
        db.session.flush()
        changelog_service.record_update(p.id, old, changelog_service.snapshot(p))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return p


def delete_product(*, product_id: int) -> None:
    """
    Delete a product with its inventory record and change log.

    Products referenced by purchase or sales order lines are kept.
    """
    p = get_product(product_id)

    referenced = (
        db.session.query(PurchaseOrderItem.id).filter(PurchaseOrderItem.product_id == product_id).first()
        or db.session.query(SalesOrderItem.id).filter(SalesOrderItem.product_id == product_id).first()
    )
    if referenced:
        raise ConflictError("Product is referenced by orders and cannot be deleted")

    db.session.delete(p)
    db.session.commit()


def recompute_floor_prices(*, product_ids: list[int] | None = None) -> dict:
    """
    Reset floor_price_cents = cost * (1 + markup) for all (or selected) products.

    Floor price is not a logged pricing field, so no change-log rows are written.

    Returns:
        {"updated": n, "unchanged": n, "above_retail": [product ids]}
    """
    markup_bps = floor_markup_bps()
    query = db.session.query(Product)
    if product_ids:
        query = query.filter(Product.id.in_(product_ids))

    updated = 0
    unchanged = 0
    above_retail = []
    try:
        for p in query.order_by(Product.id.asc()).all():
            floor = compute_floor_price_cents(p.cost_cents, markup_bps)
            if p.floor_price_cents == floor:
                unchanged += 1
            else:
                p.floor_price_cents = floor
                updated += 1
            if floor > p.retail_price_cents:
                above_retail.append(p.id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return {"updated": updated, "unchanged": unchanged, "above_retail": above_retail}
