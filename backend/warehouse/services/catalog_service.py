# Overview: Service-layer operations for categories, subcategories and brands.

"""
Catalog Service

Categories carry a reorder_class code that fixes the reorder thresholds of
their products' first inventory record (see config.REORDER_THRESHOLDS).

Deleting a category, subcategory or brand that products still reference is
refused with ConflictError rather than orphaning or cascading products.
"""

from __future__ import annotations

from sqlalchemy import func

from ..config import REORDER_THRESHOLDS
from ..extensions import db
from ..models import Brand, Category, Product, Subcategory
from ..validation import ConflictError

REORDER_CLASSES = set(REORDER_THRESHOLDS)


class CatalogNotFoundError(Exception):
    """Raised when a category, subcategory or brand is not found."""
    pass


class CatalogValidationError(Exception):
    """Raised when catalog data fails validation."""
    pass


def _clean_name(name: str | None, label: str) -> str:
    if not name or not name.strip():
        raise CatalogValidationError(f"{label} name is required")
    return name.strip()


def _normalize_reorder_class(value: str | None) -> str:
    if not value:
        return "STANDARD"
    code = value.strip().upper()
    if code not in REORDER_CLASSES:
        raise CatalogValidationError(
            f"Invalid reorder_class. Must be one of: {', '.join(sorted(REORDER_CLASSES))}"
        )
    return code


def _ensure_unique_name(model, name: str, *, exclude_id: int | None = None, **scope) -> None:
    query = db.session.query(model).filter(func.lower(model.name) == name.lower())
    for key, value in scope.items():
        query = query.filter(getattr(model, key) == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first():
        raise ConflictError(f"'{name}' already exists")


# =============================================================================
# Categories
# =============================================================================

def list_categories() -> list[Category]:
    return db.session.query(Category).order_by(Category.name.asc()).all()


def get_category(category_id: int) -> Category:
    category = db.session.query(Category).filter_by(id=category_id).first()
    if not category:
        raise CatalogNotFoundError(f"Category {category_id} not found")
    return category


def create_category(*, name: str, reorder_class: str | None = None, description: str | None = None) -> Category:
    name = _clean_name(name, "Category")
    _ensure_unique_name(Category, name)

    category = Category(
        name=name,
        reorder_class=_normalize_reorder_class(reorder_class),
        description=description,
    )
    db.session.add(category)
    db.session.commit()
    return category


def update_category(
    category_id: int,
    *,
    name: str | None = None,
    reorder_class: str | None = None,
    description: str | None = None,
) -> Category:
    """
    Update a category.

    Changing reorder_class only affects products stocked for the first time
    afterwards; existing inventory thresholds are left alone.
    """
    category = get_category(category_id)

    if name is not None:
        name = _clean_name(name, "Category")
        _ensure_unique_name(Category, name, exclude_id=category_id)
        category.name = name
    if reorder_class is not None:
        category.reorder_class = _normalize_reorder_class(reorder_class)
    if description is not None:
        category.description = description

    db.session.commit()
    return category


def delete_category(category_id: int) -> None:
    category = get_category(category_id)

    in_use = db.session.query(Product.id).filter(Product.category_id == category_id).first()
    if in_use:
        raise ConflictError("Category is assigned to products and cannot be deleted")

    for sub in list(category.subcategories):
        db.session.delete(sub)
    db.session.delete(category)
    db.session.commit()


# =============================================================================
# Subcategories
# =============================================================================

def list_subcategories(category_id: int | None = None) -> list[Subcategory]:
    query = db.session.query(Subcategory)
    if category_id:
        query = query.filter(Subcategory.category_id == category_id)
    return query.order_by(Subcategory.name.asc()).all()


def get_subcategory(subcategory_id: int) -> Subcategory:
    sub = db.session.query(Subcategory).filter_by(id=subcategory_id).first()
    if not sub:
        raise CatalogNotFoundError(f"Subcategory {subcategory_id} not found")
    return sub


def create_subcategory(*, category_id: int, name: str, description: str | None = None) -> Subcategory:
    get_category(category_id)
    name = _clean_name(name, "Subcategory")
    _ensure_unique_name(Subcategory, name, category_id=category_id)

    sub = Subcategory(category_id=category_id, name=name, description=description)
    db.session.add(sub)
    db.session.commit()
    return sub


def update_subcategory(
    subcategory_id: int,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Subcategory:
    sub = get_subcategory(subcategory_id)

    if name is not None:
        name = _clean_name(name, "Subcategory")
        _ensure_unique_name(Subcategory, name, exclude_id=subcategory_id, category_id=sub.category_id)
        sub.name = name
    if description is not None:
        sub.description = description

    db.session.commit()
    return sub


def delete_subcategory(subcategory_id: int) -> None:
    sub = get_subcategory(subcategory_id)

    in_use = db.session.query(Product.id).filter(Product.subcategory_id == subcategory_id).first()
    if in_use:
        raise ConflictError("Subcategory is assigned to products and cannot be deleted")

    db.session.delete(sub)
    db.session.commit()


# =============================================================================
# Brands
# =============================================================================

def list_brands() -> list[Brand]:
    return db.session.query(Brand).order_by(Brand.name.asc()).all()


def get_brand(brand_id: int) -> Brand:
    brand = db.session.query(Brand).filter_by(id=brand_id).first()
    if not brand:
        raise CatalogNotFoundError(f"Brand {brand_id} not found")
    return brand


def create_brand(*, name: str, description: str | None = None) -> Brand:
    name = _clean_name(name, "Brand")
    _ensure_unique_name(Brand, name)

    brand = Brand(name=name, description=description)
    db.session.add(brand)
    db.session.commit()
    return brand


def update_brand(brand_id: int, *, name: str | None = None, description: str | None = None) -> Brand:
    brand = get_brand(brand_id)

    if name is not None:
        name = _clean_name(name, "Brand")
        _ensure_unique_name(Brand, name, exclude_id=brand_id)
        brand.name = name
    if description is not None:
        brand.description = description

    db.session.commit()
    return brand


def delete_brand(brand_id: int) -> None:
    brand = get_brand(brand_id)

    in_use = db.session.query(Product.id).filter(Product.brand_id == brand_id).first()
    if in_use:
        raise ConflictError("Brand is assigned to products and cannot be deleted")

    db.session.delete(brand)
    db.session.commit()
