# Overview: Service-layer operations for vendors; encapsulates business logic and database work.

"""
Vendor Service

Vendors are the supplier directory. Every purchase order has exactly one
vendor; a vendor with purchase orders on file cannot be deleted.
"""

from __future__ import annotations

from sqlalchemy import func, or_

from ..extensions import db
from ..models import PurchaseOrder, Vendor

VENDOR_MUTABLE_FIELDS = {
    "name",
    "contact_name",
    "email",
    "phone",
    "address",
    "terms",
    "notes",
}


class VendorNotFoundError(Exception):
    """Raised when a vendor is not found."""
    pass


class VendorValidationError(Exception):
    """Raised when vendor data fails validation."""
    pass


def apply_vendor_patch(vendor: Vendor, patch: dict) -> None:
    for k, v in patch.items():
        if k not in VENDOR_MUTABLE_FIELDS:
            continue
        if k == "name":
            v = (v or "").strip()
            if not v:
                raise VendorValidationError("Vendor name is required")
        elif k == "email" and v:
            v = v.strip().lower() or None
        setattr(vendor, k, v)


def get_vendor(vendor_id: int) -> Vendor:
    vendor = db.session.query(Vendor).filter_by(id=vendor_id).first()
    if not vendor:
        raise VendorNotFoundError(f"Vendor {vendor_id} not found")
    return vendor


def create_vendor(*, patch: dict) -> Vendor:
    if not patch.get("name"):
        raise VendorValidationError("Vendor name is required")
    vendor = Vendor()
    apply_vendor_patch(vendor, patch)
    db.session.add(vendor)
    db.session.commit()
    return vendor


def update_vendor(*, vendor_id: int, patch: dict) -> Vendor:
    vendor = get_vendor(vendor_id)
    apply_vendor_patch(vendor, patch)
    db.session.commit()
    return vendor


def count_purchase_orders(vendor_id: int) -> int:
    return (
        db.session.query(func.count(PurchaseOrder.id))
        .filter(PurchaseOrder.vendor_id == vendor_id)
        .scalar()
        or 0
    )


def delete_vendor(vendor_id: int) -> None:
    """
    Raises:
        VendorNotFoundError: unknown vendor
        VendorValidationError: purchase orders still reference the vendor
    """
    vendor = get_vendor(vendor_id)
    if count_purchase_orders(vendor_id):
        raise VendorValidationError("Vendor has purchase orders and cannot be deleted")
    db.session.delete(vendor)
    db.session.commit()


def list_vendors(
    *,
    search: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Vendor], int]:
    """Vendors ordered by name, with the unpaged total."""
    query = db.session.query(Vendor)

    if search:
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Vendor.name.ilike(term),
                Vendor.contact_name.ilike(term),
                Vendor.email.ilike(term),
            )
        )

    total = query.count()
    vendors = query.order_by(Vendor.name.asc(), Vendor.id.asc()).offset(offset).limit(limit).all()
    return vendors, total
