# Overview: Flask API routes for the vendor directory; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..models import Vendor
from ..services import vendor_service
from ..services.vendor_service import VendorNotFoundError, VendorValidationError
from ..validation import ModelValidationPolicy, ValidationError, validate_payload

VENDOR_POLICY = ModelValidationPolicy(
    writable_fields=set(vendor_service.VENDOR_MUTABLE_FIELDS),
    required_on_create={"name"},
)

vendors_bp = Blueprint("vendors", __name__, url_prefix="/api/vendors")


def _vendor_json(vendor: Vendor) -> dict:
    data = vendor.to_dict()
    data["purchase_order_count"] = vendor_service.count_purchase_orders(vendor.id)
    return data


@vendors_bp.get("")
def list_vendors_route():
    """Query: search (name, contact or email), limit, offset."""
    limit = max(1, min(request.args.get("limit", 100, type=int), 500))
    offset = max(0, request.args.get("offset", 0, type=int))

    vendors, total = vendor_service.list_vendors(
        search=request.args.get("search"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [v.to_dict() for v in vendors],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@vendors_bp.post("")
def create_vendor_route():
    payload = request.get_json(silent=True)
    try:
        patch = validate_payload(model=Vendor, payload=payload, policy=VENDOR_POLICY, partial=False)
        vendor = vendor_service.create_vendor(patch=patch)
    except (ValidationError, VendorValidationError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(_vendor_json(vendor)), 201


@vendors_bp.get("/<int:vendor_id>")
def get_vendor_route(vendor_id: int):
    try:
        return jsonify(_vendor_json(vendor_service.get_vendor(vendor_id)))
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404


@vendors_bp.put("/<int:vendor_id>")
def update_vendor_route(vendor_id: int):
    """Partial update; omitted fields keep their values."""
    payload = request.get_json(silent=True)
    try:
        patch = validate_payload(model=Vendor, payload=payload, policy=VENDOR_POLICY, partial=True)
        vendor = vendor_service.update_vendor(vendor_id=vendor_id, patch=patch)
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except (ValidationError, VendorValidationError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(_vendor_json(vendor))


@vendors_bp.delete("/<int:vendor_id>")
def delete_vendor_route(vendor_id: int):
    # Refused (400) while purchase orders reference the vendor
    try:
        vendor_service.delete_vendor(vendor_id)
    except VendorNotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except VendorValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"ok": True})
