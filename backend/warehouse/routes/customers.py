# Overview: Flask API routes for customers and their payments; parses input and returns JSON responses.

"""
Customer Routes

current_balance_cents is read-only here. It moves only with fulfilled
sales orders and recorded payments.
"""

from flask import Blueprint, current_app, jsonify, request

from ..models import Customer
from ..services import customer_service, payment_service
from ..services.customer_service import CustomerNotFoundError
from ..services.payment_service import PaymentValidationError
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_customer,
    validate_payload,
)

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields=set(customer_service.CUSTOMER_MUTABLE_FIELDS),
    required_on_create={"name"},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
def list_customers_route():
    """
    List customers.

    Query parameters:
    - status: active | inactive
    - search: name or email substring
    - limit: Maximum results (default: 100)
    - offset: Pagination offset (default: 0)
    """
    limit = request.args.get("limit", 100, type=int)
    offset = request.args.get("offset", 0, type=int)
    limit = max(1, min(limit, 500))
    offset = max(0, offset)

    customers, total = customer_service.list_customers(
        status=request.args.get("status"),
        search=request.args.get("search"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "items": [customer_service.customer_to_dict(c) for c in customers],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@customers_bp.post("")
def create_customer_route():
    """
    Create a customer.

    Request body:
    {
        "name": "Corner Market",      // required
        "credit_limit_cents": 500000, // optional, null = no limit
        "status": "active",           // optional
        ...
    }
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        enforce_rules_customer(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        customer = customer_service.create_customer(patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(customer_service.customer_to_dict(customer)), 201


@customers_bp.get("/<int:customer_id>")
def get_customer_route(customer_id: int):
    try:
        customer = customer_service.get_customer(customer_id)
    except CustomerNotFoundError:
        return jsonify({"error": "Customer not found"}), 404
    return jsonify(customer_service.customer_to_dict(customer))


@customers_bp.put("/<int:customer_id>")
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
        enforce_rules_customer(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        customer = customer_service.update_customer(customer_id=customer_id, patch=patch)
    except CustomerNotFoundError:
        return jsonify({"error": "Customer not found"}), 404

    return jsonify(customer_service.customer_to_dict(customer))


@customers_bp.get("/<int:customer_id>/payments")
def list_payments_route(customer_id: int):
    limit = request.args.get("limit", 100, type=int)
    offset = request.args.get("offset", 0, type=int)
    limit = max(1, min(limit, 500))
    offset = max(0, offset)

    try:
        payments, total = payment_service.list_payments(customer_id, limit=limit, offset=offset)
    except CustomerNotFoundError:
        return jsonify({"error": "Customer not found"}), 404

    return jsonify({
        "items": [p.to_dict() for p in payments],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@customers_bp.post("/<int:customer_id>/payments")
def record_payment_route(customer_id: int):
    """
    Record a payment; the customer's balance drops by the amount.

    Request body:
    {
        "amount_cents": 5000,       // required, > 0
        "method": "check",          // required
        "payment_date": "2024-01-15", // optional, default now
        "reference": "CHK-1042",    // optional
        "notes": "..."              // optional
    }

    Returns:
        {payment: Payment, customer: Customer}
    """
    data = request.get_json(silent=True) or {}

    if data.get("amount_cents") is None:
        return jsonify({"error": "amount_cents is required"}), 400

    try:
        payment = payment_service.record_payment(
            customer_id=customer_id,
            amount_cents=data.get("amount_cents"),
            method=data.get("method"),
            payment_date=data.get("payment_date"),
            reference=data.get("reference"),
            notes=data.get("notes"),
        )
    except CustomerNotFoundError:
        return jsonify({"error": "Customer not found"}), 404
    except PaymentValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record payment")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Payment %s recorded for customer %s: %s cents", payment.id, customer_id, payment.amount_cents
    )
    customer = customer_service.get_customer(customer_id)
    return jsonify({
        "payment": payment.to_dict(),
        "customer": customer.to_dict(),
    }), 201
