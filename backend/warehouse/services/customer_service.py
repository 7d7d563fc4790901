# Overview: Service-layer operations for customers; encapsulates business logic and database work.

"""
Customer Service

current_balance_cents is never written from here: it only moves with
fulfilled sales orders (sales_service) and recorded payments
(payment_service), each in its own transaction.
"""

from __future__ import annotations

from sqlalchemy import func, or_

from ..extensions import db
from ..models import Customer, Payment, SalesOrder

CUSTOMER_MUTABLE_FIELDS = {
    "name",
    "email",
    "phone",
    "address",
    "customer_group",
    "customer_category",
    "credit_limit_cents",
    "payment_terms",
    "status",
    "notes",
}


class CustomerNotFoundError(Exception):
    """Raised when a customer is not found."""

    def __init__(self, customer_id):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


def apply_customer_patch(c: Customer, patch: dict) -> None:
    for k, v in patch.items():
        if k not in CUSTOMER_MUTABLE_FIELDS:
            continue
        setattr(c, k, v)


def get_customer(customer_id: int) -> Customer:
    customer = db.session.query(Customer).filter_by(id=customer_id).first()
    if not customer:
        raise CustomerNotFoundError(customer_id)
    return customer


def create_customer(*, patch: dict) -> Customer:
    customer = Customer(current_balance_cents=0, status="active")
    apply_customer_patch(customer, patch)
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(*, customer_id: int, patch: dict) -> Customer:
    customer = get_customer(customer_id)
    apply_customer_patch(customer, patch)
    db.session.commit()
    return customer


def activity_counts(customer_id: int) -> dict:
    orders = (
        db.session.query(func.count(SalesOrder.id))
        .filter(SalesOrder.customer_id == customer_id)
        .scalar()
    )
    payments = (
        db.session.query(func.count(Payment.id))
        .filter(Payment.customer_id == customer_id)
        .scalar()
    )
    return {"sales_orders": orders or 0, "payments": payments or 0}


def customer_to_dict(customer: Customer) -> dict:
    data = customer.to_dict()
    data["counts"] = activity_counts(customer.id)
    return data


def list_customers(
    *,
    status: str | None = None,
    search: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Customer], int]:
    query = db.session.query(Customer)
    if status:
        query = query.filter(Customer.status == status)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(Customer.name.ilike(term), Customer.email.ilike(term)))

    total = query.count()
    customers = query.order_by(Customer.name.asc(), Customer.id.asc()).offset(offset).limit(limit).all()
    return customers, total
