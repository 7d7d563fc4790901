# Overview: Service-layer operations for customer payments; encapsulates balance updates.

"""
Payment Service

Recording a payment inserts the payment row and lowers the customer's
current balance by the amount in one transaction. The balance may go
below zero (credit on account).
"""

from __future__ import annotations

from ..extensions import db
from ..models import Customer, Payment
from ..validation import ValidationError, coerce_int, enforce_money
from .concurrency import atomic_write, lock_for_update
from .customer_service import CustomerNotFoundError, get_customer
from warehouse.time_utils import coerce_datetime


class PaymentValidationError(Exception):
    """Raised when payment data fails validation."""
    pass


def record_payment(
    *,
    customer_id: int,
    amount_cents,
    method: str | None,
    payment_date=None,
    reference: str | None = None,
    notes: str | None = None,
) -> Payment:
    """
    Record a customer payment and apply it to the balance.

    Raises:
        CustomerNotFoundError: unknown customer
        PaymentValidationError: amount not positive, missing method, bad date
    """
    try:
        amount = coerce_int("amount_cents", amount_cents)
        enforce_money("amount_cents", amount)
    except ValidationError as e:
        raise PaymentValidationError(str(e))
    if amount <= 0:
        raise PaymentValidationError("amount_cents must be > 0")

    method = (method or "").strip()
    if not method:
        raise PaymentValidationError("method is required")
    if len(method) > 32:
        raise PaymentValidationError("method exceeds max length 32")

    try:
        paid_at = coerce_datetime(payment_date, default_now=True)
    except ValueError:
        raise PaymentValidationError("Invalid payment_date format")

    with atomic_write():
        customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
        if not customer:
            raise CustomerNotFoundError(customer_id)

        payment = Payment(
            customer_id=customer.id,
            amount_cents=amount,
            payment_date=paid_at,
            method=method,
            reference=reference,
            notes=notes,
        )
        db.session.add(payment)
        customer.current_balance_cents = customer.current_balance_cents - amount
        db.session.flush()

    return payment


def list_payments(customer_id: int, *, limit: int = 100, offset: int = 0) -> tuple[list[Payment], int]:
    get_customer(customer_id)
    query = db.session.query(Payment).filter(Payment.customer_id == customer_id)
    total = query.count()
    payments = (
        query.order_by(Payment.payment_date.desc(), Payment.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return payments, total
