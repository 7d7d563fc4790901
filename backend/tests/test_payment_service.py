"""
Payment tests: recording a payment lowers the customer balance.
"""

import pytest

from warehouse.extensions import db
from warehouse.models import Customer, Payment
from warehouse.services import payment_service, sales_service
from warehouse.services.customer_service import CustomerNotFoundError
from warehouse.services.payment_service import PaymentValidationError


def _balance(customer_id: int) -> int:
    return db.session.get(Customer, customer_id).current_balance_cents


def test_payment_reduces_balance(db_session, customer, stocked_product):
    sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 40, "unit_price_cents": 150}],
    )
    assert _balance(customer.id) == 6000

    payment = payment_service.record_payment(
        customer_id=customer.id,
        amount_cents=2500,
        method="check",
        reference="CHK-1042",
    )

    assert payment.id is not None
    assert _balance(customer.id) == 3500


def test_payment_restores_available_credit(db_session, customer, stocked_product):
    sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 50, "unit_price_cents": 200}],
    )
    payment_service.record_payment(customer_id=customer.id, amount_cents=4000, method="cash")

    # 6000 outstanding + 4000 new order == limit
    order = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 20, "unit_price_cents": 200}],
    )
    assert order.total_cents == 4000
    assert _balance(customer.id) == 10000


def test_overpayment_leaves_credit_on_account(db_session, customer):
    payment_service.record_payment(customer_id=customer.id, amount_cents=500, method="cash")

    assert _balance(customer.id) == -500


@pytest.mark.parametrize("amount,method", [
    (0, "cash"),
    (-100, "cash"),
    ("12.50", "cash"),
    (100, ""),
    (100, None),
])
def test_invalid_payments_are_rejected(db_session, customer, amount, method):
    with pytest.raises(PaymentValidationError):
        payment_service.record_payment(customer_id=customer.id, amount_cents=amount, method=method)

    assert _balance(customer.id) == 0
    assert db.session.query(Payment).count() == 0


def test_payment_for_unknown_customer(db_session):
    with pytest.raises(CustomerNotFoundError):
        payment_service.record_payment(customer_id=9999, amount_cents=100, method="cash")


def test_list_payments_newest_first(db_session, customer):
    payment_service.record_payment(customer_id=customer.id, amount_cents=100, method="cash",
                                   payment_date="2024-01-01")
    payment_service.record_payment(customer_id=customer.id, amount_cents=200, method="cash",
                                   payment_date="2024-02-01")

    payments, total = payment_service.list_payments(customer.id)

    assert total == 2
    assert [p.amount_cents for p in payments] == [200, 100]
