"""
Sales fulfillment tests.

A sales order either fully succeeds (order + items inserted, stock
decremented, balance raised) or changes nothing.
"""

import pytest

from warehouse.extensions import db
from warehouse.models import Customer, SalesOrder, SalesOrderItem
from warehouse.services import inventory_service, sales_service
from warehouse.services.customer_service import CustomerNotFoundError
from warehouse.services.inventory_service import InsufficientStockError
from warehouse.services.products_service import ProductNotFoundError
from warehouse.services.sales_service import (
    BelowFloorPriceError,
    CreditLimitExceededError,
    InsufficientInventoryError,
    SalesOrderError,
)

from conftest import set_stock


def _balance(customer_id: int) -> int:
    return db.session.get(Customer, customer_id).current_balance_cents


def _order_count() -> int:
    return db.session.query(SalesOrder).count()


def test_create_fulfills_order(db_session, customer, stocked_product):
    order = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 10, "unit_price_cents": 150}],
        notes="dock 4",
    )

    assert order.so_number == "SO-0001"
    assert order.status == "fulfilled"
    assert order.subtotal_cents == 1500
    assert order.total_cents == 1500
    assert [(i.quantity, i.line_total_cents) for i in order.items] == [(10, 1500)]
    assert inventory_service.get_quantity_on_hand(stocked_product.id) == 90
    assert _balance(customer.id) == 1500


def test_balance_round_trip_without_limit(db_session, customer, stocked_product):
    customer.credit_limit_cents = None
    db_session.commit()

    # $150.00 total
    sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 100, "unit_price_cents": 150}],
    )

    assert _balance(customer.id) == 15000


def test_credit_limit_exceeded_leaves_everything_unchanged(db_session, customer, stocked_product):
    # $150.00 order against a $100.00 limit
    with pytest.raises(CreditLimitExceededError) as exc:
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[{"product_id": stocked_product.id, "quantity": 100, "unit_price_cents": 150}],
        )

    assert exc.value.details["order_total_cents"] == 15000
    assert _balance(customer.id) == 0
    assert inventory_service.get_quantity_on_hand(stocked_product.id) == 100
    assert _order_count() == 0


def test_order_exactly_at_credit_limit_is_allowed(db_session, customer, stocked_product):
    order = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 50, "unit_price_cents": 200}],
    )

    assert order.total_cents == 10000
    assert _balance(customer.id) == 10000


def test_credit_limit_can_be_disabled(db_session, app, customer, stocked_product):
    order = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 100, "unit_price_cents": 150}],
        enforce_credit_limit=False,
    )

    assert order.total_cents == 15000
    assert _balance(customer.id) == 15000


def test_credit_limit_setting_is_read_from_config(db_session, app, customer, stocked_product, monkeypatch):
    monkeypatch.setitem(app.config, "ENFORCE_CREDIT_LIMIT", False)

    sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 100, "unit_price_cents": 150}],
    )

    assert _balance(customer.id) == 15000


def test_insufficient_inventory_rejects_whole_order(db_session, customer, stocked_product, second_product):
    set_stock(second_product.id, 2)

    with pytest.raises(InsufficientInventoryError) as exc:
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[
                {"product_id": stocked_product.id, "quantity": 5, "unit_price_cents": 150},
                {"product_id": second_product.id, "quantity": 3, "unit_price_cents": 130},
            ],
        )

    assert "Lemonade 12oz" in str(exc.value)
    assert exc.value.details["items"][0]["on_hand"] == 2
    assert inventory_service.get_quantity_on_hand(stocked_product.id) == 100
    assert inventory_service.get_quantity_on_hand(second_product.id) == 2
    assert _balance(customer.id) == 0
    assert _order_count() == 0


def test_lines_for_same_product_are_summed_for_stock_check(db_session, customer, product):
    set_stock(product.id, 10)

    with pytest.raises(InsufficientInventoryError):
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[
                {"product_id": product.id, "quantity": 6, "unit_price_cents": 150},
                {"product_id": product.id, "quantity": 6, "unit_price_cents": 150},
            ],
        )

    assert inventory_service.get_quantity_on_hand(product.id) == 10


def test_stock_lost_mid_order_rolls_back_everything(db_session, customer, stocked_product, second_product, monkeypatch):
    set_stock(second_product.id, 50)
    original = inventory_service.apply_decrement
    calls = []

    def decrement_then_run_dry(product_id, quantity):
        calls.append(product_id)
        if len(calls) == 2:
            raise InsufficientStockError(product_id, quantity, 0)
        return original(product_id, quantity)

    monkeypatch.setattr(inventory_service, "apply_decrement", decrement_then_run_dry)

    with pytest.raises(InsufficientInventoryError) as exc:
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[
                {"product_id": stocked_product.id, "quantity": 5, "unit_price_cents": 150},
                {"product_id": second_product.id, "quantity": 3, "unit_price_cents": 130},
            ],
        )

    assert calls == [stocked_product.id, second_product.id]
    assert exc.value.details["items"][0]["product_id"] == second_product.id
    assert _order_count() == 0
    assert db.session.query(SalesOrderItem).count() == 0
    assert inventory_service.get_quantity_on_hand(stocked_product.id) == 100
    assert inventory_service.get_quantity_on_hand(second_product.id) == 50
    assert _balance(customer.id) == 0


def test_product_without_inventory_is_insufficient(db_session, customer, product):
    with pytest.raises(InsufficientInventoryError):
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[{"product_id": product.id, "quantity": 1, "unit_price_cents": 150}],
        )


def test_selling_entire_stock_leaves_zero(db_session, customer, stocked_product):
    sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 60, "unit_price_cents": 150}],
        enforce_credit_limit=False,
    )
    sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 40, "unit_price_cents": 150}],
        enforce_credit_limit=False,
    )

    assert inventory_service.get_quantity_on_hand(stocked_product.id) == 0
    with pytest.raises(InsufficientInventoryError):
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 150}],
            enforce_credit_limit=False,
        )


def test_price_below_floor_is_rejected(db_session, customer, stocked_product):
    # floor is 115 cents
    with pytest.raises(BelowFloorPriceError) as exc:
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 114}],
        )

    assert exc.value.details["items"][0]["floor_price_cents"] == 115
    assert inventory_service.get_quantity_on_hand(stocked_product.id) == 100
    assert _order_count() == 0


def test_price_at_floor_is_accepted(db_session, customer, stocked_product):
    order = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 115}],
    )
    assert order.total_cents == 115


def test_unknown_product_and_customer(db_session, customer, stocked_product):
    with pytest.raises(ProductNotFoundError):
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[{"product_id": 9999, "quantity": 1, "unit_price_cents": 150}],
        )
    with pytest.raises(CustomerNotFoundError):
        sales_service.create_sales_order(
            customer_id=9999,
            items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 150}],
        )


def test_inactive_customer_is_rejected(db_session, customer, stocked_product):
    customer.status = "inactive"
    db_session.commit()

    with pytest.raises(SalesOrderError):
        sales_service.create_sales_order(
            customer_id=customer.id,
            items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 150}],
        )


@pytest.mark.parametrize("items", [
    [],
    None,
    [{"product_id": 1, "quantity": 0, "unit_price_cents": 150}],
    [{"product_id": 1, "quantity": 1}],
    [{"product_id": 1, "quantity": 1.5, "unit_price_cents": 150}],
    [{"product_id": 1, "quantity": 1, "unit_price_cents": -1}],
])
def test_invalid_lines_are_rejected(db_session, customer, items):
    with pytest.raises(SalesOrderError):
        sales_service.create_sales_order(customer_id=customer.id, items=items)


def test_so_number_follows_existing_maximum(db_session, customer, stocked_product):
    db_session.add(SalesOrder(so_number="SO-0007", customer_id=customer.id, subtotal_cents=0, total_cents=0))
    db_session.commit()

    order = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 150}],
    )

    assert order.so_number == "SO-0008"


def test_so_number_orders_numerically_past_four_digits(db_session, customer, stocked_product):
    db_session.add(SalesOrder(so_number="SO-9999", customer_id=customer.id, subtotal_cents=0, total_cents=0))
    db_session.add(SalesOrder(so_number="SO-10000", customer_id=customer.id, subtotal_cents=0, total_cents=0))
    db_session.commit()

    order = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 150}],
    )

    assert order.so_number == "SO-10001"


def test_list_sales_orders_by_customer(db_session, customer, stocked_product):
    other = Customer(name="Other Shop", current_balance_cents=0, status="active")
    db_session.add(other)
    db_session.commit()

    mine = sales_service.create_sales_order(
        customer_id=customer.id,
        items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 150}],
    )
    sales_service.create_sales_order(
        customer_id=other.id,
        items=[{"product_id": stocked_product.id, "quantity": 1, "unit_price_cents": 150}],
    )

    orders, total = sales_service.list_sales_orders(customer_id=customer.id)

    assert total == 1
    assert [o.id for o in orders] == [mine.id]
