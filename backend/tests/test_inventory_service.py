"""
Inventory ledger tests: receipts, conditional decrements, reads, valuation.
"""

import pytest

from warehouse.extensions import db
from warehouse.models import Inventory
from warehouse.services import inventory_service
from warehouse.services.inventory_service import InsufficientStockError, InventoryError

from conftest import set_stock


def test_first_receipt_creates_row_with_class_thresholds(db_session, product):
    inv = inventory_service.apply_receipt(product.id, 40, "BEVERAGE")
    db_session.commit()

    assert inv.quantity_on_hand == 40
    assert inv.reorder_level == 100
    assert inv.reorder_quantity == 200
    assert inv.last_restocked is not None


def test_unknown_reorder_class_falls_back_to_standard(db_session, product):
    inv = inventory_service.apply_receipt(product.id, 5, "HARDWARE")
    db_session.commit()

    assert (inv.reorder_level, inv.reorder_quantity) == (50, 100)


@pytest.mark.parametrize("reorder_class,expected", [
    ("SNACK", (100, 200)),
    ("DAIRY", (50, 100)),
    ("PRODUCE", (50, 100)),
    ("MEAT", (25, 50)),
    ("FROZEN", (75, 150)),
    (None, (50, 100)),
])
def test_reorder_thresholds_table(app, reorder_class, expected):
    thresholds = inventory_service.reorder_thresholds(reorder_class)
    assert (thresholds["reorder_level"], thresholds["reorder_quantity"]) == expected


def test_receipt_adds_to_existing_row_and_keeps_thresholds(db_session, product):
    inventory_service.apply_receipt(product.id, 10, "MEAT")
    db_session.commit()

    inv = inventory_service.apply_receipt(product.id, 15, "BEVERAGE")
    db_session.commit()

    assert inv.quantity_on_hand == 25
    # thresholds fixed on first receipt
    assert inv.reorder_level == 25
    assert inv.reorder_quantity == 50


def test_receipt_rejects_non_positive_quantity(db_session, product):
    with pytest.raises(InventoryError):
        inventory_service.apply_receipt(product.id, 0)


def test_decrement_reduces_on_hand(db_session, product):
    set_stock(product.id, 10)

    inv = inventory_service.apply_decrement(product.id, 4)
    db_session.commit()

    assert inv.quantity_on_hand == 6


def test_decrement_to_exactly_zero(db_session, product):
    set_stock(product.id, 10)

    inv = inventory_service.apply_decrement(product.id, 10)
    db_session.commit()

    assert inv.quantity_on_hand == 0


def test_decrement_beyond_on_hand_fails_and_changes_nothing(db_session, product):
    set_stock(product.id, 3)

    with pytest.raises(InsufficientStockError) as exc:
        inventory_service.apply_decrement(product.id, 4)
    db_session.rollback()

    assert exc.value.requested == 4
    assert exc.value.on_hand == 3
    assert inventory_service.get_quantity_on_hand(product.id) == 3


def test_decrement_without_inventory_row_fails(db_session, product):
    with pytest.raises(InsufficientStockError) as exc:
        inventory_service.apply_decrement(product.id, 1)
    assert exc.value.on_hand == 0


def test_list_inventory_low_stock_only(db_session, product, second_product):
    set_stock(product.id, 10)          # reorder_level 50 -> low
    set_stock(second_product.id, 500)  # not low

    rows = inventory_service.list_inventory(low_stock_only=True)

    assert [r.product_id for r in rows] == [product.id]
    assert rows[0].is_low_stock is True


def test_list_inventory_sku_filter(db_session, product, second_product):
    set_stock(product.id, 10)
    set_stock(second_product.id, 20)

    rows = inventory_service.list_inventory(sku="bev-002")

    assert [r.product_id for r in rows] == [second_product.id]


def test_inventory_value_uses_most_recent_received_cost(db_session, vendor, product, second_product):
    from warehouse.services import purchase_order_service

    first = purchase_order_service.create_purchase_order(
        vendor_id=vendor.id,
        items=[{"product_id": product.id, "quantity": 10, "unit_cost_cents": 90}],
    )
    purchase_order_service.receive_purchase_order(first.id)
    second = purchase_order_service.create_purchase_order(
        vendor_id=vendor.id,
        items=[{"product_id": product.id, "quantity": 10, "unit_cost_cents": 110}],
    )
    purchase_order_service.receive_purchase_order(second.id)
    # never received via PO: valued at product cost (80)
    set_stock(second_product.id, 5)

    value = inventory_service.get_inventory_value()

    rows = {row["product_id"]: row for row in value["items"]}
    assert rows[product.id]["unit_cost_cents"] == 110
    assert rows[product.id]["cost_source"] == "purchase_order"
    assert rows[second_product.id]["unit_cost_cents"] == 80
    assert rows[second_product.id]["cost_source"] == "product"
    assert value["total_units"] == 25
    assert value["total_value_cents"] == 20 * 110 + 5 * 80


def test_check_constraint_blocks_negative_quantity(db_session, product):
    from sqlalchemy.exc import IntegrityError

    inv = Inventory(product_id=product.id, quantity_on_hand=-1, reorder_level=50, reorder_quantity=100)
    db.session.add(inv)
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()
