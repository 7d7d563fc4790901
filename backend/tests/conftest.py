"""
Pytest fixtures for warehouse backend tests.

Provides test database setup, catalog/order fixtures, and test client.
"""

import pytest

from warehouse import create_app
from warehouse.extensions import db
from warehouse.models import Category, Customer, Inventory, Product, Vendor
from warehouse.services import purchase_order_service


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'ENFORCE_CREDIT_LIMIT': True,
    'AUTO_RECOMPUTE_FLOOR_PRICE': False,
    'FLOOR_PRICE_MARKUP_BPS': 1500,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def category(db_session):
    """Beverage category (reorder at 100, reorder 200)."""
    category = Category(name="Beverages", reorder_class="BEVERAGE")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def meat_category(db_session):
    category = Category(name="Meat", reorder_class="MEAT")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def product(db_session, category):
    """Cola: cost $1.00, retail $1.50, floor $1.15."""
    product = Product(
        sku="BEV-001",
        name="Cola 12oz",
        description="Cola, 12oz can",
        cost_cents=100,
        retail_price_cents=150,
        floor_price_cents=115,
        category_id=category.id,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def second_product(db_session, category):
    product = Product(
        sku="BEV-002",
        name="Lemonade 12oz",
        cost_cents=80,
        retail_price_cents=130,
        floor_price_cents=92,
        category_id=category.id,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def vendor(db_session):
    vendor = Vendor(name="Acme Beverage Supply", contact_name="Pat Doe", email="orders@acme.test")
    db_session.add(vendor)
    db_session.commit()
    return vendor


@pytest.fixture(scope='function')
def customer(db_session):
    """Customer with a $100.00 credit limit and zero balance."""
    customer = Customer(
        name="Corner Market",
        email="buyer@corner.test",
        credit_limit_cents=10000,
        current_balance_cents=0,
        status="active",
    )
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def stocked_product(db_session, product):
    """Cola with 100 units on hand."""
    inv = Inventory(product_id=product.id, quantity_on_hand=100, reorder_level=100, reorder_quantity=200)
    db_session.add(inv)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def pending_po(db_session, vendor, product):
    """Pending purchase order for 50 units of Cola at $1.00."""
    return purchase_order_service.create_purchase_order(
        vendor_id=vendor.id,
        items=[{"product_id": product.id, "quantity": 50, "unit_cost_cents": 100}],
    )


def set_stock(product_id: int, quantity: int) -> Inventory:
    """Helper to put a product at an exact on-hand quantity."""
    inv = db.session.query(Inventory).filter_by(product_id=product_id).first()
    if inv is None:
        inv = Inventory(product_id=product_id, quantity_on_hand=quantity, reorder_level=50, reorder_quantity=100)
        db.session.add(inv)
    else:
        inv.quantity_on_hand = quantity
    db.session.commit()
    return inv
