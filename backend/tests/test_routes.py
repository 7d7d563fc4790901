"""
HTTP surface tests through the Flask test client.
"""

from warehouse.extensions import db
from warehouse.models import Customer

from conftest import set_stock


def test_health(client, db_session):
    response = client.get('/api/health')

    assert response.status_code == 200
    assert response.json['status'] == 'healthy'
    assert 'latency_ms' in response.json['checks']['database']


class TestProductRoutes:
    def test_create_get_update_and_changelog(self, client, db_session, category):
        response = client.post('/api/products', json={
            'sku': 'SNK-100',
            'name': 'Trail Mix',
            'cost_cents': 1000,
            'retail_price_cents': 2000,
            'category_id': category.id,
        })
        assert response.status_code == 201
        product = response.json
        assert product['floor_price_cents'] == 1150
        assert product['category']['reorder_class'] == 'BEVERAGE'

        response = client.put(f"/api/products/{product['id']}", json={'retail_price_cents': 2400})
        assert response.status_code == 200
        assert response.json['retail_price_cents'] == 2400

        response = client.get(f"/api/products/{product['id']}/changelog")
        assert response.status_code == 200
        assert [e['change_type'] for e in response.json['items']] == ['price_increase', 'created']

    def test_validation_errors(self, client, db_session, category):
        response = client.post('/api/products', json={'sku': 'X', 'name': 'X'})
        assert response.status_code == 400

        response = client.post('/api/products', json={
            'sku': 'X', 'name': 'X', 'category_id': category.id, 'cost_cents': -5,
        })
        assert response.status_code == 400

        response = client.post('/api/products', json={
            'sku': 'X', 'name': 'X', 'category_id': category.id, 'is_active': True,
        })
        assert response.status_code == 400

    def test_duplicate_sku_is_409(self, client, db_session, product):
        response = client.post('/api/products', json={
            'sku': product.sku, 'name': 'Copy', 'category_id': product.category_id,
        })
        assert response.status_code == 409

    def test_unknown_product_is_404(self, client, db_session):
        assert client.get('/api/products/9999').status_code == 404
        assert client.put('/api/products/9999', json={'name': 'x'}).status_code == 404
        assert client.get('/api/products/9999/changelog').status_code == 404

    def test_recompute_floor_prices(self, client, db_session, product):
        product.floor_price_cents = 1
        db.session.commit()

        response = client.post('/api/products/floor-prices/recompute', json={})

        assert response.status_code == 200
        assert response.json['updated'] == 1
        assert client.get(f'/api/products/{product.id}').json['floor_price_cents'] == 115


class TestCatalogRoutes:
    def test_category_crud(self, client, db_session):
        response = client.post('/api/categories', json={'name': 'Frozen Foods', 'reorder_class': 'frozen'})
        assert response.status_code == 201
        category_id = response.json['id']
        assert response.json['reorder_class'] == 'FROZEN'

        assert client.post('/api/categories', json={'name': 'frozen foods'}).status_code == 409
        assert client.post('/api/categories', json={'name': 'Misc', 'reorder_class': 'BOGUS'}).status_code == 400

        response = client.put(f'/api/categories/{category_id}', json={'description': 'Ice cream, meals'})
        assert response.status_code == 200

        assert client.delete(f'/api/categories/{category_id}').status_code == 200
        assert client.get(f'/api/categories/{category_id}').status_code == 404

    def test_category_in_use_cannot_be_deleted(self, client, db_session, product):
        response = client.delete(f'/api/categories/{product.category_id}')
        assert response.status_code == 409

    def test_subcategories_and_brands(self, client, db_session, category):
        response = client.post('/api/subcategories', json={'category_id': category.id, 'name': 'Soda'})
        assert response.status_code == 201

        listed = client.get(f'/api/subcategories?category_id={category.id}').json
        assert [s['name'] for s in listed['items']] == ['Soda']

        response = client.post('/api/brands', json={'name': 'Fizz'})
        assert response.status_code == 201
        assert client.post('/api/brands', json={'name': ''}).status_code == 400


class TestVendorRoutes:
    def test_crud(self, client, db_session):
        response = client.post('/api/vendors', json={'name': 'Northwind', 'email': 'Sales@Northwind.test'})
        assert response.status_code == 201
        vendor_id = response.json['id']
        assert response.json['email'] == 'sales@northwind.test'

        response = client.put(f'/api/vendors/{vendor_id}', json={'terms': 'Net 30'})
        assert response.json['terms'] == 'Net 30'

        listed = client.get('/api/vendors?search=north').json
        assert listed['count'] == 1

        assert client.delete(f'/api/vendors/{vendor_id}').status_code == 200
        assert client.get(f'/api/vendors/{vendor_id}').status_code == 404

    def test_vendor_with_orders_cannot_be_deleted(self, client, db_session, pending_po):
        response = client.delete(f'/api/vendors/{pending_po.vendor_id}')
        assert response.status_code == 400
        assert client.get(f'/api/vendors/{pending_po.vendor_id}').json['purchase_order_count'] == 1


class TestPurchaseOrderRoutes:
    def test_create_and_receive(self, client, db_session, vendor, product):
        response = client.post('/api/purchase-orders', json={
            'vendor_id': vendor.id,
            'expected_date': '2024-01-22',
            'items': [{'product_id': product.id, 'quantity': 24, 'unit_cost_cents': 100}],
        })
        assert response.status_code == 201
        po = response.json
        assert po['po_number'] == 'PO-0001'
        assert po['status'] == 'pending'

        response = client.post(f"/api/purchase-orders/{po['id']}/receive")
        assert response.status_code == 200
        assert response.json['success'] is True
        assert response.json['total_quantity'] == 24

        inventory = client.get(f'/api/inventory/{product.id}').json
        assert inventory['quantity_on_hand'] == 24
        assert inventory['reorder_level'] == 100

    def test_second_receive_is_400(self, client, db_session, pending_po, product):
        assert client.post('/api/purchase-orders/receive', json={'po_id': pending_po.id}).status_code == 200

        response = client.post('/api/purchase-orders/receive', json={'po_id': pending_po.id})

        assert response.status_code == 400
        assert response.json['error'] == 'Purchase Order already received'
        assert client.get(f'/api/inventory/{product.id}').json['quantity_on_hand'] == 50

    def test_receive_requires_po_id(self, client, db_session):
        assert client.post('/api/purchase-orders/receive', json={}).status_code == 400
        assert client.post('/api/purchase-orders/9999/receive').status_code == 404

    def test_invalid_create_is_400(self, client, db_session, vendor):
        response = client.post('/api/purchase-orders', json={'vendor_id': vendor.id, 'items': []})
        assert response.status_code == 400

    def test_list_filters(self, client, db_session, pending_po):
        assert client.get('/api/purchase-orders?status=pending').json['count'] == 1
        assert client.get('/api/purchase-orders?status=received').json['count'] == 0
        assert client.get('/api/purchase-orders?status=bogus').status_code == 400


class TestSalesOrderRoutes:
    def test_create_sales_order(self, client, db_session, customer, stocked_product):
        response = client.post('/api/sales-orders', json={
            'customer_id': customer.id,
            'items': [{'product_id': stocked_product.id, 'quantity': 10, 'unit_price_cents': 150}],
        })

        assert response.status_code == 201
        assert response.json['so_number'] == 'SO-0001'
        assert response.json['total_cents'] == 1500
        assert response.json['customer']['current_balance_cents'] == 1500
        assert response.json['items'][0]['product']['sku'] == stocked_product.sku

        listed = client.get(f'/api/sales-orders?customer_id={customer.id}').json
        assert listed['count'] == 1

    def test_credit_limit_exceeded_is_400(self, client, db_session, customer, stocked_product):
        response = client.post('/api/sales-orders', json={
            'customer_id': customer.id,
            'items': [{'product_id': stocked_product.id, 'quantity': 100, 'unit_price_cents': 150}],
        })

        assert response.status_code == 400
        assert response.json['details']['credit_limit_cents'] == 10000
        assert db.session.get(Customer, customer.id).current_balance_cents == 0

    def test_insufficient_inventory_is_400(self, client, db_session, customer, product):
        set_stock(product.id, 1)

        response = client.post('/api/sales-orders', json={
            'customer_id': customer.id,
            'items': [{'product_id': product.id, 'quantity': 2, 'unit_price_cents': 150}],
        })

        assert response.status_code == 400
        assert 'Insufficient inventory' in response.json['error']

    def test_below_floor_is_400(self, client, db_session, customer, stocked_product):
        response = client.post('/api/sales-orders', json={
            'customer_id': customer.id,
            'items': [{'product_id': stocked_product.id, 'quantity': 1, 'unit_price_cents': 100}],
        })
        assert response.status_code == 400

    def test_missing_customer_is_400(self, client, db_session):
        assert client.post('/api/sales-orders', json={'items': []}).status_code == 400

    def test_unknown_sales_order_is_404(self, client, db_session):
        assert client.get('/api/sales-orders/9999').status_code == 404


class TestCustomerRoutes:
    def test_create_update_and_pay(self, client, db_session):
        response = client.post('/api/customers', json={
            'name': 'Harbor Deli',
            'credit_limit_cents': 50000,
            'current_balance_cents': 999,
        })
        # balance is not client-writable
        assert response.status_code == 400

        response = client.post('/api/customers', json={'name': 'Harbor Deli', 'credit_limit_cents': 50000})
        assert response.status_code == 201
        customer_id = response.json['id']
        assert response.json['current_balance_cents'] == 0
        assert response.json['counts'] == {'sales_orders': 0, 'payments': 0}

        response = client.put(f'/api/customers/{customer_id}', json={'status': 'closed'})
        assert response.status_code == 400

        response = client.post(f'/api/customers/{customer_id}/payments', json={
            'amount_cents': 1200, 'method': 'card',
        })
        assert response.status_code == 201
        assert response.json['customer']['current_balance_cents'] == -1200

        payments = client.get(f'/api/customers/{customer_id}/payments').json
        assert payments['count'] == 1

    def test_invalid_payment_is_400(self, client, db_session, customer):
        response = client.post(f'/api/customers/{customer.id}/payments', json={'amount_cents': 0, 'method': 'cash'})
        assert response.status_code == 400

    def test_unknown_customer_is_404(self, client, db_session):
        assert client.get('/api/customers/9999').status_code == 404
        assert client.post('/api/customers/9999/payments', json={
            'amount_cents': 100, 'method': 'cash',
        }).status_code == 404


class TestInventoryRoutes:
    def test_list_low_stock_and_value(self, client, db_session, product, second_product):
        set_stock(product.id, 10)
        set_stock(second_product.id, 500)

        low = client.get('/api/inventory?low_stock_only=true').json
        assert [row['product']['sku'] for row in low['items']] == [product.sku]

        value = client.get('/api/inventory/value').json
        assert value['total_units'] == 510
        assert value['total_value_cents'] == 10 * 100 + 500 * 80

    def test_never_stocked_product_reports_zero(self, client, db_session, product):
        response = client.get(f'/api/inventory/{product.id}')
        assert response.status_code == 200
        assert response.json['quantity_on_hand'] == 0
