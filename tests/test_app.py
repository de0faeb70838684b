import os
import unittest
from io import BytesIO

os.environ['FLASK_ENV'] = 'testing'

from app import app  # noqa: E402


class AppTestCase(unittest.TestCase):
    def setUp(self):
        app.config['TESTING'] = True
        self.services = app.extensions['inventory']
        self.services.store.clear()
        self.app = app.test_client()

    def login(self):
        rv = self.app.post('/register', json={
            'name': 'Admin', 'email': 'admin@example.com', 'password': 'admin123',
        })
        self.assertEqual(rv.status_code, 201)
        return rv

    def add_product(self, **fields):
        data = {'sku': 'PEN', 'name': 'Pen', 'quantity': 10, 'price': 1.5}
        data.update(fields)
        rv = self.app.post('/api/products', json=data)
        self.assertEqual(rv.status_code, 201, rv.get_json())
        return rv.get_json()


class AuthTestCase(AppTestCase):
    def test_api_requires_login(self):
        rv = self.app.get('/api/products')
        self.assertEqual(rv.status_code, 401)
        self.assertIn('error', rv.get_json())

    def test_register_logs_in(self):
        self.login()
        rv = self.app.get('/me')
        self.assertEqual(rv.get_json()['email'], 'admin@example.com')

    def test_login_and_logout(self):
        self.login()
        self.app.post('/logout')
        self.assertEqual(self.app.get('/me').status_code, 401)

        rv = self.app.post('/login', json={'email': 'admin@example.com', 'password': 'wrong-one'})
        self.assertEqual(rv.status_code, 401)
        rv = self.app.post('/login', json={'email': 'admin@example.com', 'password': 'admin123'})
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(self.app.get('/me').status_code, 200)

    def test_duplicate_registration(self):
        self.login()
        rv = self.app.post('/register', json={
            'name': 'Again', 'email': 'ADMIN@example.com', 'password': 'admin123',
        })
        self.assertEqual(rv.status_code, 409)

    def test_app_logger_is_configured(self):
        import app as app_module
        from utils.logger import LOGGER_NAMES
        self.assertIn(app_module.logger.name, LOGGER_NAMES)

    def test_invalid_form(self):
        rv = self.app.post('/register', json={'name': 'Admin', 'email': 'not-an-email', 'password': '1'})
        self.assertEqual(rv.status_code, 400)
        self.assertIn('email', rv.get_json()['fields'])
        self.assertIn('password', rv.get_json()['fields'])


class ProductRoutesTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        self.login()

    def test_product_crud(self):
        product = self.add_product(barcode='999')
        rv = self.app.get('/api/products?name=pe')
        self.assertEqual([p['sku'] for p in rv.get_json()], ['PEN'])

        rv = self.app.put(f"/api/products/{product['id']}", json={'price': 2})
        self.assertEqual(rv.get_json()['price'], 2)
        self.assertEqual(rv.get_json()['name'], 'Pen')

        self.assertEqual(self.app.get('/api/products/barcode/999').get_json()['id'], product['id'])
        self.assertEqual(self.app.get('/api/products/barcode/000').status_code, 404)

        self.assertEqual(self.app.delete(f"/api/products/{product['id']}").status_code, 200)
        self.assertEqual(self.app.get(f"/api/products/{product['id']}").status_code, 404)

    def test_duplicate_sku(self):
        self.add_product()
        rv = self.app.post('/api/products', json={'sku': 'PEN', 'name': 'Other pen'})
        self.assertEqual(rv.status_code, 409)

    def test_adjust_stock(self):
        product = self.add_product()
        rv = self.app.post(f"/api/products/{product['id']}/adjust", json={'delta': -4})
        self.assertEqual(rv.get_json()['quantity'], 6)
        rv = self.app.post('/api/products/missing/adjust', json={'delta': 1})
        self.assertEqual(rv.status_code, 404)

    def test_generate_sku(self):
        sku = self.app.get('/api/products/generate-sku').get_json()['sku']
        self.assertTrue(sku.startswith('SKU-'))


class LedgerRoutesTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        self.login()
        self.product = self.add_product()

    def quantity(self):
        return self.app.get(f"/api/products/{self.product['id']}").get_json()['quantity']

    def test_sales_order_flow(self):
        rv = self.app.post('/api/sales', json={
            'items': [{'product_id': self.product['id'], 'quantity': 4}],
        })
        self.assertEqual(rv.status_code, 201)
        order = rv.get_json()
        self.assertEqual(self.quantity(), 6)
        self.assertEqual(order['customer_name'], 'Unknown')

        rv = self.app.put(f"/api/sales/{order['id']}", json={'payment_status': 'Paid'})
        self.assertEqual(rv.get_json()['payment_status'], 'Paid')

        self.app.delete(f"/api/sales/{order['id']}")
        self.assertEqual(self.quantity(), 10)
        self.assertEqual(self.app.get(f"/api/sales/{order['id']}").status_code, 404)

    def test_insufficient_stock(self):
        rv = self.app.post('/api/sales', json={
            'items': [{'product_id': self.product['id'], 'quantity': 11}],
        })
        self.assertEqual(rv.status_code, 409)
        self.assertIn('Not enough stock for Pen', rv.get_json()['error'])
        self.assertEqual(self.quantity(), 10)

    def test_purchase_order_flow(self):
        supplier = self.app.post('/api/suppliers', json={'name': 'Acme'}).get_json()
        rv = self.app.post('/api/purchases', json={
            'supplier_id': supplier['id'],
            'items': [{'product_id': self.product['id'], 'quantity': 5}],
        })
        order = rv.get_json()
        self.assertEqual(order['supplier_name'], 'Acme')
        self.assertEqual(self.quantity(), 10)

        self.app.put(f"/api/purchases/{order['id']}", json={'shipping_status': 'Received'})
        self.assertEqual(self.quantity(), 15)
        self.app.delete(f"/api/purchases/{order['id']}")
        self.assertEqual(self.quantity(), 10)


class RegistryAndSettingsRoutesTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        self.login()

    def test_categories(self):
        names = [c['name'] for c in self.app.get('/api/categories').get_json()]
        self.assertIn('Electronics', names)
        rv = self.app.post('/api/categories', json={'name': 'electronics'})
        self.assertEqual(rv.status_code, 409)

        electronics = next(c for c in self.app.get('/api/categories').get_json() if c['name'] == 'Electronics')
        self.add_product(category='Electronics')
        self.assertEqual(self.app.delete(f"/api/categories/{electronics['id']}").status_code, 409)

    def test_customers(self):
        customer = self.app.post('/api/customers', json={'name': 'Selam', 'city': 'Adama'}).get_json()
        rv = self.app.put(f"/api/customers/{customer['id']}", json={'name': 'Selam PLC'})
        self.assertEqual(rv.get_json()['name'], 'Selam PLC')
        self.assertEqual(rv.get_json()['city'], 'Adama')
        self.app.delete(f"/api/customers/{customer['id']}")
        self.assertEqual(self.app.get('/api/customers').get_json(), [])

    def test_settings(self):
        self.assertEqual(self.app.get('/api/settings').get_json()['exchange_rate_usd_etb'], 115)
        rv = self.app.put('/api/settings', json={'exchange_rate_usd_etb': 125})
        self.assertEqual(rv.get_json()['exchange_rate_usd_etb'], 125)
        rv = self.app.put('/api/settings', json={'exchange_rate_usd_etb': 0})
        self.assertEqual(rv.status_code, 400)

    def test_dashboard(self):
        rv = self.app.get('/api/dashboard?preset=7d')
        self.assertEqual(rv.status_code, 200)
        self.assertIn('summary', rv.get_json())
        self.assertEqual(self.app.get('/api/dashboard?preset=decade').status_code, 400)
        self.assertEqual(self.app.get('/api/dashboard?start=yesterday').status_code, 400)


class CsvRoutesTestCase(AppTestCase):
    def setUp(self):
        super().setUp()
        self.login()

    def test_export(self):
        self.add_product()
        rv = self.app.get('/export/products.csv')
        self.assertEqual(rv.mimetype, 'text/csv')
        self.assertIn('attachment', rv.headers['Content-Disposition'])
        self.assertIn(b'PEN', rv.data)

    def test_import(self):
        body = b"name,sku,category,quantity,price\nChair,CH-1,Furniture,3,40\n"
        rv = self.app.post('/import/products', data={
            'file': (BytesIO(body), 'products.csv'),
        }, content_type='multipart/form-data')
        self.assertEqual(rv.get_json()['imported'], 1)
        self.assertEqual(len(self.services.catalog.list()), 1)

    def test_import_rejects_other_extensions(self):
        rv = self.app.post('/import/products', data={
            'file': (BytesIO(b"x"), 'products.txt'),
        }, content_type='multipart/form-data')
        self.assertEqual(rv.status_code, 400)


if __name__ == '__main__':
    unittest.main()
