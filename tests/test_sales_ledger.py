import unittest
from datetime import date
from unittest import mock

from inventory_core import create_app, db
from inventory_core.errors import InsufficientStockError, InvalidDataError, NotFoundError
from inventory_core.ledger import ItemEditPolicy, order_total, quantity_changes
from inventory_core.services import InventoryServices
from inventory_core.store import MemoryCollectionStore, SqlCollectionStore


class SalesLedgerTestCase(unittest.TestCase):
    policy = ItemEditPolicy.RECONCILE

    def setUp(self):
        self.services = InventoryServices(MemoryCollectionStore(), item_edit_policy=self.policy)
        catalog = self.services.catalog
        self.pen = catalog.create({'sku': 'PEN', 'name': 'Pen', 'quantity': 10, 'price': 1.5})
        self.book = catalog.create({'sku': 'BOOK', 'name': 'Notebook', 'quantity': 5, 'price': 4})
        self.customer = self.services.customers.create({'name': 'Selam Trading'})
        self.sales = self.services.sales

    def quantity(self, product):
        return self.services.catalog.find_by_id(product['id'])['quantity']

    def create_order(self, **overrides):
        draft = {
            'customer_id': self.customer['id'],
            'items': [
                {'product_id': self.pen['id'], 'quantity': 3},
                {'product_id': self.book['id'], 'quantity': 2},
            ],
        }
        draft.update(overrides)
        return self.sales.create_sales_order(draft)


class CreateSalesOrderTestCase(SalesLedgerTestCase):
    def test_create_deducts_stock_and_fills_defaults(self):
        order = self.create_order()
        self.assertEqual(self.quantity(self.pen), 7)
        self.assertEqual(self.quantity(self.book), 3)
        self.assertEqual(order['customer_name'], 'Selam Trading')
        self.assertEqual(order['payment_status'], 'Unpaid')
        self.assertEqual(order['exchange_rate'], 115)
        self.assertEqual(order['order_date'], date.today().isoformat())
        self.assertEqual(order['total_amount_usd'], 3 * 1.5 + 2 * 4)
        self.assertEqual(order['items'][0]['name'], 'Pen')
        self.assertEqual(len(self.sales.list()), 1)

    def test_exchange_rate_comes_from_settings(self):
        self.services.settings.save({'exchange_rate_usd_etb': 130})
        self.assertEqual(self.create_order()['exchange_rate'], 130)

    def test_unknown_customer_name(self):
        order = self.create_order(customer_id=None)
        self.assertEqual(order['customer_name'], 'Unknown')

    def test_insufficient_stock_leaves_everything_unchanged(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self.create_order(items=[
                {'product_id': self.pen['id'], 'quantity': 2},
                {'product_id': self.book['id'], 'quantity': 6},
            ])
        self.assertEqual(ctx.exception.available, 5)
        self.assertEqual(ctx.exception.requested, 6)
        self.assertIn('Notebook', ctx.exception.message)
        self.assertEqual(self.quantity(self.pen), 10)
        self.assertEqual(self.quantity(self.book), 5)
        self.assertEqual(self.sales.list(), [])

    def test_repeated_product_is_checked_cumulatively(self):
        with self.assertRaises(InsufficientStockError):
            self.create_order(items=[
                {'product_id': self.book['id'], 'quantity': 3},
                {'product_id': self.book['id'], 'quantity': 3},
            ])
        self.assertEqual(self.quantity(self.book), 5)

    def test_missing_product_counts_as_no_stock(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self.create_order(items=[{'product_id': 'gone', 'quantity': 1, 'name': 'Gone'}])
        self.assertEqual(ctx.exception.available, 0)

    def test_invalid_drafts(self):
        with self.assertRaises(InvalidDataError):
            self.create_order(items=[])
        with self.assertRaises(InvalidDataError):
            self.create_order(items=[{'product_id': self.pen['id'], 'quantity': 0}])
        with self.assertRaises(InvalidDataError):
            self.create_order(payment_status='Maybe')
        with self.assertRaises(InvalidDataError):
            self.create_order(exchange_rate=0)
        with self.assertRaises(InvalidDataError):
            self.create_order(order_date='not-a-date')
        self.assertEqual(self.quantity(self.pen), 10)

    def test_explicit_price_snapshot(self):
        order = self.create_order(items=[{'product_id': self.pen['id'], 'quantity': 2, 'price_usd': 2.25}])
        self.assertEqual(order['total_amount_usd'], 4.5)
        self.services.catalog.update(self.pen['id'], {'price': 100})
        self.assertEqual(self.sales.get(order['id'])['items'][0]['price_usd'], 2.25)


class DeleteSalesOrderTestCase(SalesLedgerTestCase):
    def test_delete_restores_stock(self):
        order = self.create_order()
        self.sales.delete_sales_order(order['id'])
        self.assertEqual(self.quantity(self.pen), 10)
        self.assertEqual(self.quantity(self.book), 5)
        self.assertIsNone(self.sales.get(order['id']))

    def test_delete_missing_order(self):
        with self.assertRaises(NotFoundError):
            self.sales.delete_sales_order('missing')

    def test_delete_skips_removed_products(self):
        order = self.create_order()
        self.services.catalog.delete(self.book['id'])
        self.sales.delete_sales_order(order['id'])
        self.assertEqual(self.quantity(self.pen), 10)
        self.assertEqual(self.sales.list(), [])


class UpdateSalesOrderTestCase(SalesLedgerTestCase):
    def test_payment_status_never_touches_stock(self):
        order = self.create_order()
        updated = self.sales.update_sales_order(order['id'], {'payment_status': 'Paid'})
        self.assertEqual(updated['payment_status'], 'Paid')
        self.assertEqual(self.quantity(self.pen), 7)
        self.assertEqual(self.quantity(self.book), 3)

    def test_reconcile_item_changes(self):
        order = self.create_order()
        updated = self.sales.update_sales_order(order['id'], {'items': [
            {'product_id': self.pen['id'], 'quantity': 5},
            {'product_id': self.book['id'], 'quantity': 1},
        ]})
        self.assertEqual(self.quantity(self.pen), 5)
        self.assertEqual(self.quantity(self.book), 4)
        self.assertEqual(updated['total_amount_usd'], 5 * 1.5 + 1 * 4)

    def test_reconcile_rejects_increase_beyond_stock(self):
        order = self.create_order()
        with self.assertRaises(InsufficientStockError):
            self.sales.update_sales_order(order['id'], {'items': [
                {'product_id': self.pen['id'], 'quantity': 1},
                {'product_id': self.book['id'], 'quantity': 9},
            ]})
        self.assertEqual(self.quantity(self.pen), 7)
        self.assertEqual(self.quantity(self.book), 3)
        self.assertEqual(self.sales.get(order['id'])['items'], order['items'])

    def test_changing_customer_updates_name(self):
        order = self.create_order()
        other = self.services.customers.create({'name': 'Abebe Shop'})
        updated = self.sales.update_sales_order(order['id'], {'customer_id': other['id']})
        self.assertEqual(updated['customer_name'], 'Abebe Shop')

    def test_update_missing_order(self):
        with self.assertRaises(NotFoundError):
            self.sales.update_sales_order('missing', {'payment_status': 'Paid'})


class IgnoreItemEditsTestCase(SalesLedgerTestCase):
    policy = ItemEditPolicy.IGNORE

    def test_item_changes_leave_stock_alone(self):
        order = self.create_order()
        with self.assertLogs('inventory_core.sales', level='WARNING'):
            updated = self.sales.update_sales_order(order['id'], {'items': [
                {'product_id': self.pen['id'], 'quantity': 1},
            ]})
        self.assertEqual(updated['total_amount_usd'], 1.5)
        self.assertEqual(self.quantity(self.pen), 7)
        self.assertEqual(self.quantity(self.book), 3)


class FailedApplyTestCase(unittest.TestCase):
    """A stock adjustment failing halfway through an order undoes the whole order."""

    def make_store(self):
        return MemoryCollectionStore()

    def setUp(self):
        self.services = InventoryServices(self.make_store())
        catalog = self.services.catalog
        self.first = catalog.create({'sku': 'A', 'name': 'First', 'quantity': 10, 'price': 1})
        self.second = catalog.create({'sku': 'B', 'name': 'Second', 'quantity': 10, 'price': 1})

    def quantity(self, product):
        return self.services.catalog.find_by_id(product['id'])['quantity']

    def test_second_adjustment_failing_leaves_stock_and_orders(self):
        catalog = self.services.catalog
        adjust_stock = catalog.adjust_stock
        calls = []

        def fail_on_second_call(product_id, delta):
            calls.append(product_id)
            if len(calls) == 2:
                raise RuntimeError("storage unavailable")
            return adjust_stock(product_id, delta)

        with mock.patch.object(catalog, 'adjust_stock', side_effect=fail_on_second_call):
            with self.assertRaises(RuntimeError):
                self.services.sales.create_sales_order({'items': [
                    {'product_id': self.first['id'], 'quantity': 4},
                    {'product_id': self.second['id'], 'quantity': 2},
                ]})

        self.assertEqual(len(calls), 2)
        self.assertEqual(self.quantity(self.first), 10)
        self.assertEqual(self.quantity(self.second), 10)
        self.assertEqual(self.services.sales.list(), [])


class SqlFailedApplyTestCase(FailedApplyTestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = create_app('testing')

    def make_store(self):
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()
        return SqlCollectionStore(db)

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()


class LedgerHelpersTestCase(unittest.TestCase):
    def test_order_total(self):
        items = [{'price_usd': 2.5, 'quantity': 2}, {'price_usd': 1, 'quantity': 3}]
        self.assertEqual(order_total(items), 8)
        self.assertEqual(order_total([]), 0)

    def test_quantity_changes(self):
        old = [{'product_id': 'a', 'quantity': 2}, {'product_id': 'b', 'quantity': 1}]
        new = [{'product_id': 'a', 'quantity': 2}, {'product_id': 'c', 'quantity': 4}]
        self.assertEqual(quantity_changes(old, new), {'c': 4, 'b': -1})


if __name__ == '__main__':
    unittest.main()
