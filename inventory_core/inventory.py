import logging
import random
import string
import time

from inventory_core.errors import DuplicateSkuError, InvalidDataError, NotFoundError
from inventory_core.store import PRODUCTS, Repository

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    'sku', 'name', 'description', 'category', 'quantity',
    'reorder_level', 'price', 'image_url', 'barcode',
)


def _clean_product(data):
    product = {k: v for k, v in data.items() if k in PRODUCT_FIELDS or k == 'id'}

    for field in ('sku', 'name'):
        if field in product:
            product[field] = str(product[field] or '').strip()
            if not product[field]:
                raise InvalidDataError(f"Product {field} is required.")

    if 'quantity' in product:
        quantity = product['quantity']
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidDataError("Quantity must be a whole number of 0 or more.")

    if product.get('reorder_level') is not None:
        level = product['reorder_level']
        if isinstance(level, bool) or not isinstance(level, int) or level < 0:
            raise InvalidDataError("Reorder level must be a whole number of 0 or more.")

    if 'price' in product:
        price = product['price']
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            raise InvalidDataError("Price must be zero or positive.")

    return product


class ProductCatalog:
    """
    CRUD over product records plus the stock-adjustment primitive.

    ``adjust_stock`` is the only path the order ledger uses to change a
    product's quantity.
    """

    def __init__(self, store, lock):
        self.products = Repository(store, PRODUCTS, entity='Product')
        self._lock = lock

    def list(self, name=None, sku=None, category=None):
        products = self.products.all()
        if name:
            products = [p for p in products if name.lower() in p.get('name', '').lower()]
        if sku:
            products = [p for p in products if sku.lower() in p.get('sku', '').lower()]
        if category:
            products = [p for p in products if p.get('category') == category]
        return products

    def find_by_id(self, product_id):
        return self.products.get(product_id)

    def find_by_sku(self, sku):
        return self.products.find(lambda p: p.get('sku') == sku)

    def find_by_barcode(self, barcode):
        if not barcode:
            return None
        return self.products.find(lambda p: p.get('barcode') == barcode)

    def create(self, data):
        product = {
            'description': '',
            'category': '',
            'quantity': 0,
            'price': 0,
            'image_url': '',
            'barcode': '',
        }
        product.update(data)
        product.pop('id', None)
        for field in ('sku', 'name'):
            product.setdefault(field, '')
        product = _clean_product(product)

        with self._lock:
            if self.find_by_sku(product['sku']):
                raise DuplicateSkuError(product['sku'])
            created = self.products.add(product)
        logger.info(f"Product created: {created['sku']} - {created['name']} (Quantity: {created['quantity']})")
        return created

    def update(self, product_id, updates):
        updates = _clean_product({k: v for k, v in updates.items() if k != 'id'})
        with self._lock:
            product = self.products.get(product_id)
            if product is None:
                raise NotFoundError('Product', product_id)
            new_sku = updates.get('sku')
            if new_sku and new_sku != product['sku']:
                clash = self.products.find(lambda p: p.get('sku') == new_sku and p['id'] != product_id)
                if clash:
                    raise DuplicateSkuError(new_sku)
            product.update(updates)
            self.products.save(product)
        logger.debug(f"Product updated: {product['sku']} - {product['name']}")
        return product

    def delete(self, product_id):
        # Orders keep name/price snapshots, so there is no reference check
        removed = self.products.remove(product_id)
        if removed:
            logger.info(f"Product deleted: {removed['sku']} - {removed['name']}")
        return removed

    def adjust_stock(self, product_id, delta):
        """
        Add ``delta`` (signed int) to the product's quantity.

        Returns the updated product, or None when the product no longer
        exists; a missing product is skipped rather than treated as an error.
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidDataError("Stock adjustment must be a whole number.")
        with self._lock:
            product = self.products.get(product_id)
            if product is None:
                logger.warning(f"Stock adjustment of {delta:+d} skipped: product {product_id} not found")
                return None
            product['quantity'] = int(product.get('quantity') or 0) + delta
            self.products.save(product)

        logger.info(f"Stock {'IN' if delta >= 0 else 'OUT'}: {product['sku']} {delta:+d} -> {product['quantity']}")
        if product['quantity'] < 0:
            logger.warning(
                f"NEGATIVE STOCK ALERT: Product {product['sku']} has negative quantity: {product['quantity']}"
            )
        return product

    def low_stock(self):
        items = [
            p for p in self.products.all()
            if p.get('reorder_level') and 0 < p.get('quantity', 0) <= p['reorder_level']
        ]
        return sorted(items, key=lambda p: p['quantity'])

    def out_of_stock(self):
        return [p for p in self.products.all() if p.get('quantity', 0) == 0]

    @staticmethod
    def generate_sku():
        suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=4))
        return f"SKU-{str(int(time.time() * 1000))[-6:]}-{suffix}"
