"""
Pieces shared by the sales and purchase ledgers.

Every ledger operation runs as one unit of work:

1. stock changes are staged on a ``StockUnitOfWork`` which checks each
   withdrawal against the quantities it has staged so far,
2. only when every check passed are the deltas applied through
   ``ProductCatalog.adjust_stock``, in item order,
3. the order record is written,

all under the ledger lock and inside one store transaction, so a failure at
any point leaves products and orders as they were.
"""

import logging
from datetime import date
from enum import Enum as PyEnum

from inventory_core.errors import InsufficientStockError, InvalidDataError
from inventory_core.models import PaymentStatus, enum_values
from inventory_core.store import Repository

logger = logging.getLogger(__name__)


class ItemEditPolicy(PyEnum):
    """What an order update does when only the item list changed."""
    IGNORE = "ignore"          # leave stock alone (stock may drift from the items)
    RECONCILE = "reconcile"    # apply the per-product difference


def order_total(items):
    return sum(item['price_usd'] * item['quantity'] for item in items)


def quantities_by_product(items):
    totals = {}
    for item in items:
        totals[item['product_id']] = totals.get(item['product_id'], 0) + item['quantity']
    return totals


def quantity_changes(old_items, new_items):
    """Per-product ``new - old`` quantity, skipping products that did not move."""
    old = quantities_by_product(old_items)
    new = quantities_by_product(new_items)
    changes = {}
    for product_id in list(new) + [p for p in old if p not in new]:
        change = new.get(product_id, 0) - old.get(product_id, 0)
        if change:
            changes[product_id] = change
    return changes


def _is_number(value):
    return not isinstance(value, bool) and isinstance(value, (int, float))


class StockUnitOfWork:
    """Collects stock deltas and applies them only once every check passed."""

    def __init__(self, catalog):
        self.catalog = catalog
        self.deltas = []
        self._projected = {}

    def projected_quantity(self, product_id):
        if product_id not in self._projected:
            product = self.catalog.find_by_id(product_id)
            self._projected[product_id] = None if product is None else int(product.get('quantity') or 0)
        return self._projected[product_id]

    def withdraw(self, product_id, quantity, item_name):
        available = self.projected_quantity(product_id)
        if available is None or available < quantity:
            raise InsufficientStockError(item_name, available or 0, quantity)
        self._projected[product_id] = available - quantity
        self.deltas.append((product_id, -quantity))

    def deposit(self, product_id, quantity):
        current = self.projected_quantity(product_id)
        if current is not None:
            self._projected[product_id] = current + quantity
        self.deltas.append((product_id, quantity))

    def release(self, product_id, quantity):
        # Unchecked removal, used when reversing received purchases
        self.deposit(product_id, -quantity)

    def commit(self):
        for product_id, delta in self.deltas:
            self.catalog.adjust_stock(product_id, delta)
        applied, self.deltas = len(self.deltas), []
        return applied


class OrderLedger:
    """Common draft handling for both order types."""

    entity = 'Order'
    collection = None
    party_key = None
    editable_fields = ()

    def __init__(self, store, catalog, parties, settings, lock,
                 item_edit_policy=ItemEditPolicy.RECONCILE):
        self.store = store
        self.catalog = catalog
        self.parties = parties
        self.settings = settings
        self.orders = Repository(store, self.collection, entity=self.entity)
        self._lock = lock
        self.item_edit_policy = ItemEditPolicy(item_edit_policy)

    def list(self):
        return self.orders.all()

    def get(self, order_id):
        return self.orders.get(order_id)

    def _normalise_items(self, items):
        if not items:
            raise InvalidDataError("An order needs at least one item.")
        normalised = []
        for raw in items:
            product_id = raw.get('product_id')
            if not product_id:
                raise InvalidDataError("Every order item needs a product.")
            quantity = raw.get('quantity')
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise InvalidDataError("Item quantity must be a whole number greater than 0.")

            # Snapshot name and price so later product edits leave the order alone
            product = self.catalog.find_by_id(product_id)
            name = raw.get('name') or (product['name'] if product else product_id)
            price = raw.get('price_usd')
            if price is None:
                price = product.get('price', 0) if product else 0
            if not _is_number(price) or price < 0:
                raise InvalidDataError("Item price must be zero or positive.")

            normalised.append({
                'product_id': product_id,
                'name': name,
                'quantity': quantity,
                'price_usd': price,
            })
        return normalised

    def _party_name(self, party_id):
        party = self.parties.get(party_id) if party_id else None
        return party['name'] if party else 'Unknown'

    def _check_fields(self, order):
        if not _is_number(order.get('exchange_rate')) or order['exchange_rate'] <= 0:
            raise InvalidDataError("Exchange rate must be a number greater than 0.")
        if order.get('payment_status') not in enum_values(PaymentStatus):
            raise InvalidDataError(f"Unknown payment status: {order.get('payment_status')}")
        try:
            date.fromisoformat(str(order.get('order_date'))[:10])
        except ValueError:
            raise InvalidDataError(f"Invalid order date: {order.get('order_date')}")

    def _build(self, draft, defaults):
        party_id_key = f"{self.party_key}_id"
        party_name_key = f"{self.party_key}_name"

        order = dict(defaults)
        order.update({
            'order_date': date.today().isoformat(),
            'exchange_rate': self.settings.exchange_rate(),
            'payment_status': PaymentStatus.UNPAID.value,
        })
        order.update({
            k: v for k, v in draft.items()
            if k in self.editable_fields and v is not None
        })
        order[party_id_key] = draft.get(party_id_key)
        order[party_name_key] = draft.get(party_name_key) or self._party_name(order[party_id_key])
        order['items'] = self._normalise_items(draft.get('items'))
        order['total_amount_usd'] = order_total(order['items'])
        self._check_fields(order)
        return order

    def _merge(self, old, updates):
        party_id_key = f"{self.party_key}_id"
        party_name_key = f"{self.party_key}_name"

        merged = dict(old)
        merged.update({k: v for k, v in updates.items() if k in self.editable_fields})
        if 'items' in updates:
            merged['items'] = self._normalise_items(updates['items'])
        if updates.get(party_id_key) != old.get(party_id_key) and party_id_key in updates \
                and not updates.get(party_name_key):
            merged[party_name_key] = self._party_name(updates[party_id_key])
        merged['total_amount_usd'] = order_total(merged['items'])
        self._check_fields(merged)
        return merged

    def _items_changed(self, old, merged):
        return bool(quantity_changes(old['items'], merged['items']))
