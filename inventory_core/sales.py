import logging

from inventory_core.ledger import ItemEditPolicy, OrderLedger, StockUnitOfWork, quantity_changes
from inventory_core.store import SALES_ORDERS

logger = logging.getLogger(__name__)


class SalesLedger(OrderLedger):
    """
    Sales orders deduct stock when created and give it back when deleted.
    Payment status never affects stock.
    """

    entity = 'Sales order'
    collection = SALES_ORDERS
    party_key = 'customer'
    editable_fields = (
        'customer_id', 'customer_name', 'items', 'order_date',
        'exchange_rate', 'payment_status',
    )

    def create_sales_order(self, draft):
        order = self._build(draft, defaults={})

        with self._lock, self.store.transaction():
            work = StockUnitOfWork(self.catalog)
            for item in order['items']:
                work.withdraw(item['product_id'], item['quantity'], item['name'])
            work.commit()
            created = self.orders.add(order)

        logger.info(
            f"Sales order {created['id']} created for {created['customer_name']}: "
            f"{len(created['items'])} item(s), {created['total_amount_usd']:.2f} USD"
        )
        return created

    def update_sales_order(self, order_id, updates):
        with self._lock, self.store.transaction():
            old = self.orders.require(order_id)
            merged = self._merge(old, updates)

            if self._items_changed(old, merged):
                if self.item_edit_policy is ItemEditPolicy.RECONCILE:
                    work = StockUnitOfWork(self.catalog)
                    names = {i['product_id']: i['name'] for i in old['items'] + merged['items']}
                    for product_id, change in quantity_changes(old['items'], merged['items']).items():
                        if change > 0:
                            work.withdraw(product_id, change, names[product_id])
                        else:
                            work.deposit(product_id, -change)
                    work.commit()
                else:
                    logger.warning(
                        f"Sales order {order_id} items changed; stock left unchanged (policy: ignore)"
                    )

            saved = self.orders.save(merged)

        logger.info(f"Sales order {order_id} updated")
        return saved

    def delete_sales_order(self, order_id):
        with self._lock, self.store.transaction():
            order = self.orders.require(order_id)
            work = StockUnitOfWork(self.catalog)
            for item in order['items']:
                work.deposit(item['product_id'], item['quantity'])
            work.commit()
            self.orders.remove(order_id)

        logger.info(f"Sales order {order_id} deleted; {len(order['items'])} item(s) returned to stock")
        return order
