import logging

from inventory_core.errors import InvalidDataError
from inventory_core.ledger import ItemEditPolicy, OrderLedger, StockUnitOfWork, quantity_changes
from inventory_core.models import PurchaseStatus, ShippingStatus, enum_values
from inventory_core.store import PURCHASE_ORDERS

logger = logging.getLogger(__name__)

RECEIVED = ShippingStatus.RECEIVED.value


class PurchaseLedger(OrderLedger):
    """
    Purchase orders add their items to stock only while shipping status is
    "Received". Any shipping status may move to any other; entering Received
    adds the items once and leaving it (or deleting the order) removes them
    once. ``status`` and ``payment_status`` never affect stock.
    """

    entity = 'Purchase order'
    collection = PURCHASE_ORDERS
    party_key = 'supplier'
    editable_fields = (
        'supplier_id', 'supplier_name', 'items', 'order_date', 'status',
        'shipping_status', 'exchange_rate', 'payment_status',
    )

    def _check_fields(self, order):
        super()._check_fields(order)
        if order.get('status') not in enum_values(PurchaseStatus):
            raise InvalidDataError(f"Unknown purchase status: {order.get('status')}")
        if order.get('shipping_status') not in enum_values(ShippingStatus):
            raise InvalidDataError(f"Unknown shipping status: {order.get('shipping_status')}")

    def create_purchase_order(self, draft):
        order = self._build(draft, defaults={
            'status': PurchaseStatus.PENDING.value,
            'shipping_status': ShippingStatus.PENDING.value,
        })

        with self._lock, self.store.transaction():
            created = self.orders.add(order)
            if created['shipping_status'] == RECEIVED:
                work = StockUnitOfWork(self.catalog)
                for item in created['items']:
                    work.deposit(item['product_id'], item['quantity'])
                work.commit()

        logger.info(
            f"Purchase order {created['id']} created from {created['supplier_name']} "
            f"({created['shipping_status']}): {created['total_amount_usd']:.2f} USD"
        )
        return created

    def update_purchase_order(self, order_id, updates):
        with self._lock, self.store.transaction():
            old = self.orders.require(order_id)
            merged = self._merge(old, updates)
            was_received = old['shipping_status'] == RECEIVED
            is_received = merged['shipping_status'] == RECEIVED

            work = StockUnitOfWork(self.catalog)
            if is_received and not was_received:
                for item in merged['items']:
                    work.deposit(item['product_id'], item['quantity'])
            elif was_received and not is_received:
                for item in old['items']:
                    work.release(item['product_id'], item['quantity'])
            elif self._items_changed(old, merged):
                if self.item_edit_policy is ItemEditPolicy.RECONCILE and is_received:
                    for product_id, change in quantity_changes(old['items'], merged['items']).items():
                        work.deposit(product_id, change)
                elif is_received:
                    logger.warning(
                        f"Purchase order {order_id} items changed while received; "
                        f"stock left unchanged (policy: ignore)"
                    )
            work.commit()

            saved = self.orders.save(merged)

        if was_received != is_received:
            logger.info(
                f"Purchase order {order_id} shipping status {old['shipping_status']} -> {merged['shipping_status']}"
            )
        return saved

    def delete_purchase_order(self, order_id):
        with self._lock, self.store.transaction():
            order = self.orders.require(order_id)
            if order['shipping_status'] == RECEIVED:
                work = StockUnitOfWork(self.catalog)
                for item in order['items']:
                    work.release(item['product_id'], item['quantity'])
                work.commit()
            self.orders.remove(order_id)

        logger.info(f"Purchase order {order_id} deleted")
        return order
