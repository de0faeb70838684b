import threading

from inventory_core.category import CategoryRegistry
from inventory_core.client import CustomerRegistry
from inventory_core.company_settings import SettingsService
from inventory_core.dashboard import Dashboard
from inventory_core.inventory import ProductCatalog
from inventory_core.ledger import ItemEditPolicy
from inventory_core.procurement import PurchaseLedger
from inventory_core.sales import SalesLedger
from inventory_core.supplier import SupplierRegistry
from inventory_core.users import UserService


class InventoryServices:
    """Wires every service to one collection store and one ledger lock."""

    def __init__(self, store, bcrypt=None, default_exchange_rate=115,
                 default_categories=(), item_edit_policy=ItemEditPolicy.RECONCILE):
        self.store = store
        self.lock = threading.RLock()

        self.settings = SettingsService(store, default_exchange_rate)
        self.catalog = ProductCatalog(store, self.lock)
        self.categories = CategoryRegistry(store, self.catalog, default_categories)
        self.suppliers = SupplierRegistry(store)
        self.customers = CustomerRegistry(store)
        self.sales = SalesLedger(
            store, self.catalog, self.customers, self.settings, self.lock, item_edit_policy
        )
        self.purchases = PurchaseLedger(
            store, self.catalog, self.suppliers, self.settings, self.lock, item_edit_policy
        )
        self.dashboard = Dashboard(self.catalog, self.sales, self.purchases)
        self.users = UserService(store, bcrypt) if bcrypt is not None else None

    @classmethod
    def from_config(cls, store, config, bcrypt=None):
        return cls(
            store,
            bcrypt=bcrypt,
            default_exchange_rate=config.get('DEFAULT_EXCHANGE_RATE', 115),
            default_categories=config.get('DEFAULT_CATEGORIES', ()),
            item_edit_policy=ItemEditPolicy(config.get('LEDGER_ITEM_EDIT_POLICY', 'reconcile')),
        )
