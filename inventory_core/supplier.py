from inventory_core.registry import NamedRegistry
from inventory_core.store import SUPPLIERS


class SupplierRegistry(NamedRegistry):
    entity = 'Supplier'
    collection = SUPPLIERS
    fields = ('name', 'contact_person', 'email', 'phone', 'address', 'city', 'state')
