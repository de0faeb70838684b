from inventory_core.registry import NamedRegistry
from inventory_core.store import CUSTOMERS


class CustomerRegistry(NamedRegistry):
    entity = 'Customer'
    collection = CUSTOMERS
    fields = ('name', 'email', 'phone', 'address', 'city', 'state')
