import logging

from inventory_core.errors import CategoryInUseError, DuplicateCategoryError, NotFoundError
from inventory_core.registry import NamedRegistry
from inventory_core.store import CATEGORIES, new_id

logger = logging.getLogger(__name__)


class CategoryRegistry(NamedRegistry):
    """
    Categories are referenced from products by name, so deleting one that a
    product still uses is refused.
    """

    entity = 'Category'
    collection = CATEGORIES

    def __init__(self, store, catalog, default_names=()):
        super().__init__(store)
        self.store = store
        self.catalog = catalog
        self.default_names = list(default_names)

    def list(self):
        # Seed the defaults the first time the collection is read
        if not self.store.exists(CATEGORIES):
            seeded = [{'id': new_id(), 'name': name} for name in self.default_names]
            self.records.replace_all(seeded)
            logger.info(f"Seeded {len(seeded)} default categories")
            return seeded
        return self.records.all()

    def _name_taken(self, name, exclude_id=None):
        return any(
            c['name'].lower() == name.lower() and c['id'] != exclude_id
            for c in self.list()
        )

    def create(self, data):
        record = self._clean(data)
        if self._name_taken(record['name']):
            raise DuplicateCategoryError(record['name'])
        return super().create(record)

    def update(self, record_id, updates):
        record = self._clean(updates, partial=True)
        if self.get(record_id) is None:
            raise NotFoundError(self.entity, record_id)
        if record.get('name') and self._name_taken(record['name'], exclude_id=record_id):
            raise DuplicateCategoryError(record['name'])
        return super().update(record_id, record)

    def get(self, record_id):
        return next((c for c in self.list() if c['id'] == record_id), None)

    def delete(self, record_id):
        category = self.get(record_id)
        if category and any(p.get('category') == category['name'] for p in self.catalog.list()):
            raise CategoryInUseError(category['name'])
        return super().delete(record_id)
