import logging

from inventory_core.errors import InvalidDataError, NotFoundError
from inventory_core.store import Repository

logger = logging.getLogger(__name__)


class NamedRegistry:
    """Plain CRUD over a collection whose records require a ``name``."""

    entity = 'Record'
    collection = None
    fields = ('name',)

    def __init__(self, store):
        self.records = Repository(store, self.collection, entity=self.entity)

    def _clean(self, data, partial=False):
        record = {k: v for k, v in data.items() if k in self.fields}
        if 'name' in record or not partial:
            record['name'] = str(record.get('name') or '').strip()
            if not record['name']:
                raise InvalidDataError(f"{self.entity} name is required.")
        return record

    def list(self):
        return self.records.all()

    def get(self, record_id):
        return self.records.get(record_id)

    def create(self, data):
        record = self.records.add(self._clean(data))
        logger.info(f"{self.entity} created: {record['name']}")
        return record

    def update(self, record_id, updates):
        record = self.records.get(record_id)
        if record is None:
            raise NotFoundError(self.entity, record_id)
        record.update(self._clean(updates, partial=True))
        return self.records.save(record)

    def delete(self, record_id):
        removed = self.records.remove(record_id)
        if removed:
            logger.info(f"{self.entity} deleted: {removed['name']}")
        return removed
