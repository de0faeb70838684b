"""
Collection store: the persistence port used by every inventory service.

A store maps a collection name ("products", "sales_orders", ...) to a list of
JSON records and only supports whole-collection reads and writes:

    store.get("products")          -> list of dicts (a private copy)
    store.put("products", records) -> replaces the collection

``transaction()`` groups several puts so that they land together. Leaving the
block with an exception restores what was there before it. Nested blocks join
the outermost one.

Two implementations are provided:
1. MemoryCollectionStore - process-local, used by tests and the "memory" backend
2. SqlCollectionStore    - one Flask-SQLAlchemy row per collection
"""

import json
import logging
import threading
import uuid
from contextlib import contextmanager

from sqlalchemy import delete

from inventory_core.errors import NotFoundError

logger = logging.getLogger(__name__)

PRODUCTS = 'products'
CATEGORIES = 'categories'
SUPPLIERS = 'suppliers'
CUSTOMERS = 'customers'
SALES_ORDERS = 'sales_orders'
PURCHASE_ORDERS = 'purchase_orders'
SETTINGS = 'settings'
USERS = 'users'

COLLECTIONS = (
    PRODUCTS, CATEGORIES, SUPPLIERS, CUSTOMERS,
    SALES_ORDERS, PURCHASE_ORDERS, SETTINGS, USERS,
)


def new_id():
    return uuid.uuid4().hex


class CollectionStore:
    """Base class holding the transaction bookkeeping shared by both backends."""

    def __init__(self):
        self._local = threading.local()

    @property
    def _depth(self):
        return getattr(self._local, 'depth', 0)

    @_depth.setter
    def _depth(self, value):
        self._local.depth = value

    @property
    def in_transaction(self):
        return self._depth > 0

    def get(self, name):
        raise NotImplementedError

    def put(self, name, records):
        raise NotImplementedError

    def exists(self, name):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    def _begin(self):
        pass

    def _commit(self):
        pass

    def _rollback(self):
        pass

    @contextmanager
    def transaction(self):
        outermost = self._depth == 0
        if outermost:
            self._begin()
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if outermost:
                self._rollback()
                logger.debug("Collection store transaction rolled back")
            raise
        else:
            self._depth -= 1
            if outermost:
                self._commit()


class MemoryCollectionStore(CollectionStore):
    """
    Keeps each collection as a JSON string, so every read is a fresh copy.

    A transaction remembers the previous value of each collection it writes
    (per thread), and a rollback restores only those collections. Writes made
    by other threads in the meantime are kept.
    """

    def __init__(self, initial=None):
        super().__init__()
        self._collections = {}
        for name, records in (initial or {}).items():
            self._collections[name] = json.dumps(records)

    @property
    def _undo(self):
        return getattr(self._local, 'undo', None)

    @_undo.setter
    def _undo(self, value):
        self._local.undo = value

    def get(self, name):
        raw = self._collections.get(name)
        return json.loads(raw) if raw is not None else []

    def put(self, name, records):
        undo = self._undo
        if self.in_transaction and undo is not None and name not in undo:
            undo[name] = self._collections.get(name)
        self._collections[name] = json.dumps(list(records))

    def exists(self, name):
        return name in self._collections

    def clear(self):
        self._collections = {}

    def _begin(self):
        self._undo = {}

    def _commit(self):
        self._undo = None

    def _rollback(self):
        for name, raw in (self._undo or {}).items():
            if raw is None:
                self._collections.pop(name, None)
            else:
                self._collections[name] = raw
        self._undo = None


class SqlCollectionStore(CollectionStore):
    """
    Stores every collection as one JSON row of ``stored_collection``.

    Outside a transaction each put commits immediately. Inside one, puts are
    flushed into the current session and committed (or rolled back) when the
    outermost block exits.
    """

    def __init__(self, db):
        super().__init__()
        self.db = db

    def _row(self, name):
        from inventory_core.models import StoredCollection
        return self.db.session.get(StoredCollection, name)

    def get(self, name):
        row = self._row(name)
        if row is None or row.payload is None:
            return []
        # Round-trip through JSON so callers never mutate the tracked payload
        return json.loads(json.dumps(row.payload))

    def put(self, name, records):
        from inventory_core.models import StoredCollection
        payload = json.loads(json.dumps(list(records)))
        row = self._row(name)
        if row is None:
            row = StoredCollection(name=name, payload=payload)
            self.db.session.add(row)
        else:
            row.payload = payload
        if self.in_transaction:
            self.db.session.flush()
        else:
            self.db.session.commit()

    def exists(self, name):
        return self._row(name) is not None

    def clear(self):
        from inventory_core.models import StoredCollection
        self.db.session.execute(delete(StoredCollection))
        self.db.session.commit()

    def _commit(self):
        self.db.session.commit()

    def _rollback(self):
        self.db.session.rollback()


class Repository:
    """Record-level helpers over one collection of a store."""

    def __init__(self, store, collection, entity='Record'):
        self.store = store
        self.collection = collection
        self.entity = entity

    def all(self):
        return self.store.get(self.collection)

    def get(self, record_id):
        return next((r for r in self.all() if r.get('id') == record_id), None)

    def find(self, predicate):
        return next((r for r in self.all() if predicate(r)), None)

    def filter(self, predicate):
        return [r for r in self.all() if predicate(r)]

    def require(self, record_id):
        record = self.get(record_id)
        if record is None:
            raise NotFoundError(self.entity, record_id)
        return record

    def add(self, data):
        records = self.all()
        record = dict(data)
        record['id'] = new_id()
        records.append(record)
        self.store.put(self.collection, records)
        return record

    def save(self, record):
        records = self.all()
        for index, existing in enumerate(records):
            if existing.get('id') == record['id']:
                records[index] = record
                self.store.put(self.collection, records)
                return record
        raise NotFoundError(self.entity, record['id'])

    def remove(self, record_id):
        records = self.all()
        kept = [r for r in records if r.get('id') != record_id]
        if len(kept) == len(records):
            return None
        self.store.put(self.collection, kept)
        return next(r for r in records if r.get('id') == record_id)

    def replace_all(self, records):
        self.store.put(self.collection, records)
