# inventory_core/models.py

from datetime import datetime, timezone
from enum import Enum as PyEnum
from flask_login import UserMixin
# Use shared db instance
from inventory_core import db


class StoredCollection(db.Model):
    """One row per named collection; the payload is the whole record list."""
    __tablename__ = 'stored_collection'

    name = db.Column(db.String(64), primary_key=True)
    payload = db.Column(db.JSON, nullable=False, default=list)
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<StoredCollection {self.name} ({len(self.payload or [])} records)>"


class PaymentStatus(PyEnum):
    UNPAID = "Unpaid"
    PAID = "Paid"
    PARTIAL = "Partial"


class PurchaseStatus(PyEnum):
    PENDING = "Pending"
    PARTIAL = "Partial"
    COMPLETE = "Complete"


class ShippingStatus(PyEnum):
    PENDING = "Pending"
    ON_THE_WAY = "On the Way"
    RECEIVED = "Received"


def enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(UserMixin):
    """Session user built from a stored user record (never holds the hash)."""

    def __init__(self, id, name, email):
        self.id = id
        self.name = name
        self.email = email

    @classmethod
    def from_record(cls, record):
        return cls(record['id'], record.get('name', ''), record['email'])

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}

    def __repr__(self):
        return f"<User {self.email}>"
