import logging

from inventory_core.errors import DuplicateUserError, InvalidCredentialsError, InvalidDataError
from inventory_core.models import User
from inventory_core.store import USERS, Repository

logger = logging.getLogger(__name__)


class UserService:
    """Registration and credential checks over the ``users`` collection."""

    def __init__(self, store, bcrypt):
        self.users = Repository(store, USERS, entity='User')
        self.bcrypt = bcrypt

    def _by_email(self, email):
        email = (email or '').strip().lower()
        return self.users.find(lambda u: u['email'].lower() == email)

    def register(self, name, email, password):
        email = (email or '').strip()
        if not email or not password:
            raise InvalidDataError("Email and password are required.")
        if self._by_email(email):
            raise DuplicateUserError(email)
        hashed_pw = self.bcrypt.generate_password_hash(password).decode('utf-8')
        record = self.users.add({'name': (name or '').strip(), 'email': email, 'password': hashed_pw})
        logger.info(f"User registered: {email}")
        return User.from_record(record)

    def authenticate(self, email, password):
        record = self._by_email(email)
        if not record or not self.bcrypt.check_password_hash(record['password'], password or ''):
            logger.warning(f"Failed login for {email}")
            raise InvalidCredentialsError()
        return User.from_record(record)

    def get(self, user_id):
        record = self.users.get(user_id)
        return User.from_record(record) if record else None

    def ensure_user(self, name, email, password):
        """Create the user unless the email is already registered."""
        existing = self._by_email(email)
        if existing:
            return User.from_record(existing), False
        return self.register(name, email, password), True
