import os
from datetime import timedelta
from dotenv import load_dotenv

# Optional: Load .env early
load_dotenv()


class Config:
    """Base configuration (shared by all environments)"""

    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-key-please-change-12345')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PERMANENT_SESSION_LIFETIME = timedelta(minutes=60)

    # CSRF Protection
    WTF_CSRF_ENABLED = True
    WTF_CSRF_SECRET_KEY = os.environ.get('WTF_CSRF_SECRET_KEY', 'another-dev-secret-change-me')
    WTF_CSRF_TIME_LIMIT = 3600  # 1 hour

    # Uploads (CSV import)
    ALLOWED_EXTENSIONS = {'csv'}
    MAX_CONTENT_LENGTH = 4 * 1024 * 1024  # 4MB

    # Storage backend for the collection store: "sql" or "memory"
    INVENTORY_STORE = os.environ.get('INVENTORY_STORE', 'sql')

    # Ledger
    DEFAULT_EXCHANGE_RATE = float(os.environ.get('DEFAULT_EXCHANGE_RATE', 115))
    LEDGER_ITEM_EDIT_POLICY = os.environ.get('LEDGER_ITEM_EDIT_POLICY', 'reconcile')
    DEFAULT_CATEGORIES = [
        'Electronics',
        'Office Supplies',
        'Furniture',
        'Groceries',
        'Clothing',
        'Hardware',
    ]

    # Localisation
    BABEL_DEFAULT_LOCALE = 'en'
    BABEL_SUPPORTED_LOCALES = ['en', 'am']

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'true').lower() == 'true'

    def validate(self):
        if not self.SECRET_KEY or len(self.SECRET_KEY) < 16:
            raise ValueError("SECRET_KEY must be set and secure")
        if not self.WTF_CSRF_SECRET_KEY:
            raise ValueError("WTF_CSRF_SECRET_KEY must be set")
        if self.INVENTORY_STORE not in ('sql', 'memory'):
            raise ValueError(f"Unknown INVENTORY_STORE: {self.INVENTORY_STORE}")
        if self.LEDGER_ITEM_EDIT_POLICY not in ('ignore', 'reconcile'):
            raise ValueError(f"Unknown LEDGER_ITEM_EDIT_POLICY: {self.LEDGER_ITEM_EDIT_POLICY}")
        if self.DEFAULT_EXCHANGE_RATE <= 0:
            raise ValueError("DEFAULT_EXCHANGE_RATE must be positive")
        if self.INVENTORY_STORE == 'sql':
            if not hasattr(self, 'SQLALCHEMY_DATABASE_URI') or not self.SQLALCHEMY_DATABASE_URI:
                raise ValueError("SQLALCHEMY_DATABASE_URI must be set")


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///inventory.db')


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    INVENTORY_STORE = 'memory'
    WTF_CSRF_ENABLED = False
    LOG_TO_FILE = False
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    def validate(self):
        super().validate()
        if not self.SQLALCHEMY_DATABASE_URI:
            raise ValueError("DATABASE_URL is required in production")


# Shortcut dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
