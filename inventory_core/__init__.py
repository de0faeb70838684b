# inventory_core/__init__.py
import logging
import os
from flask import Flask, current_app, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_wtf.csrf import CSRFProtect
from flask_babel import Babel, _
from flask_login import LoginManager

# Single db instance
db = SQLAlchemy()
bcrypt = Bcrypt()
csrf = CSRFProtect()
babel = Babel()
login_manager = LoginManager()
# Config
from .config import config as app_config

logger = logging.getLogger(__name__)


def get_locale():
    return request.args.get('lang') or request.accept_languages.best_match(
        app_config['default'].BABEL_SUPPORTED_LOCALES or ['en']
    )


def get_services():
    """The InventoryServices bound to the current app."""
    return current_app.extensions['inventory']


def create_default_admin(app=None):
    app = app or current_app
    services = app.extensions['inventory']
    user, created = services.users.ensure_user(
        'System Admin',
        os.environ.get('ADMIN_EMAIL', 'admin@example.com'),
        os.environ.get('ADMIN_PASSWORD', 'admin123'),
    )
    if created:
        logger.info(f"✅ Default admin created: {user.email}")
    else:
        logger.info("ℹ️ Admin already exists.")
    return user


def create_app(config_name=None):
    app = Flask(__name__)

    # Load config
    env = config_name or os.getenv('FLASK_ENV') or 'production'
    config_class = app_config.get(env)
    if not config_class:
        raise ValueError(f"Unknown config: {env}")

    config_instance = config_class()
    config_instance.validate()
    app.config.from_object(config_instance)

    from utils.logger import setup_logging
    setup_logging(app.config['LOG_LEVEL'], app.config['LOG_DIR'], app.config['LOG_TO_FILE'])
    logger.info(f"🔧 Loaded config: {env} (store: {app.config['INVENTORY_STORE']})")

    # Initialize extensions
    if app.config.get('SQLALCHEMY_DATABASE_URI'):
        db.init_app(app)
    bcrypt.init_app(app)
    csrf.init_app(app)
    babel.init_app(app, locale_selector=get_locale)

    login_manager.init_app(app)
    login_manager.login_view = None

    @login_manager.user_loader
    def load_user(user_id):
        # A user removed from the store drops out of the session here
        return get_services().users.get(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': _("Please log in to access this page.")}), 401

    from .services import InventoryServices
    from .store import MemoryCollectionStore, SqlCollectionStore
    if app.config['INVENTORY_STORE'] == 'sql':
        from . import models  # noqa: F401  registers StoredCollection
        with app.app_context():
            db.create_all()
        store = SqlCollectionStore(db)
    else:
        store = MemoryCollectionStore()
    app.extensions['inventory'] = InventoryServices.from_config(store, app.config, bcrypt=bcrypt)

    from .cli import register_commands
    register_commands(app)

    return app
