# inventory_core/cli.py

import click

from . import db, create_default_admin, get_services
from .store import COLLECTIONS


def register_commands(app):
    @app.cli.command("reset-db")
    def reset_db():
        """Drop every stored collection and recreate the tables."""
        services = get_services()
        services.store.clear()
        if app.config['INVENTORY_STORE'] == 'sql':
            db.drop_all()
            db.create_all()
        click.echo("✅ Database reset complete.")

    @app.cli.command("create-admin")
    def create_admin():
        """Create the default admin user from ADMIN_EMAIL / ADMIN_PASSWORD."""
        user = create_default_admin(app)
        click.echo(f"✅ Admin ready: {user.email}")

    @app.cli.command("stock-report")
    def stock_report():
        """Print record counts and low/out-of-stock products."""
        services = get_services()
        for name in COLLECTIONS:
            click.echo(f"{name}: {len(services.store.get(name))}")
        for product in services.catalog.low_stock():
            click.echo(f"LOW  {product['sku']} {product['name']} ({product['quantity']})")
        for product in services.catalog.out_of_stock():
            click.echo(f"OUT  {product['sku']} {product['name']}")
