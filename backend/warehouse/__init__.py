# backend/warehouse/__init__.py
import logging

from flask import Flask

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.catalog import catalog_bp
    from .routes.products import products_bp
    from .routes.inventory import inventory_bp
    from .routes.vendors import vendors_bp
    from .routes.purchase_orders import purchase_orders_bp
    from .routes.customers import customers_bp
    from .routes.sales_orders import sales_orders_bp
    from .routes.dashboard import dashboard_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(purchase_orders_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(sales_orders_bp)
    app.register_blueprint(dashboard_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
