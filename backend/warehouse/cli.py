# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/warehouse/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent). Use `flask db upgrade` for migrations.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog maintenance:
# - python -m flask catalog recompute-floor-prices [--product-id 3 --product-id 7]
#   Reset floor prices to cost plus FLOOR_PRICE_MARKUP_BPS.
#
# Inventory inspection:
# - python -m flask inventory low-stock [--limit 50]
#   List products at or below their reorder level.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services import inventory_service, products_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    click.echo("BUILD  Creating tables...")
    db.create_all()
    click.echo("PASS Database ready")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete")


@click.group('catalog')
def catalog_group():
    """Product catalog maintenance commands."""


@catalog_group.command('recompute-floor-prices')
@click.option('--product-id', 'product_ids', type=int, multiple=True, help='Limit to these products')
@with_appcontext
def recompute_floor_prices_cli(product_ids):
    """Reset floor prices from current cost and the configured markup."""
    markup_bps = current_app.config.get("FLOOR_PRICE_MARKUP_BPS")
    result = products_service.recompute_floor_prices(product_ids=list(product_ids) or None)

    click.echo(f"PASS Floor prices recomputed at {markup_bps} bps markup")
    click.echo(f"  Updated:   {result['updated']}")
    click.echo(f"  Unchanged: {result['unchanged']}")
    if result["above_retail"]:
        ids = ", ".join(str(pid) for pid in result["above_retail"])
        click.echo(f"WARN Floor price above retail for products: {ids}")


@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command('low-stock')
@click.option('--limit', type=int, default=100, show_default=True)
@with_appcontext
def low_stock_cli(limit):
    """List inventory at or below its reorder level."""
    rows = inventory_service.list_inventory(low_stock_only=True, limit=limit)
    if not rows:
        click.echo("No low-stock items.")
        return

    click.echo(f"{'SKU':<16} {'Name':<32} {'On hand':>8} {'Reorder at':>10} {'Reorder qty':>11}")
    for inv in rows:
        click.echo(
            f"{inv.product.sku:<16} {inv.product.name[:32]:<32} "
            f"{inv.quantity_on_hand:>8} {inv.reorder_level:>10} {inv.reorder_quantity:>11}"
        )
    click.echo(f"\n{len(rows)} item(s) need reordering.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(inventory_group)
