# Overview: Flask CLI command groups for bootstrap, inspection, and demo data.

# backend/verger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent: create missing tables and add missing columns (e.g. sales.client_id).
# - python -m flask system seed
#   Insert demo products and clients into empty tables.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Inspection:
# - python -m flask stock list [--alerts-only]
#   List products with stock levels and low-stock flags.
# - python -m flask clients list
#   List active clients.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services.seed_service import seed_sample_data


def _services():
    return current_app.extensions["verger"]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create the schema if absent and evolve it in place (idempotent)."""
    added = _services().store.initialize()
    if added:
        click.echo(f"PASS Added columns: {', '.join(added)}")
    else:
        click.echo("PASS Schema up to date")


@system_group.command('seed')
@with_appcontext
def seed_system():
    """Insert demo products and clients (only into empty tables)."""
    _services().store.initialize()
    inserted = seed_sample_data(_services())
    click.echo(f"PASS Inserted {inserted['products']} products, {inserted['clients']} clients")


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
    _services().store.initialize()
    click.echo("PASS Database reset")


@click.group('stock')
def stock_group():
    """Stock inspection commands."""


@stock_group.command('list')
@click.option('--alerts-only', is_flag=True, help='Only products below their alert threshold')
@with_appcontext
def list_stock(alerts_only):
    products = _services().products.list_products()
    if alerts_only:
        products = [p for p in products if p.stock_alert]
    if not products:
        click.echo("No products.")
        return
    for p in products:
        flag = "  LOW" if p.stock_alert else ""
        click.echo(f"{p.id:>4}  {p.name:<30} {p.stock_level:>10g} {p.unit:<6} [{p.category}]{flag}")


@click.group('clients')
def clients_group():
    """CRM inspection commands."""


@clients_group.command('list')
@with_appcontext
def list_clients():
    clients = _services().clients.list_active_clients()
    if not clients:
        click.echo("No active clients.")
        return
    for c in clients:
        click.echo(f"{c.id:>4}  {c.name:<30} {c.email or '-':<30} {c.phone or '-'}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stock_group)
    app.cli.add_command(clients_group)
