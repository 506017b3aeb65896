# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/sellerdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to sellerdesk (PowerShell: $env:FLASK_APP="sellerdesk").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Seller management:
# - python -m flask sellers list
#   List all sellers with active status.
# - python -m flask sellers create --name "Ada Books" --email ada@example.com
#   Create a new seller (tenant).
#
# Refund inspection:
# - python -m flask refunds stats --seller-id 1
#   Refund counts by status and approved total for one seller.
#
# Maintenance:
# - python -m flask maintenance cleanup-security-events --retention-days 90
#   Delete security events older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Seller
from .services import sales_service, security_service
from .services.persistence import SqlAlchemyStore
from .services.refund_service import RefundManager, refund_stats
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask sellers create' to add a seller.")


@click.group('sellers')
def sellers_group():
    """Seller (tenant) management commands."""


@sellers_group.command('list')
@with_appcontext
def list_sellers():
    """List all sellers."""
    sellers = db.session.query(Seller).order_by(Seller.id.asc()).all()
    if not sellers:
        click.echo("No sellers found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<30} {'Email':<35} {'Active':<6}")
    click.echo("-" * 80)
    for seller in sellers:
        active = "yes" if seller.is_active else "no"
        click.echo(f"{seller.id:<6} {seller.name:<30} {seller.email:<35} {active:<6}")


@sellers_group.command('create')
@click.option('--name', prompt=True, help='Seller display name')
@click.option('--email', prompt=True, help='Seller email (unique)')
@with_appcontext
def create_seller(name, email):
    """Create a new seller."""
    try:
        seller = sales_service.create_seller(name=name, email=email)
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created seller {seller.id}: {seller.name} <{seller.email}>")


@click.group('refunds')
def refunds_group():
    """Refund inspection commands."""


@refunds_group.command('stats')
@click.option('--seller-id', type=int, required=True, help='Seller to report on')
@with_appcontext
def refund_stats_cli(seller_id):
    """Show refund counts by status and the approved refund total."""
    if db.session.get(Seller, seller_id) is None:
        raise click.ClickException(f"Seller {seller_id} not found")

    manager = RefundManager(SqlAlchemyStore(), seller_id)
    stats = refund_stats(manager.list_refunds())

    click.echo(f"Refunds for seller {seller_id}:")
    click.echo(f"  total:    {stats['total_refunds']}")
    click.echo(f"  pending:  {stats['pending_refunds']}")
    click.echo(f"  approved: {stats['approved_refunds']}")
    click.echo(f"  rejected: {stats['rejected_refunds']}")
    click.echo(f"  approved amount: {stats['total_amount']:.2f}")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-security-events')
@click.option('--retention-days', type=int, default=90, show_default=True)
@with_appcontext
def cleanup_security_events_cli(retention_days):
    """
    Cleanup old security events.

    Default retention: 90 days.
    """
    deleted = security_service.cleanup_security_events(retention_days=retention_days)
    click.echo(f"Deleted {deleted} security events older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(sellers_group)
    app.cli.add_command(refunds_group)
    app.cli.add_command(maintenance_group)
