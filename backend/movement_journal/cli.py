# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/movement_journal/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default System Administrator.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with roles and status.
# - python -m flask users create --username jdoe --full-name "Jane Doe" --password "Field1234" --role "Field Engineer"
#   Create a user (prompts if options are omitted).
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired or revoked session tokens older than the retention window.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .models import User
from .permissions import SYSTEM_ADMINISTRATOR, VALID_ROLES
from .services import session_service, user_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the movement journal: schema plus a default administrator.

    The administrator's credentials come from DEFAULT_ADMIN_USERNAME and
    DEFAULT_ADMIN_PASSWORD. Change the password immediately in production!
    """
    click.echo("START Initializing movement journal...")

    db.create_all()
    click.echo("PASS Schema ready")

    username = current_app.config["DEFAULT_ADMIN_USERNAME"]
    admin = db.session.query(User).filter_by(username=username).first()
    if admin:
        click.echo(f"PASS Using existing administrator: {admin.username} (ID: {admin.id})")
        return

    try:
        admin = user_service.create_user(
            {
                "username": username,
                "password": current_app.config["DEFAULT_ADMIN_PASSWORD"],
                "full_name": "System Administrator",
                "role": SYSTEM_ADMINISTRATOR,
            },
            actor_id=None,
        )
    except ServiceError as e:
        db.session.rollback()
        click.echo(f"FAIL Could not create administrator: {e.message}")
        return

    click.echo(f"PASS Created administrator: {admin.username} (ID: {admin.id})")
    click.echo("SECURITY Change the default password immediately!")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--full-name', prompt=True, help='Full name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(VALID_ROLES), prompt=True, help='Role')
@click.option('--district', 'districts', multiple=True, help='District (repeatable)')
@with_appcontext
def create_user_cli(username, full_name, password, role, districts):
    """
    Create a new user.

    Password must be at least 8 characters with a letter and a digit.
    """
    try:
        user = user_service.create_user(
            {
                "username": username,
                "full_name": full_name,
                "password": password,
                "role": role,
                "district": list(districts),
            },
            actor_id=None,
        )
        click.echo(f"PASS Created user: {user.username} with role '{user.role}'")
        click.echo("SECURITY Password securely hashed with bcrypt")
    except ServiceError as e:
        db.session.rollback()
        click.echo(f"FAIL Failed to create user: {e.message}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'Username':<20} {'Full name':<28} {'Status':<10} {'Role'}")
    click.echo("="*100)

    for user in users:
        click.echo(
            f"{user.id:<5} {user.username:<20} {(user.full_name or ''):<28} {user.status:<10} {user.role or 'none'}"
        )

    click.echo("="*100 + "\n")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired and revoked session tokens past the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} session tokens older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
