# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/vault/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with their roles.
# - python -m flask users create --username dev --email dev@iwb.local --full-name "Dev User" --password "Password123" --role developer
#   Create a user (prompts if options are omitted).
#
# Backups:
# - python -m flask backups create
#   Write a new snapshot to BACKUP_DIR.
# - python -m flask backups list
#   List snapshots, newest first.
# - python -m flask backups restore backup-2026-10-19T08-55-00-123Z.json
#   Replace table contents with a snapshot.
# - python -m flask backups prune --keep 5
#   Delete all but the newest snapshots.
#
# Client queries:
# - python -m flask queries classify "How much does it cost?"
#   Show the intent, confidence and whether the message would be auto-answered.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import USER_ROLES
from .storage import get_storage
from .services import backup_service
from .services.auth_service import register_user
from .services.nlp_service import get_classifier
from .validation import ValidationError


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

    click.echo("PASS Database reset complete. Run 'python -m flask users create' to add an account.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--full-name', prompt=True, help='Full name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(USER_ROLES), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, email, full_name, password, role):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    """
    try:
        user = register_user({
            "username": username,
            "email": email,
            "full_name": full_name,
            "password": password,
            "role": role,
        })
    except ValidationError as e:
        for err in e.errors:
            click.echo(f"FAIL {err['message']}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user['username']} ({user['email']}) with role '{user['role']}'")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = get_storage().list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Role':<12} {'Full name'}")
    click.echo("="*90)

    for user in users:
        click.echo(f"{user['id']:<5} {user['username']:<20} {user['email']:<30} {user['role']:<12} {user['full_name']}")

    click.echo("="*90 + "\n")


@click.group('backups')
def backups_group():
    """Snapshot backup, restore and retention commands."""


@backups_group.command('create')
@with_appcontext
def create_backup_cli():
    """Write a new snapshot of every table."""
    try:
        path = backup_service.create_backup()
    except backup_service.BackupError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    click.echo(f"PASS Backup created: {path}")


@backups_group.command('list')
@with_appcontext
def list_backups_cli():
    """List snapshots, newest first."""
    names = backup_service.get_available_backups()
    if not names:
        click.echo("No backups found.")
        return
    for name in names:
        click.echo(name)


@backups_group.command('restore')
@click.argument('backup_file')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def restore_backup_cli(backup_file, yes):
    """
    Replace table contents with BACKUP_FILE (a name from `backups list`).

    Not transactional: a failure part-way leaves tables partially restored.
    """
    if not yes:
        click.confirm(f"WARN This will REPLACE table contents with {backup_file}. Continue?", abort=True)

    try:
        path = backup_service.resolve_backup_path(backup_file)
        restored = backup_service.restore_from_backup(path)
    except backup_service.BackupError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    for table, count in restored.items():
        click.echo(f"  {table:<20} {count} rows")
    click.echo(f"PASS Restored from {backup_file}")


@backups_group.command('prune')
@click.option('--keep', type=click.IntRange(min=0), default=backup_service.DEFAULT_RETENTION, show_default=True,
              help='Number of newest snapshots to keep')
@with_appcontext
def prune_backups_cli(keep):
    """Delete all but the newest KEEP snapshots."""
    removed = backup_service.prune_backups(keep)
    for name in removed:
        click.echo(f"DELETE  {name}")
    click.echo(f"PASS Removed {len(removed)} backup(s)")


@click.group('queries')
def queries_group():
    """Client query tooling."""


@queries_group.command('classify')
@click.argument('message')
@with_appcontext
def classify_cli(message):
    """Show how MESSAGE would be routed by the intent classifier."""
    classifier = get_classifier()
    result = classifier.classify(message)
    auto = bool(result.intent) and result.confidence > classifier.threshold

    click.echo(f"Intent:     {result.intent or '-'}")
    click.echo(f"Confidence: {result.confidence:.3f} (threshold {classifier.threshold})")
    click.echo(f"Decision:   {'auto_complete' if auto else 'pending'}")
    if auto:
        click.echo(f"Answer:     {result.answer}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(backups_group)
    app.cli.add_command(queries_group)
