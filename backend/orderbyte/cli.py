# backend/orderbyte/cli.py
# Overview: Flask CLI commands for operating an OrderByte instance.
#
# system init-db
#   Create the schema and load the seed dataset (idempotent).
# system reset-db --yes
#   Drop every table, recreate the schema and reseed.
# orgs list | create | deactivate
#   Inspect and manage tenant organizations.
# staff list | create | roles
#   Inspect and manage an organization's staff directory.
# audit list
#   Print the newest audit log entries.

import click
from flask.cli import with_appcontext

from .extensions import db
from .permissions import ROLE_PERMISSIONS, get_permission_definition
from .seed_data import load_seed_data
from .services import audit_service, organization_service, staff_service
from .services.organization_service import DEFAULT_THEME
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """Store bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create the schema and load seed data if the store is empty."""
    db.create_all()
    if load_seed_data():
        click.echo("PASS Created schema and loaded seed data")
    else:
        click.echo("PASS Schema ready; seed data already present")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm dropping all data')
@with_appcontext
def reset_db(yes):
    """Drop all data, recreate the schema and reseed."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.session.remove()
    db.drop_all()
    db.create_all()
    load_seed_data()
    click.echo("PASS Store reset to seed data")


@click.group('orgs')
def orgs_group():
    """Organization (tenant) management."""


@orgs_group.command('list')
@click.option('--all', 'include_inactive', is_flag=True, help='Include inactive organizations')
@with_appcontext
def list_orgs(include_inactive):
    orgs = organization_service.list_organizations(include_inactive=include_inactive)
    if not orgs:
        click.echo("No organizations found.")
        return

    click.echo("\n" + "=" * 72)
    click.echo(f"{'ID':<24} {'Name':<32} {'Active':<8} {'Currency'}")
    click.echo("=" * 72)
    for org in orgs:
        active_str = "Yes" if org.is_active else "No"
        currency = (org.settings or {}).get("currency", "-")
        click.echo(f"{org.id:<24} {org.name:<32} {active_str:<8} {currency}")
    click.echo("=" * 72 + "\n")


@orgs_group.command('create')
@click.option('--id', 'org_id', required=True, help='Organization id (lowercase slug, used as subdomain)')
@click.option('--name', required=True, help='Display name')
@click.option('--primary', default=DEFAULT_THEME["primaryColor"], help='Primary colour (#rrggbb)')
@click.option('--secondary', default=DEFAULT_THEME["secondaryColor"], help='Secondary colour (#rrggbb)')
@click.option('--accent', default=DEFAULT_THEME["accentColor"], help='Accent colour (#rrggbb)')
@with_appcontext
def create_org(org_id, name, primary, secondary, accent):
    try:
        org = organization_service.create_organization(
            org_id=org_id,
            name=name,
            theme={"primaryColor": primary, "secondaryColor": secondary, "accentColor": accent},
        )
    except ValidationError as exc:
        click.echo(f"FAIL {exc}")
        raise SystemExit(1)
    audit_service.record("create", "organization", org.id, "cli", {"name": org.name})
    click.echo(f"PASS Created organization: {org.name} (ID: {org.id})")


@orgs_group.command('deactivate')
@click.option('--id', 'org_id', required=True, help='Organization id')
@with_appcontext
def deactivate_org(org_id):
    org = organization_service.find_organization(org_id)
    if org is None:
        click.echo(f"FAIL Organization '{org_id}' not found")
        raise SystemExit(1)
    if not organization_service.delete_organization(org_id):
        click.echo(f"FAIL Organization '{org_id}' is already inactive")
        raise SystemExit(1)
    audit_service.record("delete", "organization", org_id, "cli", {})
    click.echo(f"PASS Deactivated organization: {org_id}")


@click.group('staff')
def staff_group():
    """Staff directory management."""


@staff_group.command('list')
@click.option('--org', 'org_id', required=True, help='Organization id')
@with_appcontext
def list_staff(org_id):
    if organization_service.get_organization(org_id) is None:
        click.echo(f"FAIL Organization '{org_id}' not found or inactive")
        raise SystemExit(1)
    members = staff_service.list_staff(org_id)
    if not members:
        click.echo("No staff found.")
        return
    for member in members:
        login = "login" if member.password_hash else "no-login"
        click.echo(f"{member.id:<20} {member.email:<32} {member.role:<10} {login}")


@staff_group.command('create')
@click.option('--org', 'org_id', required=True, help='Organization id')
@click.option('--email', required=True)
@click.option('--name', required=True)
@click.option('--role', required=True, type=click.Choice(staff_service.STAFF_ROLES))
@click.option('--password', default=None, help='Optional login password')
@with_appcontext
def create_staff(org_id, email, name, role, password):
    if organization_service.get_organization(org_id) is None:
        click.echo(f"FAIL Organization '{org_id}' not found or inactive")
        raise SystemExit(1)
    try:
        member = staff_service.create_staff(org_id, email=email, name=name, role=role, password=password)
    except (ValidationError, ConflictError) as exc:
        click.echo(f"FAIL {exc}")
        raise SystemExit(1)
    audit_service.record("create", "user", member.id, "cli", {"organizationId": org_id, "email": member.email})
    click.echo(f"PASS Created staff member: {member.email} ({member.role}) in {org_id}")


@staff_group.command('roles')
def list_roles():
    """Print each staff role with the permissions it grants."""
    for role in staff_service.STAFF_ROLES:
        names = sorted(get_permission_definition(code)[1] for code in ROLE_PERMISSIONS.get(role, ()))
        click.echo(f"{role:<10} {', '.join(names)}")


@click.group('audit')
def audit_group():
    """Audit log inspection."""


@audit_group.command('list')
@click.option('--action', default=None, type=click.Choice(audit_service.AUDIT_ACTIONS))
@click.option('--entity-type', default=None, type=click.Choice(audit_service.ENTITY_TYPES))
@click.option('--limit', default=20, type=int, show_default=True)
@with_appcontext
def list_audit(action, entity_type, limit):
    entries = audit_service.list_entries(action=action, entity_type=entity_type, limit=limit)
    if not entries:
        click.echo("No audit entries found.")
        return
    for entry in entries:
        click.echo(
            f"{entry.to_dict()['performedAt']}  {entry.action:<16} {entry.entity_type:<13} "
            f"{entry.entity_id:<24} {entry.performed_by}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(orgs_group)
    app.cli.add_command(staff_group)
    app.cli.add_command(audit_group)
