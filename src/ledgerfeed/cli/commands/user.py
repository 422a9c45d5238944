"""User management commands."""

import click
from ledgerfeed.cli.error_handling import handle_domain_error
from ledgerfeed.domain.errors import DomainError
from ledgerfeed.domain.user import UserService


@click.group()
def user_group():
    """Manage users."""
    pass


@user_group.command("create")
@click.argument("name")
@click.argument("email")
@click.pass_context
def create_user(ctx, name: str, email: str):
    """Create a new user.

    Examples:
        ledgerfeed user create "Ada Lovelace" ada@example.com
    """
    service = UserService(ctx.obj["db"])

    try:
        user_id = service.create_user(name=name, email=email)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created user '{name}' (ID: {user_id})")


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    service = UserService(ctx.obj["db"])

    users = service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 80)
    for u in users:
        click.echo(f"{u.id} | {u.name:20s} | {u.email}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
