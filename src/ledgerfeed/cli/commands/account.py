"""Account management commands."""

import click
from ledgerfeed.cli.account_resolution import resolve_account_or_exit
from ledgerfeed.cli.error_handling import handle_domain_error
from ledgerfeed.domain.account import AccountService
from ledgerfeed.domain.entities import AccountType
from ledgerfeed.domain.errors import DomainError


@click.group()
def account_group():
    """Manage ledger accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice([t.value for t in AccountType]),
    help="Account classification",
)
@click.option("--category", help="Free-text category (defaults to the account type)")
@click.pass_context
def create_account(ctx, name: str, account_type: str, category: str | None):
    """Create a new account.

    Examples:
        ledgerfeed account create "Cash" --type asset --category "Current Assets"
        ledgerfeed account create "Office Supplies" --type expense
    """
    service = AccountService(ctx.obj["db"])

    category_name = category if category is not None else account_type.capitalize()

    try:
        account_id = service.create_account(
            name=name, account_type=account_type, category=category_name
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")
    if category is None:
        click.echo(f"Category set to '{category_name}'")


@account_group.command("list")
@click.option("--active", "active_only", is_flag=True, help="Only show active accounts")
@click.pass_context
def list_accounts(ctx, active_only: bool):
    """List accounts grouped by type."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(active_only=active_only)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"{acc.id} | {acc.account_type.value:9s} | {acc.name:20s} | {acc.category}{status}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="Corrected account name")
@click.option("--category", help="Corrected category")
@click.pass_context
def update_account(ctx, account: str, name: str | None, category: str | None) -> None:
    """Correct the name or category of an account.

    ACCOUNT can be an account name or ID. The account type cannot change.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    if name is None and category is None:
        click.echo("Error: Nothing to update; pass --name and/or --category", err=True)
        ctx.exit(1)

    try:
        service.update_account(account_id, name=name, category=category)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account {account_id}")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account so new transactions cannot use it."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    service.set_active(account_id, False)
    click.echo(f"Deactivated account {account_id}")


@account_group.command("activate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def activate_account(ctx, account: str) -> None:
    """Re-activate a deactivated account."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    service.set_active(account_id, True)
    click.echo(f"Activated account {account_id}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def delete_account(ctx, account: str) -> None:
    """Delete an account that no transaction uses."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account {account_id}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
