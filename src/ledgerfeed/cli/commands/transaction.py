"""Transaction management commands."""

import click
from ledgerfeed.cli.account_resolution import entries_from_options_or_exit
from ledgerfeed.cli.error_handling import handle_domain_error
from ledgerfeed.domain.account import AccountService
from ledgerfeed.domain.entities import (
    Transaction,
    TransactionCandidate,
    TransactionStatus,
    TransactionValidation,
)
from ledgerfeed.domain.errors import DomainError, PersistenceError
from ledgerfeed.domain.transaction import TransactionService
from ledgerfeed.domain.validation import format_currency
from ledgerfeed.utils.date_parser import parse_date


ENTRY_HELP = "ACCOUNT:AMOUNT, account by name or ID (repeatable)"


@click.group()
def transaction_group():
    """Manage journal transactions."""
    pass


def _parse_date_or_exit(ctx: click.Context, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _echo_transaction(txn: Transaction, account_names: dict[str, str]) -> None:
    click.echo(f"Transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Description: {txn.description}")
    click.echo(f"  Status: {txn.status.value}")
    click.echo(f"  Created by: {txn.created_by}")
    if txn.approved_by:
        click.echo(f"  Approved by: {txn.approved_by}")
    if txn.post_id:
        click.echo(f"  Post: {txn.post_id}")
    click.echo(f"  {'Account':<30} {'Debit':>15} {'Credit':>15}")
    for entry in txn.entries:
        name = account_names.get(entry.account_id, entry.account_id)
        debit = format_currency(entry.debit_amount) if entry.debit_amount else ""
        credit = format_currency(entry.credit_amount) if entry.credit_amount else ""
        click.echo(f"  {name:<30} {debit:>15} {credit:>15}")
    click.echo(
        f"  {'TOTAL':<30} {format_currency(txn.total_debits):>15} "
        f"{format_currency(txn.total_credits):>15}"
    )


def _echo_validation(validation: TransactionValidation) -> None:
    click.echo(f"Debits:  {format_currency(validation.total_debits)}")
    click.echo(f"Credits: {format_currency(validation.total_credits)}")
    click.echo(f"Balance: {format_currency(validation.balance)}")


@transaction_group.command("create")
@click.option("--description", required=True, help="What the transaction is for")
@click.option("--date", "date_str", default="today", show_default=True,
              help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--created-by", required=True, help="Creator user ID")
@click.option("--post", "post_id", help="Post ID to link the transaction to")
@click.option("--debit", "debits", multiple=True, help=ENTRY_HELP)
@click.option("--credit", "credits", multiple=True, help=ENTRY_HELP)
@click.pass_context
def create_transaction(
    ctx,
    description: str,
    date_str: str,
    created_by: str,
    post_id: str | None,
    debits: tuple[str, ...],
    credits: tuple[str, ...],
):
    """Record a transaction. It starts out pending approval.

    Examples:
        ledgerfeed transaction create --description "Office supplies" \\
            --created-by <USER_ID> --debit "Office Supplies:100" --credit Cash:100
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    candidate = TransactionCandidate(
        description=description,
        date=_parse_date_or_exit(ctx, date_str),
        created_by=created_by,
        entries=entries_from_options_or_exit(ctx, account_service, debits, credits),
        post_id=post_id,
    )

    try:
        txn = service.create_transaction(candidate)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created transaction {txn.id} (pending approval)")
    click.echo(f"  Total: {format_currency(txn.total_debits)}")


@transaction_group.command("check")
@click.option("--description", default="", help="What the transaction is for")
@click.option("--date", "date_str", default="today", show_default=True, help="Transaction date")
@click.option("--created-by", default="", help="Creator user ID")
@click.option("--debit", "debits", multiple=True, help=ENTRY_HELP)
@click.option("--credit", "credits", multiple=True, help=ENTRY_HELP)
@click.pass_context
def check_transaction(ctx, description, date_str, created_by, debits, credits):
    """Validate a transaction without saving it and show its totals."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    candidate = TransactionCandidate(
        description=description,
        date=_parse_date_or_exit(ctx, date_str),
        created_by=created_by,
        entries=entries_from_options_or_exit(ctx, account_service, debits, credits),
    )
    validation = service.preview_transaction(candidate)
    _echo_validation(validation)
    if validation.is_valid:
        click.echo("Transaction is valid.")
        return
    for problem in validation.errors:
        click.echo(f"  - {problem}")
    ctx.exit(1)


@transaction_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in TransactionStatus]),
              help="Only show transactions with this status")
@click.option("--post", "post_id", help="Only show the transaction of this post")
@click.pass_context
def list_transactions(ctx, status: str | None, post_id: str | None):
    """List transactions, newest first."""
    service = TransactionService(ctx.obj["db"])

    transactions = service.list_transactions(
        status=TransactionStatus(status) if status else None, post_id=post_id
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(f"{'ID':<37} {'Date':<12} {'Status':<9} {'Amount':>15}  {'Description':<30}")
    click.echo("-" * 110)
    for txn in transactions:
        click.echo(
            f"{txn.id:<37} {str(txn.date):<12} {txn.status.value:<9} "
            f"{format_currency(txn.total_debits):>15}  {txn.description[:30]:<30}"
        )


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str):
    """Show a transaction with its entries."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    accounts = {acc.id: acc.name for acc in AccountService(db).list_accounts()}
    _echo_transaction(txn, accounts)


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--description", help="New description")
@click.option("--date", "date_str", help="New date")
@click.option("--debit", "debits", multiple=True, help=ENTRY_HELP + "; replaces all entries")
@click.option("--credit", "credits", multiple=True, help=ENTRY_HELP + "; replaces all entries")
@click.pass_context
def update_transaction(ctx, transaction_id, description, date_str, debits, credits) -> None:
    """Edit a pending or rejected transaction.

    Any edit sends the transaction back to pending. Giving --debit or --credit
    replaces every entry; otherwise entries are kept.
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    entries = None
    if debits or credits:
        entries = entries_from_options_or_exit(ctx, AccountService(db), debits, credits)

    candidate = TransactionCandidate(
        description=description,
        date=_parse_date_or_exit(ctx, date_str) if date_str is not None else None,
        entries=entries,
    )

    try:
        service.update_transaction(transaction_id, candidate)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id} (pending approval)")


@transaction_group.command("approve")
@click.argument("transaction_id")
@click.option("--approver", "approver_id", required=True, help="Approving user ID")
@click.pass_context
def approve_transaction(ctx, transaction_id: str, approver_id: str) -> None:
    """Approve a pending transaction. Approved transactions are final."""
    service = TransactionService(ctx.obj["db"])

    try:
        txn = service.approve_transaction(transaction_id, approver_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
    if txn.status == TransactionStatus.APPROVED and txn.approved_by == approver_id:
        click.echo(f"Approved transaction {transaction_id}")
    else:
        click.echo(f"Transaction {transaction_id} is {txn.status.value}; nothing to approve")


@transaction_group.command("reject")
@click.argument("transaction_id")
@click.pass_context
def reject_transaction(ctx, transaction_id: str) -> None:
    """Reject a pending transaction."""
    service = TransactionService(ctx.obj["db"])

    try:
        txn = service.reject_transaction(transaction_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} is {txn.status.value}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction that is not approved.

    Examples:
        ledgerfeed transaction delete <TRANSACTION_ID>
    """
    service = TransactionService(ctx.obj["db"])

    # Confirm deletion
    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {transaction_id}?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
