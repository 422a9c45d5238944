"""CLI helpers for account resolution and error handling."""

from __future__ import annotations

import click
from ledgerfeed.domain.account import AccountService
from ledgerfeed.domain.entities import EntryCandidate
from ledgerfeed.utils.account_resolver import resolve_account
from ledgerfeed.utils.amount_parser import split_entry_option


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str
) -> str:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def entries_from_options_or_exit(
    ctx: click.Context,
    account_service: AccountService,
    debits: tuple[str, ...],
    credits: tuple[str, ...],
) -> list[EntryCandidate]:
    """Build entry candidates from repeated --debit/--credit ACCOUNT:AMOUNT options.

    Debit lines come first, then credit lines, each in the order given.
    """
    entries: list[EntryCandidate] = []
    for side, options in (("debit", debits), ("credit", credits)):
        for option in options:
            try:
                account, amount = split_entry_option(option)
            except ValueError as exc:
                click.echo(f"Error: Invalid {side} entry: {exc}", err=True)
                ctx.exit(1)
            account_id = resolve_account_or_exit(ctx, account_service, account)
            if side == "debit":
                entries.append(EntryCandidate(account_id=account_id, debit_amount=amount))
            else:
                entries.append(EntryCandidate(account_id=account_id, credit_amount=amount))
    return entries
