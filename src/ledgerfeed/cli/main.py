"""Main CLI entry point."""

import logging

import click
from ledgerfeed.database.factories import create_sqlite_database

# Import and register all commands at module level
from ledgerfeed.cli.commands import (
    account,
    post,
    transaction,
    user,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERFEED_DB_PATH environment variable)",
    envvar="LEDGERFEED_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log lifecycle and database activity")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Ledgerfeed - social feed with double-entry bookkeeping.

    Post short updates and turn them into balanced journal transactions that
    go through a pending/approved/rejected review.
    """
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
account.register_commands(cli)
post.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
