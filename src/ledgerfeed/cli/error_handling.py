"""CLI error handling helpers."""

import click

from ledgerfeed.domain.errors import DomainError, PersistenceError


def handle_domain_error(ctx: click.Context, error: DomainError | PersistenceError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Errors carrying several problems are printed one problem per line.
    """
    problems = getattr(error, "errors", None) or [str(error)]
    if len(problems) == 1:
        click.echo(f"Error: {problems[0]}", err=True)
    else:
        click.echo("Error:", err=True)
        for problem in problems:
            click.echo(f"  - {problem}", err=True)
    ctx.exit(1)
