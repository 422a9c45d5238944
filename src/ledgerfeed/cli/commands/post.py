"""Feed post commands."""

import click
from ledgerfeed.cli.error_handling import handle_domain_error
from ledgerfeed.domain.errors import DomainError
from ledgerfeed.domain.post import PostService


@click.group()
def post_group():
    """Manage feed posts."""
    pass


@post_group.command("create")
@click.argument("content")
@click.option("--author", "author_id", required=True, help="Author user ID")
@click.option("--persona", required=True, help="Persona the author posts as")
@click.pass_context
def create_post(ctx, content: str, author_id: str, persona: str):
    """Post a short update.

    Examples:
        ledgerfeed post create "Bought printer paper" --author <USER_ID> --persona Bookkeeper
    """
    service = PostService(ctx.obj["db"])

    try:
        post_id = service.create_post(content=content, author_id=author_id, author_persona=persona)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created post {post_id}")


@post_group.command("list")
@click.option("--author", "author_id", help="Only show posts by this user ID")
@click.pass_context
def list_posts(ctx, author_id: str | None):
    """Show the feed, newest first."""
    service = PostService(ctx.obj["db"])

    posts = service.list_posts(author_id=author_id)
    if not posts:
        click.echo("No posts found.")
        return

    for p in posts:
        link = f" [transaction {p.transaction_id}]" if p.transaction_id else ""
        click.echo(f"{p.id} | {p.created_at:%Y-%m-%d %H:%M} | {p.author_persona}: {p.content}{link}")


@post_group.command("delete")
@click.argument("post_id")
@click.pass_context
def delete_post(ctx, post_id: str):
    """Delete a post that has no transaction."""
    service = PostService(ctx.obj["db"])

    try:
        service.delete_post(post_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted post {post_id}")


def register_commands(cli):
    """Register post commands with main CLI."""
    cli.add_command(post_group, name="post")
