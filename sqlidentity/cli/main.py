"""sqlidentity CLI entry point — `sqlid` command group."""

from __future__ import annotations

import asyncio

import click

from sqlidentity.cli.commands.roles import roles_cmd
from sqlidentity.cli.commands.users import users_cmd
from sqlidentity.cli.output import console
from sqlidentity.core.config import get_settings


@click.group()
@click.version_option(package_name="sqlidentity")
@click.option(
    "--database-url",
    default=None,
    envvar="SQLIDENTITY_DATABASE_URL",
    help="Async SQLAlchemy URL (defaults to the configured settings)",
)
@click.pass_context
def cli(ctx: click.Context, database_url: str | None) -> None:
    """sqlidentity — inspect and administer identity tables.

    \b
    Quick start:
      sqlid init-db
      sqlid roles create Admin
      sqlid users create alice --email alice@example.com
      sqlid users add-role alice Admin
      sqlid users show alice
    """
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url or get_settings().database_url


cli.add_command(users_cmd)
cli.add_command(roles_cmd)


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the identity tables if they do not exist."""
    from sqlidentity.core.database import create_engine_from_settings, create_schema

    async def _init() -> None:
        engine = create_engine_from_settings(ctx.obj["database_url"])
        try:
            await create_schema(engine)
        finally:
            await engine.dispose()

    asyncio.run(_init())
    console.print("[green]✓[/green] Identity tables ready")


if __name__ == "__main__":
    cli()
