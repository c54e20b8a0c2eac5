"""CLI commands for role management."""

from __future__ import annotations

import click
from sqlalchemy.ext.asyncio import AsyncSession

from sqlidentity.cli.output import console, roles_table
from sqlidentity.cli.session import run_with_stores
from sqlidentity.core.exceptions import IdentityStoreError


@click.group("roles")
def roles_cmd() -> None:
    """Create, list and delete roles."""


@roles_cmd.command("create")
@click.argument("name")
@click.pass_context
def roles_create(ctx: click.Context, name: str) -> None:
    """Create a role called NAME."""

    async def _create(users, roles) -> str | None:
        existing = await roles.find_by_name(name.upper())
        if existing is not None:
            return None
        role = roles.schema.role(name)
        await roles.set_normalized_role_name(role, name.upper())
        await roles.create(role)
        return await roles.get_role_id(role)

    try:
        role_id = run_with_stores(ctx, _create)
    except IdentityStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if role_id is None:
        console.print(f"[yellow]Role {name!r} already exists.[/yellow]")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Role [bold]{name}[/bold] created ({role_id})")


@roles_cmd.command("list")
@click.pass_context
def roles_list(ctx: click.Context) -> None:
    """List all roles."""

    async def _list(users, roles):
        session: AsyncSession = roles.session
        result = await session.execute(roles.roles.order_by(roles.schema.role.name))
        return list(result.scalars().all())

    try:
        items = run_with_stores(ctx, _list)
    except IdentityStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    console.print(roles_table(items))


@roles_cmd.command("delete")
@click.argument("name")
@click.pass_context
def roles_delete(ctx: click.Context, name: str) -> None:
    """Delete the role called NAME."""

    async def _delete(users, roles) -> bool:
        role = await roles.find_by_name(name.upper())
        if role is None:
            return False
        await roles.delete(role)
        return True

    try:
        deleted = run_with_stores(ctx, _delete)
    except IdentityStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if not deleted:
        console.print(f"[yellow]Role {name!r} not found.[/yellow]")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Role [bold]{name}[/bold] deleted")
