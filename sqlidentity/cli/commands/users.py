"""CLI commands for user management.

Users are addressed by user name; the CLI upper-cases names and emails to
produce the normalized lookup keys, the same way the framework would.
"""

from __future__ import annotations

import click

from sqlidentity.cli.output import claims_table, console, user_detail, users_table
from sqlidentity.cli.session import run_with_stores
from sqlidentity.core.claims import Claim
from sqlidentity.core.exceptions import IdentityStoreError, RoleNotFoundError


class _UserNotFound(Exception):
    pass


async def _load(users, user_name: str):
    user = await users.find_by_name(user_name.upper())
    if user is None:
        raise _UserNotFound(user_name)
    return user


def _run(ctx: click.Context, fn):
    try:
        return run_with_stores(ctx, fn)
    except _UserNotFound as e:
        console.print(f"[yellow]User {e.args[0]!r} not found.[/yellow]")
        raise SystemExit(1)
    except RoleNotFoundError as e:
        console.print(f"[yellow]Role {e.role_name!r} not found.[/yellow]")
        raise SystemExit(1)
    except IdentityStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


@click.group("users")
def users_cmd() -> None:
    """Create users and inspect their roles, claims and logins."""


@users_cmd.command("create")
@click.argument("user_name")
@click.option("--email", default=None, help="Email address")
@click.option("--phone", default=None, help="Phone number")
@click.pass_context
def users_create(ctx: click.Context, user_name: str, email: str | None, phone: str | None) -> None:
    """Create a user without a password (the framework sets credentials)."""

    async def _create(users, roles) -> str | None:
        if await users.find_by_name(user_name.upper()) is not None:
            return None
        user = users.schema.user(user_name)
        await users.set_normalized_user_name(user, user_name.upper())
        if email:
            await users.set_email(user, email)
            await users.set_normalized_email(user, email.upper())
        if phone:
            await users.set_phone_number(user, phone)
        await users.create(user)
        return await users.get_user_id(user)

    user_id = _run(ctx, _create)
    if user_id is None:
        console.print(f"[yellow]User {user_name!r} already exists.[/yellow]")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] User [bold]{user_name}[/bold] created ({user_id})")


@users_cmd.command("list")
@click.option("--role", default=None, help="Only users in this role")
@click.option("--limit", default=50, show_default=True, help="Max rows to display")
@click.pass_context
def users_list(ctx: click.Context, role: str | None, limit: int) -> None:
    """List users."""

    async def _list(users, roles):
        if role:
            return (await users.get_users_in_role(role))[:limit]
        model = users.schema.user
        result = await users.session.execute(
            users.users.order_by(model.user_name).limit(limit)
        )
        return list(result.scalars().all())

    console.print(users_table(_run(ctx, _list)))


@users_cmd.command("show")
@click.argument("user_name")
@click.pass_context
def users_show(ctx: click.Context, user_name: str) -> None:
    """Show a user with roles, claims and external logins."""

    async def _show(users, roles):
        user = await _load(users, user_name)
        return (
            user,
            await users.get_roles(user),
            await users.get_claims(user),
            await users.get_logins(user),
        )

    user_detail(*_run(ctx, _show))


@users_cmd.command("add-role")
@click.argument("user_name")
@click.argument("role_name")
@click.pass_context
def users_add_role(ctx: click.Context, user_name: str, role_name: str) -> None:
    """Add USER_NAME to ROLE_NAME."""

    async def _add(users, roles) -> bool:
        user = await _load(users, user_name)
        if await users.is_in_role(user, role_name):
            return False
        await users.add_to_role(user, role_name)
        return True

    if not _run(ctx, _add):
        console.print(f"[dim]{user_name} is already in {role_name}.[/dim]")
        return
    console.print(f"[green]✓[/green] {user_name} added to [bold]{role_name}[/bold]")


@users_cmd.command("remove-role")
@click.argument("user_name")
@click.argument("role_name")
@click.pass_context
def users_remove_role(ctx: click.Context, user_name: str, role_name: str) -> None:
    """Remove USER_NAME from ROLE_NAME (unknown roles are ignored)."""

    async def _remove(users, roles) -> None:
        user = await _load(users, user_name)
        await users.remove_from_role(user, role_name)

    _run(ctx, _remove)
    console.print(f"[green]✓[/green] {user_name} removed from [bold]{role_name}[/bold]")


@users_cmd.command("claims")
@click.argument("user_name")
@click.pass_context
def users_claims(ctx: click.Context, user_name: str) -> None:
    """List the claims of USER_NAME."""

    async def _claims(users, roles):
        return await users.get_claims(await _load(users, user_name))

    console.print(claims_table(_run(ctx, _claims), title=f"Claims of {user_name}"))


@users_cmd.command("add-claim")
@click.argument("user_name")
@click.argument("claim_type")
@click.argument("claim_value")
@click.pass_context
def users_add_claim(ctx: click.Context, user_name: str, claim_type: str, claim_value: str) -> None:
    """Attach the claim CLAIM_TYPE=CLAIM_VALUE to USER_NAME."""

    async def _add(users, roles) -> None:
        await users.add_claims(await _load(users, user_name), [Claim(claim_type, claim_value)])

    _run(ctx, _add)
    console.print(f"[green]✓[/green] Claim {claim_type}={claim_value} added to {user_name}")
