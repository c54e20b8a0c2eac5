"""Rich output helpers — identity tables and detail views."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.table import Table
from rich.text import Text

from sqlidentity.core.claims import Claim, UserLoginInfo
from sqlidentity.models.role import IdentityRoleMixin
from sqlidentity.models.user import IdentityUserMixin

console = Console()


def fmt_date(value: datetime | None) -> str:
    if value is None:
        return "—"
    return value.strftime("%Y-%m-%d %H:%M")


def _flag(value: bool) -> Text:
    return Text("✓", style="green") if value else Text("✗", style="dim")


def users_table(users: list[IdentityUserMixin]) -> Table:
    table = Table(
        title=f"Users ({len(users)})",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("User name", style="bold")
    table.add_column("Email")
    table.add_column("Confirmed", justify="center")
    table.add_column("2FA", justify="center")
    table.add_column("Failed", justify="right")
    table.add_column("Locked until", style="dim")

    for u in users:
        table.add_row(
            str(u.id),
            u.user_name or "—",
            u.email or "—",
            _flag(u.email_confirmed),
            _flag(u.two_factor_enabled),
            str(u.access_failed_count),
            fmt_date(u.lockout_end),
        )
    return table


def roles_table(roles: list[IdentityRoleMixin]) -> Table:
    table = Table(title=f"Roles ({len(roles)})", header_style="bold cyan", border_style="dim")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Normalized")
    for r in roles:
        table.add_row(str(r.id), r.name or "—", r.normalized_name or "—")
    return table


def claims_table(claims: list[Claim], title: str = "Claims") -> Table:
    table = Table(title=f"{title} ({len(claims)})", header_style="bold cyan", border_style="dim")
    table.add_column("Type", style="bold")
    table.add_column("Value")
    for c in claims:
        table.add_row(c.type, c.value)
    return table


def user_detail(
    user: IdentityUserMixin,
    roles: list[str],
    claims: list[Claim],
    logins: list[UserLoginInfo],
) -> None:
    """Print a detailed view of a single user."""
    console.rule(f"[bold cyan]User — {user.user_name or user.id}")

    fields = [
        ("ID", str(user.id)),
        ("User name", user.user_name),
        ("Email", user.email),
        ("Email confirmed", str(user.email_confirmed)),
        ("Phone", user.phone_number),
        ("Two-factor", str(user.two_factor_enabled)),
        ("Lockout", str(user.lockout_enabled)),
        ("Locked until", fmt_date(user.lockout_end) if user.lockout_end else None),
        ("Failed logins", str(user.access_failed_count)),
        ("Has password", str(user.password_hash is not None)),
        ("Roles", ", ".join(roles) if roles else None),
    ]
    for label, value in fields:
        if value:
            console.print(f"  [dim]{label:<16}[/dim] {value}")

    if claims:
        console.print()
        console.print(claims_table(claims))

    if logins:
        console.print()
        table = Table(title="External logins", header_style="bold cyan", border_style="dim")
        table.add_column("Provider", style="bold")
        table.add_column("Display name")
        table.add_column("Key", style="dim")
        for login in logins:
            table.add_row(
                login.login_provider, login.provider_display_name or "—", login.provider_key
            )
        console.print(table)
