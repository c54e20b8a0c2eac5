"""Capability protocols consumed by the authentication framework.

Each protocol is one narrow capability. A store declares the set it
implements by listing protocols as bases; callers depend only on the
protocols they use and can probe a store with ``isinstance``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol, TypeVar, runtime_checkable

from sqlalchemy import Select

from sqlidentity.core.cancellation import CancellationToken
from sqlidentity.core.claims import Claim, IdentityResult, UserLoginInfo

TUser = TypeVar("TUser")
TRole = TypeVar("TRole")

Token = CancellationToken | None


# ── User capabilities ─────────────────────────────────────────────────────────

@runtime_checkable
class UserStoreBase(Protocol[TUser]):
    async def create(self, user: TUser, cancellation_token: Token = None) -> IdentityResult: ...
    async def update(self, user: TUser, cancellation_token: Token = None) -> IdentityResult: ...
    async def delete(self, user: TUser, cancellation_token: Token = None) -> IdentityResult: ...
    async def find_by_id(self, user_id: str | None, cancellation_token: Token = None) -> TUser | None: ...
    async def find_by_name(self, normalized_user_name: str | None, cancellation_token: Token = None) -> TUser | None: ...
    async def get_user_id(self, user: TUser, cancellation_token: Token = None) -> str | None: ...
    async def get_user_name(self, user: TUser, cancellation_token: Token = None) -> str | None: ...
    async def set_user_name(self, user: TUser, user_name: str | None, cancellation_token: Token = None) -> None: ...
    async def get_normalized_user_name(self, user: TUser, cancellation_token: Token = None) -> str | None: ...
    async def set_normalized_user_name(self, user: TUser, normalized_name: str | None, cancellation_token: Token = None) -> None: ...
    async def close(self) -> None: ...


@runtime_checkable
class UserLoginStore(Protocol[TUser]):
    async def add_login(self, user: TUser, login: UserLoginInfo, cancellation_token: Token = None) -> None: ...
    async def remove_login(self, user: TUser, login_provider: str, provider_key: str, cancellation_token: Token = None) -> None: ...
    async def get_logins(self, user: TUser, cancellation_token: Token = None) -> list[UserLoginInfo]: ...
    async def find_by_login(self, login_provider: str, provider_key: str, cancellation_token: Token = None) -> TUser | None: ...


@runtime_checkable
class UserRoleStore(Protocol[TUser]):
    async def add_to_role(self, user: TUser, role_name: str, cancellation_token: Token = None) -> None: ...
    async def remove_from_role(self, user: TUser, role_name: str, cancellation_token: Token = None) -> None: ...
    async def get_roles(self, user: TUser, cancellation_token: Token = None) -> list[str]: ...
    async def is_in_role(self, user: TUser, role_name: str, cancellation_token: Token = None) -> bool: ...
    async def get_users_in_role(self, role_name: str, cancellation_token: Token = None) -> list[TUser]: ...


@runtime_checkable
class UserClaimStore(Protocol[TUser]):
    async def get_claims(self, user: TUser, cancellation_token: Token = None) -> list[Claim]: ...
    async def add_claims(self, user: TUser, claims: Iterable[Claim], cancellation_token: Token = None) -> None: ...
    async def replace_claim(self, user: TUser, claim: Claim, new_claim: Claim, cancellation_token: Token = None) -> None: ...
    async def remove_claims(self, user: TUser, claims: Iterable[Claim], cancellation_token: Token = None) -> None: ...
    async def get_users_for_claim(self, claim: Claim, cancellation_token: Token = None) -> list[TUser]: ...


@runtime_checkable
class UserPasswordStore(Protocol[TUser]):
    async def set_password_hash(self, user: TUser, password_hash: str | None, cancellation_token: Token = None) -> None: ...
    async def get_password_hash(self, user: TUser, cancellation_token: Token = None) -> str | None: ...
    async def has_password(self, user: TUser, cancellation_token: Token = None) -> bool: ...


@runtime_checkable
class UserSecurityStampStore(Protocol[TUser]):
    async def set_security_stamp(self, user: TUser, stamp: str | None, cancellation_token: Token = None) -> None: ...
    async def get_security_stamp(self, user: TUser, cancellation_token: Token = None) -> str | None: ...


@runtime_checkable
class UserEmailStore(Protocol[TUser]):
    async def set_email(self, user: TUser, email: str | None, cancellation_token: Token = None) -> None: ...
    async def get_email(self, user: TUser, cancellation_token: Token = None) -> str | None: ...
    async def get_email_confirmed(self, user: TUser, cancellation_token: Token = None) -> bool: ...
    async def set_email_confirmed(self, user: TUser, confirmed: bool, cancellation_token: Token = None) -> None: ...
    async def find_by_email(self, normalized_email: str | None, cancellation_token: Token = None) -> TUser | None: ...
    async def get_normalized_email(self, user: TUser, cancellation_token: Token = None) -> str | None: ...
    async def set_normalized_email(self, user: TUser, normalized_email: str | None, cancellation_token: Token = None) -> None: ...


@runtime_checkable
class UserLockoutStore(Protocol[TUser]):
    async def get_lockout_end_date(self, user: TUser, cancellation_token: Token = None) -> datetime | None: ...
    async def set_lockout_end_date(self, user: TUser, lockout_end: datetime | None, cancellation_token: Token = None) -> None: ...
    async def increment_access_failed_count(self, user: TUser, cancellation_token: Token = None) -> int: ...
    async def reset_access_failed_count(self, user: TUser, cancellation_token: Token = None) -> None: ...
    async def get_access_failed_count(self, user: TUser, cancellation_token: Token = None) -> int: ...
    async def get_lockout_enabled(self, user: TUser, cancellation_token: Token = None) -> bool: ...
    async def set_lockout_enabled(self, user: TUser, enabled: bool, cancellation_token: Token = None) -> None: ...


@runtime_checkable
class UserPhoneNumberStore(Protocol[TUser]):
    async def set_phone_number(self, user: TUser, phone_number: str | None, cancellation_token: Token = None) -> None: ...
    async def get_phone_number(self, user: TUser, cancellation_token: Token = None) -> str | None: ...
    async def get_phone_number_confirmed(self, user: TUser, cancellation_token: Token = None) -> bool: ...
    async def set_phone_number_confirmed(self, user: TUser, confirmed: bool, cancellation_token: Token = None) -> None: ...


@runtime_checkable
class UserTwoFactorStore(Protocol[TUser]):
    async def set_two_factor_enabled(self, user: TUser, enabled: bool, cancellation_token: Token = None) -> None: ...
    async def get_two_factor_enabled(self, user: TUser, cancellation_token: Token = None) -> bool: ...


@runtime_checkable
class QueryableUserStore(Protocol[TUser]):
    @property
    def users(self) -> Select[Any]: ...


# ── Role capabilities ─────────────────────────────────────────────────────────

@runtime_checkable
class RoleStoreBase(Protocol[TRole]):
    async def create(self, role: TRole, cancellation_token: Token = None) -> IdentityResult: ...
    async def update(self, role: TRole, cancellation_token: Token = None) -> IdentityResult: ...
    async def delete(self, role: TRole, cancellation_token: Token = None) -> IdentityResult: ...
    async def get_role_id(self, role: TRole, cancellation_token: Token = None) -> str | None: ...
    async def get_role_name(self, role: TRole, cancellation_token: Token = None) -> str | None: ...
    async def set_role_name(self, role: TRole, role_name: str | None, cancellation_token: Token = None) -> None: ...
    async def get_normalized_role_name(self, role: TRole, cancellation_token: Token = None) -> str | None: ...
    async def set_normalized_role_name(self, role: TRole, normalized_name: str | None, cancellation_token: Token = None) -> None: ...
    async def find_by_id(self, role_id: str | None, cancellation_token: Token = None) -> TRole | None: ...
    async def find_by_name(self, normalized_role_name: str | None, cancellation_token: Token = None) -> TRole | None: ...
    async def close(self) -> None: ...


@runtime_checkable
class RoleClaimStore(Protocol[TRole]):
    async def get_claims(self, role: TRole, cancellation_token: Token = None) -> list[Claim]: ...
    async def add_claim(self, role: TRole, claim: Claim, cancellation_token: Token = None) -> None: ...
    async def remove_claim(self, role: TRole, claim: Claim, cancellation_token: Token = None) -> None: ...


@runtime_checkable
class QueryableRoleStore(Protocol[TRole]):
    @property
    def roles(self) -> Select[Any]: ...
