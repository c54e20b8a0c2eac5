"""UserStore — persistence for users, their claims, logins and role memberships.

Scalar ``set_*`` methods only change the passed entity. Nothing reaches the
database until :meth:`UserStore.update` is called with that entity. The one
scalar exception is :meth:`UserStore.increment_access_failed_count`, which
issues a server-side increment immediately.

Only :meth:`UserStore.add_claims` and :meth:`UserStore.add_login` open a
transaction boundary (a SAVEPOINT). Claim removal, role association writes
and every other multi-statement sequence run in whatever transaction the
caller's session already has.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import Select, delete, func, insert, select, update

from sqlidentity.core.cancellation import CancellationToken
from sqlidentity.core.claims import Claim, IdentityResult, UserLoginInfo
from sqlidentity.core.exceptions import RoleNotFoundError
from sqlidentity.core.logging import get_logger
from sqlidentity.models.base import by_attribute, column_values
from sqlidentity.models.user import IdentityUserMixin
from sqlidentity.stores._base import SqlStore, check_canceled, require, require_text
from sqlidentity.stores.capabilities import (
    QueryableUserStore,
    UserClaimStore,
    UserEmailStore,
    UserLockoutStore,
    UserLoginStore,
    UserPasswordStore,
    UserPhoneNumberStore,
    UserRoleStore,
    UserSecurityStampStore,
    UserStoreBase,
    UserTwoFactorStore,
)

logger = get_logger(__name__)

User = IdentityUserMixin
Token = CancellationToken | None


class UserStore(
    SqlStore,
    UserStoreBase[User],
    UserLoginStore[User],
    UserRoleStore[User],
    UserClaimStore[User],
    UserPasswordStore[User],
    UserSecurityStampStore[User],
    UserEmailStore[User],
    UserLockoutStore[User],
    UserPhoneNumberStore[User],
    UserTwoFactorStore[User],
    QueryableUserStore[User],
):
    """User persistence against ``Users``, ``UserClaims``, ``UserLogins`` and ``UserRoles``.

    ``Roles`` is only read, to resolve role names.
    """

    @property
    def users(self) -> Select[Any]:
        """Composable query over every user."""
        return select(self._schema.user)

    # ── CRUD ─────────────────────────────────────────────────────────────────

    async def create(self, user: User, cancellation_token: Token = None) -> IdentityResult:
        check_canceled(cancellation_token)
        require(user, "user")
        model = self._schema.user
        await self._execute(insert(model).values(by_attribute(model, column_values(user))))
        logger.debug("User created", user_id=str(user.id))
        return IdentityResult.success()

    async def update(self, user: User, cancellation_token: Token = None) -> IdentityResult:
        """Write every column of *user* to its row. Last writer wins."""
        check_canceled(cancellation_token)
        require(user, "user")
        model = self._schema.user
        values = column_values(user)
        values.pop("id")
        await self._execute(
            update(model).where(model.id == user.id).values(by_attribute(model, values))
        )
        logger.debug("User updated", user_id=str(user.id))
        return IdentityResult.success()

    async def delete(self, user: User, cancellation_token: Token = None) -> IdentityResult:
        check_canceled(cancellation_token)
        require(user, "user")
        model = self._schema.user
        await self._execute(delete(model).where(model.id == user.id))
        logger.debug("User deleted", user_id=str(user.id))
        return IdentityResult.success()

    # ── Lookup ───────────────────────────────────────────────────────────────
    # Lookup keys are compared as given; callers normalize them first.

    async def find_by_id(self, user_id: str | None, cancellation_token: Token = None) -> User | None:
        check_canceled(cancellation_token)
        key = self._schema.keys.from_string(user_id)
        model = self._schema.user
        return await self._first(select(model).where(model.id == key))

    async def find_by_name(
        self, normalized_user_name: str | None, cancellation_token: Token = None
    ) -> User | None:
        check_canceled(cancellation_token)
        model = self._schema.user
        return await self._first(
            select(model).where(model.normalized_user_name == normalized_user_name)
        )

    async def find_by_email(
        self, normalized_email: str | None, cancellation_token: Token = None
    ) -> User | None:
        check_canceled(cancellation_token)
        model = self._schema.user
        return await self._first(select(model).where(model.normalized_email == normalized_email))

    # ── Identity accessors ───────────────────────────────────────────────────

    async def get_user_id(self, user: User, cancellation_token: Token = None) -> str | None:
        check_canceled(cancellation_token)
        return self._schema.keys.to_string(require(user, "user").id)

    async def get_user_name(self, user: User, cancellation_token: Token = None) -> str | None:
        check_canceled(cancellation_token)
        return require(user, "user").user_name

    async def set_user_name(
        self, user: User, user_name: str | None, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").user_name = user_name

    async def get_normalized_user_name(
        self, user: User, cancellation_token: Token = None
    ) -> str | None:
        check_canceled(cancellation_token)
        return require(user, "user").normalized_user_name

    async def set_normalized_user_name(
        self, user: User, normalized_name: str | None, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").normalized_user_name = normalized_name

    # ── Logins ───────────────────────────────────────────────────────────────

    async def add_login(
        self, user: User, login: UserLoginInfo, cancellation_token: Token = None
    ) -> None:
        """Insert one login association inside a savepoint.

        ``provider_display_name`` is part of the table's primary key, so it
        must be present.
        """
        check_canceled(cancellation_token)
        require(user, "user")
        require(login, "login")
        require_text(login.provider_display_name, "login.provider_display_name")
        ul = self._schema.user_login
        async with self._persistence():
            async with self._session.begin_nested():
                await self._session.execute(
                    insert(ul).values(
                        {
                            ul.user_id: user.id,
                            ul.login_provider: login.login_provider,
                            ul.provider_key: login.provider_key,
                            ul.provider_display_name: login.provider_display_name,
                        }
                    )
                )
        logger.debug("Login added", user_id=str(user.id), provider=login.login_provider)

    async def remove_login(
        self,
        user: User,
        login_provider: str,
        provider_key: str,
        cancellation_token: Token = None,
    ) -> None:
        check_canceled(cancellation_token)
        require(user, "user")
        ul = self._schema.user_login
        await self._execute(
            delete(ul).where(
                ul.user_id == user.id,
                ul.login_provider == login_provider,
                ul.provider_key == provider_key,
            )
        )
        logger.debug("Login removed", user_id=str(user.id), provider=login_provider)

    async def get_logins(self, user: User, cancellation_token: Token = None) -> list[UserLoginInfo]:
        check_canceled(cancellation_token)
        require(user, "user")
        ul = self._schema.user_login
        result = await self._execute(
            select(ul.login_provider, ul.provider_key, ul.provider_display_name).where(
                ul.user_id == user.id
            )
        )
        return [UserLoginInfo(*row) for row in result.all()]

    async def find_by_login(
        self, login_provider: str, provider_key: str, cancellation_token: Token = None
    ) -> User | None:
        check_canceled(cancellation_token)
        u, ul = self._schema.user, self._schema.user_login
        return await self._first(
            select(u)
            .join(ul, ul.user_id == u.id)
            .where(ul.login_provider == login_provider, ul.provider_key == provider_key)
        )

    # ── Roles ────────────────────────────────────────────────────────────────

    def _role_id_by_name(self, role_name: str) -> Select[Any]:
        role = self._schema.role
        return select(role.id).where(func.upper(role.name) == role_name.upper())

    async def add_to_role(self, user: User, role_name: str, cancellation_token: Token = None) -> None:
        """Associate *user* with the role named *role_name* (case-insensitive).

        Raises :class:`RoleNotFoundError` when no such role exists. Role names
        that differ only in case make the lookup ambiguous and raise
        :class:`InvalidOperationError`. There is no duplicate check; a
        second association for the same pair is rejected by the ``UserRoles``
        primary key.
        """
        check_canceled(cancellation_token)
        require(user, "user")
        require_text(role_name, "role_name")
        role_id = await self._scalar_one_or_none(self._role_id_by_name(role_name))
        if role_id is None:
            raise RoleNotFoundError(role_name)
        ur = self._schema.user_role
        await self._execute(insert(ur).values({ur.user_id: user.id, ur.role_id: role_id}))
        logger.debug("User added to role", user_id=str(user.id), role=role_name)

    async def remove_from_role(
        self, user: User, role_name: str, cancellation_token: Token = None
    ) -> None:
        """Drop the association; silently does nothing for an unknown role."""
        check_canceled(cancellation_token)
        require(user, "user")
        require_text(role_name, "role_name")
        role_id = await self._scalar_one_or_none(self._role_id_by_name(role_name))
        if role_id is None:
            return
        ur = self._schema.user_role
        await self._execute(delete(ur).where(ur.user_id == user.id, ur.role_id == role_id))
        logger.debug("User removed from role", user_id=str(user.id), role=role_name)

    async def get_roles(self, user: User, cancellation_token: Token = None) -> list[str]:
        check_canceled(cancellation_token)
        require(user, "user")
        r, ur = self._schema.role, self._schema.user_role
        result = await self._execute(
            select(r.name).join(ur, ur.role_id == r.id).where(ur.user_id == user.id)
        )
        return list(result.scalars().all())

    async def is_in_role(self, user: User, role_name: str, cancellation_token: Token = None) -> bool:
        check_canceled(cancellation_token)
        require(user, "user")
        require_text(role_name, "role_name")
        r, ur, u = self._schema.role, self._schema.user_role, self._schema.user
        membership = (
            select(u.id)
            .join(ur, ur.user_id == u.id)
            .join(r, r.id == ur.role_id)
            .where(func.upper(r.name) == role_name.upper(), u.id == user.id)
        )
        result = await self._execute(select(membership.exists()))
        return bool(result.scalar())

    async def get_users_in_role(self, role_name: str, cancellation_token: Token = None) -> list[User]:
        check_canceled(cancellation_token)
        require_text(role_name, "role_name")
        r, ur, u = self._schema.role, self._schema.user_role, self._schema.user
        return await self._all(
            select(u)
            .join(ur, ur.user_id == u.id)
            .join(r, r.id == ur.role_id)
            .where(func.upper(r.name) == role_name.upper())
        )

    # ── Claims ───────────────────────────────────────────────────────────────

    async def get_claims(self, user: User, cancellation_token: Token = None) -> list[Claim]:
        check_canceled(cancellation_token)
        require(user, "user")
        uc = self._schema.user_claim
        result = await self._execute(
            select(uc.claim_type, uc.claim_value).where(uc.user_id == user.id)
        )
        return [Claim(claim_type, claim_value) for claim_type, claim_value in result.all()]

    async def add_claims(
        self, user: User, claims: Iterable[Claim], cancellation_token: Token = None
    ) -> None:
        """Insert one row per claim; either every row lands or none does."""
        check_canceled(cancellation_token)
        require(user, "user")
        claims = list(require(claims, "claims"))
        for claim in claims:
            require(claim, "claims")
        uc = self._schema.user_claim
        async with self._persistence():
            async with self._session.begin_nested():
                for claim in claims:
                    await self._session.execute(
                        insert(uc).values(
                            {
                                uc.user_id: user.id,
                                uc.claim_type: claim.type,
                                uc.claim_value: claim.value,
                            }
                        )
                    )
        logger.debug("User claims added", user_id=str(user.id), count=len(claims))

    async def replace_claim(
        self, user: User, claim: Claim, new_claim: Claim, cancellation_token: Token = None
    ) -> None:
        """Rewrite every row matching *claim* to *new_claim*. No match is a no-op."""
        check_canceled(cancellation_token)
        require(user, "user")
        require(claim, "claim")
        require(new_claim, "new_claim")
        uc = self._schema.user_claim
        await self._execute(
            update(uc)
            .where(
                uc.user_id == user.id,
                uc.claim_type == claim.type,
                uc.claim_value == claim.value,
            )
            .values({uc.claim_type: new_claim.type, uc.claim_value: new_claim.value})
        )
        logger.debug("User claim replaced", user_id=str(user.id), claim_type=claim.type)

    async def remove_claims(
        self, user: User, claims: Iterable[Claim], cancellation_token: Token = None
    ) -> None:
        """Delete matching rows claim by claim. Not atomic across claims."""
        check_canceled(cancellation_token)
        require(user, "user")
        claims = list(require(claims, "claims"))
        for claim in claims:
            require(claim, "claims")
        uc = self._schema.user_claim
        for claim in claims:
            await self._execute(
                delete(uc).where(
                    uc.user_id == user.id,
                    uc.claim_type == claim.type,
                    uc.claim_value == claim.value,
                )
            )
        logger.debug("User claims removed", user_id=str(user.id), count=len(claims))

    async def get_users_for_claim(self, claim: Claim, cancellation_token: Token = None) -> list[User]:
        check_canceled(cancellation_token)
        require(claim, "claim")
        u, uc = self._schema.user, self._schema.user_claim
        return await self._all(
            select(u)
            .join(uc, uc.user_id == u.id)
            .where(uc.claim_type == claim.type, uc.claim_value == claim.value)
        )

    # ── Password & security stamp ────────────────────────────────────────────

    async def set_password_hash(
        self, user: User, password_hash: str | None, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").password_hash = password_hash

    async def get_password_hash(self, user: User, cancellation_token: Token = None) -> str | None:
        check_canceled(cancellation_token)
        return require(user, "user").password_hash

    async def has_password(self, user: User, cancellation_token: Token = None) -> bool:
        check_canceled(cancellation_token)
        return require(user, "user").password_hash is not None

    async def set_security_stamp(
        self, user: User, stamp: str | None, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").security_stamp = stamp

    async def get_security_stamp(self, user: User, cancellation_token: Token = None) -> str | None:
        check_canceled(cancellation_token)
        return require(user, "user").security_stamp

    # ── Email ────────────────────────────────────────────────────────────────

    async def set_email(self, user: User, email: str | None, cancellation_token: Token = None) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").email = email

    async def get_email(self, user: User, cancellation_token: Token = None) -> str | None:
        check_canceled(cancellation_token)
        return require(user, "user").email

    async def get_email_confirmed(self, user: User, cancellation_token: Token = None) -> bool:
        check_canceled(cancellation_token)
        return require(user, "user").email_confirmed

    async def set_email_confirmed(
        self, user: User, confirmed: bool, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").email_confirmed = confirmed

    async def get_normalized_email(self, user: User, cancellation_token: Token = None) -> str | None:
        check_canceled(cancellation_token)
        return require(user, "user").normalized_email

    async def set_normalized_email(
        self, user: User, normalized_email: str | None, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").normalized_email = normalized_email

    # ── Lockout ──────────────────────────────────────────────────────────────

    async def get_lockout_end_date(
        self, user: User, cancellation_token: Token = None
    ) -> datetime | None:
        check_canceled(cancellation_token)
        return require(user, "user").lockout_end

    async def set_lockout_end_date(
        self, user: User, lockout_end: datetime | None, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").lockout_end = lockout_end

    async def increment_access_failed_count(self, user: User, cancellation_token: Token = None) -> int:
        """Increment the stored count server-side and return the predicted value.

        The return value is the entity's in-memory count plus one; it is not
        re-read and can lag the stored count under concurrent increments.
        The entity itself is left unchanged.
        """
        check_canceled(cancellation_token)
        require(user, "user")
        model = self._schema.user
        await self._execute(
            update(model)
            .where(model.id == user.id)
            .values({model.access_failed_count: model.access_failed_count + 1})
            .execution_options(synchronize_session=False)
        )
        logger.debug("Access failed count incremented", user_id=str(user.id))
        return user.access_failed_count + 1

    async def reset_access_failed_count(self, user: User, cancellation_token: Token = None) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").access_failed_count = 0

    async def get_access_failed_count(self, user: User, cancellation_token: Token = None) -> int:
        check_canceled(cancellation_token)
        return require(user, "user").access_failed_count

    async def get_lockout_enabled(self, user: User, cancellation_token: Token = None) -> bool:
        check_canceled(cancellation_token)
        return require(user, "user").lockout_enabled

    async def set_lockout_enabled(
        self, user: User, enabled: bool, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").lockout_enabled = enabled

    # ── Phone ────────────────────────────────────────────────────────────────

    async def set_phone_number(
        self, user: User, phone_number: str | None, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").phone_number = phone_number

    async def get_phone_number(self, user: User, cancellation_token: Token = None) -> str | None:
        check_canceled(cancellation_token)
        return require(user, "user").phone_number

    async def get_phone_number_confirmed(self, user: User, cancellation_token: Token = None) -> bool:
        check_canceled(cancellation_token)
        return require(user, "user").phone_number_confirmed

    async def set_phone_number_confirmed(
        self, user: User, confirmed: bool, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").phone_number_confirmed = confirmed

    # ── Two-factor ───────────────────────────────────────────────────────────

    async def set_two_factor_enabled(
        self, user: User, enabled: bool, cancellation_token: Token = None
    ) -> None:
        """In-memory only; persisted by :meth:`update`."""
        check_canceled(cancellation_token)
        self._detached(user, "user").two_factor_enabled = enabled

    async def get_two_factor_enabled(self, user: User, cancellation_token: Token = None) -> bool:
        check_canceled(cancellation_token)
        return require(user, "user").two_factor_enabled
