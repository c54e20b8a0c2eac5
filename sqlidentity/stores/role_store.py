"""RoleStore — role persistence and role-claim management."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, delete, insert, select, update

from sqlidentity.core.cancellation import CancellationToken
from sqlidentity.core.claims import Claim, IdentityResult
from sqlidentity.core.logging import get_logger
from sqlidentity.models.base import by_attribute, column_values
from sqlidentity.models.role import IdentityRoleMixin
from sqlidentity.stores._base import SqlStore, check_canceled, require
from sqlidentity.stores.capabilities import QueryableRoleStore, RoleClaimStore, RoleStoreBase

logger = get_logger(__name__)


class RoleStore(
    SqlStore,
    RoleStoreBase[IdentityRoleMixin],
    RoleClaimStore[IdentityRoleMixin],
    QueryableRoleStore[IdentityRoleMixin],
):
    """Role CRUD, lookup and role claims against the ``Roles`` / ``RoleClaims`` tables."""

    @property
    def roles(self) -> Select[Any]:
        """Composable query over every role."""
        return select(self._schema.role)

    # ── CRUD ─────────────────────────────────────────────────────────────────

    async def create(
        self, role: IdentityRoleMixin, cancellation_token: CancellationToken | None = None
    ) -> IdentityResult:
        check_canceled(cancellation_token)
        require(role, "role")
        model = self._schema.role
        await self._execute(insert(model).values(by_attribute(model, column_values(role))))
        logger.debug("Role created", role_id=str(role.id), name=role.name)
        return IdentityResult.success()

    async def update(
        self, role: IdentityRoleMixin, cancellation_token: CancellationToken | None = None
    ) -> IdentityResult:
        check_canceled(cancellation_token)
        require(role, "role")
        model = self._schema.role
        values = column_values(role)
        values.pop("id")
        await self._execute(
            update(model).where(model.id == role.id).values(by_attribute(model, values))
        )
        logger.debug("Role updated", role_id=str(role.id))
        return IdentityResult.success()

    async def delete(
        self, role: IdentityRoleMixin, cancellation_token: CancellationToken | None = None
    ) -> IdentityResult:
        check_canceled(cancellation_token)
        require(role, "role")
        model = self._schema.role
        await self._execute(delete(model).where(model.id == role.id))
        logger.debug("Role deleted", role_id=str(role.id))
        return IdentityResult.success()

    # ── Lookup ───────────────────────────────────────────────────────────────

    async def find_by_id(
        self, role_id: str | None, cancellation_token: CancellationToken | None = None
    ) -> IdentityRoleMixin | None:
        check_canceled(cancellation_token)
        key = self._schema.keys.from_string(role_id)
        model = self._schema.role
        return await self._first(select(model).where(model.id == key))

    async def find_by_name(
        self, normalized_role_name: str | None, cancellation_token: CancellationToken | None = None
    ) -> IdentityRoleMixin | None:
        check_canceled(cancellation_token)
        model = self._schema.role
        return await self._first(
            select(model).where(model.normalized_name == normalized_role_name)
        )

    # ── In-memory accessors ──────────────────────────────────────────────────
    # Setters only touch the passed entity; call update() to persist.

    async def get_role_id(
        self, role: IdentityRoleMixin, cancellation_token: CancellationToken | None = None
    ) -> str | None:
        check_canceled(cancellation_token)
        return self._schema.keys.to_string(require(role, "role").id)

    async def get_role_name(
        self, role: IdentityRoleMixin, cancellation_token: CancellationToken | None = None
    ) -> str | None:
        check_canceled(cancellation_token)
        return require(role, "role").name

    async def set_role_name(
        self,
        role: IdentityRoleMixin,
        role_name: str | None,
        cancellation_token: CancellationToken | None = None,
    ) -> None:
        check_canceled(cancellation_token)
        self._detached(role, "role").name = role_name

    async def get_normalized_role_name(
        self, role: IdentityRoleMixin, cancellation_token: CancellationToken | None = None
    ) -> str | None:
        check_canceled(cancellation_token)
        return require(role, "role").normalized_name

    async def set_normalized_role_name(
        self,
        role: IdentityRoleMixin,
        normalized_name: str | None,
        cancellation_token: CancellationToken | None = None,
    ) -> None:
        check_canceled(cancellation_token)
        self._detached(role, "role").normalized_name = normalized_name

    # ── Claims ───────────────────────────────────────────────────────────────

    async def get_claims(
        self, role: IdentityRoleMixin, cancellation_token: CancellationToken | None = None
    ) -> list[Claim]:
        check_canceled(cancellation_token)
        require(role, "role")
        rc = self._schema.role_claim
        result = await self._execute(
            select(rc.claim_type, rc.claim_value).where(rc.role_id == role.id)
        )
        return [Claim(claim_type, claim_value) for claim_type, claim_value in result.all()]

    async def add_claim(
        self,
        role: IdentityRoleMixin,
        claim: Claim,
        cancellation_token: CancellationToken | None = None,
    ) -> None:
        check_canceled(cancellation_token)
        require(role, "role")
        require(claim, "claim")
        rc = self._schema.role_claim
        await self._execute(
            insert(rc).values(
                {rc.role_id: role.id, rc.claim_type: claim.type, rc.claim_value: claim.value}
            )
        )
        logger.debug("Role claim added", role_id=str(role.id), claim_type=claim.type)

    async def remove_claim(
        self,
        role: IdentityRoleMixin,
        claim: Claim,
        cancellation_token: CancellationToken | None = None,
    ) -> None:
        """Delete every row matching (role, type, value)."""
        check_canceled(cancellation_token)
        require(role, "role")
        require(claim, "claim")
        rc = self._schema.role_claim
        await self._execute(
            delete(rc).where(
                rc.role_id == role.id,
                rc.claim_type == claim.type,
                rc.claim_value == claim.value,
            )
        )
        logger.debug("Role claim removed", role_id=str(role.id), claim_type=claim.type)
