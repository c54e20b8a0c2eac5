"""Claim rows attached to users and roles.

Claims are not deduplicated: the same (owner, type, value) triple may be
stored several times.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from sqlidentity.models.base import Base, KeyedMixin


class _ClaimColumns:
    id: Mapped[int] = mapped_column("Id", Integer, primary_key=True, autoincrement=True)
    claim_type: Mapped[str | None] = mapped_column("ClaimType", Text)
    claim_value: Mapped[str | None] = mapped_column("ClaimValue", Text)


class IdentityUserClaimMixin(_ClaimColumns, KeyedMixin):
    __tablename__ = "UserClaims"

    @declared_attr
    def user_id(cls) -> Mapped[Any]:
        return mapped_column(
            "UserId", cls.key_converter.column_type(), nullable=False, index=True
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.claim_type}={self.claim_value!r} user={self.user_id!r}>"


class IdentityRoleClaimMixin(_ClaimColumns, KeyedMixin):
    __tablename__ = "RoleClaims"

    @declared_attr
    def role_id(cls) -> Mapped[Any]:
        return mapped_column(
            "RoleId", cls.key_converter.column_type(), nullable=False, index=True
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.claim_type}={self.claim_value!r} role={self.role_id!r}>"


class IdentityUserClaim(IdentityUserClaimMixin, Base):
    pass


class IdentityRoleClaim(IdentityRoleClaimMixin, Base):
    pass
